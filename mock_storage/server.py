from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from pathlib import Path
from typing import Optional
import json
import os
import uuid

# Support both local development and Docker
DEFAULT_DATA_DIR = Path("/storage_data") if os.path.exists("/storage_data") else Path(__file__).resolve().parent / "data"


def create_app(data_dir: Path = DEFAULT_DATA_DIR, fail_marker: Optional[str] = None) -> FastAPI:
    """Local stand-in for the Firebase Storage REST API.

    Objects whose name contains ``fail_marker`` answer 503, to rehearse
    storage outages.
    """
    app = FastAPI(title="Mock Storage Server", version="1.0.0")

    def object_file(bucket: str, name: str) -> Path:
        bucket_dir = (data_dir / bucket).resolve()
        file = (bucket_dir / name).resolve()
        if not name or bucket_dir.parent != data_dir.resolve() or not file.is_relative_to(bucket_dir):
            raise HTTPException(status_code=400, detail="invalid object name")
        return file

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.post("/v0/b/{bucket}/o")
    async def upload(bucket: str, name: str, request: Request):
        if fail_marker and fail_marker in name:
            raise HTTPException(status_code=503, detail="storage unavailable")
        file = object_file(bucket, name)
        body = await request.body()
        file.parent.mkdir(parents=True, exist_ok=True)
        file.write_bytes(body)
        token = str(uuid.uuid4())
        meta = {
            "name": name,
            "bucket": bucket,
            "size": str(len(body)),
            "contentType": request.headers.get("content-type", "application/octet-stream"),
            "downloadTokens": token,
        }
        file.with_name(file.name + ".meta.json").write_text(json.dumps(meta))
        return meta

    @app.get("/v0/b/{bucket}/o/{name:path}")
    def download(bucket: str, name: str):
        file = object_file(bucket, name)
        if not file.exists():
            raise HTTPException(status_code=404, detail="object not found")
        meta_file = file.with_name(file.name + ".meta.json")
        content_type = json.loads(meta_file.read_text())["contentType"] if meta_file.exists() else None
        return Response(content=file.read_bytes(), media_type=content_type or "application/octet-stream")

    @app.delete("/v0/b/{bucket}/o/{name:path}", status_code=204)
    def delete(bucket: str, name: str):
        file = object_file(bucket, name)
        if not file.exists():
            raise HTTPException(status_code=404, detail="object not found")
        file.unlink()
        file.with_name(file.name + ".meta.json").unlink(missing_ok=True)
        return Response(status_code=204)

    return app


app = create_app()
