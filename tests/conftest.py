"""Pytest fixtures for testing"""

import httpx
import pytest
from pathlib import Path
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from cresus_dossier.api.main import create_app
from cresus_dossier.api.dependencies import get_storage_client
from cresus_dossier.config import settings
from cresus_dossier.domain.models import Consents, Contact, Debt, DossierRecord
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.database.models import Base
from cresus_dossier.infrastructure.database.session import get_db
from cresus_dossier.infrastructure.security import hash_password
from mock_storage.server import create_app as create_storage_app


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Object names containing this marker make the mock storage answer 503
FAIL_MARKER = "FAIL"
TEST_BUCKET = "test-bucket"

ADVISOR_EMAIL = "conseiller@cresus.test"
ADVISOR_PASSWORD = "mot-de-passe-conseiller"
ADVISOR_HASH = hash_password(ADVISOR_PASSWORD)


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """No retry delay, one known advisor account"""
    monkeypatch.setattr(settings, "storage_backoff_base", 0.0)
    monkeypatch.setattr(settings, "advisor_accounts", {ADVISOR_EMAIL: ADVISOR_HASH})
    monkeypatch.setattr(settings, "jwt_secret_key", "test-secret-key-with-at-least-32-bytes")


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def storage(storage_dir: Path) -> StorageClient:
    """Storage client wired in-process to the mock storage server"""
    storage_app = create_storage_app(data_dir=storage_dir, fail_marker=FAIL_MARKER)
    return StorageClient(
        base_url="http://storage.test/v0/b",
        bucket=TEST_BUCKET,
        auth_token="",
        transport=httpx.ASGITransport(app=storage_app),
    )


@pytest.fixture
def client(db: Session, storage: StorageClient) -> TestClient:
    """Create FastAPI test client with test database and mock storage"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_client] = lambda: storage
    return TestClient(app)


@pytest.fixture
def auth_headers(client: TestClient) -> dict:
    """Bearer header of a signed-in advisor"""
    response = client.post("/v1/auth/login", json={"email": ADVISOR_EMAIL, "password": ADVISOR_PASSWORD})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def sample_record() -> DossierRecord:
    """
    Household with 2 050 € income, 900 € charges and one 150 € consumer credit.

    The 30 € energy arrears plan is an "other debt" and stays out of the
    credit payments, leaving a 1 000 € residual.
    """
    return DossierRecord(
        contact=Contact(
            last_name="Martin",
            first_name="Claire",
            email="claire.martin@example.fr",
            mobile="06 12 34 56 78",
            address="12 rue des Lilas",
            postal_code="67000",
            city="Strasbourg",
            occupation="Aide-soignante",
        ),
        consents=Consents(data_processing=True, referrer_sharing=True),
        income={"salaries": 180000, "allowances": 25000},
        housing={"rent": 65000, "energy": 8000},
        children={"schooling": 5000},
        other={"transport": 6000},
        insurance={"home": 2000},
        taxes={"income_tax": 4000},
        consumer=[Debt(creditor="Cofidis", monthly_payment=15000, remaining_principal=320000)],
        other_debts=[Debt(creditor="EDF", monthly_payment=3000, arrears=45000)],
    )
