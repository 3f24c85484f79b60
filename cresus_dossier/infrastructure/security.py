"""Advisor authentication: argon2 password check and JWT access tokens"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from cresus_dossier.config import settings
from cresus_dossier.domain.exceptions import AuthenticationError

password_hasher = PasswordHasher()


class AdvisorAuthService:
    """Checks advisor credentials and issues the tokens the dashboard relies on"""

    def __init__(
        self,
        accounts: Optional[Mapping[str, str]] = None,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expiration_hours: Optional[int] = None,
    ):
        self.accounts = accounts if accounts is not None else settings.advisor_accounts
        self.jwt_secret = secret or settings.jwt_secret_key
        self.jwt_algorithm = algorithm or settings.jwt_algorithm
        self.jwt_expiration_hours = expiration_hours or settings.jwt_expiration_hours

    def authenticate(self, email: str, password: str) -> str:
        """Return the normalized advisor email when the password matches"""
        key = email.strip().lower()
        hashed = {k.lower(): v for k, v in self.accounts.items()}.get(key)
        if not hashed:
            raise AuthenticationError("Unknown advisor")
        try:
            password_hasher.verify(hashed, password)
        except (VerificationError, InvalidHashError) as e:
            raise AuthenticationError("Invalid advisor credentials") from e
        return key

    def create_token(self, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": email,
            "iat": now,
            "exp": now + timedelta(hours=self.jwt_expiration_hours),
            "type": "access",
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e


def hash_password(password: str) -> str:
    """Produce the value to put in the advisor accounts setting"""
    return password_hasher.hash(password)
