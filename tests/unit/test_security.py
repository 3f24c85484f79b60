"""Unit tests for advisor authentication"""

import jwt
import pytest
from cresus_dossier.domain.exceptions import AuthenticationError
from cresus_dossier.infrastructure.security import AdvisorAuthService, hash_password

SECRET = "unit-test-secret-key-with-32-bytes-min"


@pytest.fixture
def auth_service() -> AdvisorAuthService:
    return AdvisorAuthService(
        accounts={"Conseil@Cresus.test": hash_password("bon-mot-de-passe")},
        secret=SECRET,
        algorithm="HS256",
        expiration_hours=2,
    )


def test_authenticate_normalizes_email(auth_service: AdvisorAuthService):
    assert auth_service.authenticate("  conseil@cresus.TEST ", "bon-mot-de-passe") == "conseil@cresus.test"


def test_wrong_password_is_refused(auth_service: AdvisorAuthService):
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("conseil@cresus.test", "mauvais")


def test_unknown_advisor_is_refused(auth_service: AdvisorAuthService):
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("inconnu@cresus.test", "bon-mot-de-passe")


def test_malformed_hash_is_refused():
    service = AdvisorAuthService(accounts={"a@b.fr": "not-an-argon2-hash"}, secret=SECRET)
    with pytest.raises(AuthenticationError):
        service.authenticate("a@b.fr", "x")


def test_token_round_trip(auth_service: AdvisorAuthService):
    """Test issued tokens carry the advisor and expire after the configured delay"""
    token = auth_service.create_token("conseil@cresus.test")
    payload = auth_service.verify_token(token)

    assert payload["sub"] == "conseil@cresus.test"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 2 * 3600


def test_expired_token_is_refused():
    service = AdvisorAuthService(accounts={}, secret=SECRET, expiration_hours=-1)
    token = service.create_token("conseil@cresus.test")

    with pytest.raises(AuthenticationError, match="expired"):
        service.verify_token(token)


def test_token_signed_with_another_key_is_refused(auth_service: AdvisorAuthService):
    forged = jwt.encode({"sub": "intrus@cresus.test"}, "another-secret-key-with-32-bytes-min", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        auth_service.verify_token(forged)
