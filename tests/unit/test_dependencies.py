"""Unit tests for bearer-token verification in dependencies."""

import pytest

from config import JWTSettings
from dependencies import decode_principal
from errors import AuthenticationError
from factories import TEST_SECRET, make_settings, make_token
from schemas.models.user import Role


@pytest.fixture
def settings():
    return make_settings()


class TestDecodePrincipal:
    def test_user_without_role_claim(self, settings):
        principal = decode_principal(make_token("user-1"), settings)
        assert principal.id == "user-1"
        assert principal.role == Role.USER

    @pytest.mark.parametrize("role", ["ADMIN", "admin"])
    def test_admin_role(self, settings, role):
        assert decode_principal(make_token("a1", role=role), settings).is_admin

    @pytest.mark.parametrize(
        "token_kwargs",
        [
            {"secret": "wrong-secret-wrong-secret-wrong-secret"},
            {"issuer": "someone-else"},
            {"audience": "other.api"},
            {"expires_in": -3600},
        ],
        ids=["bad_signature", "bad_issuer", "bad_audience", "expired"],
    )
    def test_rejected_tokens(self, settings, token_kwargs):
        with pytest.raises(AuthenticationError):
            decode_principal(make_token("user-1", **token_kwargs), settings)

    def test_unknown_role_rejected(self, settings):
        with pytest.raises(AuthenticationError):
            decode_principal(make_token("user-1", role="SUPERUSER"), settings)

    def test_garbage(self, settings):
        with pytest.raises(AuthenticationError):
            decode_principal("not.a.jwt", settings)

    def test_leeway_accepts_just_expired(self, settings):
        principal = decode_principal(make_token("user-1", expires_in=-5), settings)
        assert principal.id == "user-1"

    def test_unconfigured_key(self):
        settings = make_settings(jwt=JWTSettings(jwt_secret="", jwt_public_key=""))
        with pytest.raises(AuthenticationError):
            decode_principal(make_token("user-1", secret=TEST_SECRET), settings)
