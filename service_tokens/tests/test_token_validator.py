"""
Unit tests for TokenValidator.
"""

import pytest
from prometheus_client import CollectorRegistry

from shared.errors import AuthenticationError
from shared.metrics import TokenMetrics
from shared.test_helpers import FakeClock
from service_tokens.app.claims.policies import StandardClaimsConfig
from service_tokens.app.config.provider import BaseTokenConfig
from service_tokens.app.engine import TokenEngine
from service_tokens.app.validation.token_validator import (
    TokenValidator, TokenVerificationRequest, TokenVerificationResponse, TokenRefreshResponse
)


class TestTokenValidator:
    """Test cases for TokenValidator."""

    @pytest.fixture
    def clock(self):
        """Create a controllable clock."""
        return FakeClock(now=1_000)

    @pytest.fixture
    def engine(self, clock):
        """Create an engine issuing standard claims."""
        config = StandardClaimsConfig(
            "validator-secret",
            ttl_seconds=300,
            issuer="auth-service",
            clock=clock
        )
        return TokenEngine(config, metrics=TokenMetrics(CollectorRegistry()))

    @pytest.fixture
    def token_validator(self, engine):
        """Create TokenValidator instance."""
        return TokenValidator(engine)

    @pytest.fixture
    def token(self, engine):
        """Create a valid token."""
        return engine.encode({"sub": "user1", "roles": ["user", "analyst"]})

    def test_verify_token_success(self, token_validator, token):
        """Test successful token verification."""
        result = token_validator.verify_token(token)

        assert isinstance(result, TokenVerificationResponse)
        assert result.valid is True
        assert result.claims["sub"] == "user1"
        assert result.claims["roles"] == ["user", "analyst"]
        assert result.error is None
        assert result.code is None

    def test_verify_token_failure(self, token_validator, token):
        """Test tampered tokens are reported as invalid."""
        tampered = token[:-2] + ("AA" if not token.endswith("AA") else "BA")

        result = token_validator.verify_token(tampered)

        assert result.valid is False
        assert result.claims is None
        assert result.code in ("SIGNATURE_INVALID", "MALFORMED_BASE64")
        assert result.error

    def test_verify_token_expired(self, token_validator, token, clock):
        """Test expired tokens report the failing claim."""
        clock.advance(301)

        result = token_validator.verify_token(token)

        assert result.valid is False
        assert result.code == "CLAIM_INVALID"
        assert result.step == "RunValidation"
        assert "Token expired" in result.error

    def test_verify_request_with_skip(self, token_validator, token, clock):
        """Test request models carry the skip list."""
        clock.advance(301)

        result = token_validator.verify(TokenVerificationRequest(token=token, skip=["exp"]))

        assert result.valid is True
        assert result.claims["sub"] == "user1"

    def test_extract_claims_success(self, token_validator, token):
        """Test successful claims extraction."""
        claims = token_validator.extract_claims(token)

        assert claims["sub"] == "user1"
        assert claims["iss"] == "auth-service"

    def test_extract_claims_failure(self, token_validator):
        """Test claims extraction failure."""
        with pytest.raises(AuthenticationError) as exc_info:
            token_validator.extract_claims("invalid_token")

        assert exc_info.value.code == "AUTHENTICATION_ERROR"
        assert exc_info.value.details["token_error"] == "MALFORMED_TOKEN"
        assert exc_info.value.to_response().code == "AUTHENTICATION_ERROR"

    def test_get_subject_info(self, token_validator, token):
        """Test registered claim extraction."""
        info = token_validator.get_subject_info(token)

        assert info["subject"] == "user1"
        assert info["issuer"] == "auth-service"
        assert info["audience"] is None
        assert info["exp"] == 1_300
        assert info["iat"] == 1_000
        assert len(info["token_id"]) == 32

    def test_refresh_token_success(self, token_validator, token, clock):
        """Test an expired token is re-issued with fresh claims."""
        original = token_validator.extract_claims(token)
        clock.advance(1_000)

        result = token_validator.refresh_token(token)

        assert isinstance(result, TokenRefreshResponse)
        assert result.valid is True
        assert result.expires_in == 300
        assert result.access_token != token

        refreshed = token_validator.extract_claims(result.access_token)
        assert refreshed["sub"] == "user1"
        assert refreshed["roles"] == ["user", "analyst"]
        assert refreshed["exp"] == 2_300
        assert refreshed["jti"] != original["jti"]

    def test_refresh_token_bad_signature(self, token):
        """Test refresh never skips signature verification."""
        other = TokenEngine(
            BaseTokenConfig("another-secret"),
            metrics=TokenMetrics(CollectorRegistry())
        )

        result = TokenValidator(other).refresh_token(token)

        assert result.valid is False
        assert result.access_token is None
        assert result.code == "SIGNATURE_INVALID"

    def test_refresh_token_other_claim_invalid(self, clock):
        """Test refresh still validates claims other than exp."""
        metrics = TokenMetrics(CollectorRegistry())
        issuer = TokenEngine(StandardClaimsConfig("s", issuer="evil", clock=clock), metrics=metrics)
        verifier = TokenEngine(StandardClaimsConfig("s", issuer="auth", clock=clock), metrics=metrics)
        token = issuer.encode({"sub": "user1"})

        result = TokenValidator(verifier).refresh_token(token)

        assert result.valid is False
        assert result.code == "CLAIM_INVALID"
