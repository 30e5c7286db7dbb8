"""
Integration tests for the complete token flow.
"""

from concurrent.futures import ThreadPoolExecutor

import jwt
import pytest
from prometheus_client import CollectorRegistry

from shared.config import TokenSettings
from shared.metrics import TokenMetrics
from shared.test_helpers import FakeClock, TestDataFactory, iter_bit_flips
from service_tokens.app.claims.policies import StandardClaimsConfig
from service_tokens.app.config.provider import BaseTokenConfig
from service_tokens.app.engine import TokenEngine
from service_tokens.app.errors import (
    MalformedBase64Error, MalformedTokenError, SignatureInvalidError, TokenError
)
from service_tokens.app.validation.token_validator import TokenValidator

# Long enough that PyJWT does not warn about short HMAC keys.
SECRET = "integration-secret-0123456789-abcdefghijklmnopqrstuvwxyz-ABCDEFGHIJ"

ALGORITHMS = ["HS256", "HS384", "HS512"]


@pytest.fixture
def metrics():
    """Create metrics bound to a private registry."""
    return TokenMetrics(CollectorRegistry())


class TestPyJWTInterop:
    """Tokens interoperate with an independent JWT implementation."""

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_pyjwt_decodes_our_tokens(self, metrics, algorithm):
        """Test PyJWT verifies tokens we issue."""
        engine = TokenEngine(BaseTokenConfig(SECRET, algorithm), metrics=metrics)
        token = engine.encode({"sub": "user1", "roles": ["user"]})

        assert jwt.get_unverified_header(token) == {"alg": algorithm, "typ": "JWT"}
        assert jwt.decode(token, SECRET, algorithms=[algorithm]) == {"sub": "user1", "roles": ["user"]}

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_we_decode_pyjwt_tokens(self, metrics, algorithm):
        """Test tokens issued by PyJWT verify here."""
        token = jwt.encode({"sub": "user2", "scope": "read"}, SECRET, algorithm=algorithm)
        engine = TokenEngine(BaseTokenConfig(SECRET, algorithm), metrics=metrics)

        assert engine.decode(token) == {"sub": "user2", "scope": "read"}

    def test_pyjwt_sees_standard_claims(self, metrics):
        """Test PyJWT accepts the standard claims we issue."""
        config = StandardClaimsConfig(SECRET, issuer="auth-service", audience="api", ttl_seconds=600)
        token = TokenEngine(config, metrics=metrics).encode({"sub": "user1"})

        claims = jwt.decode(
            token, SECRET, algorithms=["HS256"], audience="api", issuer="auth-service"
        )

        assert claims["sub"] == "user1"
        assert claims["exp"] - claims["iat"] == 600

    def test_expired_pyjwt_token_refreshable(self, metrics):
        """Test an expired PyJWT token is refused but refreshable."""
        clock = FakeClock(now=2_000_000_000)
        token = jwt.encode(
            {"sub": "user1", "exp": clock.now - 10, "iat": clock.now - 70, "nbf": clock.now - 70},
            SECRET,
            algorithm="HS256"
        )
        validator = TokenValidator(
            TokenEngine(StandardClaimsConfig(SECRET, ttl_seconds=60, clock=clock), metrics=metrics)
        )

        assert validator.verify_token(token).code == "CLAIM_INVALID"

        refreshed = validator.refresh_token(token)
        assert refreshed.valid is True
        assert validator.extract_claims(refreshed.access_token)["exp"] == clock.now + 60


class TestTamperDetection:
    """Single-bit flips anywhere in a token never verify."""

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_every_bit_flip_rejected(self, metrics, algorithm):
        """Test every single-bit flip in every segment is rejected."""
        engine = TokenEngine(BaseTokenConfig(SECRET, algorithm), metrics=metrics)
        token = engine.encode({"sub": "u1", "admin": False})

        for position, bit, tampered in iter_bit_flips(token):
            with pytest.raises((SignatureInvalidError, MalformedBase64Error, MalformedTokenError)):
                engine.decode(tampered)

    def test_segment_swap_rejected(self, metrics):
        """Test splicing a payload from another token fails."""
        engine = TokenEngine(BaseTokenConfig(SECRET), metrics=metrics)
        user = engine.encode({"sub": "user", "admin": False}).split(".")
        admin = engine.encode({"sub": "user", "admin": True}).split(".")

        with pytest.raises(SignatureInvalidError):
            engine.decode(".".join([user[0], admin[1], user[2]]))


class TestSettingsFlow:
    """Configuration loaded from the environment drives the engine."""

    def test_environment_to_token(self, monkeypatch, metrics):
        """Test a full encode/decode cycle from TOKENS_ settings."""
        monkeypatch.setenv("TOKENS_SECRET_KEY", SECRET)
        monkeypatch.setenv("TOKENS_ALGORITHM", "HS512")
        monkeypatch.setenv("TOKENS_ISSUER", "auth-service")

        config = StandardClaimsConfig.from_settings(TokenSettings())
        engine = TokenEngine(config, metrics=metrics)
        token = engine.encode({"sub": "user1"})

        assert jwt.get_unverified_header(token)["alg"] == "HS512"
        assert engine.decode(token)["iss"] == "auth-service"


class TestConcurrency:
    """Engines are safe to share between threads."""

    def test_shared_engine_across_threads(self, metrics):
        """Test concurrent encode/decode on one engine."""
        engine = TokenEngine(BaseTokenConfig(SECRET, "HS384"), metrics=metrics)
        payloads = [{"sub": f"user{i}", "n": i} for i in range(200)]

        def round_trip(payload):
            return engine.decode(engine.encode(payload))

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(round_trip, payloads))

        assert results == payloads
        assert metrics.registry.get_sample_value(
            "tokens_decoded_total", {"algorithm": "HS384", "outcome": "ok"}
        ) == 200.0

    def test_errors_are_token_errors(self, metrics):
        """Test every failure mode shares the TokenError base."""
        engine = TokenEngine(BaseTokenConfig(SECRET), metrics=metrics)

        for payload in TestDataFactory.create_test_payloads():
            token = engine.encode(payload)
            with pytest.raises(TokenError):
                engine.decode(token + "x")
