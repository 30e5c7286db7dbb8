"""
Token validation service built on the token engine.
"""

from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field

from shared.logging import get_logger
from shared.errors import AuthenticationError
from ..claims.models import Claim, ClaimName
from ..engine import TokenEngine
from ..errors import TokenError

# Claims dropped from a token before it is re-issued on refresh.
REISSUED_CLAIMS = (Claim.EXP, Claim.IAT, Claim.NBF, Claim.JTI)


class TokenVerificationRequest(BaseModel):
    """Request model for token verification."""
    token: str
    skip: List[str] = Field(default_factory=list)


class TokenVerificationResponse(BaseModel):
    """Response model for token verification."""
    valid: bool
    claims: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    code: Optional[str] = None
    step: Optional[str] = None


class TokenRefreshResponse(BaseModel):
    """Response model for token refresh."""
    valid: bool
    access_token: Optional[str] = None
    expires_in: Optional[int] = None
    error: Optional[str] = None
    code: Optional[str] = None


class TokenValidator:
    """Token validation service."""

    def __init__(self, engine: TokenEngine):
        self.engine = engine
        self.logger = get_logger("tokens.validator")

    def verify_token(self, token: str, skip: Optional[List[ClaimName]] = None) -> TokenVerificationResponse:
        """Verify a token and report the outcome instead of raising."""
        try:
            claims = self.engine.decode(token, skip=skip)

            return TokenVerificationResponse(
                valid=True,
                claims=claims
            )

        except TokenError as e:
            self.logger.info("Token verification failed", code=e.code, step=e.step)
            return TokenVerificationResponse(
                valid=False,
                error=e.message,
                code=e.code,
                step=e.step
            )

    def verify(self, request: TokenVerificationRequest) -> TokenVerificationResponse:
        """Verify a token from a request model."""
        return self.verify_token(request.token, skip=request.skip)

    def extract_claims(self, token: str) -> Dict[str, Any]:
        """Extract claims from a valid token."""
        response = self.verify_token(token)

        if not response.valid:
            raise AuthenticationError(
                f"Invalid token: {response.error}",
                details={"token_error": response.code, "step": response.step}
            )

        return response.claims

    def get_subject_info(self, token: str) -> Dict[str, Any]:
        """Get the registered claims of a valid token."""
        claims = self.extract_claims(token)

        return {
            "subject": claims.get("sub"),
            "issuer": claims.get("iss"),
            "audience": claims.get("aud"),
            "token_id": claims.get("jti"),
            "exp": claims.get("exp"),
            "iat": claims.get("iat")
        }

    def refresh_token(self, token: str) -> TokenRefreshResponse:
        """Re-issue a token, accepting it even if it has expired.

        Only ``exp`` is skipped; the signature and every other claim are
        still checked. Time and id claims are dropped so the configuration
        issues fresh ones.
        """
        try:
            claims = self.engine.decode(token, skip={Claim.EXP})

            for claim in REISSUED_CLAIMS:
                claims.pop(claim.value, None)

            new_token = self.engine.encode(claims)
            new_claims = self.engine.decode(new_token)

            expires_in = None
            exp, iat = new_claims.get("exp"), new_claims.get("iat")
            if isinstance(exp, (int, float)) and isinstance(iat, (int, float)):
                expires_in = int(exp - iat)

            self.logger.info("Token refreshed", sub=new_claims.get("sub"))

            return TokenRefreshResponse(
                valid=True,
                access_token=new_token,
                expires_in=expires_in
            )

        except TokenError as e:
            self.logger.warning("Token refresh failed", code=e.code, step=e.step)
            return TokenRefreshResponse(
                valid=False,
                error=e.message,
                code=e.code
            )
