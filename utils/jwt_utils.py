"""JWT utilities for identity-provider session tokens"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from config import settings


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified"""

    pass


class IdentityTokenVerifier:
    """Verifies session tokens issued by the external identity provider"""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        role_claim: Optional[str] = None,
    ):
        self.secret = secret or settings.AUTH_JWT_SECRET
        self.algorithm = algorithm or settings.AUTH_JWT_ALGORITHM
        self.audience = audience if audience is not None else settings.AUTH_JWT_AUDIENCE
        self.issuer = issuer if issuer is not None else settings.AUTH_JWT_ISSUER
        self.role_claim = role_claim or settings.AUTH_ROLE_CLAIM

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a session token

        Args:
            token: The JWT token to verify

        Returns:
            Decoded payload

        Raises:
            InvalidTokenError: if the signature, expiry, audience or issuer is invalid
        """
        options = {"require": ["sub"], "verify_aud": self.audience is not None}
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

    def extract_role(self, payload: Dict[str, Any]) -> Optional[str]:
        """Read the role from a (possibly nested) claim, e.g. "public_metadata.role" """
        value: Any = payload
        for part in self.role_claim.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(part)
        return value if isinstance(value, str) else None

    def create_token(self, user_id: str, role: Optional[str] = None, expires_hours: int = 24) -> str:
        """
        Create a session token; used by local tooling and tests in place of the provider

        Args:
            user_id: Subject of the token
            role: Role stored under the configured role claim
            expires_hours: Token expiry in hours (default: 24)
        """
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {"sub": user_id, "iat": now, "exp": now + timedelta(hours=expires_hours)}
        if self.audience:
            payload["aud"] = self.audience
        if self.issuer:
            payload["iss"] = self.issuer

        if role is not None:
            # Build nested claims for dotted role paths
            parts = self.role_claim.split(".")
            target = payload
            for part in parts[:-1]:
                target = target.setdefault(part, {})
            target[parts[-1]] = role

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)


# Global instance
token_verifier = IdentityTokenVerifier()
