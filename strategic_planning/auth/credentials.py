"""
Credential service: signs and verifies session tokens.

Tokens are HS256 JWTs binding ``{sub, role, department, email}``. They are
self-contained, so any process instance holding the secret can verify them.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import Settings, get_settings
from ..errors import TokenExpiredError, TokenMalformedError


class CredentialService:
    """Issue and verify signed session credentials."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 24,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CredentialService":
        settings = settings or get_settings()
        return cls(
            secret=settings.secret_key,
            algorithm=settings.token_algorithm,
            expire_minutes=settings.access_token_expire_minutes,
        )

    def sign(
        self,
        payload: Dict[str, Any],
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Sign ``payload``, adding ``iat`` and ``exp`` claims."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))

        to_encode = dict(payload)
        to_encode.update({"iat": now, "exp": expire})
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify ``token`` and return its claims.

        Raises:
            TokenExpiredError: the signature is valid but ``exp`` has passed
            TokenMalformedError: anything else (bad signature, garbage, no ``sub``)
        """
        if not token:
            raise TokenMalformedError("Token not provided")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except JWTError as exc:
            raise TokenMalformedError("Invalid token") from exc

        if not payload.get("sub"):
            raise TokenMalformedError("Invalid token: missing subject")
        return payload

    def issue_for(self, user: Any) -> str:
        """Sign a credential for a stored user record."""
        return self.sign(
            {
                "sub": user.id,
                "email": user.email,
                "role": user.role,
                "department": user.department,
            }
        )
