"""
Security helpers: password hashing and access tokens.

- Passwords are hashed with bcrypt; the raw password is never stored.
- Access tokens are stateless JWTs carrying the user id and email.
  Verification needs only the token and the server secret, so there is no
  session table and no revocation list. Logout is client-side.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt


DEFAULT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7
BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of a secret.
_BCRYPT_MAX_BYTES = 72


# =============================================================================
# Password Hashing
# =============================================================================

class PasswordHasher:
    """
    bcrypt wrapper with a configurable cost factor.

    Usage:
        hasher = PasswordHasher(rounds=10)
        hashed = hasher.hash("s3cret!")
        hasher.verify("s3cret!", hashed)  # True
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """Hash a plaintext password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """Check a plaintext password against a stored hash."""
        try:
            return bcrypt.checkpw(
                self._encode(password),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            # Malformed stored hash
            return False

    def burn(self, password: str) -> None:
        """
        Run a comparison against a throwaway hash.

        Used when the account does not exist so the login path costs the
        same either way.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("not-a-real-password")
        self.verify(password, self._dummy_hash)


# =============================================================================
# JWT Token Handling
# =============================================================================

class TokenError(Exception):
    """Token could not be verified."""


class TokenExpiredError(TokenError):
    """Signature is valid but the token is past its expiry."""


class InvalidTokenError(TokenError):
    """Token is malformed, tampered with, or missing required claims."""


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a verified token."""

    user_id: str
    email: str
    expires_at: datetime


class TokenService:
    """
    Issues and verifies signed access tokens.

    Payload: {"userId", "email", "iat", "exp"}.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = DEFAULT_ALGORITHM,
        expires_delta: timedelta = timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS),
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(
        self,
        user_id: str,
        email: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a signed token for a user."""
        now = datetime.now(timezone.utc)
        expire_at = now + (expires_delta if expires_delta is not None else self.expires_delta)

        to_encode = {
            "userId": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(expire_at.timestamp()),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            TokenExpiredError: Token is past its expiry.
            InvalidTokenError: Bad signature, bad format, or missing claims.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise InvalidTokenError("Token is missing identity claims")

        return TokenClaims(
            user_id=user_id,
            email=email,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
