"""
auth/tokens.py -- JWT issuing/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET and carry
       sub, id, email, role, iat and exp. Claims are signed, not encrypted --
       anyone holding a token can base64-decode them. verify() distinguishes
       expiry from every other failure so the request gate can report
       "Token expirado" separately from "Token inválido".

  Passwords: bcrypt, used directly rather than through passlib. passlib's
       wrap-bug detection feeds bcrypt a >72-byte password, which bcrypt 4.x
       rejects. The cost factor is configurable (BCRYPT_ROUNDS, default 10).

  No revocation: validity is purely signature + expiry. Logout is a client
       concern; the server keeps no session table.

Layer rule: no imports from api/ or users/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

logger = logging.getLogger("authapi.auth")

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ("id", "email")


class TokenExpiredError(Exception):
    """The token's signature is valid but its exp claim is in the past."""


class TokenInvalidError(Exception):
    """The token is malformed, tampered with, or missing required claims."""


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 10) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes. The API layer caps password
    length (Pydantic field) so inputs stay under that limit.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ---------------------------------------------------------------------------
# JWT issue / verify
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Mints and verifies signed bearer tokens.

    Constructed once at startup from Settings and shared through app.state,
    so tests can build one with their own secret and expiry.
    """

    def __init__(self, secret: str, expire_seconds: int) -> None:
        if not secret:
            raise ValueError("TokenIssuer requires a signing secret.")
        self._secret = secret
        self.expire_seconds = expire_seconds

    def issue(self, claims: dict, expires_in: timedelta | None = None) -> str:
        """Encode a signed JWT over claims plus iat/exp.

        Args:
            claims:     Identity claims, at least "id" and "email".
            expires_in: Lifetime override. Defaults to the configured
                        expiry (JWT_EXPIRES_IN).
        """
        now = datetime.now(timezone.utc)
        lifetime = expires_in if expires_in is not None else timedelta(seconds=self.expire_seconds)
        payload = {
            **claims,
            "sub": str(claims["id"]),
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> dict:
        """Decode and verify a JWT, returning its claims.

        Raises:
            TokenExpiredError: signature valid, exp in the past.
            TokenInvalidError: anything else -- bad signature, bad structure,
                               wrong algorithm, missing id/email claims.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError(str(exc)) from exc
        except JWTError as exc:
            raise TokenInvalidError(str(exc)) from exc
        missing = [name for name in _REQUIRED_CLAIMS if name not in payload]
        if missing:
            raise TokenInvalidError(f"Token is missing claims: {', '.join(missing)}")
        return payload
