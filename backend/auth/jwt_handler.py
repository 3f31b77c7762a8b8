from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt

from backend.core import config


class TokenError(Exception):
    """Base class for tokens that fail verification."""


class TokenMalformed(TokenError):
    pass


class TokenSignatureInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class TokenCodec:
    """Issues and verifies signed, time-limited access tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
    ) -> None:
        if not secret:
            raise ValueError("jwt_secret_blank")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(
        self,
        claims: dict,
        ttl: timedelta | None = None,
        issued_at: datetime | None = None,
    ) -> str:
        now = issued_at or datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + (ttl or self.ttl)
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        # PyJWT checks the signature before validating exp or any other claim.
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise TokenSignatureInvalid("Token signature is invalid") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformed("Token could not be decoded") from exc


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec(
        config.JWT_SECRET_KEY,
        algorithm=config.JWT_ALGORITHM,
        ttl=timedelta(minutes=config.JWT_EXPIRES_MINUTES),
    )
