"""JWT token codec.

Issues and parses the signed, time-bound bearer tokens handed out on
login. Tokens are HS256 JWTs carrying ``sub``, ``iat`` and ``exp``.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import jwt

DEFAULT_TTL_SECONDS = 24 * 3600


class SigningKeyMissing(RuntimeError):
    """Raised when a token operation runs without a signing key."""


class TokenError(Exception):
    """Base class for every reason a token is refused."""


class MalformedTokenError(TokenError):
    pass


class SignatureError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


@dataclass(frozen=True)
class Claims:
    subject: str
    issued_at: int
    expires_at: int


class TokenCodec:
    """Issue and verify tokens under one symmetric key and one algorithm.

    Parameters
    ----------
    secret_key
        Pre-shared signing key. Issuing or parsing with an empty key
        raises SigningKeyMissing.
    ttl_seconds
        Default lifetime of issued tokens.
    clock
        Returns the current time as epoch seconds; ``time.time`` by default.
    """

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._secret_key = secret_key
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _key(self) -> str:
        if not self._secret_key:
            raise SigningKeyMissing("token signing key is not configured")
        return self._secret_key

    def _now(self) -> int:
        return int(self._clock())

    def issue(self, subject: str, ttl_seconds: Optional[int] = None) -> str:
        issued_at = self._now()
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        return jwt.encode(payload, self._key(), algorithm=self.ALGORITHM)

    def parse(self, token: str) -> Claims:
        """Verify ``token`` and return its claims.

        The signature is checked first, against the HS256 allow-list only;
        expiry is checked afterwards with integer seconds and no leeway.

        Raises
        ------
        SignatureError
            Bad signature, or a declared algorithm other than HS256
        ExpiredTokenError
            ``exp`` is not strictly after the current second
        MalformedTokenError
            Undecodable token, or missing or ill-typed claims
        """
        try:
            payload = jwt.decode(
                token,
                self._key(),
                algorithms=[self.ALGORITHM],
                # Expiry is checked below against the injected clock
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise SignatureError(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        subject = payload["sub"]
        issued_at = payload["iat"]
        expires_at = payload["exp"]
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("subject claim must be a non-empty string")
        for name, value in (("iat", issued_at), ("exp", expires_at)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise MalformedTokenError(f"{name} claim must be a number")

        if not int(expires_at) > self._now():
            raise ExpiredTokenError("token has expired")

        return Claims(subject=subject, issued_at=int(issued_at), expires_at=int(expires_at))
