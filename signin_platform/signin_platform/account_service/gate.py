"""
Request authentication gate.

The token travels only in the ``token`` cookie set by ``/login``; the
Authorization header is not consulted. A missing token and an invalid
one produce the same AUTH_REQUIRED response; which check failed is only
logged.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import AppError, ErrorKind
from .tokens import (
    ExpiredTokenError,
    MalformedTokenError,
    SignatureError,
    SigningKeyMissing,
    TokenCodec,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Identity admitted for the current request."""
    subject: str
    request_id: Optional[str] = None


class AuthGate:
    def __init__(self, codec: TokenCodec, cookie_name: str = "token"):
        self.codec = codec
        self.cookie_name = cookie_name

    def extract(self, cookies: dict) -> Optional[str]:
        token = cookies.get(self.cookie_name)
        return token or None

    def authenticate(self, token: Optional[str], request_id: Optional[str] = None) -> RequestContext:
        """Admit the request or raise AppError(UNAUTHENTICATED)."""
        if token is None:
            logger.info("auth: no token presented: request_id=%s", request_id)
            raise AppError(ErrorKind.UNAUTHENTICATED)

        try:
            claims = self.codec.parse(token)
        except ExpiredTokenError as exc:
            logger.info("auth: token expired: request_id=%s", request_id)
            raise AppError(ErrorKind.UNAUTHENTICATED) from exc
        except SignatureError as exc:
            logger.warning("auth: token signature rejected: request_id=%s reason=%s", request_id, exc)
            raise AppError(ErrorKind.UNAUTHENTICATED) from exc
        except MalformedTokenError as exc:
            logger.warning("auth: malformed token: request_id=%s reason=%s", request_id, exc)
            raise AppError(ErrorKind.UNAUTHENTICATED) from exc
        except SigningKeyMissing as exc:
            logger.critical("auth: cannot verify tokens, SECRET_KEY is not set: request_id=%s", request_id)
            raise AppError(ErrorKind.INTERNAL) from exc

        return RequestContext(subject=claims.subject, request_id=request_id)
