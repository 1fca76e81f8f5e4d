"""
FastAPI dependency providers.

Every component receives its collaborators here, built from ``Settings``.
Tests swap them through ``app.dependency_overrides``.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .auth import PasswordHasher
from .config import Settings, get_settings
from .db import get_db
from .gate import AuthGate, RequestContext
from .password_policy import PasswordPolicy
from .service import AccountService
from .store import SqlCredentialStore
from .tokens import TokenCodec

_hashers = {}


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    rounds = settings.PASSWORD_HASH_ROUNDS
    if rounds not in _hashers:
        _hashers[rounds] = PasswordHasher(rounds=rounds)
    return _hashers[rounds]


def get_token_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    return TokenCodec(settings.SECRET_KEY, ttl_seconds=settings.token_ttl_seconds)


def get_account_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: TokenCodec = Depends(get_token_codec),
) -> AccountService:
    return AccountService(SqlCredentialStore(db), hasher, PasswordPolicy(), codec)


def get_auth_gate(
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> AuthGate:
    return AuthGate(codec, cookie_name=settings.TOKEN_COOKIE_NAME)


def require_auth(request: Request, gate: AuthGate = Depends(get_auth_gate)) -> RequestContext:
    """Admit the request with its RequestContext, or stop it with AUTH_REQUIRED."""
    request_id = getattr(request.state, "request_id", None)
    return gate.authenticate(gate.extract(request.cookies), request_id=request_id)
