from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Depends, Response, status
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings, settings
from .db import init_db
from .dependencies import get_account_service, require_auth
from .errors import register_error_handlers
from .gate import RequestContext
from .middleware import RequestIdMiddleware
from .schemas import (
    SignupRequest,
    LoginRequest,
    SignupResponse,
    UserResponse,
    MessageResponse,
    AuthorizedResponse,
    ErrorResponse,
)
from .service import AccountService
from .utils.log_config import configure_logging

configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create tables on startup"""
    init_db()
    yield


app = FastAPI(title="Account Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)


@app.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def signup(payload: SignupRequest, service: AccountService = Depends(get_account_service)):
    user = service.signup(payload.email, payload.password, payload.name)
    return SignupResponse(user=UserResponse.model_validate(user))


@app.post("/login", response_model=MessageResponse, responses={401: {"model": ErrorResponse}})
def login(
    credentials: LoginRequest,
    response: Response,
    service: AccountService = Depends(get_account_service),
    config: Settings = Depends(get_settings),
):
    token = service.login(credentials.email, credentials.password)
    response.set_cookie(
        key=config.TOKEN_COOKIE_NAME,
        value=token,
        max_age=config.token_ttl_seconds,
        path="/",
        secure=config.COOKIE_SECURE,
        httponly=True,
        samesite="lax",
    )
    return MessageResponse(message="login_success")


@app.post("/logout", response_model=MessageResponse)
def logout(response: Response, config: Settings = Depends(get_settings)):
    # Only the client copy is dropped; issued tokens stay valid until expiry
    response.delete_cookie(key=config.TOKEN_COOKIE_NAME, path="/")
    return MessageResponse(message="logout_success")


@app.get("/auth/", response_model=AuthorizedResponse, responses={401: {"model": ErrorResponse}})
def authorized(ctx: RequestContext = Depends(require_auth)):
    logger.info("authorized access: subject=%s request_id=%s", ctx.subject, ctx.request_id)
    return AuthorizedResponse(subject=ctx.subject)


@app.get("/auth/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
def me(ctx: RequestContext = Depends(require_auth), service: AccountService = Depends(get_account_service)):
    return service.get_user(ctx.subject)


@app.get("/health")
def health():
    return {"status": "ok"}
