"""
Signup and login over the credential store.

Passwords and tokens are never logged. Both login failure causes (unknown
email, wrong password) raise the same INVALID_CREDENTIALS error so the
response cannot be used to discover registered accounts.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from .auth import HashingFailure, PasswordHasher
from .errors import AppError, ErrorKind, wrap_db_error
from .models import User
from .password_policy import PasswordPolicy, PolicyViolation
from .store import CredentialStore, DuplicateIdentity, IdentityNotFound
from .tokens import SigningKeyMissing, TokenCodec

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        policy: PasswordPolicy,
        codec: TokenCodec,
    ):
        self.store = store
        self.hasher = hasher
        self.policy = policy
        self.codec = codec

    def signup(self, email: str, password: str, name: str) -> User:
        try:
            self.policy.enforce(password)
        except PolicyViolation as exc:
            logger.warning("signup: password policy violated: email=%s reasons=%s", email, exc.reasons)
            raise AppError(ErrorKind.INVALID_INPUT, details={"password": exc.reasons}) from exc

        try:
            hashed = self.hasher.hash(password)
        except HashingFailure as exc:
            logger.error("signup: failed to hash password: email=%s", email, exc_info=exc)
            raise AppError(ErrorKind.INTERNAL) from exc

        try:
            user = self.store.create(email, hashed, name)
        except DuplicateIdentity as exc:
            logger.warning("signup: duplicate email: email=%s", email)
            raise AppError(ErrorKind.DUPLICATE_IDENTITY, details={"field": "email"}) from exc
        except SQLAlchemyError as exc:
            logger.error("signup: failed to create user: email=%s error=%s", email, exc)
            raise wrap_db_error(exc) from exc

        logger.info("signup: user created: email=%s user_id=%s", email, user.id)
        return user

    def login(self, email: str, password: str) -> str:
        """Verify the credentials and return a freshly issued token."""
        try:
            user = self.store.find_by_identifier(email)
        except IdentityNotFound as exc:
            logger.warning("login: user not found: email=%s", email)
            raise AppError(ErrorKind.INVALID_CREDENTIALS) from exc
        except SQLAlchemyError as exc:
            logger.error("login: credential lookup failed: email=%s error=%s", email, exc)
            raise wrap_db_error(exc) from exc

        try:
            matched = self.hasher.verify(password, user.password)
        except HashingFailure as exc:
            logger.error("login: stored hash unreadable: email=%s user_id=%s", email, user.id, exc_info=exc)
            raise AppError(ErrorKind.INTERNAL) from exc

        if not matched:
            logger.warning("login: invalid password: email=%s", email)
            raise AppError(ErrorKind.INVALID_CREDENTIALS)

        try:
            token = self.codec.issue(user.email)
        except SigningKeyMissing as exc:
            logger.critical("login: cannot sign token, SECRET_KEY is not set: email=%s", email)
            raise AppError(ErrorKind.INTERNAL) from exc
        logger.info("login: success: email=%s user_id=%s", email, user.id)
        return token

    def get_user(self, email: str) -> User:
        """Load the record behind an already authenticated subject."""
        try:
            return self.store.find_by_identifier(email)
        except IdentityNotFound as exc:
            # Token outlived its account
            logger.warning("account lookup: subject has no record: email=%s", email)
            raise AppError(ErrorKind.UNAUTHENTICATED) from exc
        except SQLAlchemyError as exc:
            logger.error("account lookup failed: email=%s error=%s", email, exc)
            raise wrap_db_error(exc) from exc
