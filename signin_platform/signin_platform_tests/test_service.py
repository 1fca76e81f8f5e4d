"""Unit tests for AccountService over an in-memory credential store."""
import pytest
from sqlalchemy.exc import OperationalError

from signin_platform.signin_platform.account_service.auth import PasswordHasher
from signin_platform.signin_platform.account_service.errors import AppError, ErrorKind
from signin_platform.signin_platform.account_service.password_policy import PasswordPolicy
from signin_platform.signin_platform.account_service.service import AccountService
from signin_platform.signin_platform.account_service.tokens import TokenCodec

from .conftest import STRONG_PASSWORD, TEST_SECRET_KEY, FixedClock


@pytest.fixture
def codec():
    return TokenCodec(TEST_SECRET_KEY, ttl_seconds=3600, clock=FixedClock(1_700_000_000))


@pytest.fixture
def service(memory_store, codec):
    return AccountService(memory_store, PasswordHasher(rounds=1000), PasswordPolicy(), codec)


def test_signup_stores_hashed_password(service, memory_store):
    user = service.signup("user@example.com", STRONG_PASSWORD, "Test User")
    assert user.email == "user@example.com"
    assert user.name == "Test User"
    stored = memory_store.users["user@example.com"]
    assert stored.password != STRONG_PASSWORD
    assert service.hasher.verify(STRONG_PASSWORD, stored.password)


def test_signup_reports_all_policy_violations(service, memory_store):
    with pytest.raises(AppError) as exc_info:
        service.signup("user@example.com", "password", "Test User")
    err = exc_info.value
    assert err.kind is ErrorKind.INVALID_INPUT
    assert err.status_code == 400
    assert set(err.details["password"]) >= {"missing_uppercase", "missing_digit", "missing_symbol"}
    assert memory_store.users == {}


def test_signup_duplicate_identity(service):
    service.signup("user@example.com", STRONG_PASSWORD, "Test User")
    with pytest.raises(AppError) as exc_info:
        service.signup("user@example.com", STRONG_PASSWORD, "Someone Else")
    assert exc_info.value.kind is ErrorKind.DUPLICATE_IDENTITY
    assert exc_info.value.status_code == 409
    assert exc_info.value.code == "DB_DUPLICATE"


def test_login_returns_token_for_subject(service, codec):
    service.signup("user@example.com", STRONG_PASSWORD, "Test User")
    token = service.login("user@example.com", STRONG_PASSWORD)
    assert codec.parse(token).subject == "user@example.com"


def test_login_failures_are_indistinguishable(service):
    service.signup("user@example.com", STRONG_PASSWORD, "Test User")

    with pytest.raises(AppError) as unknown:
        service.login("nobody@example.com", STRONG_PASSWORD)
    with pytest.raises(AppError) as wrong:
        service.login("user@example.com", "Wrong1234!@#$")

    assert unknown.value.kind is wrong.value.kind is ErrorKind.INVALID_CREDENTIALS
    assert unknown.value.to_dict() == wrong.value.to_dict()
    assert unknown.value.status_code == wrong.value.status_code == 401


def test_login_skips_password_policy(service, memory_store):
    # Accounts created before the policy existed can still log in
    memory_store.create("legacy@example.com", service.hasher.hash("weak"), "Legacy")
    assert service.login("legacy@example.com", "weak")


def test_login_with_unreadable_hash_is_internal(service, memory_store):
    memory_store.create("broken@example.com", "not-a-hash", "Broken")
    with pytest.raises(AppError) as exc_info:
        service.login("broken@example.com", STRONG_PASSWORD)
    assert exc_info.value.kind is ErrorKind.INTERNAL


def test_login_without_signing_key_is_internal(memory_store):
    service = AccountService(memory_store, PasswordHasher(rounds=1000), PasswordPolicy(), TokenCodec(""))
    service.signup("user@example.com", STRONG_PASSWORD, "Test User")
    with pytest.raises(AppError) as exc_info:
        service.login("user@example.com", STRONG_PASSWORD)
    assert exc_info.value.kind is ErrorKind.INTERNAL
    assert exc_info.value.status_code == 500


def test_store_failure_is_internal_and_not_retried(codec):
    class FailingStore:
        calls = 0

        def find_by_identifier(self, identifier):
            raise AssertionError("not used")

        def create(self, identifier, hashed_password, name):
            FailingStore.calls += 1
            raise OperationalError("INSERT", {}, Exception("database is locked"))

    service = AccountService(FailingStore(), PasswordHasher(rounds=1000), PasswordPolicy(), codec)
    with pytest.raises(AppError) as exc_info:
        service.signup("user@example.com", STRONG_PASSWORD, "Test User")
    assert exc_info.value.kind is ErrorKind.INTERNAL
    assert "locked" not in exc_info.value.message
    assert FailingStore.calls == 1


def test_get_user_for_deleted_account_is_unauthenticated(service):
    with pytest.raises(AppError) as exc_info:
        service.get_user("gone@example.com")
    assert exc_info.value.kind is ErrorKind.UNAUTHENTICATED
