"""
Credential storage.

``CredentialStore`` is the interface the account flow depends on;
``SqlCredentialStore`` implements it over a SQLAlchemy session. Identity
uniqueness is enforced by the unique constraint on ``users.email``, not
by any in-process locking. Nothing here retries.
"""
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import User


class IdentityNotFound(Exception):
    pass


class DuplicateIdentity(Exception):
    pass


class CredentialStore(Protocol):
    def find_by_identifier(self, identifier: str) -> User:
        ...

    def create(self, identifier: str, hashed_password: str, name: str) -> User:
        ...


class SqlCredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_identifier(self, identifier: str) -> User:
        user = self.db.query(User).filter(User.email == identifier).first()
        if user is None:
            raise IdentityNotFound(identifier)
        return user

    def create(self, identifier: str, hashed_password: str, name: str) -> User:
        user = User(email=identifier, password=hashed_password, name=name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateIdentity(identifier) from exc
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user
