from passlib.context import CryptContext
from passlib.exc import PasswordSizeError

DEFAULT_ROUNDS = 29000


class HashingFailure(Exception):
    """Raised when a secret cannot be hashed or a stored hash cannot be read."""


class PasswordHasher:
    """Salted one-way hashing and constant-time verification of passwords.

    Hashes are self-contained modular-crypt strings that embed the scheme,
    the per-call random salt and the work factor, so verification needs
    nothing but the stored string.
    """

    # Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
    SCHEME = "pbkdf2_sha256"

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self._context = CryptContext(
            schemes=[self.SCHEME],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        try:
            return self._context.hash(plaintext)
        except (ValueError, TypeError, OSError) as exc:
            raise HashingFailure("failed to hash password") from exc

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Return True when ``plaintext`` matches ``hashed``.

        A mismatch is False, not an error, and so is a secret too long for
        passlib to accept. Raises HashingFailure only when ``hashed`` is not
        a recognisable hash string.
        """
        try:
            return self._context.verify(plaintext, hashed)
        except PasswordSizeError:
            return False
        except (ValueError, TypeError) as exc:
            raise HashingFailure("stored password hash is malformed") from exc
