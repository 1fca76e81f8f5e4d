"""
Password strength rules applied at signup.

Login never re-runs these checks: stored credentials may predate a
policy change.
"""
import unicodedata
from typing import List

MIN_LENGTH = 12
# Hash backends such as bcrypt silently truncate past 72 bytes; reject instead
MAX_LENGTH = 72


class PolicyViolation(Exception):
    def __init__(self, reasons: List[str]):
        self.reasons = reasons
        super().__init__(", ".join(reasons))


def _has_category(plaintext: str, category: str) -> bool:
    return any(unicodedata.category(ch) == category for ch in plaintext)


def _is_symbol(ch: str) -> bool:
    # Unicode punctuation (P*) or symbol (S*) categories
    return unicodedata.category(ch)[0] in ("P", "S")


class PasswordPolicy:
    def __init__(self, min_length: int = MIN_LENGTH, max_length: int = MAX_LENGTH):
        self.min_length = min_length
        self.max_length = max_length

    def validate(self, plaintext: str) -> List[str]:
        """Return every broken rule for ``plaintext``; an empty list means it passes."""
        reasons = []
        if len(plaintext) < self.min_length:
            reasons.append("password_too_short")
        elif len(plaintext) > self.max_length:
            reasons.append("password_too_long")

        if not _has_category(plaintext, "Lu"):
            reasons.append("missing_uppercase")
        if not _has_category(plaintext, "Ll"):
            reasons.append("missing_lowercase")
        if not _has_category(plaintext, "Nd"):
            reasons.append("missing_digit")
        if not any(_is_symbol(ch) for ch in plaintext):
            reasons.append("missing_symbol")
        return reasons

    def enforce(self, plaintext: str) -> None:
        reasons = self.validate(plaintext)
        if reasons:
            raise PolicyViolation(reasons)
