from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

MIN_ADMISSION_LENGTH = 8


class AdmissionHandler(ABC):
    # Base class for checking one rule of a new account password

    def __init__(self, next_handler: Optional["AdmissionHandler"] = None) -> None:
        self._next = next_handler

    def set_next(self, next_handler: "AdmissionHandler") -> "AdmissionHandler":
        self._next = next_handler
        return next_handler

    def handle(self, secret: str) -> bool:
        if not self._check(secret):
            return False

        if self._next:
            return self._next.handle(secret)

        return True

    @abstractmethod
    def _check(self, secret: str) -> bool:
        ...


class LengthHandler(AdmissionHandler):
    def _check(self, secret: str) -> bool:
        return len(secret) >= MIN_ADMISSION_LENGTH


class UppercaseHandler(AdmissionHandler):
    def _check(self, secret: str) -> bool:
        return any(c.isupper() for c in secret)


class LowercaseHandler(AdmissionHandler):
    def _check(self, secret: str) -> bool:
        return any(c.islower() for c in secret)


class DigitHandler(AdmissionHandler):
    def _check(self, secret: str) -> bool:
        return any(c.isdigit() for c in secret)


class SymbolHandler(AdmissionHandler):
    def _check(self, secret: str) -> bool:
        # Anything that is not a letter, digit or whitespace counts as a symbol
        return any(not c.isalnum() and not c.isspace() for c in secret)


def build_admission_chain() -> AdmissionHandler:
    # length → upper → lower → digit → symbol
    first = LengthHandler()
    nxt = first.set_next(UppercaseHandler())
    nxt = nxt.set_next(LowercaseHandler())
    nxt = nxt.set_next(DigitHandler())
    nxt.set_next(SymbolHandler())
    return first


def check_admission(secret: Any) -> bool:
    """Hard gate for new account passwords: every rule in the chain must pass."""
    if not isinstance(secret, str) or not secret:
        return False
    return build_admission_chain().handle(secret)
