import secrets
import string
from typing import Optional

SYMBOLS = '!@#$%^&*()-_=+[]{};:,.<>?'
MIN_LENGTH = 4
MAX_LENGTH = 128


class PasswordBuilder:
    def __init__(self):
        self.length = 16
        self.use_upper = True
        self.use_lower = True
        self.use_digits = True
        self.use_symbols = False

    def set_length(self, length: int) -> 'PasswordBuilder':
        # Keep length inside the supported range
        self.length = min(MAX_LENGTH, max(MIN_LENGTH, int(length)))
        return self

    def with_upper(self, enable: bool = True) -> 'PasswordBuilder':
        self.use_upper = bool(enable)
        return self

    def with_lower(self, enable: bool = True) -> 'PasswordBuilder':
        self.use_lower = bool(enable)
        return self

    def with_digits(self, enable: bool = True) -> 'PasswordBuilder':
        self.use_digits = bool(enable)
        return self

    def with_symbols(self, enable: bool = True) -> 'PasswordBuilder':
        self.use_symbols = bool(enable)
        return self

    def character_classes(self) -> list:
        classes = []
        if self.use_lower:
            classes.append(string.ascii_lowercase)
        if self.use_upper:
            classes.append(string.ascii_uppercase)
        if self.use_digits:
            classes.append(string.digits)
        if self.use_symbols:
            classes.append(SYMBOLS)
        return classes

    def build(self) -> str:
        classes = self.character_classes()
        # Nothing selected: letters + digits
        if not classes:
            classes = [string.ascii_letters, string.digits]
        pool = ''.join(classes)

        # One guaranteed character from each enabled class
        password_chars = [secrets.choice(cls) for cls in classes]

        while len(password_chars) < self.length:
            password_chars.append(secrets.choice(pool))

        # Shuffle so the guaranteed chars aren't always in front
        secrets.SystemRandom().shuffle(password_chars)

        return ''.join(password_chars[: self.length])


def generate_password(length: Optional[int] = 16, upper: bool = True, lower: bool = True, digits: bool = True, symbols: bool = False) -> str:
    return (
        PasswordBuilder()
        .set_length(length if length is not None else 16)
        .with_upper(upper)
        .with_lower(lower)
        .with_digits(digits)
        .with_symbols(symbols)
        .build()
    )
