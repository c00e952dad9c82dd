from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

import config


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    username: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, max_length=255)


class PasswordCreate(BaseModel):
    model_config = ConfigDict(extra='forbid')

    title: str = Field(min_length=1, max_length=255)
    encrypted_password: str = Field(min_length=1)
    username: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = Field(default=None, max_length=2048)
    notes: Optional[str] = None
    category: str = Field(default='login', min_length=1, max_length=32)


class PasswordUpdate(BaseModel):
    model_config = ConfigDict(extra='forbid')

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    encrypted_password: Optional[str] = Field(default=None, min_length=1)
    username: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = Field(default=None, max_length=2048)
    notes: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=32)


class PasswordGeneratorRequest(BaseModel):
    length: int = Field(default=config.GENERATOR_DEFAULT_LENGTH,
                        ge=config.GENERATOR_MIN_LENGTH, le=config.GENERATOR_MAX_LENGTH)
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_symbols: bool = False

    @model_validator(mode='after')
    def at_least_one_class(self):
        if not (self.include_uppercase or self.include_lowercase
                or self.include_numbers or self.include_symbols):
            raise ValueError('Select at least one character type')
        return self
