import string

import pytest

from patterns.password_builder import PasswordBuilder, SYMBOLS, generate_password


def test_default_password():
    pwd = generate_password()
    assert len(pwd) == 16
    assert any(c in string.ascii_uppercase for c in pwd)
    assert any(c in string.ascii_lowercase for c in pwd)
    assert any(c in string.digits for c in pwd)
    assert not any(c in SYMBOLS for c in pwd)


def test_every_enabled_class_is_present():
    for _ in range(20):
        pwd = generate_password(length=4, upper=True, lower=True, digits=True, symbols=True)
        assert len(pwd) == 4
        assert any(c in SYMBOLS for c in pwd)
        assert any(c in string.digits for c in pwd)


def test_single_class():
    pwd = generate_password(length=30, upper=False, lower=False, digits=True, symbols=False)
    assert pwd.isdigit()


@pytest.mark.parametrize('requested,expected', [(1, 4), (500, 128), (20, 20)])
def test_length_is_bounded(requested, expected):
    assert PasswordBuilder().set_length(requested).length == expected
