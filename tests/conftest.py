"""Shared fixtures. Key derivation is slow on purpose, so keys are derived once per module."""

import base64

import pytest

from lockr.kdf import derive_key

ZERO_SALT = base64.b64encode(bytes(16)).decode("ascii")


@pytest.fixture(scope="module")
def key():
    """Key for the zero salt and 'correct-horse'."""
    return derive_key("correct-horse", ZERO_SALT)


@pytest.fixture(scope="module")
def other_key():
    """Key for the zero salt and a different password."""
    return derive_key("battery-staple", ZERO_SALT)
