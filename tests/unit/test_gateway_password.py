"""Unit tests for password hashing utilities."""

from src.sl_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain():
    hashed = hash_password("MySecret1")
    assert hashed != "MySecret1"
    assert hashed.startswith("$2")


def test_verify_correct_password():
    assert verify_password("MySecret1", hash_password("MySecret1")) is True


def test_verify_wrong_password():
    assert verify_password("WrongPass9", hash_password("MySecret1")) is False


def test_missing_hash_never_verifies():
    assert verify_password("anything", None) is False
