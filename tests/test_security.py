from unittest.mock import patch

import bcrypt
import pytest

from blogserver.security import bcrypt_hash, generate_verification_code


def test_hash_verifies_against_original():
    password = "password"
    hashed = bcrypt_hash(password)
    assert len(hashed) == 60
    assert bcrypt.checkpw(password.encode(), hashed.encode())
    assert not bcrypt.checkpw(b"secret", hashed.encode())


def test_hash_uses_default_cost():
    password = "password"
    assert bcrypt_hash(password).startswith("$2a$10$")


def test_hash_is_salted():
    password = "password"
    assert len({bcrypt_hash(password) for _ in range(2)}) == 2


def test_overlong_password_rejected():
    with pytest.raises(ValueError):
        bcrypt_hash("x" * 73)


@pytest.mark.parametrize("length", [1, 4, 6, 10])
def test_code_has_requested_length_and_digits(length):
    for _ in range(20):
        code = generate_verification_code(length)
        assert len(code) == length
        assert code.isdigit()


def test_code_is_zero_padded():
    with patch("secrets.randbelow", return_value=42) as randbelow:
        code = generate_verification_code(6)
    assert code == "000042"
    randbelow.assert_called_once_with(1000000)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        generate_verification_code(-1)