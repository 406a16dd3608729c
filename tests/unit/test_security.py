from __future__ import annotations

from datetime import timedelta

import pytest
from jose import jwt  # type: ignore[import-untyped]

from pollster.core.security import InvalidTokenError, Tokener, hash_password, verify_password


def test_issued_token_round_trips_to_user_id(tokener: Tokener) -> None:
    token = tokener.issue(17)

    assert tokener.verify(token) == 17
    claims = jwt.decode(token, tokener.secret, algorithms=[tokener.algorithm])
    assert claims["sub"] == "17"
    assert claims["exp"] > claims["iat"]


def test_token_signed_with_another_secret_is_rejected(tokener: Tokener) -> None:
    forged = Tokener(secret="someone-else", algorithm="HS256", expires_delta=timedelta(minutes=5)).issue(17)

    with pytest.raises(InvalidTokenError):
        tokener.verify(forged)


def test_expired_token_is_rejected() -> None:
    expired = Tokener(secret="s3cret", algorithm="HS256", expires_delta=timedelta(minutes=-1))

    with pytest.raises(InvalidTokenError):
        expired.verify(expired.issue(3))


def test_non_numeric_subject_is_rejected(tokener: Tokener) -> None:
    token = jwt.encode(
        {"sub": "alice", "iat": 0, "exp": 4102444800, "jti": "x"},
        tokener.secret,
        algorithm=tokener.algorithm,
    )

    with pytest.raises(InvalidTokenError):
        tokener.verify(token)


def test_password_hashing() -> None:
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)
    assert not verify_password("hunter22", "not-a-bcrypt-hash")
