from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from todo_platform.core.config import settings
from todo_platform.core.errors import InvalidTokenError, MissingTokenError
from todo_platform.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    verify_token,
)


def test_password_hash_is_salted_and_verifiable():
    first = get_password_hash("secret123")
    second = get_password_hash("secret123")

    assert first != "secret123"
    assert first != second
    assert verify_password("secret123", first)
    assert verify_password("secret123", second)
    assert not verify_password("secret124", first)


def test_token_round_trip_carries_identity():
    token = create_access_token(owner_id="user-1", email="one@example.com")

    claims = verify_token(token)

    assert claims.owner_id == "user-1"
    assert claims.email == "one@example.com"
    assert claims.expires_at > claims.issued_at


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_token(raw):
    with pytest.raises(MissingTokenError):
        verify_token(raw)


def test_wrong_secret_is_rejected():
    token = create_access_token(owner_id="user-1", email="one@example.com", secret_key="another-secret")

    with pytest.raises(InvalidTokenError):
        verify_token(token)


def test_tampered_payload_is_rejected():
    token = create_access_token(owner_id="user-1", email="one@example.com")
    forged = create_access_token(owner_id="user-2", email="two@example.com")
    header, _, signature = token.split(".")
    _, forged_payload, _ = forged.split(".")

    with pytest.raises(InvalidTokenError):
        verify_token(f"{header}.{forged_payload}.{signature}")


@pytest.mark.parametrize("raw", ["garbage", "not.a.token", "Bearer abc"])
def test_malformed_token_is_rejected(raw):
    with pytest.raises(InvalidTokenError):
        verify_token(raw)


def test_expired_token_is_rejected():
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = create_access_token(
        owner_id="user-1", email="one@example.com",
        expires_delta=timedelta(minutes=30), now=issued,
    )

    with pytest.raises(InvalidTokenError):
        verify_token(token)


def test_expiry_is_checked_against_given_clock():
    issued = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    token = create_access_token(
        owner_id="user-1", email="one@example.com",
        expires_delta=timedelta(minutes=10), now=issued,
    )

    assert verify_token(token, now=issued + timedelta(minutes=9)).owner_id == "user-1"
    with pytest.raises(InvalidTokenError):
        verify_token(token, now=issued + timedelta(minutes=10))


def test_signed_token_without_identity_claims_is_rejected():
    exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
    no_email = jwt.encode({"sub": "user-1", "exp": exp}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    no_sub = jwt.encode({"email": "one@example.com", "exp": exp}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    for token in (no_email, no_sub):
        with pytest.raises(InvalidTokenError):
            verify_token(token)


def test_signed_token_without_expiry_is_rejected():
    token = jwt.encode({"sub": "user-1", "email": "one@example.com"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    with pytest.raises(InvalidTokenError):
        verify_token(token)
