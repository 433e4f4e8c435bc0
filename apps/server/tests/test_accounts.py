from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
import pytest

from labreport.accounts import (
    AccountError,
    AccountExistsError,
    AccountStore,
    AuthenticationError,
    normalize_email,
)

SECRET = "test-secret-with-enough-length-for-hs256"


@pytest.fixture
def store(tmp_path: Path):
    store = AccountStore(
        tmp_path / "db" / "accounts.db",
        jwt_secret=SECRET,
        token_ttl_s=3600,
        bcrypt_rounds=4,
    )
    yield store
    store.close()


def test_register_then_authenticate(store: AccountStore) -> None:
    account, token = store.register("Lab.Tech@Example.com ", "s3cret!")
    assert account.email == "lab.tech@example.com"
    assert store.decode_token(token)["sub"] == str(account.id)

    same, login_token = store.authenticate("lab.tech@example.com", "s3cret!")
    assert same == account
    claims = store.decode_token(login_token)
    assert claims["email"] == "lab.tech@example.com"
    assert claims["exp"] - claims["iat"] == 3600


def test_password_is_not_stored_in_clear(store: AccountStore) -> None:
    store.register("a@example.com", "plaintext-password")
    with store._cursor(commit=False) as cur:
        cur.execute("SELECT password_hash FROM users")
        (stored,) = cur.fetchone()
    assert "plaintext-password" not in stored
    assert stored.startswith("$2")


def test_duplicate_email_rejected(store: AccountStore) -> None:
    store.register("dup@example.com", "one")
    with pytest.raises(AccountExistsError, match="User already exists"):
        store.register("DUP@example.com", "two")


@pytest.mark.parametrize("email", ["", "no-at-sign", "two@@example.com", "a b@example.com"])
def test_invalid_email_rejected(store: AccountStore, email: str) -> None:
    with pytest.raises(AccountError, match="email"):
        store.register(email, "password")


def test_empty_and_oversized_passwords_rejected(store: AccountStore) -> None:
    with pytest.raises(AccountError, match="empty"):
        store.register("x@example.com", "")
    with pytest.raises(AccountError, match="72 bytes"):
        store.register("x@example.com", "é" * 40)


def test_wrong_password_and_unknown_user(store: AccountStore) -> None:
    store.register("user@example.com", "right")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        store.authenticate("user@example.com", "wrong")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        store.authenticate("ghost@example.com", "right")
    with pytest.raises(AuthenticationError):
        store.authenticate("user@example.com", "")


def test_get(store: AccountStore) -> None:
    account, _ = store.register("get@example.com", "pw")
    assert store.get(" GET@example.com") == account
    assert store.get("missing@example.com") is None


def test_expired_token_rejected(store: AccountStore) -> None:
    account, _ = store.register("old@example.com", "pw")
    token = store.issue_token(account, now=datetime.now(UTC) - timedelta(hours=2))
    with pytest.raises(AuthenticationError, match="expired"):
        store.decode_token(token)


def test_token_signed_with_other_secret_rejected(store: AccountStore) -> None:
    forged = jwt.encode({"sub": "1"}, "some-other-secret-of-decent-length", algorithm="HS256")
    with pytest.raises(AuthenticationError, match="Invalid token"):
        store.decode_token(forged)


def test_accounts_persist_across_reopen(tmp_path: Path) -> None:
    db_path = tmp_path / "accounts.db"
    first = AccountStore(db_path, jwt_secret=SECRET, bcrypt_rounds=4)
    first.register("keep@example.com", "pw")
    first.close()
    second = AccountStore(db_path, jwt_secret=SECRET, bcrypt_rounds=4)
    try:
        account, _ = second.authenticate("keep@example.com", "pw")
        assert account.email == "keep@example.com"
    finally:
        second.close()


def test_empty_secret_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="jwt_secret"):
        AccountStore(tmp_path / "a.db", jwt_secret="")


def test_normalize_email() -> None:
    assert normalize_email("  Mixed@Case.COM ") == "mixed@case.com"
