"""SQLite-backed user accounts with bcrypt password hashes and JWT sessions."""

from __future__ import annotations

import logging
import re
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from threading import RLock
from typing import Any

import bcrypt
import jwt

LOGGER = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS users (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    email         TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at    TEXT NOT NULL
);
"""


class AccountError(ValueError):
    """Invalid account input (malformed email, unusable password)."""


class AccountExistsError(AccountError):
    pass


class AuthenticationError(AccountError):
    """Wrong credentials, or a token that is invalid or expired."""


@dataclass(frozen=True, slots=True)
class Account:
    id: int
    email: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountStore:
    """Thin wrapper around a SQLite users table."""

    def __init__(
        self,
        db_path: Path,
        *,
        jwt_secret: str,
        token_ttl_s: int = 86400,
        bcrypt_rounds: int = 12,
    ) -> None:
        if not jwt_secret:
            raise ValueError("jwt_secret must not be empty")
        self.db_path = db_path
        self._jwt_secret = jwt_secret
        self._token_ttl_s = int(token_ttl_s)
        self._bcrypt_rounds = int(bcrypt_rounds)
        self._lock = RLock()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        with self._cursor() as cur:
            cur.executescript(_SCHEMA_SQL)

    # -- lifecycle ------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _cursor(self, *, commit: bool = True):
        with self._lock:
            cur = self._conn.cursor()
            try:
                yield cur
                if commit:
                    self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cur.close()

    # -- accounts -------------------------------------------------------------

    @staticmethod
    def _validate(email: str, password: str) -> str:
        normalized = normalize_email(email)
        if not _EMAIL_RE.match(normalized):
            raise AccountError("A valid email address is required")
        if not password:
            raise AccountError("Password must not be empty")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise AccountError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return normalized

    def register(self, email: str, password: str) -> tuple[Account, str]:
        """Create an account; returns it with a fresh session token."""
        normalized = self._validate(email, password)
        password_hash = bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self._bcrypt_rounds)
        ).decode("ascii")
        created_at = datetime.now(UTC).isoformat()
        try:
            with self._cursor() as cur:
                cur.execute(
                    "INSERT INTO users (email, password_hash, created_at) VALUES (?, ?, ?)",
                    (normalized, password_hash, created_at),
                )
                account = Account(id=int(cur.lastrowid), email=normalized)
        except sqlite3.IntegrityError as exc:
            raise AccountExistsError("User already exists") from exc
        LOGGER.info("Registered account id=%d", account.id)
        return account, self.issue_token(account)

    def get(self, email: str) -> Account | None:
        with self._cursor(commit=False) as cur:
            cur.execute("SELECT id, email FROM users WHERE email = ?", (normalize_email(email),))
            row = cur.fetchone()
        return Account(id=int(row[0]), email=str(row[1])) if row else None

    def authenticate(self, email: str, password: str) -> tuple[Account, str]:
        """Verify credentials; returns the account with a fresh session token."""
        with self._cursor(commit=False) as cur:
            cur.execute(
                "SELECT id, email, password_hash FROM users WHERE email = ?",
                (normalize_email(email),),
            )
            row = cur.fetchone()
        if row is None or not password:
            raise AuthenticationError("Invalid credentials")
        try:
            ok = bcrypt.checkpw(password.encode("utf-8"), str(row[2]).encode("ascii"))
        except ValueError:
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")
        account = Account(id=int(row[0]), email=str(row[1]))
        return account, self.issue_token(account)

    # -- tokens ---------------------------------------------------------------

    def issue_token(self, account: Account, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(UTC)
        claims = {
            "sub": str(account.id),
            "email": account.email,
            "iat": issued,
            "exp": issued + timedelta(seconds=self._token_ttl_s),
        }
        return jwt.encode(claims, self._jwt_secret, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, self._jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc
