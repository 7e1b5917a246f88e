"""Database repository for administrator accounts."""

from __future__ import annotations

from typing import Any

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import AdminAccount
from .domain.errors import DuplicateAccountError, StoreError

_COLUMNS = (
    "account_id",
    "first_name",
    "last_name",
    "email",
    "password_hash",
    "phone_number",
    "designation",
    "address",
    "city",
    "state",
    "post_code",
    "image",
    "is_confirmed",
    "is_active",
    "confirm_otp",
    "otp_tries",
    "created_at",
    "updated_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM admins"
_UPDATABLE = frozenset(_COLUMNS) - {"account_id", "email", "created_at", "updated_at"}

# Unique index name -> request field reported back to the caller.
_CONSTRAINT_FIELDS = {
    "admins_email_key": "email_id",
    "admins_phone_number_key": "phone_number",
}


class AdminRepository:
    """Postgres-backed credential store; unique indexes are the source of truth for uniqueness."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def find_by_email(self, email: str) -> AdminAccount | None:
        return self._fetch_one(f"{_SELECT} WHERE email = %s", (email,))

    def find_by_phone(self, phone_number: str) -> AdminAccount | None:
        return self._fetch_one(f"{_SELECT} WHERE phone_number = %s", (phone_number,))

    def get_by_id(self, account_id: str) -> AdminAccount | None:
        return self._fetch_one(f"{_SELECT} WHERE account_id = %s", (account_id,))

    def insert(self, account: AdminAccount) -> AdminAccount:
        """Persist a new account and return it with store-assigned timestamps.

        Raises
        ------
        DuplicateAccountError
            When the email or phone unique index rejects the row.
        StoreError
            For any other database failure.
        """
        columns = [name for name in _COLUMNS if name not in ("created_at", "updated_at")]
        placeholders = ", ".join(["%s"] * len(columns))
        query = f"""
            INSERT INTO admins ({', '.join(columns)}, created_at, updated_at)
            VALUES ({placeholders}, NOW(), NOW())
            RETURNING {', '.join(_COLUMNS)}
        """
        params = [getattr(account, name) for name in columns]
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
                    conn.commit()
        except pg_errors.UniqueViolation as exc:
            constraint = exc.diag.constraint_name or ""
            raise DuplicateAccountError(_CONSTRAINT_FIELDS.get(constraint, "email_id")) from exc
        except psycopg.Error as exc:
            raise StoreError(f"insert failed: {exc}") from exc
        return self._map_record(row)

    def update_by_email(self, email: str, /, **fields: Any) -> None:
        """Apply a partial update to the account identified by ``email``."""
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"cannot update columns: {sorted(unknown)}")
        if not fields:
            return
        assignments = ", ".join(f"{name} = %s" for name in fields)
        query = f"UPDATE admins SET {assignments}, updated_at = NOW() WHERE email = %s"
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, [*fields.values(), email])
                    conn.commit()
        except psycopg.Error as exc:
            raise StoreError(f"update failed: {exc}") from exc

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> AdminAccount | None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(f"lookup failed: {exc}") from exc
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> AdminAccount:
        """Convert a raw database tuple into the domain ``AdminAccount`` dataclass."""
        record = dict(zip(_COLUMNS, row))
        record["account_id"] = str(record["account_id"])
        return AdminAccount(**record)
