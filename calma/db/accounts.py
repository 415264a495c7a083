"""Connected Google accounts. Tokens are stored encrypted; see calma.google.encryption."""

from datetime import UTC
from typing import Any

from calma.db.core import _get_connection, _transaction

_PUBLIC_COLUMNS = "id, user_id, google_account_id, email, is_default, created_at"
_ALL_COLUMNS = f"{_PUBLIC_COLUMNS}, access_token, refresh_token, expiry_date"


def _row_to_account(row: tuple, with_tokens: bool = False) -> dict[str, Any]:
    account = {
        "id": str(row[0]),
        "user_id": str(row[1]),
        "google_account_id": row[2],
        "email": row[3],
        "is_default": row[4],
        "created_at": row[5].astimezone(UTC).isoformat(),
    }
    if with_tokens:
        account["access_token"] = row[6]
        account["refresh_token"] = row[7]
        account["expiry_date"] = row[8]
    return account


async def accounts_list(user_id: str) -> list[dict[str, Any]]:
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"SELECT {_PUBLIC_COLUMNS} FROM connected_accounts WHERE user_id = %s ORDER BY created_at DESC",
            (user_id,),
        )
        return [_row_to_account(row) async for row in rows]


async def accounts_count(user_id: str) -> int:
    async with _get_connection() as conn:
        row = await (
            await conn.execute("SELECT COUNT(*) FROM connected_accounts WHERE user_id = %s", (user_id,))
        ).fetchone()
        return int(row[0]) if row else 0


async def account_get(user_id: str, account_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"SELECT {_ALL_COLUMNS} FROM connected_accounts WHERE id = %s AND user_id = %s",
                (account_id, user_id),
            )
        ).fetchone()
        return _row_to_account(row, with_tokens=True) if row else None


async def account_get_default(user_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"SELECT {_ALL_COLUMNS} FROM connected_accounts WHERE user_id = %s AND is_default",
                (user_id,),
            )
        ).fetchone()
        return _row_to_account(row, with_tokens=True) if row else None


async def account_upsert(
    user_id: str,
    google_account_id: str,
    email: str,
    access_token: str,
    refresh_token: str,
    expiry_date: int,
) -> dict[str, Any]:
    """Store (or refresh) a connection; the host's first account becomes default."""
    async with _transaction() as conn:
        row = await (
            await conn.execute("SELECT COUNT(*) FROM connected_accounts WHERE user_id = %s", (user_id,))
        ).fetchone()
        is_first = row[0] == 0
        saved = await (
            await conn.execute(
                f"""INSERT INTO connected_accounts
                        (user_id, google_account_id, email, access_token, refresh_token, expiry_date, is_default)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (user_id, google_account_id) DO UPDATE SET
                        email = EXCLUDED.email,
                        access_token = EXCLUDED.access_token,
                        refresh_token = EXCLUDED.refresh_token,
                        expiry_date = EXCLUDED.expiry_date
                    RETURNING {_PUBLIC_COLUMNS}""",
                (user_id, google_account_id, email, access_token, refresh_token, expiry_date, is_first),
            )
        ).fetchone()
        return _row_to_account(saved)


async def account_update_tokens(account_id: str, access_token: str, refresh_token: str, expiry_date: int) -> None:
    async with _get_connection() as conn:
        await conn.execute(
            "UPDATE connected_accounts SET access_token = %s, refresh_token = %s, expiry_date = %s WHERE id = %s",
            (access_token, refresh_token, expiry_date, account_id),
        )


async def account_set_default(user_id: str, account_id: str) -> bool:
    async with _transaction() as conn:
        found = await (
            await conn.execute(
                "SELECT 1 FROM connected_accounts WHERE id = %s AND user_id = %s", (account_id, user_id)
            )
        ).fetchone()
        if found is None:
            return False
        await conn.execute(
            "UPDATE connected_accounts SET is_default = (id = %s) WHERE user_id = %s",
            (account_id, user_id),
        )
        return True


async def account_delete(user_id: str, account_id: str) -> bool:
    """Remove a connection; if it was the default, the oldest remaining one takes over."""
    async with _transaction() as conn:
        row = await (
            await conn.execute(
                "DELETE FROM connected_accounts WHERE id = %s AND user_id = %s RETURNING is_default",
                (account_id, user_id),
            )
        ).fetchone()
        if row is None:
            return False
        if row[0]:
            await conn.execute(
                """UPDATE connected_accounts SET is_default = TRUE
                   WHERE id = (SELECT id FROM connected_accounts WHERE user_id = %s ORDER BY created_at LIMIT 1)""",
                (user_id,),
            )
        return True
