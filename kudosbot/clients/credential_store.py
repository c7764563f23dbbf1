"""Durable storage for linked Strava/Discord account credentials.

Two backends share the :class:`CredentialStore` contract:

* :class:`JsonCredentialStore` keeps the whole mapping in one JSON object on
  disk, rewritten (atomically) on every upsert.
* :class:`SQLiteCredentialStore` upserts one row per athlete and indexes the
  Discord user id column for reverse lookups.

Neither backend offers partial updates. Callers read the current record,
merge, and upsert the full result.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Dict, List, Protocol, runtime_checkable

from kudosbot.models.account import LinkedAccount

logger = logging.getLogger(__name__)


class AccountNotLinkedError(Exception):
    """Raised when no stored record is linked to the given Discord user."""


@runtime_checkable
class CredentialStore(Protocol):
    def get(self, athlete_id: str) -> LinkedAccount: ...

    def upsert(self, athlete_id: str, record: LinkedAccount) -> None: ...

    def find_athlete_id(self, chat_user_id: str) -> str: ...

    def all(self) -> Dict[str, LinkedAccount]: ...


class JsonCredentialStore:
    """File-backed store holding every record in a single JSON object."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._records: Dict[str, LinkedAccount] = {}
        self._by_chat_user: Dict[str, List[str]] = {}
        self._load()

    def _load(self) -> None:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("credential file must contain a JSON object")
            self._records = {
                str(athlete_id): LinkedAccount.model_validate(data or {})
                for athlete_id, data in raw.items()
            }
        except FileNotFoundError:
            logger.info("No credential store at %s; starting empty", self._path)
            self._records = {}
            self._write()
        except ValueError as exc:
            logger.warning(
                "Unreadable credential store at %s (%s); starting empty", self._path, exc
            )
            self._records = {}
            self._write()

        self._reindex()

    def _reindex(self) -> None:
        # Athletes per chat user, in record insertion order.
        self._by_chat_user = {}
        for athlete_id, record in self._records.items():
            if record.chat_user_id:
                self._by_chat_user.setdefault(record.chat_user_id, []).append(athlete_id)

    def _write(self) -> None:
        if self._path.parent and not self._path.parent.exists():
            self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            athlete_id: record.to_storage() for athlete_id, record in self._records.items()
        }
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh)
        os.replace(tmp, self._path)

    def get(self, athlete_id: str) -> LinkedAccount:
        record = self._records.get(str(athlete_id))
        if record is None:
            return LinkedAccount()
        return record.model_copy()

    def upsert(self, athlete_id: str, record: LinkedAccount) -> None:
        athlete_id = str(athlete_id)
        self._records[athlete_id] = record.model_copy()
        self._reindex()
        self._write()

    set = upsert

    def find_athlete_id(self, chat_user_id: str) -> str:
        athlete_ids = self._by_chat_user.get(str(chat_user_id))
        if not athlete_ids:
            raise AccountNotLinkedError("No Strava account linked")
        return athlete_ids[0]

    def all(self) -> Dict[str, LinkedAccount]:
        return {k: v.model_copy() for k, v in self._records.items()}


class SQLiteCredentialStore:
    """One row per athlete, with an index on the linked Discord user."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS linked_accounts (
                    athlete_id TEXT PRIMARY KEY,
                    chat_user_id TEXT,
                    data TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_linked_accounts_chat_user
                ON linked_accounts (chat_user_id)
                """
            )

    def get(self, athlete_id: str) -> LinkedAccount:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM linked_accounts WHERE athlete_id = ?",
                (str(athlete_id),),
            ).fetchone()
        if not row:
            return LinkedAccount()
        return LinkedAccount.model_validate(json.loads(row["data"]))

    def upsert(self, athlete_id: str, record: LinkedAccount) -> None:
        data_json = json.dumps(record.to_storage())
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO linked_accounts (athlete_id, chat_user_id, data)
                VALUES (?, ?, ?)
                ON CONFLICT(athlete_id) DO UPDATE SET
                    chat_user_id = excluded.chat_user_id,
                    data = excluded.data
                """,
                (str(athlete_id), record.chat_user_id, data_json),
            )

    set = upsert

    def find_athlete_id(self, chat_user_id: str) -> str:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT athlete_id FROM linked_accounts
                WHERE chat_user_id = ?
                ORDER BY rowid LIMIT 1
                """,
                (str(chat_user_id),),
            ).fetchone()
        if not row:
            raise AccountNotLinkedError("No Strava account linked")
        return row["athlete_id"]

    def all(self) -> Dict[str, LinkedAccount]:
        with self._connect() as conn:
            rows = conn.execute("SELECT athlete_id, data FROM linked_accounts").fetchall()
        return {
            row["athlete_id"]: LinkedAccount.model_validate(json.loads(row["data"]))
            for row in rows
        }


def build_credential_store(backend: str, path: str) -> CredentialStore:
    """Instantiate the configured backend."""
    if backend == "sqlite":
        return SQLiteCredentialStore(path)
    return JsonCredentialStore(path)


__all__ = [
    "AccountNotLinkedError",
    "CredentialStore",
    "JsonCredentialStore",
    "SQLiteCredentialStore",
    "build_credential_store",
]
