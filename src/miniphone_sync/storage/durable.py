"""SQLite-backed durable mirror of chats and messages."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from pathlib import Path
from typing import Any

import structlog

from miniphone_sync.models.chat import Chat
from miniphone_sync.models.message import Message
from miniphone_sync.utils.async_helpers import PersistenceFailure, store_retry

log = structlog.get_logger()

SCHEMA_VERSION = 1


class SQLiteStore:
    """Durable store over two tables: chat metadata and messages.

    Writes are upserts keyed by chat id / message id. Message rows also carry
    an autoincrement ``seq`` that is never rewritten by an upsert, so
    :meth:`load_all` returns messages in first-insertion order.

    The blocking ``sqlite3`` calls run in a worker thread; a single
    connection is shared and guarded by a lock.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = str(db_path)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        if self._conn is not None:
            return
        try:
            await asyncio.to_thread(self._open_sync)
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Could not open store {self._db_path}: {e}") from e
        log.debug("durable_store_opened", path=self._db_path)

    async def close(self) -> None:
        if self._conn is None:
            return
        with self._lock:
            self._conn.close()
            self._conn = None
        log.debug("durable_store_closed", path=self._db_path)

    async def put(self, message: Message) -> None:
        await self._run(self._put_message_sync, message)

    async def put_chat(self, chat: Chat) -> None:
        await self._run(self._put_chat_sync, chat)

    async def load_all(self) -> tuple[list[Chat], list[Message]]:
        result: tuple[list[Chat], list[Message]] = await self._run(self._load_all_sync)
        return result

    def _connection(self) -> sqlite3.Connection:
        conn = self._conn
        if conn is None:
            raise PersistenceFailure("Store is not open")
        return conn

    async def _run(self, func: Any, *args: Any) -> Any:
        self._connection()
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e

    def _open_sync(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._db_path, check_same_thread=False, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA busy_timeout=5000")
        self._apply_migrations(conn)
        self._conn = conn

    def _apply_migrations(self, conn: sqlite3.Connection) -> None:
        user_version = conn.execute("PRAGMA user_version").fetchone()[0]
        if user_version == 0:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS chats (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    last_message_time INTEGER,
                    data TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id INTEGER NOT NULL UNIQUE,
                    chat_id TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    type TEXT NOT NULL,
                    role TEXT NOT NULL,
                    status TEXT NOT NULL,
                    data TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_chat ON messages (chat_id)")
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        elif user_version != SCHEMA_VERSION:
            raise sqlite3.DatabaseError(f"Unsupported schema version: {user_version}")

    @store_retry
    def _put_message_sync(self, message: Message) -> None:
        record = message.to_record()
        conn = self._connection()
        with self._lock:
            conn.execute(
                """
                INSERT INTO messages (id, chat_id, timestamp, type, role, status, data)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    status = excluded.status,
                    data = excluded.data
                """,
                (
                    message.id,
                    message.chat_id,
                    message.timestamp,
                    message.type.value,
                    message.role.value,
                    message.status.value,
                    json.dumps(record, ensure_ascii=False),
                ),
            )

    @store_retry
    def _put_chat_sync(self, chat: Chat) -> None:
        record = chat.to_record()
        conn = self._connection()
        with self._lock:
            conn.execute(
                """
                INSERT INTO chats (id, name, type, last_message_time, data)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    type = excluded.type,
                    last_message_time = excluded.last_message_time,
                    data = excluded.data
                """,
                (
                    chat.id,
                    chat.name,
                    record["type"],
                    record["last_message_time"],
                    json.dumps(record, ensure_ascii=False),
                ),
            )

    def _load_all_sync(self) -> tuple[list[Chat], list[Message]]:
        conn = self._connection()
        with self._lock:
            chat_rows = conn.execute("SELECT data FROM chats ORDER BY rowid ASC").fetchall()
            message_rows = conn.execute(
                "SELECT data FROM messages ORDER BY seq ASC"
            ).fetchall()

        chats: list[Chat] = []
        for row in chat_rows:
            try:
                chats.append(Chat.from_record(json.loads(row["data"])))
            except (KeyError, ValueError, TypeError) as e:
                log.warning("skipping_corrupt_chat_row", error=str(e))

        messages: list[Message] = []
        for row in message_rows:
            try:
                messages.append(Message.from_record(json.loads(row["data"])))
            except (KeyError, ValueError, TypeError) as e:
                log.warning("skipping_corrupt_message_row", error=str(e))

        return chats, messages
