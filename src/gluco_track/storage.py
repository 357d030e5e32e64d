"""Store de lecturas por usuario: suscripciones push y persistencia SQLite."""

from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from hashlib import sha256
from pathlib import Path
from typing import Any
from uuid import uuid4

from gluco_track.errors import AuthRequiredError, StoreWriteError
from gluco_track.model import ConnectionState, HealthProfile, Reading, UserProfile

logger = logging.getLogger(__name__)

Snapshot = dict[str, dict[str, Any]]

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS profiles (
    user_id TEXT PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    device_id TEXT NOT NULL DEFAULT '',
    token TEXT NOT NULL DEFAULT '',
    device_connected INTEGER NOT NULL DEFAULT 0,
    last_connection INTEGER,
    age INTEGER NOT NULL DEFAULT 0,
    weight INTEGER NOT NULL DEFAULT 0,
    height INTEGER NOT NULL DEFAULT 0,
    condition TEXT NOT NULL DEFAULT 'None'
);

CREATE TABLE IF NOT EXISTS readings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    reading_key TEXT NOT NULL,
    payload TEXT NOT NULL,
    row_hash TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE(user_id, reading_key)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_readings_user_row_hash
ON readings(user_id, row_hash);
"""


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    user_id: str = ""
    export_dir: str = ""
    window_days: int = 7
    demo_interval_s: float = 5.0


class Subscription:
    """Cancellation token for a store subscription.

    ``cancel()`` may be called any number of times, also after the owner is
    gone; only the first call detaches the listener.
    """

    def __init__(
        self,
        callback: Callable[[Any], None],
        on_cancel: Callable[[Subscription], None],
    ) -> None:
        self._callback = callback
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, value: Any) -> None:
        if self._active:
            self._callback(value)

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._on_cancel(self)


class ReadingStore(ABC):
    """Push-based per-user store of readings and profile records.

    Subclasses persist; this base keeps the listener registry so every
    mutation notifies subscribers with a full snapshot.
    """

    def __init__(self) -> None:
        self._listeners: dict[tuple[str, str], list[Subscription]] = {}

    @abstractmethod
    def snapshot(self, user_id: str) -> Snapshot:
        """Return every reading record of ``user_id`` keyed by store key."""

    @abstractmethod
    def append_record(
        self, user_id: str, record: Mapping[str, Any], key: str | None = None
    ) -> str | None:
        """Store one raw record. Returns its key, or None if it was a duplicate.

        Stored readings are never modified: a record whose key is already
        taken is ignored as well.

        Raises:
            AuthRequiredError: If ``user_id`` is empty.
            StoreWriteError: If the write fails.
        """

    @abstractmethod
    def load_profile(self, user_id: str) -> UserProfile:
        """Return the profile of ``user_id`` or defaults."""

    @abstractmethod
    def save_profile(self, user_id: str, profile: UserProfile) -> None:
        """Replace the profile of ``user_id``."""

    def append(self, user_id: str, reading: Reading) -> str | None:
        """Store ``reading`` in wire format."""
        return self.append_record(user_id, reading.to_record(), key=reading.key)

    def update_connection(
        self,
        user_id: str,
        connected: bool,
        at_ms: int,
        *,
        token: str | None = None,
    ) -> UserProfile:
        """Toggle the connection flag and stamp the last connection time."""
        profile = self.load_profile(user_id)
        updated = replace(
            profile,
            token=profile.token if token is None else token,
            connection=ConnectionState(connected=connected, last_connection=at_ms),
        )
        self.save_profile(user_id, updated)
        return updated

    def subscribe(
        self, user_id: str, on_change: Callable[[Snapshot], None]
    ) -> Subscription:
        """Listen to the reading collection; fires now and after each change."""
        sub = self._register("readings", user_id, on_change)
        sub.deliver(self.snapshot(user_id))
        return sub

    def subscribe_profile(
        self, user_id: str, on_change: Callable[[UserProfile], None]
    ) -> Subscription:
        """Listen to the profile record; fires now and after each change."""
        sub = self._register("profile", user_id, on_change)
        sub.deliver(self.load_profile(user_id))
        return sub

    def _register(
        self, kind: str, user_id: str, callback: Callable[[Any], None]
    ) -> Subscription:
        _require_user(user_id)
        slot = self._listeners.setdefault((kind, user_id), [])

        def detach(sub: Subscription) -> None:
            if sub in slot:
                slot.remove(sub)

        sub = Subscription(callback, detach)
        slot.append(sub)
        return sub

    def _notify_readings(self, user_id: str) -> None:
        subs = list(self._listeners.get(("readings", user_id), []))
        if not subs:
            return
        _deliver_all(subs, self.snapshot(user_id))

    def _notify_profile(self, user_id: str) -> None:
        subs = list(self._listeners.get(("profile", user_id), []))
        if not subs:
            return
        _deliver_all(subs, self.load_profile(user_id))


class SQLiteReadingStore(ReadingStore):
    """Repositorio SQLite: config, perfiles y lecturas por usuario."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        super().__init__()
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        values = {row["key"]: row["value"] for row in rows}
        defaults = AppConfig()
        return AppConfig(
            user_id=values.get("user_id", defaults.user_id),
            export_dir=values.get("export_dir", defaults.export_dir),
            window_days=_parse_int(values.get("window_days"), defaults.window_days),
            demo_interval_s=_parse_float(
                values.get("demo_interval_s"), defaults.demo_interval_s
            ),
        )

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        payload = {
            "user_id": config.user_id,
            "export_dir": config.export_dir,
            "window_days": str(config.window_days),
            "demo_interval_s": str(config.demo_interval_s),
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()

    def snapshot(self, user_id: str) -> Snapshot:
        _require_user(user_id)
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT reading_key, payload FROM readings
                WHERE user_id = ?
                ORDER BY id
                """,
                (user_id,),
            ).fetchall()
        return {str(row["reading_key"]): json.loads(row["payload"]) for row in rows}

    def append_record(
        self, user_id: str, record: Mapping[str, Any], key: str | None = None
    ) -> str | None:
        _require_user(user_id)
        payload = json.dumps(dict(record), ensure_ascii=True, sort_keys=True)
        row_hash = sha256(payload.encode("utf-8")).hexdigest()
        reading_key = key or uuid4().hex
        created_at = datetime.now().isoformat(timespec="seconds")
        try:
            with self._connect() as conn:
                exists = conn.execute(
                    "SELECT 1 FROM readings WHERE user_id = ? AND row_hash = ?",
                    (user_id, row_hash),
                ).fetchone()
                if exists is not None:
                    return None
                # Las lecturas no se modifican: una clave repetida se ignora.
                cur = conn.execute(
                    """
                    INSERT INTO readings(
                        user_id, reading_key, payload, row_hash, created_at
                    ) VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(user_id, reading_key) DO NOTHING
                    """,
                    (user_id, reading_key, payload, row_hash, created_at),
                )
                conn.commit()
                if cur.rowcount == 0:
                    logger.debug("Reading key %s already stored", reading_key)
                    return None
        except sqlite3.Error as exc:
            raise StoreWriteError(f"No se pudo guardar la lectura: {exc}") from exc
        logger.info("Stored reading %s for user %s", reading_key, user_id)
        self._notify_readings(user_id)
        return reading_key

    def load_profile(self, user_id: str) -> UserProfile:
        _require_user(user_id)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None:
            return UserProfile()
        return UserProfile(
            name=row["name"],
            device_id=row["device_id"],
            token=row["token"],
            connection=ConnectionState(
                connected=bool(row["device_connected"]),
                last_connection=row["last_connection"],
            ),
            health=HealthProfile(
                age=int(row["age"]),
                weight=int(row["weight"]),
                height=int(row["height"]),
                condition=row["condition"],
            ),
        )

    def save_profile(self, user_id: str, profile: UserProfile) -> None:
        _require_user(user_id)
        values = (
            user_id,
            profile.name,
            profile.device_id,
            profile.token,
            int(profile.connection.connected),
            profile.connection.last_connection,
            profile.health.age,
            profile.health.weight,
            profile.health.height,
            profile.health.condition,
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO profiles(
                        user_id, name, device_id, token, device_connected,
                        last_connection, age, weight, height, condition
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        name=excluded.name,
                        device_id=excluded.device_id,
                        token=excluded.token,
                        device_connected=excluded.device_connected,
                        last_connection=excluded.last_connection,
                        age=excluded.age,
                        weight=excluded.weight,
                        height=excluded.height,
                        condition=excluded.condition
                    """,
                    values,
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreWriteError(f"No se pudo guardar el perfil: {exc}") from exc
        self._notify_profile(user_id)


def _deliver_all(subs: list[Subscription], value: Any) -> None:
    """Deliver to every subscriber; a failing listener does not stop the rest."""
    for sub in subs:
        try:
            sub.deliver(value)
        except Exception:
            logger.exception("Store listener failed")


def _require_user(user_id: str | None) -> str:
    if not user_id:
        raise AuthRequiredError("A user id is required for store access")
    return user_id


def _parse_int(raw: str | None, default: int) -> int:
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def _parse_float(raw: str | None, default: float) -> float:
    try:
        return float(raw) if raw is not None else default
    except ValueError:
        return default
