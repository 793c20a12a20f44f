import sqlite3
import datetime
import logging
import uuid
from contextlib import contextmanager
from typing import Iterable, List, Optional, Tuple

from config import YamlConfig
from settings_schema import validate_settings
from models import (
    Exercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
    TemplateExercise,
)

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the SQLite database cannot be read or written."""


def _ts(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Optional[str]) -> Optional[datetime.datetime]:
    return datetime.datetime.fromisoformat(value) if value else None


def _uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    return uuid.UUID(value) if value else None


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    primary_muscle TEXT NOT NULL,
                    secondary_muscles TEXT NOT NULL DEFAULT '',
                    equipment TEXT NOT NULL,
                    instructions TEXT,
                    is_custom INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                );""",
            [
                "id",
                "name",
                "primary_muscle",
                "secondary_muscles",
                "equipment",
                "instructions",
                "is_custom",
                "created_at",
            ],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL DEFAULT 'Workout',
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    notes TEXT,
                    is_completed INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "name", "started_at", "completed_at", "notes", "is_completed"],
        ),
        "workout_exercises": (
            """CREATE TABLE workout_exercises (
                    id TEXT PRIMARY KEY,
                    workout_id TEXT NOT NULL,
                    exercise_id TEXT,
                    position INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "workout_id", "exercise_id", "position"],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id TEXT PRIMARY KEY,
                    workout_exercise_id TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0,
                    weight REAL NOT NULL DEFAULT 0,
                    reps INTEGER NOT NULL DEFAULT 0,
                    rpe INTEGER,
                    set_type TEXT NOT NULL DEFAULT 'Working',
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    completed_at TEXT,
                    is_pr INTEGER NOT NULL DEFAULT 0
                );""",
            [
                "id",
                "workout_exercise_id",
                "position",
                "weight",
                "reps",
                "rpe",
                "set_type",
                "is_completed",
                "completed_at",
                "is_pr",
            ],
        ),
        "workout_templates": (
            """CREATE TABLE workout_templates (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    last_used TEXT
                );""",
            ["id", "name", "notes", "created_at", "last_used"],
        ),
        "template_exercises": (
            """CREATE TABLE template_exercises (
                    id TEXT PRIMARY KEY,
                    template_id TEXT NOT NULL,
                    exercise_id TEXT,
                    position INTEGER NOT NULL DEFAULT 0,
                    default_set_count INTEGER NOT NULL DEFAULT 3,
                    default_weight REAL,
                    default_reps INTEGER,
                    notes TEXT
                );""",
            [
                "id",
                "template_id",
                "exercise_id",
                "position",
                "default_set_count",
                "default_weight",
                "default_reps",
                "notes",
            ],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    _SETTING_DEFAULTS = {
        "weight_unit": "lbs",
        "default_rest_duration": "90.0",
        "haptic_feedback_enabled": "1",
        "sound_enabled": "1",
        "appearance_mode": "light",
        "week_start": "monday",
        "app_version": "1.0.0",
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        try:
            connection = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot open {self._db_path}: {e}") from e
        try:
            yield connection
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise PersistenceError(str(e)) from e
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("migrating table %s", table)
        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col in ("position", "is_completed", "is_custom", "is_pr", "weight", "reps"):
                        return "0"
                    if col == "default_set_count":
                        return "3"
                    if col == "set_type":
                        return "'Working'"
                    if col == "secondary_muscles":
                        return "''"
                    if col in ("started_at", "created_at"):
                        return "CURRENT_TIMESTAMP"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        with self._connection() as conn:
            for key, value in self._SETTING_DEFAULTS.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )

    @contextmanager
    def transaction(self):
        """Yield one connection committed as a single unit of work."""
        with self._connection() as conn:
            yield conn


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class EntityRepository(BaseRepository):
    """Maps one entity type to one table keyed by a UUID text id."""

    table = ""

    def _columns(self) -> List[str]:
        return self._TABLE_DEFINITIONS[self.table][1]

    def to_row(self, entity) -> Tuple:
        raise NotImplementedError

    def from_row(self, row: Tuple):
        raise NotImplementedError

    def fetch_models(self) -> list:
        cols = ", ".join(self._columns())
        rows = self.fetch_all(f"SELECT {cols} FROM {self.table};")
        return [self.from_row(row) for row in rows]

    def upsert_many(self, conn: sqlite3.Connection, entities: Iterable) -> None:
        columns = self._columns()
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c != "id")
        conn.executemany(
            f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates};",
            [self.to_row(e) for e in entities],
        )

    def delete_ids(self, conn: sqlite3.Connection, ids: Iterable[uuid.UUID]) -> None:
        conn.executemany(
            f"DELETE FROM {self.table} WHERE id = ?;",
            [(str(i),) for i in ids],
        )


class ExerciseRepository(EntityRepository):
    """Repository for the exercise catalogue."""

    table = "exercises"
    def to_row(self, e: Exercise) -> Tuple:
        return (
            str(e.id),
            e.name,
            e.primary_muscle.value,
            "|".join(m.value for m in e.secondary_muscles),
            e.equipment.value,
            e.instructions,
            int(e.is_custom),
            _ts(e.created_at),
        )

    def from_row(self, row: Tuple) -> Exercise:
        eid, name, primary, secondary, equipment, instructions, custom, created = row
        return Exercise(
            id=uuid.UUID(eid),
            name=name,
            primary_muscle=primary,
            secondary_muscles=[m for m in (secondary or "").split("|") if m],
            equipment=equipment,
            instructions=instructions,
            is_custom=bool(custom),
            created_at=_parse_ts(created),
        )


class WorkoutRepository(EntityRepository):
    """Repository for workout table operations."""

    table = "workouts"
    def to_row(self, w: Workout) -> Tuple:
        return (
            str(w.id),
            w.name,
            _ts(w.started_at),
            _ts(w.completed_at),
            w.notes,
            int(w.is_completed),
        )

    def from_row(self, row: Tuple) -> Workout:
        wid, name, started, completed, notes, done = row
        return Workout(
            id=uuid.UUID(wid),
            name=name,
            started_at=_parse_ts(started),
            completed_at=_parse_ts(completed),
            notes=notes,
            is_completed=bool(done),
        )


class WorkoutExerciseRepository(EntityRepository):
    """Repository for exercises logged inside a workout."""

    table = "workout_exercises"
    def to_row(self, we: WorkoutExercise) -> Tuple:
        return (
            str(we.id),
            str(we.workout_id),
            str(we.exercise_id) if we.exercise_id else None,
            we.order,
        )

    def from_row(self, row: Tuple) -> WorkoutExercise:
        weid, wid, eid, position = row
        return WorkoutExercise(
            id=uuid.UUID(weid),
            workout_id=uuid.UUID(wid),
            exercise_id=_uuid(eid),
            order=int(position),
        )


class SetRepository(EntityRepository):
    """Repository for sets table operations."""

    table = "sets"
    def to_row(self, s: WorkoutSet) -> Tuple:
        return (
            str(s.id),
            str(s.workout_exercise_id),
            s.order,
            float(s.weight),
            int(s.reps),
            s.rpe,
            s.set_type.value,
            int(s.is_completed),
            _ts(s.completed_at),
            int(s.is_pr),
        )

    def from_row(self, row: Tuple) -> WorkoutSet:
        (
            sid,
            weid,
            position,
            weight,
            reps,
            rpe,
            set_type,
            done,
            completed,
            is_pr,
        ) = row
        return WorkoutSet(
            id=uuid.UUID(sid),
            workout_exercise_id=uuid.UUID(weid),
            order=int(position),
            weight=float(weight),
            reps=int(reps),
            rpe=rpe,
            set_type=set_type,
            is_completed=bool(done),
            completed_at=_parse_ts(completed),
            is_pr=bool(is_pr),
        )


class TemplateWorkoutRepository(EntityRepository):
    """Repository for workout templates."""

    table = "workout_templates"
    def to_row(self, t: WorkoutTemplate) -> Tuple:
        return (str(t.id), t.name, t.notes, _ts(t.created_at), _ts(t.last_used_at))

    def from_row(self, row: Tuple) -> WorkoutTemplate:
        tid, name, notes, created, last_used = row
        return WorkoutTemplate(
            id=uuid.UUID(tid),
            name=name,
            notes=notes,
            created_at=_parse_ts(created),
            last_used_at=_parse_ts(last_used),
        )


class TemplateExerciseRepository(EntityRepository):
    """Repository for exercises belonging to templates."""

    table = "template_exercises"
    def to_row(self, te: TemplateExercise) -> Tuple:
        return (
            str(te.id),
            str(te.template_id),
            str(te.exercise_id) if te.exercise_id else None,
            te.order,
            te.default_set_count,
            te.default_weight,
            te.default_reps,
            te.notes,
        )

    def from_row(self, row: Tuple) -> TemplateExercise:
        teid, tid, eid, position, set_count, weight, reps, notes = row
        return TemplateExercise(
            id=uuid.UUID(teid),
            template_id=uuid.UUID(tid),
            exercise_id=_uuid(eid),
            order=int(position),
            default_set_count=int(set_count),
            default_weight=weight,
            default_reps=reps,
            notes=notes,
        )


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    BOOL_KEYS = {"haptic_feedback_enabled", "sound_enabled"}

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, float | str | bool] = {}
        for k, v in rows:
            if k in self.BOOL_KEYS:
                result[k] = v in {"1", "1.0", "true", "True"}
                continue
            try:
                result[k] = float(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                val = str(value)
                if key in self.BOOL_KEYS:
                    val = "1" if val in {"1", "1.0", "true", "True"} else "0"
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, val),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def set_text(self, key: str, value: str) -> None:
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get_text(key, str(default)))
        except ValueError:
            return default

    def set_float(self, key: str, value: float) -> None:
        self.set_text(key, str(float(value)))

    def get_bool(self, key: str, default: bool) -> bool:
        return self.get_text(key, "1" if default else "0") in {
            "1",
            "true",
            "True",
            "1.0",
        }

    def set_bool(self, key: str, value: bool) -> None:
        self.set_text(key, "1" if value else "0")
