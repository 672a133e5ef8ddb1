"""Database engine setup and initialization."""

import logging
from pathlib import Path

import aiosqlite

from ..config import get_settings

logger = logging.getLogger(__name__)

# Columns added to the workout tables when AI programs were introduced.
# Databases created by the plain workout logger lack them.
SESSION_PROGRAM_COLUMNS = {
    "program_id": "INTEGER REFERENCES workout_programs(id)",
    "week_number": "INTEGER",
    "session_number": "INTEGER",
    "phase_name": "TEXT",
    "warm_up_video_url": "TEXT",
    "completion_status": "TEXT DEFAULT 'scheduled'",
}

EXERCISE_PROGRAM_COLUMNS = {
    "rest_seconds": "INTEGER DEFAULT 60",
    "muscle_groups": "TEXT DEFAULT '[]'",
    "video_url": "TEXT",
    "exercise_completed": "INTEGER DEFAULT 0",
    "completion_notes": "TEXT",
}


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_settings().data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "fitquest.db"


async def _table_columns(db: aiosqlite.Connection, table: str) -> set[str]:
    cursor = await db.execute(f"PRAGMA table_info({table})")
    columns = await cursor.fetchall()
    return {col[1] for col in columns}


async def _run_migrations(db: aiosqlite.Connection) -> None:
    """Run database migrations for schema updates."""
    session_columns = await _table_columns(db, "workout_sessions")
    for name, ddl in SESSION_PROGRAM_COLUMNS.items():
        if name not in session_columns:
            logger.info("Adding workout_sessions.%s", name)
            await db.execute(f"ALTER TABLE workout_sessions ADD COLUMN {name} {ddl}")

    exercise_columns = await _table_columns(db, "workout_exercises")
    for name, ddl in EXERCISE_PROGRAM_COLUMNS.items():
        if name not in exercise_columns:
            logger.info("Adding workout_exercises.%s", name)
            await db.execute(f"ALTER TABLE workout_exercises ADD COLUMN {name} {ddl}")

    feedback_columns = await _table_columns(db, "workout_feedback")
    if "completion_percentage" not in feedback_columns:
        await db.execute(
            "ALTER TABLE workout_feedback ADD COLUMN completion_percentage INTEGER"
        )

    await db.commit()


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # User profiles (owned by the profile service)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS user_profiles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL UNIQUE,
                height REAL,
                age INTEGER,
                gender TEXT,
                activity_level TEXT,
                fitness_goal TEXT,
                weight REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Daily quests, one row per user per date
        await db.execute("""
            CREATE TABLE IF NOT EXISTS daily_quests (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                date TEXT NOT NULL,
                weight_logged INTEGER DEFAULT 0,
                meal_logged INTEGER DEFAULT 0,
                exercise_logged INTEGER DEFAULT 0,
                day_completed INTEGER DEFAULT 0,
                streak_day INTEGER DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (user_key, date)
            )
        """)

        # Generated programs
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_programs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                program_name TEXT NOT NULL,
                program_goal TEXT NOT NULL,
                total_weeks INTEGER NOT NULL,
                sessions_per_week INTEGER NOT NULL,
                session_duration INTEGER NOT NULL,
                workout_days TEXT NOT NULL,
                available_equipment TEXT NOT NULL,
                muscle_balance_target TEXT DEFAULT '{}',
                status TEXT DEFAULT 'active',
                start_date TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Workout sessions (program-linked or ad-hoc)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                title TEXT NOT NULL,
                workout_type TEXT NOT NULL
                    CHECK (workout_type IN ('exercise', 'barbell', 'ai_generated')),
                scheduled_date TEXT NOT NULL,
                program_id INTEGER REFERENCES workout_programs(id),
                week_number INTEGER,
                session_number INTEGER,
                phase_name TEXT,
                warm_up_video_url TEXT,
                completion_status TEXT DEFAULT 'scheduled'
                    CHECK (completion_status IN ('scheduled', 'in_progress', 'completed')),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id INTEGER NOT NULL,
                exercise_name TEXT NOT NULL,
                sets INTEGER,
                reps INTEGER,
                weight REAL,
                duration INTEGER,
                order_index INTEGER NOT NULL DEFAULT 1,
                rest_seconds INTEGER DEFAULT 60,
                muscle_groups TEXT DEFAULT '[]',
                video_url TEXT,
                exercise_completed INTEGER DEFAULT 0,
                completion_notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (session_id) REFERENCES workout_sessions(id) ON DELETE CASCADE,
                UNIQUE (session_id, order_index)
            )
        """)

        # Per-session muscle volume (one row per user per session)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS muscle_balance_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                program_id INTEGER,
                session_id INTEGER NOT NULL,
                chest_volume INTEGER DEFAULT 0,
                back_volume INTEGER DEFAULT 0,
                legs_volume INTEGER DEFAULT 0,
                shoulders_volume INTEGER DEFAULT 0,
                arms_volume INTEGER DEFAULT 0,
                core_volume INTEGER DEFAULT 0,
                total_volume INTEGER DEFAULT 0,
                workout_date TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (program_id) REFERENCES workout_programs(id),
                FOREIGN KEY (session_id) REFERENCES workout_sessions(id),
                UNIQUE (user_key, session_id)
            )
        """)

        # Global exercise video cache
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_video_cache (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                exercise_name TEXT NOT NULL UNIQUE,
                video_id TEXT NOT NULL,
                video_url TEXT NOT NULL,
                embed_url TEXT NOT NULL,
                video_title TEXT,
                fetched_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                last_used_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                use_count INTEGER DEFAULT 1
            )
        """)

        # Append-only audit of generation requests
        await db.execute("""
            CREATE TABLE IF NOT EXISTS ai_workout_decisions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                program_id INTEGER,
                decision_type TEXT NOT NULL,
                input_data TEXT NOT NULL,
                output_data TEXT NOT NULL,
                reasoning TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (program_id) REFERENCES workout_programs(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_feedback (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                session_id INTEGER NOT NULL,
                difficulty_rating TEXT NOT NULL,
                completion_percentage INTEGER,
                notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (session_id) REFERENCES workout_sessions(id)
            )
        """)

        # Shared daily request counter
        await db.execute("""
            CREATE TABLE IF NOT EXISTS request_quota (
                user_key TEXT NOT NULL,
                scope TEXT NOT NULL,
                day TEXT NOT NULL,
                count INTEGER NOT NULL DEFAULT 0,
                PRIMARY KEY (user_key, scope, day)
            )
        """)

        # Logging tables that feed the quest engine
        await db.execute("""
            CREATE TABLE IF NOT EXISTS weights (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                weight REAL NOT NULL,
                date TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS meals (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_key TEXT NOT NULL,
                food_name TEXT NOT NULL,
                portion_size TEXT NOT NULL,
                calories INTEGER,
                meal_type TEXT CHECK (meal_type IN ('breakfast', 'lunch', 'dinner', 'snack')),
                date TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Run migrations before indexes that reference migrated columns
        await _run_migrations(db)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_daily_quests_user_date
            ON daily_quests(user_key, date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_programs_user
            ON workout_programs(user_key, status)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_sessions_program
            ON workout_sessions(program_id, scheduled_date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_exercises_session
            ON workout_exercises(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_muscle_balance_user_date
            ON muscle_balance_history(user_key, workout_date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercise_video_cache_last_used
            ON exercise_video_cache(last_used_at)
        """)

        await db.commit()
