"""Data access layer for fitquest."""

import json
from datetime import date, datetime, timezone
from pathlib import Path

import aiosqlite

from ..errors import Conflict
from ..models.muscle import MuscleBalanceRecord, MuscleVolume
from ..models.program import (
    ProgramGoal,
    ProgramStatus,
    SessionStatus,
    WorkoutExercise,
    WorkoutFeedback,
    WorkoutKind,
    WorkoutProgram,
    WorkoutSession,
)
from ..models.quest import DailyQuest, QuestAction
from ..models.user_profile import UserProfile
from ..models.video import ExerciseVideo
from .engine import get_db_path

VOLUME_COLUMNS = [
    "chest_volume",
    "back_volume",
    "legs_volume",
    "shoulders_volume",
    "arms_volume",
    "core_volume",
]


def _utcnow() -> datetime:
    """Naive UTC timestamp, matching SQLite CURRENT_TIMESTAMP."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def _format_ts(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class UserProfileRepository:
    """Repository for user profiles."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, user_key: str) -> UserProfile | None:
        """Get a profile by user key."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM user_profiles WHERE user_key = ?", (user_key,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_profile(row)

    async def upsert(self, profile: UserProfile) -> int:
        """Create or update a profile."""
        data = profile.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO user_profiles
                (user_key, height, age, gender, activity_level, fitness_goal, weight)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_key) DO UPDATE SET
                    height = excluded.height,
                    age = excluded.age,
                    gender = excluded.gender,
                    activity_level = excluded.activity_level,
                    fitness_goal = excluded.fitness_goal,
                    weight = excluded.weight,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    data["user_key"],
                    data["height"],
                    data["age"],
                    data["gender"],
                    data["activity_level"],
                    data["fitness_goal"],
                    data["weight"],
                ),
            )
            await db.commit()
            cursor = await db.execute(
                "SELECT id FROM user_profiles WHERE user_key = ?", (profile.user_key,)
            )
            row = await cursor.fetchone()
            return row[0]

    def _row_to_profile(self, row: aiosqlite.Row) -> UserProfile:
        """Convert a database row to a UserProfile."""
        return UserProfile.from_dict(
            dict(row),
            id=row["id"],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )


class DailyQuestRepository:
    """Repository for daily quest rows."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, user_key: str, day: date) -> DailyQuest | None:
        """Get the quest row for a user and date."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM daily_quests WHERE user_key = ? AND date = ?",
                (user_key, day.isoformat()),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_quest(row)

    async def create_if_missing(self, user_key: str, day: date, streak_day: int) -> bool:
        """Insert a fresh row unless one already exists.

        Returns True if this call created the row. A concurrent creator
        winning the race is not an error.
        """
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO daily_quests (user_key, date, streak_day)
                VALUES (?, ?, ?)
                ON CONFLICT (user_key, date) DO NOTHING
                """,
                (user_key, day.isoformat(), streak_day),
            )
            await db.commit()
            return cursor.rowcount == 1

    async def set_flag(self, user_key: str, day: date, action: QuestAction) -> None:
        """Set one logging flag to true."""
        # column comes from the closed QuestAction enum
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                f"""
                UPDATE daily_quests
                SET {action.column} = 1, updated_at = CURRENT_TIMESTAMP
                WHERE user_key = ? AND date = ? AND {action.column} = 0
                """,
                (user_key, day.isoformat()),
            )
            await db.commit()

    async def mark_completed(self, user_key: str, day: date) -> bool:
        """Set day_completed. Returns True if the flag changed."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE daily_quests
                SET day_completed = 1, updated_at = CURRENT_TIMESTAMP
                WHERE user_key = ? AND date = ? AND day_completed = 0
                """,
                (user_key, day.isoformat()),
            )
            await db.commit()
            return cursor.rowcount == 1

    async def list_range(self, user_key: str, start: date, end: date) -> list[DailyQuest]:
        """List quest rows between two dates (inclusive)."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM daily_quests
                WHERE user_key = ? AND date BETWEEN ? AND ?
                ORDER BY date
                """,
                (user_key, start.isoformat(), end.isoformat()),
            )
            rows = await cursor.fetchall()
            return [self._row_to_quest(row) for row in rows]

    def _row_to_quest(self, row: aiosqlite.Row) -> DailyQuest:
        """Convert a database row to a DailyQuest."""
        return DailyQuest(
            id=row["id"],
            user_key=row["user_key"],
            date=date.fromisoformat(row["date"]),
            weight_logged=bool(row["weight_logged"]),
            meal_logged=bool(row["meal_logged"]),
            exercise_logged=bool(row["exercise_logged"]),
            day_completed=bool(row["day_completed"]),
            streak_day=row["streak_day"],
        )


async def _insert_session(db: aiosqlite.Connection, session: WorkoutSession) -> int:
    """Insert a session and its exercises on an open connection."""
    cursor = await db.execute(
        """
        INSERT INTO workout_sessions
        (user_key, title, workout_type, scheduled_date, program_id, week_number,
         session_number, phase_name, warm_up_video_url, completion_status)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            session.user_key,
            session.title,
            session.kind.value,
            session.scheduled_date.isoformat(),
            session.program_id,
            session.week_number,
            session.session_number,
            session.phase_name,
            session.warm_up_video_url,
            session.status.value,
        ),
    )
    session_id = cursor.lastrowid

    for exercise in session.exercises:
        cursor = await db.execute(
            """
            INSERT INTO workout_exercises
            (session_id, exercise_name, sets, reps, rest_seconds, weight, duration,
             order_index, muscle_groups, video_url, exercise_completed, completion_notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session_id,
                exercise.name,
                exercise.sets,
                exercise.reps,
                exercise.rest_seconds,
                exercise.weight,
                exercise.duration,
                exercise.order_index,
                json.dumps(exercise.muscle_groups),
                exercise.video_url,
                int(exercise.completed),
                exercise.completion_notes,
            ),
        )
        exercise.id = cursor.lastrowid
        exercise.session_id = session_id
    return session_id


async def _insert_decision(
    db: aiosqlite.Connection,
    user_key: str,
    program_id: int | None,
    decision_type: str,
    input_data: dict,
    output_data: dict,
    reasoning: str | None,
) -> int:
    cursor = await db.execute(
        """
        INSERT INTO ai_workout_decisions
        (user_key, program_id, decision_type, input_data, output_data, reasoning)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            user_key,
            program_id,
            decision_type,
            json.dumps(input_data),
            json.dumps(output_data),
            reasoning,
        ),
    )
    return cursor.lastrowid


class ProgramRepository:
    """Repository for generated workout programs."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create_with_schedule(
        self,
        program: WorkoutProgram,
        sessions: list[WorkoutSession],
        decision: dict | None = None,
    ) -> tuple[int, list[int]]:
        """Persist a program, its sessions/exercises and the audit entry.

        Everything is written in one transaction; on any failure nothing is
        kept.

        Args:
            program: The program row
            sessions: Sessions (with exercises) to link to the program
            decision: Optional audit entry with input_data/output_data/reasoning

        Returns:
            (program_id, session_ids)
        """
        async with aiosqlite.connect(self.db_path) as db:
            try:
                cursor = await db.execute(
                    """
                    INSERT INTO workout_programs
                    (user_key, program_name, program_goal, total_weeks, sessions_per_week,
                     session_duration, workout_days, available_equipment,
                     muscle_balance_target, status, start_date)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        program.user_key,
                        program.name,
                        program.goal.value,
                        program.total_weeks,
                        program.sessions_per_week,
                        program.session_duration,
                        json.dumps(program.workout_days),
                        json.dumps(program.equipment),
                        json.dumps(program.muscle_balance_target),
                        program.status.value,
                        program.start_date.isoformat(),
                    ),
                )
                program_id = cursor.lastrowid

                session_ids = []
                for session in sessions:
                    session.program_id = program_id
                    session_ids.append(await _insert_session(db, session))

                if decision is not None:
                    await _insert_decision(
                        db,
                        program.user_key,
                        program_id,
                        decision.get("decision_type", "program_generation"),
                        decision.get("input_data", {}),
                        decision.get("output_data", {}),
                        decision.get("reasoning"),
                    )

                await db.commit()
            except aiosqlite.IntegrityError as e:
                await db.rollback()
                raise Conflict("Program schedule violates a unique constraint") from e
            except BaseException:
                await db.rollback()
                raise

        program.id = program_id
        for session, session_id in zip(sessions, session_ids):
            session.id = session_id
        return program_id, session_ids

    async def get(self, program_id: int, user_key: str | None = None) -> WorkoutProgram | None:
        """Get a program by ID, optionally scoped to its owner."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if user_key is None:
                cursor = await db.execute(
                    "SELECT * FROM workout_programs WHERE id = ?", (program_id,)
                )
            else:
                cursor = await db.execute(
                    "SELECT * FROM workout_programs WHERE id = ? AND user_key = ?",
                    (program_id, user_key),
                )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_program(row)

    async def list_for_user(
        self, user_key: str, status: ProgramStatus | None = ProgramStatus.ACTIVE
    ) -> list[WorkoutProgram]:
        """List a user's programs, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if status is None:
                cursor = await db.execute(
                    """
                    SELECT * FROM workout_programs WHERE user_key = ?
                    ORDER BY created_at DESC, id DESC
                    """,
                    (user_key,),
                )
            else:
                cursor = await db.execute(
                    """
                    SELECT * FROM workout_programs WHERE user_key = ? AND status = ?
                    ORDER BY created_at DESC, id DESC
                    """,
                    (user_key, status.value),
                )
            rows = await cursor.fetchall()
            return [self._row_to_program(row) for row in rows]

    async def update(
        self,
        program_id: int,
        user_key: str,
        name: str | None = None,
        status: ProgramStatus | None = None,
    ) -> bool:
        """Update name and/or status. Returns False if no such program."""
        assignments = []
        values: list = []
        if name is not None:
            assignments.append("program_name = ?")
            values.append(name)
        if status is not None:
            assignments.append("status = ?")
            values.append(status.value)
        if not assignments:
            raise ValueError("Nothing to update")

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                UPDATE workout_programs
                SET {", ".join(assignments)}, updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND user_key = ?
                """,
                (*values, program_id, user_key),
            )
            await db.commit()
            return cursor.rowcount == 1

    def _row_to_program(self, row: aiosqlite.Row) -> WorkoutProgram:
        """Convert a database row to a WorkoutProgram."""
        return WorkoutProgram(
            id=row["id"],
            user_key=row["user_key"],
            name=row["program_name"],
            goal=ProgramGoal(row["program_goal"]),
            total_weeks=row["total_weeks"],
            sessions_per_week=row["sessions_per_week"],
            session_duration=row["session_duration"],
            workout_days=json.loads(row["workout_days"]),
            equipment=json.loads(row["available_equipment"]),
            muscle_balance_target=json.loads(row["muscle_balance_target"] or "{}"),
            status=ProgramStatus(row["status"]),
            start_date=date.fromisoformat(row["start_date"]),
            created_at=_parse_ts(row["created_at"]),
        )


class WorkoutSessionRepository:
    """Repository for workout sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, session: WorkoutSession) -> int:
        """Create a session with its exercises in one transaction."""
        async with aiosqlite.connect(self.db_path) as db:
            try:
                session_id = await _insert_session(db, session)
                await db.commit()
            except aiosqlite.IntegrityError as e:
                await db.rollback()
                raise Conflict("Duplicate exercise order in session") from e
        session.id = session_id
        return session_id

    async def get(
        self, session_id: int, user_key: str | None = None, with_exercises: bool = True
    ) -> WorkoutSession | None:
        """Get a session by ID, optionally scoped to its owner."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if user_key is None:
                cursor = await db.execute(
                    "SELECT * FROM workout_sessions WHERE id = ?", (session_id,)
                )
            else:
                cursor = await db.execute(
                    "SELECT * FROM workout_sessions WHERE id = ? AND user_key = ?",
                    (session_id, user_key),
                )
            row = await cursor.fetchone()
            if row is None:
                return None
            session = self._row_to_session(row)

            if with_exercises:
                cursor = await db.execute(
                    "SELECT * FROM workout_exercises WHERE session_id = ? ORDER BY order_index",
                    (session_id,),
                )
                rows = await cursor.fetchall()
                session.exercises = [_row_to_exercise(r) for r in rows]
            return session

    async def list_for_program(
        self,
        program_id: int,
        from_date: date | None = None,
        max_week: int | None = None,
        limit: int | None = None,
    ) -> list[WorkoutSession]:
        """List a program's sessions ordered by date and session number."""
        query = "SELECT * FROM workout_sessions WHERE program_id = ?"
        params: list = [program_id]
        if from_date is not None:
            query += " AND scheduled_date >= ?"
            params.append(from_date.isoformat())
        if max_week is not None:
            query += " AND week_number <= ?"
            params.append(max_week)
        query += " ORDER BY scheduled_date, session_number"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    async def exercise_counts(self, program_id: int) -> dict[int, int]:
        """Number of exercises per session of a program."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT ws.id, COUNT(we.id)
                FROM workout_sessions ws
                LEFT JOIN workout_exercises we ON ws.id = we.session_id
                WHERE ws.program_id = ?
                GROUP BY ws.id
                """,
                (program_id,),
            )
            rows = await cursor.fetchall()
            return {row[0]: row[1] for row in rows}

    async def advance_status(
        self,
        session_id: int,
        to_status: SessionStatus,
        from_statuses: list[SessionStatus],
    ) -> bool:
        """Move a session to `to_status` if it is currently in one of `from_statuses`."""
        placeholders = ", ".join("?" for _ in from_statuses)
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                UPDATE workout_sessions
                SET completion_status = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND completion_status IN ({placeholders})
                """,
                (to_status.value, session_id, *[s.value for s in from_statuses]),
            )
            await db.commit()
            return cursor.rowcount == 1

    def _row_to_session(self, row: aiosqlite.Row) -> WorkoutSession:
        """Convert a database row to a WorkoutSession."""
        return WorkoutSession(
            id=row["id"],
            user_key=row["user_key"],
            title=row["title"],
            kind=WorkoutKind(row["workout_type"]),
            scheduled_date=date.fromisoformat(row["scheduled_date"]),
            program_id=row["program_id"],
            week_number=row["week_number"],
            session_number=row["session_number"],
            phase_name=row["phase_name"],
            warm_up_video_url=row["warm_up_video_url"],
            status=SessionStatus(row["completion_status"] or SessionStatus.SCHEDULED.value),
        )


def _row_to_exercise(row: aiosqlite.Row) -> WorkoutExercise:
    """Convert a database row to a WorkoutExercise."""
    return WorkoutExercise(
        id=row["id"],
        session_id=row["session_id"],
        name=row["exercise_name"],
        sets=row["sets"],
        reps=row["reps"],
        rest_seconds=row["rest_seconds"],
        order_index=row["order_index"],
        muscle_groups=json.loads(row["muscle_groups"] or "[]"),
        video_url=row["video_url"],
        completed=bool(row["exercise_completed"]),
        completion_notes=row["completion_notes"],
        weight=row["weight"],
        duration=row["duration"],
    )


class WorkoutExerciseRepository:
    """Repository for exercises within sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, exercise_id: int) -> WorkoutExercise | None:
        """Get an exercise by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM workout_exercises WHERE id = ?", (exercise_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_exercise(row)

    async def list_for_session(self, session_id: int) -> list[WorkoutExercise]:
        """List a session's exercises in order."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM workout_exercises WHERE session_id = ? ORDER BY order_index",
                (session_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_exercise(row) for row in rows]

    async def set_completion(
        self,
        exercise_id: int,
        completed: bool,
        notes: str | None = None,
        session_id: int | None = None,
    ) -> bool:
        """Update completion flag and note. Returns False if nothing matched."""
        query = """
            UPDATE workout_exercises
            SET exercise_completed = ?, completion_notes = ?
            WHERE id = ?
        """
        params: list = [int(completed), notes, exercise_id]
        if session_id is not None:
            query += " AND session_id = ?"
            params.append(session_id)
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            await db.commit()
            return cursor.rowcount == 1

    async def set_completion_by_order(
        self, session_id: int, states: list[bool]
    ) -> int:
        """Save completion states by 1-based position. Returns rows updated."""
        updated = 0
        async with aiosqlite.connect(self.db_path) as db:
            for index, completed in enumerate(states, start=1):
                cursor = await db.execute(
                    """
                    UPDATE workout_exercises
                    SET exercise_completed = ?, completion_notes = ?
                    WHERE session_id = ? AND order_index = ?
                    """,
                    (
                        int(completed),
                        "Completed" if completed else "Not completed",
                        session_id,
                        index,
                    ),
                )
                updated += cursor.rowcount
            await db.commit()
        return updated


class MuscleBalanceRepository:
    """Repository for per-session muscle volume history."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def upsert(self, record: MuscleBalanceRecord) -> None:
        """Insert or replace the volume row for (user, session)."""
        volume = record.volume
        values = [volume.chest, volume.back, volume.legs, volume.shoulders, volume.arms, volume.core]
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                f"""
                INSERT INTO muscle_balance_history
                (user_key, program_id, session_id, {", ".join(VOLUME_COLUMNS)},
                 total_volume, workout_date)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_key, session_id) DO UPDATE SET
                    {", ".join(f"{c} = excluded.{c}" for c in VOLUME_COLUMNS)},
                    total_volume = excluded.total_volume
                """,
                (
                    record.user_key,
                    record.program_id,
                    record.session_id,
                    *values,
                    record.total_volume,
                    record.workout_date.isoformat(),
                ),
            )
            await db.commit()

    async def list_for_user(
        self,
        user_key: str,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[MuscleBalanceRecord]:
        """List records, most recent workout first."""
        query = "SELECT * FROM muscle_balance_history WHERE user_key = ?"
        params: list = [user_key]
        if start is not None:
            query += " AND workout_date >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND workout_date <= ?"
            params.append(end.isoformat())
        query += " ORDER BY workout_date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    async def sum_volumes(
        self, user_key: str, start: date | None = None, end: date | None = None
    ) -> tuple[MuscleVolume, int]:
        """Summed per-group volume and summed total_volume."""
        query = f"""
            SELECT {", ".join(f"COALESCE(SUM({c}), 0)" for c in VOLUME_COLUMNS)},
                   COALESCE(SUM(total_volume), 0)
            FROM muscle_balance_history
            WHERE user_key = ?
        """
        params: list = [user_key]
        if start is not None and end is not None:
            query += " AND workout_date BETWEEN ? AND ?"
            params.extend([start.isoformat(), end.isoformat()])

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            row = await cursor.fetchone()
        volume = MuscleVolume(*row[:6])
        return volume, row[6]

    def _row_to_record(self, row: aiosqlite.Row) -> MuscleBalanceRecord:
        return MuscleBalanceRecord(
            id=row["id"],
            user_key=row["user_key"],
            program_id=row["program_id"],
            session_id=row["session_id"],
            workout_date=date.fromisoformat(row["workout_date"]),
            volume=MuscleVolume(*[row[c] for c in VOLUME_COLUMNS]),
        )


class VideoCacheRepository:
    """Repository for the global exercise video cache."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, exercise_name: str) -> ExerciseVideo | None:
        """Look up a cached video by normalized exercise name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercise_video_cache WHERE exercise_name = ?",
                (exercise_name,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_video(row)

    async def touch(self, exercise_name: str) -> None:
        """Record a cache hit."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE exercise_video_cache
                SET last_used_at = ?, use_count = use_count + 1
                WHERE exercise_name = ?
                """,
                (_format_ts(_utcnow()), exercise_name),
            )
            await db.commit()

    async def upsert(self, video: ExerciseVideo) -> None:
        """Store a freshly fetched video, replacing a stale entry."""
        fetched_at = _format_ts(video.fetched_at or _utcnow())
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO exercise_video_cache
                (exercise_name, video_id, video_url, embed_url, video_title,
                 fetched_at, last_used_at, use_count)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (exercise_name) DO UPDATE SET
                    video_id = excluded.video_id,
                    video_url = excluded.video_url,
                    embed_url = excluded.embed_url,
                    video_title = excluded.video_title,
                    fetched_at = excluded.fetched_at,
                    last_used_at = excluded.last_used_at,
                    use_count = exercise_video_cache.use_count + 1
                """,
                (
                    video.exercise_name,
                    video.video_id,
                    video.video_url,
                    video.embed_url,
                    video.video_title,
                    fetched_at,
                    fetched_at,
                    video.use_count,
                ),
            )
            await db.commit()

    async def prune(self, idle_before: datetime) -> int:
        """Evict entries not used since `idle_before`. Returns rows deleted."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM exercise_video_cache WHERE last_used_at < ?",
                (_format_ts(idle_before),),
            )
            await db.commit()
            return cursor.rowcount

    async def stats(self, top: int = 10) -> dict:
        """Aggregate usage statistics and the most used entries."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT COUNT(*) AS total_cached,
                       COALESCE(SUM(use_count), 0) AS total_uses,
                       AVG(use_count) AS avg_uses,
                       MAX(last_used_at) AS last_used
                FROM exercise_video_cache
                """
            )
            summary = dict(await cursor.fetchone())
            cursor = await db.execute(
                """
                SELECT exercise_name, use_count, video_title
                FROM exercise_video_cache
                ORDER BY use_count DESC, exercise_name
                LIMIT ?
                """,
                (top,),
            )
            rows = await cursor.fetchall()
        return {"stats": summary, "top_used": [dict(row) for row in rows]}

    def _row_to_video(self, row: aiosqlite.Row) -> ExerciseVideo:
        return ExerciseVideo(
            id=row["id"],
            exercise_name=row["exercise_name"],
            video_id=row["video_id"],
            video_url=row["video_url"],
            embed_url=row["embed_url"],
            video_title=row["video_title"],
            use_count=row["use_count"],
            fetched_at=_parse_ts(row["fetched_at"]),
            last_used_at=_parse_ts(row["last_used_at"]),
            cached=True,
        )


class FeedbackRepository:
    """Repository for post-workout feedback."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, feedback: WorkoutFeedback) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO workout_feedback
                (user_key, session_id, difficulty_rating, completion_percentage, notes)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    feedback.user_key,
                    feedback.session_id,
                    feedback.difficulty_rating,
                    feedback.completion_percentage,
                    feedback.notes,
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def list_for_session(self, session_id: int) -> list[WorkoutFeedback]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM workout_feedback WHERE session_id = ? ORDER BY id",
                (session_id,),
            )
            rows = await cursor.fetchall()
            return [
                WorkoutFeedback(
                    id=row["id"],
                    user_key=row["user_key"],
                    session_id=row["session_id"],
                    difficulty_rating=row["difficulty_rating"],
                    completion_percentage=row["completion_percentage"],
                    notes=row["notes"],
                )
                for row in rows
            ]


class DecisionLogRepository:
    """Append-only audit of generation requests."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_for_program(self, program_id: int) -> list[dict]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM ai_workout_decisions WHERE program_id = ? ORDER BY id",
                (program_id,),
            )
            rows = await cursor.fetchall()
            return [
                {
                    "id": row["id"],
                    "user_key": row["user_key"],
                    "program_id": row["program_id"],
                    "decision_type": row["decision_type"],
                    "input_data": json.loads(row["input_data"]),
                    "output_data": json.loads(row["output_data"]),
                    "reasoning": row["reasoning"],
                    "created_at": row["created_at"],
                }
                for row in rows
            ]


class QuotaRepository:
    """Shared per-user daily request counters."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def try_consume(self, user_key: str, scope: str, day: date, limit: int) -> bool:
        """Atomically count one request if the user is under `limit`."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO request_quota (user_key, scope, day, count)
                VALUES (?, ?, ?, 1)
                ON CONFLICT (user_key, scope, day) DO UPDATE SET
                    count = count + 1
                WHERE count < ?
                """,
                (user_key, scope, day.isoformat(), limit),
            )
            await db.commit()
            return cursor.rowcount == 1

    async def get_count(self, user_key: str, scope: str, day: date) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT count FROM request_quota WHERE user_key = ? AND scope = ? AND day = ?",
                (user_key, scope, day.isoformat()),
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    async def purge_before(self, day: date) -> int:
        """Drop counters from earlier days."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM request_quota WHERE day < ?", (day.isoformat(),)
            )
            await db.commit()
            return cursor.rowcount


class ActivityLogRepository:
    """Weight and meal log rows."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add_weight(self, user_key: str, weight: float, day: date) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO weights (user_key, weight, date) VALUES (?, ?, ?)",
                (user_key, weight, day.isoformat()),
            )
            await db.commit()
            return cursor.lastrowid

    async def add_meal(
        self,
        user_key: str,
        food_name: str,
        portion_size: str,
        calories: int | None,
        meal_type: str | None,
        day: date,
    ) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO meals (user_key, food_name, portion_size, calories, meal_type, date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (user_key, food_name, portion_size, calories, meal_type, day.isoformat()),
            )
            await db.commit()
            return cursor.lastrowid
