"""AI workout program generation and program queries."""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from ..clients.base import TextGenerator
from ..db.repositories import (
    ProgramRepository,
    UserProfileRepository,
    WorkoutSessionRepository,
)
from ..errors import NotFound, ProfileNotFound, ValidationError
from ..generation.payload import (
    GeneratedProgram,
    GeneratedSession,
    GeneratedWeek,
    normalize_program,
    parse_generation_text,
)
from ..generation.prompts import build_program_prompt
from ..models.program import (
    ProgramParams,
    ProgramStatus,
    SessionStatus,
    WorkoutExercise,
    WorkoutKind,
    WorkoutProgram,
    WorkoutSession,
)
from ..utils.dates import (
    ScheduledSlot,
    calculate_workout_dates,
    current_program_week,
    parse_date,
    today,
)
from .quota import DailyQuota
from .videos import VideoResolver

logger = logging.getLogger(__name__)

DECISION_TYPE = "program_generation"
DECISION_REASONING = "Generated personalized workout program based on user goals and preferences"
UPCOMING_SESSION_LIMIT = 10


@dataclass
class GenerationResult:
    """Outcome of a successful generation request."""

    program_id: int
    program_name: str
    weeks: list[GeneratedWeek] = field(default_factory=list)
    muscle_balance: dict[str, float] = field(default_factory=dict)
    sessions_created: int = 0

    def to_dict(self) -> dict:
        return {
            "program_id": self.program_id,
            "program_name": self.program_name,
            "weeks": [week.to_dict() for week in self.weeks],
            "muscle_balance": self.muscle_balance,
            "sessions_created": self.sessions_created,
        }


class ProgramGenerator:
    """Generates a multi-week program and lays it onto the calendar."""

    def __init__(
        self,
        generator: TextGenerator,
        videos: VideoResolver,
        db_path: Path | None = None,
        quota: DailyQuota | None = None,
        timezone: str | None = None,
    ):
        self.generator = generator
        self.videos = videos
        self.quota = quota
        self.timezone = timezone
        self.profiles = UserProfileRepository(db_path)
        self.programs = ProgramRepository(db_path)

    async def generate(
        self,
        user_key: str,
        params: ProgramParams | dict,
        start_date: date | None = None,
    ) -> GenerationResult:
        """Generate, schedule and store a program.

        One generation call produces the whole structure. Its reply is
        normalized, videos are resolved, and then the program, its sessions,
        their exercises and the audit entry are written in one transaction.
        Calendar slots the reply has no session for are skipped.

        Args:
            user_key: Opaque user identifier
            params: Program parameters (or a request dict to validate)
            start_date: Program start (defaults to today)

        Returns:
            GenerationResult with the new program's id and content

        Raises:
            ValidationError: Invalid parameters
            ProfileNotFound: The user has no profile
            QuotaExceeded: The daily generation limit is reached
            UpstreamUnavailable: The generation service failed
            GenerationParseError: The reply held no usable JSON
        """
        if isinstance(params, dict):
            params = ProgramParams.from_dict(params)
        else:
            params.validate()

        profile = await self.profiles.get(user_key)
        if profile is None:
            raise ProfileNotFound(user_key)

        if self.quota is not None:
            await self.quota.consume(user_key)

        start = start_date or today(self.timezone)
        slots = calculate_workout_dates(start, params.workout_days, params.total_weeks)

        logger.info(
            "Generating %d-week program for %s (%s)",
            params.total_weeks,
            user_key,
            params.goal.value,
        )
        text = await self.generator.generate(build_program_prompt(params, profile))
        raw = parse_generation_text(text)
        content = normalize_program(raw)

        sessions = await self._build_sessions(user_key, content, slots)

        program = WorkoutProgram(
            user_key=user_key,
            name=content.name,
            goal=params.goal,
            total_weeks=params.total_weeks,
            sessions_per_week=params.frequency,
            session_duration=params.duration,
            workout_days=params.workout_days,
            equipment=params.equipment,
            start_date=start,
            muscle_balance_target=content.muscle_balance,
        )
        decision = {
            "decision_type": DECISION_TYPE,
            "input_data": params.to_dict(),
            "output_data": raw.data,
            "reasoning": DECISION_REASONING,
        }
        program_id, _ = await self.programs.create_with_schedule(program, sessions, decision)

        logger.info(
            "Created program %d (%r) with %d sessions", program_id, program.name, len(sessions)
        )
        return GenerationResult(
            program_id=program_id,
            program_name=program.name,
            weeks=content.weeks,
            muscle_balance=content.muscle_balance,
            sessions_created=len(sessions),
        )

    async def _build_sessions(
        self, user_key: str, content: GeneratedProgram, slots: list[ScheduledSlot]
    ) -> list[WorkoutSession]:
        sessions = []
        for slot in slots:
            generated = content.session_for(slot.week, slot.day_of_week)
            if generated is None:
                logger.debug("No session generated for week %d %s", slot.week, slot.day_of_week)
                continue
            sessions.append(await self._build_session(user_key, generated, slot))
        return sessions

    async def _build_session(
        self, user_key: str, generated: GeneratedSession, slot: ScheduledSlot
    ) -> WorkoutSession:
        warm_up = await self.videos.resolve(generated.warm_up_query)

        exercises = []
        for order_index, item in enumerate(generated.exercises, start=1):
            video = await self.videos.resolve(item.name)
            exercises.append(
                WorkoutExercise(
                    name=item.name,
                    sets=item.sets,
                    reps=item.reps,
                    rest_seconds=item.rest_seconds,
                    order_index=order_index,
                    muscle_groups=item.muscle_groups,
                    video_url=video.embed_url if video else None,
                )
            )

        return WorkoutSession(
            user_key=user_key,
            title=generated.name,
            kind=WorkoutKind.AI_GENERATED,
            scheduled_date=slot.date,
            week_number=slot.week,
            session_number=slot.session_number,
            phase_name=generated.phase,
            warm_up_video_url=warm_up.embed_url if warm_up else None,
            status=SessionStatus.SCHEDULED,
            exercises=exercises,
        )


class ProgramQueryService:
    """Read and maintenance operations on stored programs."""

    def __init__(self, db_path: Path | None = None, timezone: str | None = None):
        self.programs = ProgramRepository(db_path)
        self.sessions = WorkoutSessionRepository(db_path)
        self.timezone = timezone

    async def _get_owned(self, user_key: str, program_id: int) -> WorkoutProgram:
        program = await self.programs.get(program_id, user_key)
        if program is None or program.status == ProgramStatus.DELETED:
            raise NotFound("Program not found", {"program_id": program_id})
        return program

    async def list_programs(self, user_key: str, on: date | str | None = None) -> list[dict]:
        """Active programs, newest first, each with its current week and
        up to ten upcoming sessions (no further ahead than next week)."""
        current_date = parse_date(on) if on is not None else today(self.timezone)

        results = []
        for program in await self.programs.list_for_user(user_key):
            week = current_program_week(program.start_date, current_date, program.total_weeks)
            upcoming = await self.sessions.list_for_program(
                program.id,
                from_date=current_date,
                max_week=min(week + 1, program.total_weeks),
                limit=UPCOMING_SESSION_LIMIT,
            )
            results.append(
                {
                    **program.to_dict(),
                    "current_week": week,
                    "sessions": [s.to_dict(include_exercises=False) for s in upcoming],
                }
            )
        return results

    async def get_schedule(
        self, user_key: str, program_id: int, on: date | str | None = None
    ) -> dict:
        """Every session of a program grouped by week, with progress statistics."""
        program = await self._get_owned(user_key, program_id)
        current_date = parse_date(on) if on is not None else today(self.timezone)

        sessions = await self.sessions.list_for_program(program_id)
        counts = await self.sessions.exercise_counts(program_id)

        weeks: dict[int, list[dict]] = {}
        for session in sessions:
            data = session.to_dict(include_exercises=False)
            data["exercise_count"] = counts.get(session.id, 0)
            weeks.setdefault(session.week_number, []).append(data)

        total = len(sessions)
        completed = sum(1 for s in sessions if s.status == SessionStatus.COMPLETED)
        upcoming = sum(
            1
            for s in sessions
            if s.status == SessionStatus.SCHEDULED and s.scheduled_date >= current_date
        )
        return {
            "program": program.to_dict(),
            "schedule": [
                {"week_number": number, "sessions": weeks[number]} for number in sorted(weeks)
            ],
            "statistics": {
                "total_sessions": total,
                "completed_sessions": completed,
                "upcoming_sessions": upcoming,
                "completion_rate": round(completed / total * 100) if total else 0,
            },
        }

    async def update_program(
        self,
        user_key: str,
        program_id: int,
        name: str | None = None,
        status: ProgramStatus | str | None = None,
    ) -> WorkoutProgram:
        """Change a program's name and/or status."""
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Program name must not be empty")
        if status is not None:
            try:
                status = ProgramStatus(status)
            except ValueError as e:
                raise ValidationError(f"Invalid status: {status}") from e
        if name is None and status is None:
            raise ValidationError("No fields to update")

        await self._get_owned(user_key, program_id)
        if not await self.programs.update(program_id, user_key, name=name, status=status):
            raise NotFound("Program not found or access denied", {"program_id": program_id})
        return await self.programs.get(program_id, user_key)

    async def rename_program(self, user_key: str, program_id: int, name: str) -> WorkoutProgram:
        return await self.update_program(user_key, program_id, name=name)

    async def delete_program(self, user_key: str, program_id: int) -> WorkoutProgram:
        """Soft delete: the program and its sessions stay stored as `deleted`."""
        program = await self.update_program(user_key, program_id, status=ProgramStatus.DELETED)
        logger.info("Program %d deleted by %s", program_id, user_key)
        return program
