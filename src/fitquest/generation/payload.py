"""Validation boundary for generated program payloads.

The generation service returns loosely typed JSON embedded in free text:
numbers arrive as "3-4 sets" or "AMRAP", muscle groups as JSON-encoded strings,
and any key may be missing. `parse_generation_text` turns the reply into a
`RawProgramPayload` (still untrusted) and `normalize_program` is the one place
where it becomes a validated `GeneratedProgram`.
"""

import json
import re
from dataclasses import dataclass, field

from ..errors import GenerationParseError
from ..utils.dates import WEEKDAYS

DEFAULT_SETS = 3
DEFAULT_REPS = 10
AMRAP_REPS = 12
DEFAULT_REST_SECONDS = 60
DEFAULT_PROGRAM_NAME = "Custom Workout Program"
DEFAULT_WARM_UP_QUERY = "dynamic stretching warm up"

_FIRST_INT = re.compile(r"(\d+)")
_INT_RANGE = re.compile(r"(\d+)-(\d+)")
_DECODER = json.JSONDecoder()


@dataclass
class RawProgramPayload:
    """Untrusted program structure exactly as the generation service sent it."""

    data: dict

    @property
    def weeks(self) -> list:
        weeks = self.data.get("weeks")
        return weeks if isinstance(weeks, list) else []


@dataclass
class GeneratedExercise:
    name: str
    sets: int
    reps: int
    rest_seconds: int
    muscle_groups: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "rest_seconds": self.rest_seconds,
            "muscle_groups": self.muscle_groups,
        }


@dataclass
class GeneratedSession:
    week_number: int
    day_of_week: str
    name: str
    phase: str | None = None
    warm_up_query: str = DEFAULT_WARM_UP_QUERY
    exercises: list[GeneratedExercise] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "session_name": self.name,
            "warm_up_video_query": self.warm_up_query,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }


@dataclass
class GeneratedWeek:
    week_number: int
    phase: str | None = None
    sessions: list[GeneratedSession] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "week_number": self.week_number,
            "phase": self.phase,
            "sessions": [s.to_dict() for s in self.sessions],
        }


@dataclass
class GeneratedProgram:
    """Validated program content, ready to be laid onto the calendar."""

    name: str
    weeks: list[GeneratedWeek] = field(default_factory=list)
    muscle_balance: dict[str, float] = field(default_factory=dict)

    def session_for(self, week_number: int, day_of_week: str) -> GeneratedSession | None:
        """Find the session generated for a (week, weekday) slot.

        When the reply lists the same slot twice, the later one wins.
        """
        found = None
        for week in self.weeks:
            for session in week.sessions:
                if session.week_number == week_number and session.day_of_week == day_of_week:
                    found = session
        return found

    def to_dict(self) -> dict:
        return {
            "program_name": self.name,
            "weeks": [w.to_dict() for w in self.weeks],
            "muscle_balance": self.muscle_balance,
        }


def parse_generation_text(text: str) -> RawProgramPayload:
    """Extract the JSON object from a generation reply.

    Prose or code fences around the object are ignored.

    Raises:
        GenerationParseError: If no parseable JSON object is found
    """
    text = text or ""
    start = text.find("{")
    if start == -1:
        raise GenerationParseError("No JSON found in generation response")
    try:
        data, _ = _DECODER.raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise GenerationParseError(f"Failed to parse generation response: {e}") from e
    if not isinstance(data, dict):
        raise GenerationParseError("Generation response is not a JSON object")
    return RawProgramPayload(data)


def _whole_number(value) -> int | None:
    """Return value as an int if it is a whole number (bools excluded)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def normalize_sets(value) -> int:
    """Sets as a positive integer: "3-4 sets" -> 3, anything unusable -> 3."""
    if isinstance(value, str):
        match = _FIRST_INT.search(value)
        value = int(match.group(1)) if match else DEFAULT_SETS
    sets = _whole_number(value)
    if sets is None or sets < 1:
        return DEFAULT_SETS
    return sets


def normalize_reps(value) -> int:
    """Reps as a positive integer.

    "AMRAP" / "as many as possible" -> 12, "8-12" -> 10 (rounded midpoint),
    "15 reps" -> 15, anything unusable -> 10.
    """
    if isinstance(value, str):
        text = value.lower()
        if "as many" in text or "amrap" in text:
            value = AMRAP_REPS
        elif "-" in text:
            match = _INT_RANGE.search(text)
            if match:
                low, high = int(match.group(1)), int(match.group(2))
                # round half up
                value = (low + high + 1) // 2
            else:
                value = DEFAULT_REPS
        else:
            match = _FIRST_INT.search(text)
            value = int(match.group(1)) if match else DEFAULT_REPS
    reps = _whole_number(value)
    if reps is None or reps < 1:
        return DEFAULT_REPS
    return reps


def normalize_rest_seconds(value) -> int:
    """Rest interval as a non-negative integer, 60 when absent or invalid."""
    if value is None or value == "":
        return DEFAULT_REST_SECONDS
    if isinstance(value, str):
        match = _FIRST_INT.search(value)
        value = int(match.group(1)) if match else DEFAULT_REST_SECONDS
    rest = _whole_number(value)
    if rest is None or rest < 0:
        return DEFAULT_REST_SECONDS
    return rest


def normalize_muscle_groups(value) -> list[str]:
    """Muscle groups as a list of strings.

    JSON-encoded strings are decoded; anything that is not a list ends up
    as an empty list.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _normalize_weekday(value) -> str | None:
    if not isinstance(value, str):
        return None
    name = value.strip().title()
    return name if name in WEEKDAYS else None


def _text(value, default: str | None = None) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _normalize_exercises(raw_exercises) -> list[GeneratedExercise]:
    if not isinstance(raw_exercises, list):
        return []
    exercises = []
    for raw in raw_exercises:
        if not isinstance(raw, dict):
            continue
        name = _text(raw.get("name"))
        if name is None:
            continue
        exercises.append(
            GeneratedExercise(
                name=name,
                sets=normalize_sets(raw.get("sets")),
                reps=normalize_reps(raw.get("reps")),
                rest_seconds=normalize_rest_seconds(raw.get("restSeconds")),
                muscle_groups=normalize_muscle_groups(raw.get("muscleGroups")),
            )
        )
    return exercises


def _normalize_balance(raw_balance) -> dict[str, float]:
    if not isinstance(raw_balance, dict):
        return {}
    balance = {}
    for key, value in raw_balance.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        balance[str(key).lower()] = value
    return balance


def normalize_program(raw: RawProgramPayload) -> GeneratedProgram:
    """Convert an untrusted payload into a validated GeneratedProgram.

    Malformed weeks, sessions and exercises are dropped rather than failing
    the whole program; numeric exercise fields fall back to defaults.
    """
    weeks = []
    for position, raw_week in enumerate(raw.weeks, start=1):
        if not isinstance(raw_week, dict):
            continue
        week_number = _whole_number(raw_week.get("weekNumber"))
        if week_number is None or week_number < 1:
            week_number = position
        phase = _text(raw_week.get("phase"))

        sessions = []
        raw_sessions = raw_week.get("sessions")
        for raw_session in raw_sessions if isinstance(raw_sessions, list) else []:
            if not isinstance(raw_session, dict):
                continue
            day = _normalize_weekday(raw_session.get("dayOfWeek"))
            if day is None:
                continue
            sessions.append(
                GeneratedSession(
                    week_number=week_number,
                    day_of_week=day,
                    name=_text(raw_session.get("sessionName"), f"{day} Workout"),
                    phase=phase,
                    warm_up_query=_text(
                        raw_session.get("warmUpVideoQuery"), DEFAULT_WARM_UP_QUERY
                    ),
                    exercises=_normalize_exercises(raw_session.get("exercises")),
                )
            )
        weeks.append(GeneratedWeek(week_number=week_number, phase=phase, sessions=sessions))

    return GeneratedProgram(
        name=_text(raw.data.get("programName"), DEFAULT_PROGRAM_NAME),
        weeks=weeks,
        muscle_balance=_normalize_balance(raw.data.get("muscleBalance")),
    )
