"""Prompt templates for program generation."""

from ..models.program import ProgramParams
from ..models.user_profile import UserProfile

# Shape the generation service is asked to return.
PROGRAM_JSON_SHAPE = """{{
  "programName": "string",
  "weeks": [
    {{
      "weekNumber": 1,
      "phase": "string",
      "sessions": [
        {{
          "dayOfWeek": "Monday",
          "sessionName": "string",
          "warmUpVideoQuery": "dynamic stretching for {goal}",
          "exercises": [
            {{
              "name": "string",
              "sets": 3,
              "reps": 12,
              "muscleGroups": ["chest", "arms"],
              "restSeconds": 60
            }}
          ]
        }}
      ]
    }}
  ],
  "muscleBalance": {{
    "chest": 20,
    "back": 20,
    "legs": 25,
    "shoulders": 15,
    "arms": 10,
    "core": 10
  }}
}}"""

PROGRAM_PROMPT = """Generate {total_weeks}-week workout program:
GOAL: {goal} (MOST IMPORTANT)
- Frequency: {frequency} days/week on {workout_days}
- Duration: {duration} min/session
- Equipment: {equipment}
- User Profile: {profile}

Create progressive program optimized for {goal}.
Use only these muscle group names: chest, back, legs, shoulders, arms, core.

Return ONLY a valid JSON object with this exact structure:
{shape}

Be accurate and realistic with the values. Do not include any text before or after the JSON object. Make sure to include ALL weeks and complete the muscleBalance section."""


def build_program_prompt(params: ProgramParams, profile: UserProfile) -> str:
    """Build the single prompt requesting a whole multi-week program."""
    goal = params.goal.label
    return PROGRAM_PROMPT.format(
        total_weeks=params.total_weeks,
        goal=goal,
        frequency=params.frequency,
        workout_days=", ".join(params.workout_days),
        duration=params.duration,
        equipment=", ".join(params.equipment) or "bodyweight only",
        profile=profile.get_summary(),
        shape=PROGRAM_JSON_SHAPE.format(goal=goal),
    )
