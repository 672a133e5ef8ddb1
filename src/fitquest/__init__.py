"""fitquest: daily quests, streaks and AI-generated workout programs."""

__version__ = "0.1.0"
