"""CLI commands for fitquest."""

from .balance import balance
from .generate import generate
from .init import init
from .profile import profile
from .programs import programs
from .quests import quests
from .serve import serve
from .videos import videos

__all__ = [
    "balance",
    "generate",
    "init",
    "profile",
    "programs",
    "quests",
    "serve",
    "videos",
]
