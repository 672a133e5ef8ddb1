"""Exercise video cache model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ExerciseVideo:
    """A resolved demonstration video for an exercise name."""

    exercise_name: str  # normalized cache key
    video_id: str
    video_url: str
    embed_url: str
    video_title: str | None = None
    use_count: int = 1
    fetched_at: datetime | None = None
    last_used_at: datetime | None = None
    cached: bool = False
    id: int | None = None

    @classmethod
    def from_video_id(
        cls, exercise_name: str, video_id: str, title: str | None = None
    ) -> "ExerciseVideo":
        return cls(
            exercise_name=exercise_name,
            video_id=video_id,
            video_url=f"https://www.youtube.com/watch?v={video_id}",
            embed_url=f"https://www.youtube.com/embed/{video_id}",
            video_title=title,
        )

    def to_dict(self) -> dict:
        return {
            "exercise_name": self.exercise_name,
            "video_id": self.video_id,
            "video_url": self.video_url,
            "embed_url": self.embed_url,
            "video_title": self.video_title,
            "use_count": self.use_count,
            "cached": self.cached,
        }
