from .base import WireModel


class LeaderboardEntry(WireModel):
    rank: int
    user_id: str
    name: str
    avg_progress: float


class LeaderboardEnvelope(WireModel):
    """Response wrapper used by the leaderboard endpoint."""

    success: bool = False
    data: list[LeaderboardEntry] | None = None
    message: str | None = None
