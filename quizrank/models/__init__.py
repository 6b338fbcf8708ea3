"""Database model exports."""

from .game import Game, GameType
from .leaderboard import LeaderboardEntry, PeriodKind
from .reward import Reward, RewardGameAssociation, UserRewardGrant
from .user import User

__all__ = [
    "Game",
    "GameType",
    "LeaderboardEntry",
    "PeriodKind",
    "Reward",
    "RewardGameAssociation",
    "User",
    "UserRewardGrant",
]
