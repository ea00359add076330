"""
Session Module - Manages ephemeral playthroughs.

A playthrough is one run through a bank in one mode:
- Created when the user picks a mode and starts
- Holds the latest engine Session
- Driven by the GameLoop (answers, timer ticks, next)
- Ends with a review

Nothing here is persisted.
"""

from .manager import SessionManager, Playthrough, PlaythroughStatus, BankEntry
from .game_loop import GameLoop, LoopState, TurnResult, CountdownTimer
from .review import ReviewSummary, ReviewItem, build_review

__all__ = [
    "SessionManager",
    "Playthrough",
    "PlaythroughStatus",
    "BankEntry",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "CountdownTimer",
    "ReviewSummary",
    "ReviewItem",
    "build_review",
]
