"""
API Module - HTTP interface for a quiz front end.

The front end:
1. Uploads a CSV question set
2. Picks a mode and starts a playthrough
3. Sends answers, timer ticks and "next"
4. Shows the review

All state is in memory and scoped to the running process.
"""

from .schemas import (
    # Requests
    CreatePlaythroughRequest,
    AnswerRequest,
    TickRequest,
    # Responses
    BankResponse,
    PlaythroughResponse,
    TurnResponse,
    ReviewResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
    PlayMode,
)
from .service import QuizService
from .app import create_app

__all__ = [
    "CreatePlaythroughRequest",
    "AnswerRequest",
    "TickRequest",
    "BankResponse",
    "PlaythroughResponse",
    "TurnResponse",
    "ReviewResponse",
    "ErrorResponse",
    "ErrorCode",
    "PlayMode",
    "QuizService",
    "create_app",
]
