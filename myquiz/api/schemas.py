"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a front end and the engine.

Error Codes:
- NO_VALID_QUESTIONS: CSV was read but no row was a valid question
- BANK_UNREADABLE: upload is not a readable CSV
- BANK_NOT_FOUND: bank ID unknown
- PLAYTHROUGH_NOT_FOUND: playthrough does not exist or has ended
- INVALID_ACTION: action not allowed now (e.g. next before answering)
- VALIDATION_ERROR: upload is not named .csv
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class PlayMode(str, Enum):
    """Play modes."""
    CLASSIC = "classic"
    TEAM = "team"
    COUNTDOWN = "countdown"
    SURVIVAL = "survival"
    CERDAS = "cerdas"


class PlaythroughStatus(str, Enum):
    ACTIVE = "active"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class LoopState(str, Enum):
    WAITING_ANSWER = "waiting_answer"
    REVEALED = "revealed"
    FINISHED = "finished"


class ErrorCode(str, Enum):
    """Structured error codes."""
    NO_VALID_QUESTIONS = "NO_VALID_QUESTIONS"
    BANK_UNREADABLE = "BANK_UNREADABLE"
    BANK_NOT_FOUND = "BANK_NOT_FOUND"
    PLAYTHROUGH_NOT_FOUND = "PLAYTHROUGH_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class QuizConfigModel(BaseModel):
    """Playthrough settings."""
    team_count: int = Field(2, ge=2, le=8, description="Teams in team/cerdas modes")
    seconds_per_question: int = Field(30, ge=5, le=120, description="Countdown mode timer")
    lives: int = Field(1, ge=1, le=10, description="Survival mode lives")

    model_config = {"from_attributes": True}


class OptionInfo(BaseModel):
    key: str
    text: str

    model_config = {"from_attributes": True}


class QuestionInfo(BaseModel):
    """The current question. The answer key is not included."""
    number: int = Field(description="1-based position in the bank")
    question_id: str
    category: str
    prompt: str
    options: list[OptionInfo]


class AnswerInfo(BaseModel):
    """How a question was resolved."""
    chosen: Optional[str] = Field(None, description="Null when time ran out")
    correct: bool
    answer_key: str

    model_config = {"from_attributes": True}


class ModeInfo(BaseModel):
    mode: PlayMode
    title: str
    description: str
    timed: bool = False
    tags: list[str] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================

class CreatePlaythroughRequest(BaseModel):
    """Request to start a playthrough."""
    bank_id: str = Field(..., description="ID returned by POST /banks")
    mode: PlayMode = PlayMode.CLASSIC
    config: QuizConfigModel = Field(default_factory=QuizConfigModel)


class AnswerRequest(BaseModel):
    key: str = Field(..., pattern="^[A-Da-d]$", description="Chosen option: A, B, C or D")


class TickRequest(BaseModel):
    seconds: float = Field(1.0, gt=0, le=120, description="Seconds elapsed since the last tick")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class BankResponse(BaseModel):
    """A loaded question bank."""
    bank_id: str
    source_name: Optional[str] = None
    total: int
    categories: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class PlaythroughResponse(BaseModel):
    """Everything needed to render the quiz screen."""
    playthrough_id: str
    bank_id: str
    mode: PlayMode
    status: PlaythroughStatus
    loop_state: LoopState
    config: QuizConfigModel

    current_index: int
    total: int
    progress_percent: int = 0
    question: Optional[QuestionInfo] = None
    current_answer: Optional[AnswerInfo] = None

    # Mode-specific
    team_scores: Optional[list[int]] = None
    turn_team: Optional[int] = Field(None, description="0-based, team/cerdas only")
    lives: Optional[int] = None
    cerdas_phase: Optional[int] = None
    cerdas_count_by_team: Optional[list[int]] = None
    remaining_seconds: Optional[float] = None

    terminal_reason: Optional[str] = None
    created_at: float = 0.0
    api_version: str = "v1"


class TurnResponse(BaseModel):
    """Result of answer, tick or next."""
    success: bool
    loop_state: LoopState
    question_index: int
    answer: Optional[AnswerInfo] = None
    ignored: bool = Field(False, description="True when the question was already resolved")
    remaining_seconds: Optional[float] = None
    changes: list[str] = Field(default_factory=list)
    terminal_reason: Optional[str] = None
    playthrough: PlaythroughResponse
    api_version: str = "v1"


class ReviewItemInfo(BaseModel):
    number: int
    question_id: str
    category: str
    prompt: str
    options: list[OptionInfo]
    answer_key: str
    chosen: Optional[str] = None
    correct: bool = False
    resolved: bool = False


class ReviewResponse(BaseModel):
    """End-of-game review."""
    playthrough_id: str
    mode: PlayMode
    total: int
    correct_count: int
    wrong_count: int
    score_percent: int
    items: list[ReviewItemInfo] = Field(default_factory=list)
    team_scores: Optional[list[int]] = None
    leading_teams: list[int] = Field(default_factory=list)
    lives_left: Optional[int] = None
    api_version: str = "v1"


class ModeListResponse(BaseModel):
    modes: list[ModeInfo]


class PlaythroughListResponse(BaseModel):
    playthroughs: list[str]
    count: int


class EndPlaythroughResponse(BaseModel):
    success: bool
    playthrough_id: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
