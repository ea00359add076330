"""
API Service - Business logic layer between API and engine.

The service:
1. Loads CSV uploads into banks
2. Starts, drives and resets playthroughs
3. Formats engine values as response schemas

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Lookups that fail return an ErrorResponse instead of raising.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

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
    ReviewItemInfo,
    ErrorResponse,
    ModeInfo,
    # Shared
    QuizConfigModel,
    QuestionInfo,
    OptionInfo,
    AnswerInfo,
    # Enums
    ErrorCode,
    PlayMode,
)
from ..bank import (
    Question,
    BankParseError,
    NoValidQuestionsError,
    load_bank,
    load_sample_bank,
)
from ..engine_core import Mode, QuizConfig, POLICIES
from ..session import SessionManager, Playthrough, GameLoop, TurnResult

logger = logging.getLogger(__name__)


@dataclass
class QuizService:
    """
    Main API service.

    Usage:
        service = QuizService()

        bank = service.load_bank(csv_bytes, "soal.csv")
        playthrough = service.create_playthrough(
            CreatePlaythroughRequest(bank_id=bank.bank_id, mode="team")
        )
        turn = service.answer(playthrough.playthrough_id, AnswerRequest(key="B"))
        turn = service.next(playthrough.playthrough_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per playthrough
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    # =========================================================================
    # Banks
    # =========================================================================

    def load_bank(self, data: bytes, source_name: str | None = None) -> BankResponse | ErrorResponse:
        """Validate and shuffle an uploaded CSV."""
        if source_name and not source_name.lower().endswith(".csv"):
            return ErrorResponse(
                error="Upload a .csv file",
                error_code=ErrorCode.VALIDATION_ERROR,
                details={"source_name": source_name},
            )

        try:
            questions = load_bank(data, source_name=source_name)
        except NoValidQuestionsError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.NO_VALID_QUESTIONS,
                details={"rows_read": e.row_count},
            )
        except BankParseError as e:
            logger.warning("Rejected upload %s: %s", source_name, e)
            return ErrorResponse(
                error="Could not read the CSV. Make sure it is a valid .csv file delimited by commas.",
                error_code=ErrorCode.BANK_UNREADABLE,
                details={"reason": str(e)},
            )
        return self._register(questions, source_name)

    def load_sample_bank(self) -> BankResponse:
        from ..bank.loader import SAMPLE_FILE
        return self._register(load_sample_bank(), SAMPLE_FILE)

    def get_bank(self, bank_id: str) -> BankResponse | ErrorResponse:
        entry = self.session_manager.get_bank(bank_id)
        if not entry:
            return self._bank_not_found(bank_id)
        return self._bank_to_response(entry.bank_id, entry.questions, entry.source_name)

    def list_modes(self) -> list[ModeInfo]:
        return [
            ModeInfo(
                mode=PlayMode(policy.mode.value),
                title=policy.title,
                description=policy.description,
                timed=policy.timed,
                tags=list(policy.tags),
            )
            for policy in POLICIES.values()
        ]

    # =========================================================================
    # Playthroughs
    # =========================================================================

    def create_playthrough(self, request: CreatePlaythroughRequest) -> PlaythroughResponse | ErrorResponse:
        """Start a playthrough on a loaded bank."""
        if not self.session_manager.get_bank(request.bank_id):
            return self._bank_not_found(request.bank_id)

        config = QuizConfig(
            team_count=request.config.team_count,
            seconds_per_question=request.config.seconds_per_question,
            lives=request.config.lives,
        )
        playthrough = self.session_manager.create_playthrough(
            bank_id=request.bank_id,
            mode=Mode(request.mode.value),
            config=config,
        )
        self._drop_ended_loops()
        self._game_loops[playthrough.playthrough_id] = GameLoop(playthrough)
        return self._playthrough_to_response(playthrough)

    def get_playthrough(self, playthrough_id: str) -> PlaythroughResponse | ErrorResponse:
        loop = self._game_loops.get(playthrough_id)
        if not loop:
            return self._playthrough_not_found(playthrough_id)
        return self._playthrough_to_response(loop.playthrough)

    def answer(self, playthrough_id: str, request: AnswerRequest) -> TurnResponse | ErrorResponse:
        loop = self._game_loops.get(playthrough_id)
        if not loop:
            return self._playthrough_not_found(playthrough_id)
        return self._turn_to_response(loop, loop.answer(request.key.upper()))

    def tick(self, playthrough_id: str, request: TickRequest) -> TurnResponse | ErrorResponse:
        loop = self._game_loops.get(playthrough_id)
        if not loop:
            return self._playthrough_not_found(playthrough_id)
        return self._turn_to_response(loop, loop.tick(request.seconds))

    def next(self, playthrough_id: str) -> TurnResponse | ErrorResponse:
        loop = self._game_loops.get(playthrough_id)
        if not loop:
            return self._playthrough_not_found(playthrough_id)
        return self._turn_to_response(loop, loop.next())

    def reset(self, playthrough_id: str) -> PlaythroughResponse | ErrorResponse:
        """Play the same bank again from the start."""
        playthrough = self.session_manager.reset(playthrough_id)
        if not playthrough:
            return self._playthrough_not_found(playthrough_id)
        self._game_loops[playthrough_id] = GameLoop(playthrough)
        return self._playthrough_to_response(playthrough)

    def review(self, playthrough_id: str) -> ReviewResponse | ErrorResponse:
        loop = self._game_loops.get(playthrough_id)
        if not loop:
            return self._playthrough_not_found(playthrough_id)

        summary = loop.review()
        return ReviewResponse(
            playthrough_id=playthrough_id,
            mode=PlayMode(loop.playthrough.mode.value),
            total=summary.total,
            correct_count=summary.correct_count,
            wrong_count=summary.wrong_count,
            score_percent=summary.score_percent,
            items=[
                ReviewItemInfo(
                    number=item.number,
                    question_id=item.question_id,
                    category=item.category,
                    prompt=item.prompt,
                    options=[OptionInfo.model_validate(o) for o in item.options],
                    answer_key=item.answer_key,
                    chosen=item.chosen,
                    correct=item.correct,
                    resolved=item.resolved,
                )
                for item in summary.items
            ],
            team_scores=summary.team_scores,
            leading_teams=summary.leading_teams,
            lives_left=summary.lives_left,
        )

    def end_playthrough(self, playthrough_id: str, reason: str = "user_ended") -> bool:
        self._game_loops.pop(playthrough_id, None)
        return self.session_manager.end(playthrough_id, reason)

    def list_playthroughs(self) -> list[str]:
        return self.session_manager.list_active()

    def cleanup_stale(self, max_age_seconds: int = 3600) -> int:
        """Drop old finished playthroughs and their game loops."""
        removed = self.session_manager.cleanup_stale(max_age_seconds)
        self._drop_ended_loops()
        return removed

    def _drop_ended_loops(self):
        """Forget game loops whose playthrough the manager no longer holds."""
        for pid in list(self._game_loops):
            if self.session_manager.get(pid) is None:
                del self._game_loops[pid]

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _register(self, questions: list[Question], source_name: str | None) -> BankResponse:
        entry = self.session_manager.register_bank(questions, source_name)
        return self._bank_to_response(entry.bank_id, entry.questions, entry.source_name)

    def _bank_to_response(self, bank_id: str, questions: list[Question], source_name: str | None) -> BankResponse:
        categories = list(dict.fromkeys(q.category for q in questions))
        return BankResponse(
            bank_id=bank_id,
            source_name=source_name,
            total=len(questions),
            categories=categories,
        )

    def _playthrough_to_response(self, playthrough: Playthrough) -> PlaythroughResponse:
        session = playthrough.session
        loop = self._game_loops.get(playthrough.playthrough_id)
        question = playthrough.bank[session.current_index]

        return PlaythroughResponse(
            playthrough_id=playthrough.playthrough_id,
            bank_id=playthrough.bank_id,
            mode=PlayMode(playthrough.mode.value),
            status=playthrough.status.value,
            loop_state=loop.state.value if loop else "waiting_answer",
            config=QuizConfigModel.model_validate(playthrough.config),
            current_index=session.current_index,
            total=session.total,
            progress_percent=session.progress_percent,
            question=QuestionInfo(
                number=session.current_index + 1,
                question_id=question.id,
                category=question.category,
                prompt=question.prompt,
                options=[OptionInfo.model_validate(o) for o in question.options],
            ),
            current_answer=(
                AnswerInfo.model_validate(session.current_answer)
                if session.current_answer else None
            ),
            team_scores=list(session.team_scores) if session.team_scores is not None else None,
            turn_team=session.turn_team if playthrough.mode.uses_teams else None,
            lives=session.lives,
            cerdas_phase=session.cerdas_phase,
            cerdas_count_by_team=(
                list(session.cerdas_count_by_team)
                if session.cerdas_count_by_team is not None else None
            ),
            remaining_seconds=loop.remaining_seconds if loop else None,
            terminal_reason=playthrough.terminal_reason.value if playthrough.terminal_reason else None,
            created_at=playthrough.created_at,
        )

    def _turn_to_response(self, loop: GameLoop, result: TurnResult) -> TurnResponse | ErrorResponse:
        if not result.success:
            return ErrorResponse(
                error=result.error or "Action not allowed",
                error_code=ErrorCode.INVALID_ACTION,
                details={"reason": result.error_code},
            )

        return TurnResponse(
            success=True,
            loop_state=result.loop_state.value,
            question_index=result.question_index,
            answer=AnswerInfo.model_validate(result.answer) if result.answer else None,
            ignored=result.ignored,
            remaining_seconds=result.remaining_seconds,
            changes=result.changes,
            terminal_reason=result.terminal_reason.value if result.terminal_reason else None,
            playthrough=self._playthrough_to_response(loop.playthrough),
        )

    def _bank_not_found(self, bank_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Bank {bank_id} not found",
            error_code=ErrorCode.BANK_NOT_FOUND,
        )

    def _playthrough_not_found(self, playthrough_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Playthrough {playthrough_id} not found",
            error_code=ErrorCode.PLAYTHROUGH_NOT_FOUND,
        )
