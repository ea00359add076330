"""
Game Loop - Drives one playthrough question by question.

The loop:
1. Show the current question (arm the countdown in timed modes)
2. Player answers, or the countdown expires
3. Reveal right/wrong
4. Player moves on -> next question, or the playthrough ends
5. Review

The timer is tick-driven: whoever owns the clock (a browser, the CLI)
forwards elapsed seconds via tick(). Expiry reaches the engine at most
once per question, and a resolve for an already-answered question is a
no-op anyway.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..engine_core.action import Action, ActionResult
from ..engine_core.policy import get_policy
from ..engine_core.reducer import Reducer, TerminalReason
from ..engine_core.state import Answer
from .review import ReviewSummary, build_review

if TYPE_CHECKING:
    from ..bank.question import Question
    from .manager import Playthrough

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_ANSWER = "waiting_answer"
    REVEALED = "revealed"
    FINISHED = "finished"


class CountdownTimer:
    """
    Per-question countdown.

    arm() starts it for a question, tick() counts down and reports expiry
    exactly once, cancel() stops it once the question is answered.
    """

    def __init__(self, seconds: int):
        self.seconds = seconds
        self.remaining: float = 0
        self.question_index: int | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def arm(self, question_index: int):
        """Start a full countdown for a question."""
        self.question_index = question_index
        self.remaining = self.seconds
        self._running = True

    def cancel(self):
        self._running = False

    def tick(self, seconds: float = 1) -> bool:
        """Count down. Returns True on the tick that runs out the time."""
        if not self._running:
            return False
        self.remaining = max(0, self.remaining - seconds)
        if self.remaining <= 0:
            self._running = False
            return True
        return False


@dataclass
class TurnResult:
    """
    Result of one loop step.

    Contains what the presentation layer needs to re-render.
    """
    success: bool
    loop_state: LoopState
    question_index: int

    answer: Answer | None = None
    ignored: bool = False
    remaining_seconds: float | None = None
    changes: list[str] = field(default_factory=list)

    # Set when the playthrough ended on this step
    terminal_reason: TerminalReason | None = None

    error: str | None = None
    error_code: str | None = None


class GameLoop:
    """
    The playthrough driver.

    Usage:
        loop = GameLoop(playthrough)

        question = loop.current_question()
        result = loop.answer("B")        # or loop.tick() until time is up
        result = loop.next()

        if result.loop_state == LoopState.FINISHED:
            show(loop.review())
    """

    def __init__(self, playthrough: Playthrough):
        self.playthrough = playthrough
        self.reducer = Reducer(bank=playthrough.bank, config=playthrough.config)
        self.timer: CountdownTimer | None = None
        if get_policy(playthrough.mode).timed:
            self.timer = CountdownTimer(playthrough.config.seconds_per_question)
        self._enter_question()

    @property
    def state(self) -> LoopState:
        if self.playthrough.is_finished():
            return LoopState.FINISHED
        if self.playthrough.session.is_current_resolved:
            return LoopState.REVEALED
        return LoopState.WAITING_ANSWER

    @property
    def remaining_seconds(self) -> float | None:
        return self.timer.remaining if self.timer else None

    def current_question(self) -> Question:
        return self.playthrough.bank[self.playthrough.session.current_index]

    def answer(self, chosen: str) -> TurnResult:
        """The player picked an option."""
        return self._resolve(Action.answer(chosen))

    def tick(self, seconds: float = 1) -> TurnResult:
        """
        Forward elapsed time from the clock owner.

        Does nothing outside timed modes or once the question is resolved.
        """
        if self.timer and self.state == LoopState.WAITING_ANSWER and self.timer.tick(seconds):
            logger.info(
                "Time up on question %d of playthrough %s",
                self.playthrough.session.current_index + 1,
                self.playthrough.playthrough_id,
            )
            return self._resolve(Action.timeout())
        return self._turn_result(success=True)

    def next(self) -> TurnResult:
        """Move on from the revealed question."""
        if self.state == LoopState.FINISHED:
            return self._finished_error()

        result = self.reducer.apply(self.playthrough.session, Action.advance())
        if not result.success:
            return self._failed(result)

        self.playthrough.session = result.new_state
        if result.is_terminal:
            self.playthrough.finish(result.terminal.reason)
            if self.timer:
                self.timer.cancel()
            return self._turn_result(
                success=True,
                changes=result.changes,
                terminal_reason=result.terminal.reason,
            )

        self._enter_question()
        return self._turn_result(success=True, changes=result.changes)

    def review(self) -> ReviewSummary:
        return build_review(self.playthrough.bank, self.playthrough.session)

    def _resolve(self, action: Action) -> TurnResult:
        if self.state == LoopState.FINISHED:
            return self._finished_error()

        result = self.reducer.apply(self.playthrough.session, action)
        if not result.success:
            return self._failed(result)

        self.playthrough.session = result.new_state
        if self.timer:
            self.timer.cancel()
        return self._turn_result(
            success=True,
            answer=result.new_state.current_answer,
            ignored=result.ignored,
            changes=result.changes,
        )

    def _enter_question(self):
        if self.timer and not self.playthrough.session.is_current_resolved:
            self.timer.arm(self.playthrough.session.current_index)

    def _turn_result(self, **kwargs) -> TurnResult:
        return TurnResult(
            loop_state=self.state,
            question_index=self.playthrough.session.current_index,
            remaining_seconds=self.remaining_seconds,
            **kwargs,
        )

    def _failed(self, result: ActionResult) -> TurnResult:
        return self._turn_result(
            success=False,
            error=result.error,
            error_code=result.error_code,
        )

    def _finished_error(self) -> TurnResult:
        return self._turn_result(
            success=False,
            error="Playthrough is over",
            error_code="PLAYTHROUGH_OVER",
        )
