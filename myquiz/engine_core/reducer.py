r"""
Reducer - The two transitions of the session state machine.

Per question:  Unanswered --resolve_answer--> Resolved --advance--> Unanswered[next]
                                                       \--advance--> Terminal

Design principles:
- Pure functions: (session, input) -> new session
- Mode rules come from the policy table, not inline branches
- resolve_answer is idempotent: a second delivery for a resolved
  question (e.g. a late timer) changes nothing
- Call-order mistakes are programmer errors: the pure functions assert,
  the Reducer reports them as failed ActionResults
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..bank.question import Question, OPTION_KEYS
from .state import Answer, QuizConfig, Session
from .action import Action, ActionType, ActionResult
from .policy import get_policy

logger = logging.getLogger(__name__)


class TerminalReason(Enum):
    """Why a playthrough ended."""
    OUT_OF_LIVES = "out_of_lives"
    BANK_EXHAUSTED = "bank_exhausted"


@dataclass(frozen=True)
class Terminal:
    """End of a playthrough; the caller should show the review."""
    reason: TerminalReason
    session: Session


def resolve_answer(session: Session, question: Question, chosen: str | None) -> Session:
    """
    Record the response to the current question.

    chosen=None means no response (timeout). Scoring and lives follow the
    mode policy. If the current question is already resolved the session
    is returned unchanged.
    """
    assert chosen is None or chosen in OPTION_KEYS, f"Invalid option key: {chosen!r}"

    if session.is_current_resolved:
        logger.debug("Question %d already resolved; ignoring %r", session.current_index, chosen)
        return session

    correct = question.is_correct(chosen)
    answered = session.with_answer(Answer(
        chosen=chosen,
        correct=correct,
        answer_key=question.answer_key,
    ))
    return get_policy(session.mode).on_resolve(answered, correct)


def advance(session: Session, config: QuizConfig) -> Session | Terminal:
    """
    Move past the current (resolved) question.

    Ends the playthrough when the mode says so (survival without lives)
    or after the last question; otherwise steps to the next index and
    applies the mode's rotation/phase rules.
    """
    assert session.is_current_resolved, (
        f"Question {session.current_index} must be resolved before advancing"
    )

    policy = get_policy(session.mode)
    if policy.is_out(session):
        return Terminal(TerminalReason.OUT_OF_LIVES, session)
    if session.is_last_question:
        return Terminal(TerminalReason.BANK_EXHAUSTED, session)

    moved = session._copy_with(current_index=session.current_index + 1)
    return policy.on_advance(moved, config)


@dataclass
class Reducer:
    """
    Applies actions to a session for one bank and config.

    Stateless - all state is in Session.
    """
    bank: Sequence[Question]
    config: QuizConfig

    def apply(self, session: Session, action: Action) -> ActionResult:
        """
        Apply an action to the session.

        Returns ActionResult with new session, terminal info, or error.
        """
        validation_error = self._validate_action(session, action)
        if validation_error:
            return ActionResult.failure(*validation_error)

        handler = self._get_handler(action.action_type)
        return handler(session, action)

    def _validate_action(self, session: Session, action: Action) -> tuple[str, str] | None:
        """Returns (message, error_code) if the action is not allowed."""
        if session.total != len(self.bank):
            return (
                f"Session has {session.total} slots but bank has {len(self.bank)} questions",
                "BANK_MISMATCH",
            )

        if action.action_type == ActionType.ANSWER and action.chosen not in OPTION_KEYS:
            return f"Invalid option key: {action.chosen!r}", "INVALID_KEY"

        if action.action_type == ActionType.ADVANCE and not session.is_current_resolved:
            return (
                f"Question {session.current_index + 1} has not been answered yet",
                "NOT_RESOLVED",
            )

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.ANSWER: self._handle_resolve,
            ActionType.TIMEOUT: self._handle_resolve,
            ActionType.ADVANCE: self._handle_advance,
        }
        return handlers[action_type]

    def _handle_resolve(self, session: Session, action: Action) -> ActionResult:
        if session.is_current_resolved:
            return ActionResult.success_with_state(session, ignored=True)

        question = self.bank[session.current_index]
        new_session = resolve_answer(session, question, action.chosen)
        answer = new_session.current_answer

        changes = []
        if answer.timed_out:
            changes.append(f"Time is up on question {session.current_index + 1}")
        else:
            changes.append("Correct" if answer.correct else f"Wrong, the answer is {answer.answer_key}")
        if new_session.team_scores != session.team_scores:
            changes.append(f"Team {session.turn_team + 1} scores")
        if new_session.lives != session.lives:
            changes.append(f"Lost a life ({new_session.lives} left)")

        return ActionResult.success_with_state(new_session, changes=changes)

    def _handle_advance(self, session: Session, action: Action) -> ActionResult:
        outcome = advance(session, self.config)

        if isinstance(outcome, Terminal):
            return ActionResult(
                success=True,
                new_state=outcome.session,
                terminal=outcome,
                changes=[f"Playthrough over: {outcome.reason.value}"],
            )

        changes = []
        if outcome.cerdas_phase != session.cerdas_phase:
            changes.append(f"Round {outcome.cerdas_phase} begins")
        if session.mode.uses_teams:
            changes.append(f"Team {outcome.turn_team + 1}'s turn")
        return ActionResult.success_with_state(outcome, changes=changes)


def apply_action(
    bank: Sequence[Question],
    config: QuizConfig,
    session: Session,
    action: Action,
) -> ActionResult:
    """Convenience function to apply an action."""
    return Reducer(bank=bank, config=config).apply(session, action)
