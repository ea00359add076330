"""
Action System - Inputs to the session state machine.

The presentation layer turns user clicks and timer expiry into actions:
- ANSWER: the player picked an option
- TIMEOUT: the countdown ran out (an answer with no choice)
- ADVANCE: the player moved on from a resolved question
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    ANSWER = "answer"
    TIMEOUT = "timeout"
    ADVANCE = "advance"


@dataclass(frozen=True)
class Action:
    """A single input to the reducer."""
    action_type: ActionType
    chosen: str | None = None

    @classmethod
    def answer(cls, chosen: str) -> Action:
        """Factory for an answer."""
        return cls(action_type=ActionType.ANSWER, chosen=chosen)

    @classmethod
    def timeout(cls) -> Action:
        """Factory for timer expiry."""
        return cls(action_type=ActionType.TIMEOUT)

    @classmethod
    def advance(cls) -> Action:
        """Factory for moving to the next question."""
        return cls(action_type=ActionType.ADVANCE)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - New session (if accepted)
    - Terminal info (if the playthrough just ended)
    - Error (if rejected)
    """
    success: bool
    new_state: Any | None = None  # Session
    terminal: Any | None = None  # Terminal
    ignored: bool = False  # Accepted but had no effect (already resolved)
    error: str | None = None
    error_code: str | None = None
    changes: list[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.terminal is not None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        ignored: bool = False,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            changes=changes or [],
            ignored=ignored,
        )
