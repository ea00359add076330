"""
Engine Core - Session state and the per-mode state machine.

The engine:
1. Creates a fresh Session for a mode/config
2. Resolves answers (including timeouts)
3. Advances through the bank until Terminal
4. Looks up per-mode rules in the policy table
"""

from .state import Mode, QuizConfig, Answer, Session
from .action import Action, ActionType, ActionResult
from .policy import ModePolicy, POLICIES, CERDAS_PHASE_ONE_QUOTA, get_policy
from .reducer import (
    Reducer,
    Terminal,
    TerminalReason,
    resolve_answer,
    advance,
    apply_action,
)

__all__ = [
    "Mode",
    "QuizConfig",
    "Answer",
    "Session",
    "Action",
    "ActionType",
    "ActionResult",
    "ModePolicy",
    "POLICIES",
    "CERDAS_PHASE_ONE_QUOTA",
    "get_policy",
    "Reducer",
    "Terminal",
    "TerminalReason",
    "resolve_answer",
    "advance",
    "apply_action",
]
