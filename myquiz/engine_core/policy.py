"""
Mode Policies - Per-mode rules consulted by the reducer.

Each mode is one ModePolicy: a row of pure functions for scoring,
turn rotation and early termination. The reducer never branches on the
mode itself; it looks the policy up and calls it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from .state import Mode, QuizConfig, Session


# Questions each team must take in cerdas phase 1 before phase 2 opens
CERDAS_PHASE_ONE_QUOTA = 10


@dataclass(frozen=True)
class ModePolicy:
    """
    Rules for one play mode.

    on_resolve: applied after an answer is recorded (scoring, lives)
    on_advance: applied when moving to the next question (rotation, phase)
    is_out: True when the playthrough must end before the bank runs out
    """
    mode: Mode
    title: str
    description: str
    on_resolve: Callable[[Session, bool], Session]
    on_advance: Callable[[Session, QuizConfig], Session]
    is_out: Callable[[Session], bool]
    timed: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)


# ============================================================================
# Rule functions
# ============================================================================

def _unchanged_on_resolve(session: Session, correct: bool) -> Session:
    return session


def _unchanged_on_advance(session: Session, config: QuizConfig) -> Session:
    return session


def _never_out(session: Session) -> bool:
    return False


def _score_turn_team(session: Session, correct: bool) -> Session:
    """A correct answer earns the team on turn one point."""
    if not correct:
        return session
    scores = list(session.team_scores)
    scores[session.turn_team] += 1
    return session._copy_with(team_scores=tuple(scores))


def _lose_life(session: Session, correct: bool) -> Session:
    """A wrong answer costs one life, never going below zero."""
    if correct:
        return session
    return session._copy_with(lives=max(0, session.lives - 1))


def _out_of_lives(session: Session) -> bool:
    return session.lives <= 0


def _rotate_turn(session: Session, config: QuizConfig) -> Session:
    return session._copy_with(turn_team=(session.turn_team + 1) % config.team_count)


def _cerdas_advance(session: Session, config: QuizConfig) -> Session:
    """
    Count the finished turn toward phase 1, then rotate.

    Phase 2 opens once every team has reached the quota. A bank shorter
    than quota * team_count never reaches phase 2.
    """
    phase = session.cerdas_phase
    counts = session.cerdas_count_by_team

    if phase == 1:
        updated = list(counts)
        updated[session.turn_team] += 1
        counts = tuple(updated)
        if all(c >= CERDAS_PHASE_ONE_QUOTA for c in counts):
            phase = 2

    return _rotate_turn(
        session._copy_with(cerdas_phase=phase, cerdas_count_by_team=counts),
        config,
    )


# ============================================================================
# Policy table
# ============================================================================

CLASSIC = ModePolicy(
    mode=Mode.CLASSIC,
    title="Classic",
    description="Answer, see right or wrong, move on.",
    on_resolve=_unchanged_on_resolve,
    on_advance=_unchanged_on_advance,
    is_out=_never_out,
    tags=("relaxed", "practice"),
)

TEAM = ModePolicy(
    mode=Mode.TEAM,
    title="Team",
    description="Teams take turns; each correct answer scores for the team on turn.",
    on_resolve=_score_turn_team,
    on_advance=_rotate_turn,
    is_out=_never_out,
    tags=("team score", "turns"),
)

COUNTDOWN = ModePolicy(
    mode=Mode.COUNTDOWN,
    title="Countdown",
    description="Every question has a timer. Running out counts as wrong.",
    on_resolve=_unchanged_on_resolve,
    on_advance=_unchanged_on_advance,
    is_out=_never_out,
    timed=True,
    tags=("timer", "tense"),
)

SURVIVAL = ModePolicy(
    mode=Mode.SURVIVAL,
    title="Survival",
    description="Each wrong answer costs a life. No lives left ends the game.",
    on_resolve=_lose_life,
    on_advance=_unchanged_on_advance,
    is_out=_out_of_lives,
    tags=("challenge", "strict"),
)

CERDAS = ModePolicy(
    mode=Mode.CERDAS,
    title="Cerdas Cermat",
    description=(
        f"Quiz bowl in two rounds: round 1 gives every team "
        f"{CERDAS_PHASE_ONE_QUOTA} questions in turn, round 2 plays the rest."
    ),
    on_resolve=_score_turn_team,
    on_advance=_cerdas_advance,
    is_out=_never_out,
    tags=("2 rounds", "competition"),
)

POLICIES: dict[Mode, ModePolicy] = {
    Mode.CLASSIC: CLASSIC,
    Mode.TEAM: TEAM,
    Mode.COUNTDOWN: COUNTDOWN,
    Mode.SURVIVAL: SURVIVAL,
    Mode.CERDAS: CERDAS,
}


def get_policy(mode: Mode) -> ModePolicy:
    """Get the policy for a mode."""
    return POLICIES[mode]
