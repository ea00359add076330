"""
Session State - The per-playthrough value the engine operates on.

Design principles:
- Immutable-friendly: every transition returns a new Session
- Mode-shaped: fields that a mode does not use are None
- Exclusively owned: one Session per playthrough, never shared
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class Mode(Enum):
    """Play modes."""
    CLASSIC = "classic"
    TEAM = "team"
    COUNTDOWN = "countdown"
    SURVIVAL = "survival"
    CERDAS = "cerdas"  # Cerdas cermat (quiz bowl)

    @property
    def uses_teams(self) -> bool:
        return self in (Mode.TEAM, Mode.CERDAS)


TEAM_COUNT_RANGE = (2, 8)
SECONDS_RANGE = (5, 120)
LIVES_RANGE = (1, 10)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dataclass(frozen=True)
class QuizConfig:
    """Settings chosen before a playthrough starts."""
    team_count: int = 2
    seconds_per_question: int = 30
    lives: int = 1

    def __post_init__(self):
        checks = (
            ("team_count", self.team_count, TEAM_COUNT_RANGE),
            ("seconds_per_question", self.seconds_per_question, SECONDS_RANGE),
            ("lives", self.lives, LIVES_RANGE),
        )
        for name, value, (low, high) in checks:
            if not low <= value <= high:
                raise ValueError(f"{name} must be between {low} and {high}, got {value}")

    @classmethod
    def clamped(
        cls,
        team_count: int = 2,
        seconds_per_question: int = 30,
        lives: int = 1,
    ) -> QuizConfig:
        """Build a config, pulling out-of-range values to the nearest bound."""
        return cls(
            team_count=clamp(team_count, *TEAM_COUNT_RANGE),
            seconds_per_question=clamp(seconds_per_question, *SECONDS_RANGE),
            lives=clamp(lives, *LIVES_RANGE),
        )


@dataclass(frozen=True)
class Answer:
    """
    The resolution of one question.

    chosen is None when the question timed out or was not answered.
    """
    chosen: str | None
    correct: bool
    answer_key: str

    @property
    def timed_out(self) -> bool:
        return self.chosen is None


@dataclass(frozen=True)
class Session:
    """
    Complete state of one playthrough.

    answers has one slot per bank question, filled strictly in index order.
    Mode-specific fields:
    - team_scores, turn_team: team and cerdas
    - lives: survival
    - cerdas_phase, cerdas_count_by_team: cerdas
    """
    mode: Mode
    current_index: int = 0
    answers: tuple[Answer | None, ...] = ()
    team_scores: tuple[int, ...] | None = None
    turn_team: int = 0
    lives: int | None = None
    cerdas_phase: int | None = None
    cerdas_count_by_team: tuple[int, ...] | None = None

    @classmethod
    def create(cls, mode: Mode, bank_size: int, config: QuizConfig) -> Session:
        """Create the fresh session for a mode/config pair."""
        teams = mode.uses_teams
        cerdas = mode == Mode.CERDAS
        return cls(
            mode=mode,
            current_index=0,
            answers=(None,) * bank_size,
            team_scores=(0,) * config.team_count if teams else None,
            turn_team=0,
            lives=config.lives if mode == Mode.SURVIVAL else None,
            cerdas_phase=1 if cerdas else None,
            cerdas_count_by_team=(0,) * config.team_count if cerdas else None,
        )

    @property
    def total(self) -> int:
        return len(self.answers)

    @property
    def current_answer(self) -> Answer | None:
        return self.answers[self.current_index]

    @property
    def is_current_resolved(self) -> bool:
        return self.current_answer is not None

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= self.total - 1

    @property
    def resolved_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.answers if a is not None and a.correct)

    @property
    def progress_percent(self) -> int:
        """Answered share of the bank, as a whole percentage."""
        if not self.total:
            return 0
        return round(self.resolved_count / self.total * 100)

    def is_resolved(self, index: int) -> bool:
        return self.answers[index] is not None

    def with_answer(self, answer: Answer) -> Session:
        """Return new session with the current slot filled."""
        answers = list(self.answers)
        answers[self.current_index] = answer
        return self._copy_with(answers=tuple(answers))

    def _copy_with(self, **kwargs) -> Session:
        """Create a copy with some fields replaced."""
        return Session(
            mode=kwargs.get("mode", self.mode),
            current_index=kwargs.get("current_index", self.current_index),
            answers=kwargs.get("answers", self.answers),
            team_scores=kwargs.get("team_scores", self.team_scores),
            turn_team=kwargs.get("turn_team", self.turn_team),
            lives=kwargs.get("lives", self.lives),
            cerdas_phase=kwargs.get("cerdas_phase", self.cerdas_phase),
            cerdas_count_by_team=kwargs.get("cerdas_count_by_team", self.cerdas_count_by_team),
        )
