"""
Question records - the immutable unit of a question bank.

A Question always carries exactly four options keyed A, B, C, D in that
order, and an answer_key naming the option that holds the correct text.
"""

from __future__ import annotations
from dataclasses import dataclass


OPTION_KEYS: tuple[str, ...] = ("A", "B", "C", "D")
DEFAULT_CATEGORY = "Umum"


@dataclass(frozen=True)
class AnswerOption:
    """One labelled answer choice."""
    key: str  # A/B/C/D
    text: str


@dataclass(frozen=True)
class Question:
    """
    A single multiple-choice question.

    Note: option keys are presentation labels. After shuffling they are
    rewritten to match position, so options[i].key == OPTION_KEYS[i].
    """
    id: str
    category: str
    prompt: str
    options: tuple[AnswerOption, ...]
    answer_key: str

    def __post_init__(self):
        keys = tuple(o.key for o in self.options)
        if keys != OPTION_KEYS:
            raise ValueError(f"Question {self.id}: option keys must be {OPTION_KEYS}, got {keys}")
        if self.answer_key not in OPTION_KEYS:
            raise ValueError(f"Question {self.id}: invalid answer key {self.answer_key!r}")

    @property
    def correct_option(self) -> AnswerOption:
        """Get the option holding the correct answer."""
        return self.options[OPTION_KEYS.index(self.answer_key)]

    @property
    def correct_text(self) -> str:
        return self.correct_option.text

    def option(self, key: str) -> AnswerOption | None:
        """Get an option by key."""
        for o in self.options:
            if o.key == key:
                return o
        return None

    def is_correct(self, key: str | None) -> bool:
        """Check a chosen key. No choice (timeout) is never correct."""
        return key is not None and key == self.answer_key
