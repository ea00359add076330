"""
Review - End-of-playthrough summary.

Unanswered questions (timed out, or never reached because survival
ended early) count as wrong, so correct + wrong always equals the bank size.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence

from ..bank.question import Question, AnswerOption
from ..engine_core.state import Session


@dataclass
class ReviewItem:
    """One question as it was played."""
    number: int  # 1-based
    question_id: str
    category: str
    prompt: str
    options: tuple[AnswerOption, ...]
    answer_key: str
    chosen: str | None = None
    correct: bool = False
    resolved: bool = False


@dataclass
class ReviewSummary:
    """Totals plus per-question detail."""
    total: int
    correct_count: int
    wrong_count: int
    items: list[ReviewItem] = field(default_factory=list)

    # Team and cerdas modes only
    team_scores: list[int] | None = None
    leading_teams: list[int] = field(default_factory=list)  # 0-based

    # Survival only
    lives_left: int | None = None

    @property
    def score_percent(self) -> int:
        if not self.total:
            return 0
        return round(self.correct_count / self.total * 100)


def build_review(bank: Sequence[Question], session: Session) -> ReviewSummary:
    """Summarize a session against the bank it was played on."""
    items = []
    for i, question in enumerate(bank):
        answer = session.answers[i] if i < session.total else None
        items.append(ReviewItem(
            number=i + 1,
            question_id=question.id,
            category=question.category,
            prompt=question.prompt,
            options=question.options,
            answer_key=question.answer_key,
            chosen=answer.chosen if answer else None,
            correct=bool(answer and answer.correct),
            resolved=answer is not None,
        ))

    correct = sum(1 for item in items if item.correct)

    leading: list[int] = []
    if session.team_scores:
        best = max(session.team_scores)
        leading = [t for t, score in enumerate(session.team_scores) if score == best]

    return ReviewSummary(
        total=len(bank),
        correct_count=correct,
        wrong_count=len(bank) - correct,
        items=items,
        team_scores=list(session.team_scores) if session.team_scores is not None else None,
        leading_teams=leading,
        lives_left=session.lives,
    )
