"""
Bank Builder - Validates raw rows and produces a randomized question bank.

Two stages:
1. normalize_questions(): rows -> Questions (input order, invalid rows dropped)
2. build_bank(): shuffle question order, then shuffle each question's options
   and remap the answer key to wherever the correct text ended up.

Shuffling uses a non-seedable source unless an rng is passed in. Tests
must check structure, not exact order.
"""

from __future__ import annotations
import logging
import math
import random
from typing import Any, Iterable, Mapping

from .question import Question, AnswerOption, OPTION_KEYS, DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

# Canonical CSV columns
ROW_FIELDS = (
    "id",
    "kategori",
    "pertanyaan",
    "pilihan_a",
    "pilihan_b",
    "pilihan_c",
    "pilihan_d",
    "jawaban",
)

# Other header spellings accepted for the descriptive fields only
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("ID",),
    "kategori": ("Kategori", "category"),
    "pertanyaan": ("Pertanyaan", "question"),
}

_system_random = random.SystemRandom()


def _safe_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def _extract_row(raw: Mapping[str, Any]) -> dict[str, str]:
    """Pull the canonical fields out of a loosely-typed record, trimmed."""
    row = {name: _safe_text(raw.get(name)).strip() for name in ROW_FIELDS}

    for name, aliases in FIELD_ALIASES.items():
        if row[name]:
            continue
        for alias in aliases:
            value = _safe_text(raw.get(alias))
            if value:
                row[name] = value.strip()
                break

    return row


def normalize_questions(rows: Iterable[Mapping[str, Any]]) -> list[Question]:
    """
    Validate and normalize raw rows into Questions.

    Rows with an empty question or an answer outside A-D are skipped.
    Output keeps input order; options are not shuffled yet.
    An empty result is the caller's problem to report.
    """
    questions: list[Question] = []
    skipped = 0

    for idx, raw in enumerate(rows):
        row = _extract_row(raw)

        answer = row["jawaban"].upper()
        if not row["pertanyaan"] or answer not in OPTION_KEYS:
            skipped += 1
            logger.debug("Skipping row %d: missing question or bad answer %r", idx + 1, row["jawaban"])
            continue

        options = tuple(
            AnswerOption(key=key, text=row[f"pilihan_{key.lower()}"])
            for key in OPTION_KEYS
        )
        questions.append(Question(
            id=row["id"] or str(idx + 1),
            category=row["kategori"] or DEFAULT_CATEGORY,
            prompt=row["pertanyaan"],
            options=options,
            answer_key=answer,
        ))

    if skipped:
        logger.info("Normalized %d question(s), skipped %d invalid row(s)", len(questions), skipped)
    return questions


def shuffle_options(question: Question, rng: random.Random | None = None) -> Question:
    """
    Return a copy of the question with its options in random order.

    Options are relabelled A-D by new position. The answer key follows the
    correct option by TEXT: with duplicate option texts the first match
    wins, which may point at the wrong duplicate. If no option matches,
    the key falls back to "A".
    """
    rng = rng or _system_random
    correct_text = question.correct_text

    shuffled = list(question.options)
    rng.shuffle(shuffled)

    new_index = next(
        (i for i, o in enumerate(shuffled) if o.text == correct_text),
        None,
    )
    answer_key = OPTION_KEYS[new_index] if new_index is not None else "A"

    return Question(
        id=question.id,
        category=question.category,
        prompt=question.prompt,
        options=tuple(
            AnswerOption(key=OPTION_KEYS[i], text=o.text)
            for i, o in enumerate(shuffled)
        ),
        answer_key=answer_key,
    )


def build_bank(questions: Iterable[Question], rng: random.Random | None = None) -> list[Question]:
    """
    Build the presentation-ready bank: questions shuffled, then each
    question's options shuffled with its answer key remapped.
    """
    rng = rng or _system_random
    bank = list(questions)
    rng.shuffle(bank)
    return [shuffle_options(q, rng) for q in bank]
