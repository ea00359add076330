"""
Question Bank - Turns raw CSV rows into a playable question bank.

Pipeline:
1. Read rows from a CSV source (loader)
2. Validate and normalize rows into Questions (builder)
3. Shuffle questions and options, remapping the answer key (builder)
"""

from .question import Question, AnswerOption, OPTION_KEYS, DEFAULT_CATEGORY
from .builder import normalize_questions, shuffle_options, build_bank
from .loader import (
    QuestionBankError,
    BankParseError,
    NoValidQuestionsError,
    read_rows,
    load_bank,
    load_sample_bank,
)

__all__ = [
    "Question",
    "AnswerOption",
    "OPTION_KEYS",
    "DEFAULT_CATEGORY",
    "normalize_questions",
    "shuffle_options",
    "build_bank",
    "QuestionBankError",
    "BankParseError",
    "NoValidQuestionsError",
    "read_rows",
    "load_bank",
    "load_sample_bank",
]
