"""
Bank Loader - Reads question rows from CSV.

This is the only I/O in the bank pipeline. The header row is
authoritative, every cell is read as text, blank lines are skipped.
A row with more cells than the header never rejects the rest of the
file; it is dropped or cut to the header width and left to validation.

Two failures are kept apart:
- BankParseError: the file could not be decoded as CSV at all
- NoValidQuestionsError: it decoded fine but no row was a valid question
"""

from __future__ import annotations
import io
import logging
from pathlib import Path
from typing import Any, BinaryIO, TextIO, Union

import pandas as pd

from .builder import normalize_questions, build_bank
from .question import Question

logger = logging.getLogger(__name__)

SAMPLE_FILE = "contoh_soal.csv"
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

CsvSource = Union[str, Path, bytes, BinaryIO, TextIO]


class QuestionBankError(Exception):
    """Base class for bank loading failures."""


class BankParseError(QuestionBankError):
    """Raised when the source is not readable as CSV."""


class NoValidQuestionsError(QuestionBankError):
    """Raised when the CSV was read but contained no valid question."""

    def __init__(self, row_count: int, source_name: str | None = None):
        self.row_count = row_count
        self.source_name = source_name
        super().__init__(
            f"No valid questions in {source_name or 'CSV'} ({row_count} row(s) read). "
            "Check the columns and that 'jawaban' is A/B/C/D."
        )


def read_rows(source: CsvSource) -> list[dict[str, Any]]:
    """
    Decode CSV into a list of records keyed by header name.

    Accepts a path, raw bytes, or an open file object.
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)

    try:
        df = pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
            index_col=False,
            on_bad_lines="skip",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise BankParseError(f"Could not read CSV: {e}") from e

    return df.to_dict(orient="records")


def load_bank(source: CsvSource, source_name: str | None = None) -> list[Question]:
    """
    Read, validate and shuffle a question bank.

    Raises:
        BankParseError: source is not valid CSV
        NoValidQuestionsError: no row survived validation
    """
    rows = read_rows(source)
    questions = normalize_questions(rows)
    if not questions:
        raise NoValidQuestionsError(len(rows), source_name)

    bank = build_bank(questions)
    logger.info("Loaded %d question(s) from %s", len(bank), source_name or "CSV")
    return bank


def load_sample_bank() -> list[Question]:
    """Load the bundled demo question set."""
    return load_bank(DATA_DIR / SAMPLE_FILE, source_name=SAMPLE_FILE)
