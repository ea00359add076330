"""
Pytest fixtures for MyQuiz tests.
"""

import pytest

from ..bank.question import Question, AnswerOption, OPTION_KEYS
from ..engine_core.state import Mode, QuizConfig, Session
from ..session import SessionManager


HEADER = "id,kategori,pertanyaan,pilihan_a,pilihan_b,pilihan_c,pilihan_d,jawaban"


def _make_question(
    qid: str = "1",
    answer_key: str = "A",
    texts: tuple = ("alpha", "beta", "gamma", "delta"),
    category: str = "Umum",
    prompt: str | None = None,
) -> Question:
    return Question(
        id=qid,
        category=category,
        prompt=prompt or f"Question {qid}?",
        options=tuple(AnswerOption(key=k, text=t) for k, t in zip(OPTION_KEYS, texts)),
        answer_key=answer_key,
    )


@pytest.fixture
def make_question():
    """Factory for hand-built (unshuffled) questions."""
    return _make_question


@pytest.fixture
def make_bank():
    """Factory for a bank of n questions, answer keys cycling A-D."""
    def factory(n: int) -> list[Question]:
        return [
            _make_question(
                qid=str(i + 1),
                answer_key=OPTION_KEYS[i % 4],
                texts=tuple(f"q{i + 1}-{k}" for k in OPTION_KEYS),
            )
            for i in range(n)
        ]
    return factory


@pytest.fixture
def three_questions(make_bank) -> list[Question]:
    return make_bank(3)


@pytest.fixture
def default_config() -> QuizConfig:
    return QuizConfig()


@pytest.fixture
def new_session():
    """Factory for a fresh session: new_session(mode, bank, config)."""
    def factory(mode: Mode, bank: list[Question], config: QuizConfig | None = None) -> Session:
        return Session.create(mode, len(bank), config or QuizConfig())
    return factory


@pytest.fixture
def csv_bytes() -> bytes:
    """A small valid CSV with one invalid row."""
    lines = [
        HEADER,
        "1,Matematika,2+2=?,3,4,5,6,B",
        '2,Sains,"Planet terdekat dari Matahari adalah...,",Bumi,Mars,Merkurius,Jupiter,C',
        "3,Sejarah,,a,b,c,d,A",
        "4,,Ibu kota Indonesia?,Jakarta,Bandung,Surabaya,Medan,a",
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()
