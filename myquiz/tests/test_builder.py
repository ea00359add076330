"""
Tests for the bank builder.

Tests:
- Row validation and normalization
- Option shuffling and answer remapping
- Bank shuffling

Default shuffles are not seedable, so only structure and rough
distribution are checked.
"""

from collections import Counter

import pytest

from ..bank.builder import normalize_questions, shuffle_options, build_bank
from ..bank.question import Question, AnswerOption, OPTION_KEYS, DEFAULT_CATEGORY


def _row(**overrides):
    row = {
        "id": "7",
        "kategori": "Sains",
        "pertanyaan": "Air mendidih pada suhu?",
        "pilihan_a": "50",
        "pilihan_b": "90",
        "pilihan_c": "100",
        "pilihan_d": "120",
        "jawaban": "C",
    }
    row.update(overrides)
    return row


class TestNormalize:
    """Tests for normalize_questions."""

    def test_valid_row(self):
        """A complete row becomes a Question with fixed A-D options."""
        [q] = normalize_questions([_row()])

        assert q.id == "7"
        assert q.category == "Sains"
        assert q.prompt == "Air mendidih pada suhu?"
        assert [o.key for o in q.options] == list(OPTION_KEYS)
        assert [o.text for o in q.options] == ["50", "90", "100", "120"]
        assert q.answer_key == "C"
        assert q.correct_text == "100"

    def test_fields_are_trimmed(self):
        [q] = normalize_questions([_row(pertanyaan="  Spasi?  ", pilihan_a=" 50 ", jawaban=" c ")])

        assert q.prompt == "Spasi?"
        assert q.options[0].text == "50"
        assert q.answer_key == "C"

    def test_lowercase_answer_accepted(self):
        [q] = normalize_questions([_row(jawaban="b")])
        assert q.answer_key == "B"

    @pytest.mark.parametrize("answer", ["", "E", "AB", "1", "benar"])
    def test_bad_answer_rejected(self, answer):
        assert normalize_questions([_row(jawaban=answer)]) == []

    @pytest.mark.parametrize("prompt", ["", "   ", None])
    def test_empty_prompt_rejected(self, prompt):
        assert normalize_questions([_row(pertanyaan=prompt)]) == []

    def test_defaults_id_to_position(self):
        """Missing id falls back to the 1-based input position, counting skipped rows."""
        rows = [_row(pertanyaan=""), _row(id=""), _row(id="  ")]
        questions = normalize_questions(rows)

        assert [q.id for q in questions] == ["2", "3"]

    def test_defaults_category(self):
        [q] = normalize_questions([_row(kategori="")])
        assert q.category == DEFAULT_CATEGORY == "Umum"

    def test_preserves_order_and_drops_invalid(self):
        rows = [_row(id="a"), _row(id="b", jawaban="X"), _row(id="c"), _row(id="d", pertanyaan="")]
        questions = normalize_questions(rows)

        assert [q.id for q in questions] == ["a", "c"]
        assert len(questions) <= len(rows)

    def test_missing_and_null_fields(self):
        """Absent option fields become empty text, None becomes empty."""
        row = {"pertanyaan": "Hanya soal?", "jawaban": "A", "pilihan_a": None}
        [q] = normalize_questions([row])

        assert [o.text for o in q.options] == ["", "", "", ""]
        assert q.id == "1"
        assert q.category == "Umum"

    def test_non_string_values(self):
        [q] = normalize_questions([_row(id=12, pilihan_a=3.5)])
        assert q.id == "12"
        assert q.options[0].text == "3.5"

    def test_header_aliases(self):
        row = {
            "ID": "x1",
            "category": "Geografi",
            "question": "Pulau terbesar?",
            "pilihan_a": "Jawa",
            "pilihan_b": "Sumatra",
            "pilihan_c": "Sulawesi",
            "pilihan_d": "Kalimantan",
            "jawaban": "D",
        }
        [q] = normalize_questions([row])

        assert q.id == "x1"
        assert q.category == "Geografi"
        assert q.prompt == "Pulau terbesar?"

    def test_capitalized_aliases(self):
        row = _row(kategori="", pertanyaan="")
        row.update({"Kategori": "Bahasa", "Pertanyaan": "Sinonim cerdas?"})
        [q] = normalize_questions([row])

        assert q.category == "Bahasa"
        assert q.prompt == "Sinonim cerdas?"

    def test_canonical_key_wins_over_alias(self):
        [q] = normalize_questions([_row(question="alias", kategori="Asli", category="alias")])
        assert q.prompt == "Air mendidih pada suhu?"
        assert q.category == "Asli"

    def test_aliases_only_for_descriptive_fields(self):
        """Answer and option columns have no alternate spellings."""
        row = _row(jawaban="")
        row["Jawaban"] = "A"
        assert normalize_questions([row]) == []

    def test_every_question_has_one_matching_option(self):
        rows = [_row(id=str(i), jawaban=k) for i, k in enumerate("ABCDabcd")]
        for q in normalize_questions(rows):
            assert q.answer_key in OPTION_KEYS
            assert sum(1 for o in q.options if o.key == q.answer_key) == 1


class TestShuffleOptions:
    """Tests for shuffle_options."""

    def test_texts_are_permuted(self, make_question):
        q = make_question(answer_key="C")
        shuffled = shuffle_options(q)

        assert sorted(o.text for o in shuffled.options) == sorted(o.text for o in q.options)

    def test_keys_relabelled_by_position(self, make_question):
        shuffled = shuffle_options(make_question())
        assert tuple(o.key for o in shuffled.options) == OPTION_KEYS

    def test_answer_follows_correct_text(self, make_question):
        for key in OPTION_KEYS:
            q = make_question(answer_key=key)
            for _ in range(20):
                shuffled = shuffle_options(q)
                assert shuffled.correct_text == q.correct_text
                assert sum(1 for o in shuffled.options if o.text == q.correct_text) == 1

    def test_other_fields_kept(self, make_question):
        q = make_question(qid="42", category="Sejarah", prompt="Kapan?")
        shuffled = shuffle_options(q)

        assert (shuffled.id, shuffled.category, shuffled.prompt) == ("42", "Sejarah", "Kapan?")

    def test_correct_answer_lands_everywhere(self, make_question):
        """Over many shuffles the correct option reaches every position."""
        q = make_question(answer_key="A")
        positions = Counter(shuffle_options(q).answer_key for _ in range(400))

        assert set(positions) == set(OPTION_KEYS)

    def test_duplicate_text_uses_first_match(self, make_question):
        """With duplicate texts the key points at the first equal option."""
        q = make_question(answer_key="B", texts=("same", "same", "other", "else"))
        for _ in range(20):
            shuffled = shuffle_options(q)
            texts = [o.text for o in shuffled.options]
            assert shuffled.answer_key == OPTION_KEYS[texts.index("same")]

    def test_falls_back_to_a_when_no_match(self, make_question):
        class ReplacingRandom:
            def shuffle(self, items):
                items[:] = [AnswerOption(key=k, text=f"new-{k}") for k in OPTION_KEYS]

        shuffled = shuffle_options(make_question(answer_key="D"), rng=ReplacingRandom())
        assert shuffled.answer_key == "A"


class TestBuildBank:
    """Tests for build_bank."""

    def test_same_questions(self, make_bank):
        source = make_bank(8)
        bank = build_bank(source)

        assert len(bank) == len(source)
        assert sorted(q.id for q in bank) == sorted(q.id for q in source)

    def test_answers_consistent(self, make_bank):
        source = {q.id: q for q in make_bank(8)}
        for q in build_bank(source.values()):
            assert q.correct_text == source[q.id].correct_text
            assert tuple(o.key for o in q.options) == OPTION_KEYS

    def test_order_varies(self, make_bank):
        source = make_bank(6)
        orders = {tuple(q.id for q in build_bank(source)) for _ in range(30)}
        assert len(orders) > 1

    def test_input_not_mutated(self, make_bank):
        source = make_bank(5)
        before = list(source)
        build_bank(source)
        assert source == before

    def test_empty(self):
        assert build_bank([]) == []


class TestQuestion:
    """Tests for the Question record."""

    def test_rejects_wrong_keys(self):
        with pytest.raises(ValueError):
            Question(
                id="1",
                category="Umum",
                prompt="?",
                options=tuple(AnswerOption(key=k, text=k) for k in "ABC"),
                answer_key="A",
            )

    def test_rejects_bad_answer_key(self, make_question):
        with pytest.raises(ValueError):
            make_question(answer_key="E")

    def test_is_correct(self, make_question):
        q = make_question(answer_key="B")
        assert q.is_correct("B")
        assert not q.is_correct("A")
        assert not q.is_correct(None)
