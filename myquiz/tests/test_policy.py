"""
Tests for mode policies and quiz configuration.

Tests:
- Policy table coverage
- Cerdas phase switching
- QuizConfig validation and clamping
"""

import pytest

from ..engine_core.state import Mode, QuizConfig, Session
from ..engine_core.policy import (
    CERDAS_PHASE_ONE_QUOTA,
    POLICIES,
    get_policy,
)
from ..engine_core.reducer import Terminal, resolve_answer, advance


def run_cerdas(bank, config):
    """Play a cerdas bank through, recording (phase, turn_team) before each question."""
    session = Session.create(Mode.CERDAS, len(bank), config)
    seen = []
    while True:
        seen.append((session.cerdas_phase, session.turn_team))
        session = resolve_answer(session, bank[session.current_index], "A")
        outcome = advance(session, config)
        if isinstance(outcome, Terminal):
            return seen, outcome.session
        session = outcome


class TestPolicyTable:
    """Tests for the mode -> policy mapping."""

    def test_every_mode_has_policy(self):
        assert set(POLICIES) == set(Mode)

    @pytest.mark.parametrize("mode", list(Mode))
    def test_policy_matches_mode(self, mode):
        policy = get_policy(mode)
        assert policy.mode == mode
        assert policy.title
        assert policy.description

    def test_only_countdown_is_timed(self):
        timed = [mode for mode, policy in POLICIES.items() if policy.timed]
        assert timed == [Mode.COUNTDOWN]

    def test_only_survival_can_end_early(self):
        spent = Session.create(Mode.SURVIVAL, 3, QuizConfig())._copy_with(lives=0)
        for mode, policy in POLICIES.items():
            session = spent._copy_with(mode=mode)
            assert policy.is_out(session) == (mode == Mode.SURVIVAL)


class TestCerdasPhases:
    """Tests for the two-round cerdas mode."""

    def test_phase_two_after_quota(self, make_bank):
        config = QuizConfig(team_count=2)
        seen, _ = run_cerdas(make_bank(25), config)

        quota_total = CERDAS_PHASE_ONE_QUOTA * 2
        assert [phase for phase, _ in seen[:quota_total]] == [1] * quota_total
        assert [phase for phase, _ in seen[quota_total:]] == [2] * (25 - quota_total)

    def test_rotation_continues_in_phase_two(self, make_bank):
        seen, _ = run_cerdas(make_bank(25), QuizConfig(team_count=2))
        assert [turn for _, turn in seen] == [i % 2 for i in range(25)]

    def test_counts_per_team(self, make_bank):
        config = QuizConfig(team_count=2)
        bank = make_bank(25)
        session = Session.create(Mode.CERDAS, len(bank), config)
        for i in range(CERDAS_PHASE_ONE_QUOTA * 2):
            session = advance(resolve_answer(session, bank[i], "A"), config)

        assert session.cerdas_count_by_team == (10, 10)
        assert session.cerdas_phase == 2

    def test_counts_frozen_in_phase_two(self, make_bank):
        _, final = run_cerdas(make_bank(25), QuizConfig(team_count=2))
        assert final.cerdas_count_by_team == (10, 10)

    def test_three_teams(self, make_bank):
        seen, _ = run_cerdas(make_bank(35), QuizConfig(team_count=3))
        first_phase_two = next(i for i, (phase, _) in enumerate(seen) if phase == 2)
        assert first_phase_two == 30

    def test_short_bank_stays_in_phase_one(self, make_bank):
        """15 questions for 2 teams never fills the quota."""
        seen, final = run_cerdas(make_bank(15), QuizConfig(team_count=2))

        assert all(phase == 1 for phase, _ in seen)
        assert final.cerdas_phase == 1
        assert final.cerdas_count_by_team == (7, 7)

    def test_scores_in_both_phases(self, make_bank):
        bank = make_bank(24)
        config = QuizConfig(team_count=2)
        session = Session.create(Mode.CERDAS, len(bank), config)
        while True:
            q = bank[session.current_index]
            session = resolve_answer(session, q, q.answer_key)
            outcome = advance(session, config)
            if isinstance(outcome, Terminal):
                break
            session = outcome

        assert outcome.session.team_scores == (12, 12)


class TestQuizConfig:
    """Tests for QuizConfig."""

    def test_defaults(self):
        config = QuizConfig()
        assert config.team_count == 2
        assert config.seconds_per_question == 30
        assert config.lives == 1

    @pytest.mark.parametrize("kwargs", [
        {"team_count": 1},
        {"team_count": 9},
        {"seconds_per_question": 4},
        {"seconds_per_question": 121},
        {"lives": 0},
        {"lives": 11},
    ])
    def test_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            QuizConfig(**kwargs)

    def test_bounds_accepted(self):
        QuizConfig(team_count=8, seconds_per_question=5, lives=10)
        QuizConfig(team_count=2, seconds_per_question=120, lives=1)

    def test_clamped(self):
        config = QuizConfig.clamped(team_count=20, seconds_per_question=1, lives=0)
        assert config == QuizConfig(team_count=8, seconds_per_question=5, lives=1)

    def test_clamped_keeps_valid_values(self):
        assert QuizConfig.clamped(3, 45, 4) == QuizConfig(3, 45, 4)


class TestSessionViews:
    """Tests for derived session values."""

    def test_progress(self, make_bank, default_config):
        bank = make_bank(4)
        session = Session.create(Mode.CLASSIC, 4, default_config)
        assert session.progress_percent == 0

        session = resolve_answer(session, bank[0], "A")
        assert session.resolved_count == 1
        assert session.correct_count == 1
        assert session.progress_percent == 25

    def test_empty_session_progress(self, default_config):
        assert Session.create(Mode.CLASSIC, 0, default_config).progress_percent == 0
