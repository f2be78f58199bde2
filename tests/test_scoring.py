"""
Unit tests for core/readiness/scoring.py

Tests cover:
- Raw score / max possible accumulation over active questions
- Percentage rounding (half up) and clamping
- Tier thresholds
- Fallback denominator when no question is active
- Order independence and idempotence
"""
import itertools

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.readiness.models import QuestionSpec, ScoringTable, Tier
from core.readiness.scoring import (
    FALLBACK_MAX_POSSIBLE,
    score,
    tier_for,
    to_percentage,
)
from core.readiness.table import default_table


@pytest.fixture
def small_table():
    return ScoringTable(questions=(
        QuestionSpec(id="q2_owner", answers={"CTO / CIO": 7, "CEO / Founder": 10}),
        QuestionSpec(id="q7_budget", answers={"Limited capacity": 0, "Yes, fully ready": 10}),
    ))


class TestScenarios:
    """Worked examples with a two-question table"""

    def test_denominator_uses_each_question_max(self, small_table):
        """CTO (7) + fully ready (10): 17 of max(7,10) + max(0,10) = 20, 85% Leader"""
        result = score({"q2_owner": "CTO / CIO", "q7_budget": "Yes, fully ready"}, small_table)

        assert result.raw_score == 17
        assert result.max_possible == 20
        assert result.percentage == 85
        assert result.tier == Tier.LEADER

    def test_top_answers_give_100(self, small_table):
        """CEO (10) + fully ready (10): 20 of 20 = 100% Leader"""
        result = score({"q2_owner": "CEO / Founder", "q7_budget": "Yes, fully ready"}, small_table)

        assert result.raw_score == 20
        assert result.max_possible == 20
        assert result.percentage == 100
        assert result.tier == Tier.LEADER

    def test_unmatched_label_still_counts_toward_max(self, small_table):
        """Active question with unknown label adds 0 raw but its max to the denominator"""
        result = score({"q2_owner": "No clear owner yet"}, small_table)

        assert result.raw_score == 0
        assert result.max_possible == 10
        assert result.percentage == 0
        assert result.tier == Tier.EARLY
        assert result.unmatched == ("q2_owner",)
        assert result.answered == ()

    def test_partial_score(self, small_table):
        """CEO (10) + limited (0): 10 of 20 = 50% Strategic"""
        result = score({"q2_owner": "CEO / Founder", "q7_budget": "Limited capacity"}, small_table)

        assert result.raw_score == 10
        assert result.max_possible == 20
        assert result.percentage == 50
        assert result.tier == Tier.STRATEGIC
        assert result.answered == ("q2_owner", "q7_budget")


class TestActiveQuestions:
    """Only questions the form presented count toward the denominator"""

    def test_empty_submission_uses_fallback(self, small_table):
        result = score({}, small_table)

        assert result.raw_score == 0
        assert result.max_possible == FALLBACK_MAX_POSSIBLE
        assert result.percentage == 0
        assert result.tier == Tier.EARLY

    def test_unknown_question_ids_ignored(self, small_table):
        """Ids missing from the table neither score nor count"""
        result = score({"q99_extra": "anything"}, small_table)

        assert result.max_possible == FALLBACK_MAX_POSSIBLE
        assert result.raw_score == 0

    def test_present_but_empty_answer_is_active(self, small_table):
        """A presented question left blank still counts toward the max"""
        result = score({"q2_owner": "CEO / Founder", "q7_budget": ""}, small_table)

        assert result.raw_score == 10
        assert result.max_possible == 20
        assert result.percentage == 50
        assert result.unmatched == ()

    def test_none_answer_is_active(self, small_table):
        result = score({"q2_owner": None, "q7_budget": "Yes, fully ready"}, small_table)

        assert result.raw_score == 10
        assert result.max_possible == 20

    def test_explicit_active_set_overrides_submission_keys(self, small_table):
        """Caller-provided active set: unanswered q7 still counts, extra answers ignored"""
        result = score({"q2_owner": "CEO / Founder"}, small_table, active=["q2_owner", "q7_budget"])
        assert result.raw_score == 10
        assert result.max_possible == 20

        result = score(
            {"q2_owner": "CEO / Founder", "q7_budget": "Yes, fully ready"},
            small_table,
            active=["q7_budget"],
        )
        assert result.raw_score == 10
        assert result.max_possible == 10
        assert result.percentage == 100

    def test_default_table_with_live_form_questions(self):
        """The live form shows q2, q3, q6, q7; optional questions stay out of the max"""
        submission = {
            "q2_owner": "CEO / Founder",
            "q3_data": "High-quality & Governed",
            "q6_capability": "Advanced AI/ML Systems",
            "q7_budget": "Yes, fully ready",
        }
        result = score(submission, default_table())

        assert result.raw_score == 40
        assert result.max_possible == 40
        assert result.percentage == 100
        assert result.tier == Tier.LEADER


class TestSynonyms:
    """Alternate phrasings resolve to the canonical point value"""

    def test_synonym_label_scores_like_canonical(self):
        table = default_table()
        canonical = score({"q3_data": "Fragmented / Siloed"}, table)
        synonym = score({"q3_data": "Fragmented or siloed data"}, table)

        assert canonical.raw_score == synonym.raw_score == 3
        assert synonym.answered == ("q3_data",)

    def test_normalization_ignores_case_and_whitespace(self):
        table = default_table()
        result = score({"q2_owner": "  board /   executive  LEADERSHIP "}, table)

        assert result.raw_score == 8
        assert result.max_possible == 10
        assert result.percentage == 80


class TestPercentage:
    """Rounding and clamping"""

    @pytest.mark.parametrize("raw,max_possible,expected", [
        (1, 8, 13),    # 12.5 rounds up
        (5, 8, 63),    # 62.5 rounds up
        (1, 3, 33),
        (2, 3, 67),
        (0, 17, 0),
        (17, 17, 100),
    ])
    def test_round_half_up(self, raw, max_possible, expected):
        assert to_percentage(raw, max_possible) == expected

    def test_clamped_to_100(self):
        """Inconsistent totals never exceed 100"""
        assert to_percentage(50, 10) == 100

    def test_zero_max_uses_fallback(self):
        assert to_percentage(20, 0) == 50


class TestTiers:
    """Tier thresholds, lower bound inclusive"""

    @pytest.mark.parametrize("percentage,tier", [
        (0, Tier.EARLY),
        (39, Tier.EARLY),
        (40, Tier.STRATEGIC),
        (74, Tier.STRATEGIC),
        (75, Tier.LEADER),
        (100, Tier.LEADER),
    ])
    def test_boundaries(self, percentage, tier):
        assert tier_for(percentage) == tier


class TestProperties:
    """Invariants over the built-in table"""

    def test_percentage_always_bounded(self):
        table = default_table()
        for question in table.questions:
            for label in list(question.answers) + ["not a real answer", ""]:
                result = score({question.id: label}, table)
                assert 0 <= result.percentage <= 100

    def test_max_answers_give_100(self):
        table = default_table()
        submission = {
            q.id: max(q.answers, key=q.answers.get) for q in table.questions
        }
        result = score(submission, table)

        assert result.raw_score == result.max_possible
        assert result.percentage == 100
        assert result.tier == Tier.LEADER

    def test_order_independent(self):
        table = default_table()
        submission = {
            "q2_owner": "Department head",
            "q3_data": "Very Limited",
            "q6_capability": "Basic Automation/ChatGPT",
            "q7_budget": "Partial budget/skills",
        }
        expected = score(submission, table)

        for perm in itertools.permutations(table.questions[:4]):
            reordered = ScoringTable(questions=tuple(perm) + table.questions[4:])
            result = score(submission, reordered)
            assert result.raw_score == expected.raw_score
            assert result.max_possible == expected.max_possible

        reversed_submission = dict(reversed(list(submission.items())))
        assert score(reversed_submission, table) == expected

    def test_idempotent_and_inputs_untouched(self, small_table):
        submission = {"q2_owner": "CTO / CIO"}
        before = dict(submission)

        first = score(submission, small_table)
        second = score(submission, small_table)

        assert first == second
        assert submission == before


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
