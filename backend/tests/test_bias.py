"""Tests for the corpus-level bias signals."""

from datetime import timedelta

import pytest

from metawave.core.analysis.bias import BiasEvaluator, emotion_consistency, population_variance
from metawave.core.models.analysis import BiasSignal
from metawave.core.models.note import Modality


@pytest.fixture
def evaluator():
    return BiasEvaluator()


class TestGating:

    def test_fewer_than_three_notes_score_zero(self, evaluator, make_note):
        notes = [make_note("Everyone always agrees, I already invested so much") for _ in range(2)]
        assert evaluator.evaluate(notes) == {signal: 0.0 for signal in BiasSignal}

    def test_availability_needs_five_notes(self, evaluator, make_note):
        notes = [make_note("Lately it was fine") for _ in range(4)]
        assert evaluator.evaluate(notes)[BiasSignal.AVAILABILITY] == 0.0

        notes.append(make_note("Lately it was fine"))
        assert evaluator.evaluate(notes)[BiasSignal.AVAILABILITY] == pytest.approx(0.4)

    def test_blank_notes_do_not_count(self, evaluator, make_note):
        notes = [make_note("") for _ in range(5)] + [make_note("Everyone always agrees") for _ in range(2)]
        assert evaluator.evaluate(notes)[BiasSignal.CONFIRMATION] == 0.0

    def test_voice_notes_do_not_count(self, evaluator, make_note):
        notes = [make_note("Everyone always agrees", modality=Modality.VOICE) for _ in range(3)]
        notes += [make_note("Everyone always agrees") for _ in range(2)]
        assert evaluator.evaluate(notes)[BiasSignal.CONFIRMATION] == 0.0

    def test_voice_notes_count_when_enabled(self, make_note):
        notes = [make_note("Everyone always agrees", modality=Modality.VOICE) for _ in range(3)]
        signals = BiasEvaluator(include_voice=True).evaluate(notes)
        assert signals[BiasSignal.CONFIRMATION] == pytest.approx(0.6)

    def test_reports_every_signal(self, evaluator):
        assert set(evaluator.evaluate([])) == set(BiasSignal)


class TestSignals:

    def test_repeated_extreme_words_raise_confirmation(self, evaluator, make_note):
        text = "I always think this way. Everyone agrees with me. This is absolutely true."
        notes = [make_note(text, age=timedelta(minutes=30 * i)) for i in range(20)]

        signals = evaluator.evaluate(notes)

        assert signals[BiasSignal.CONFIRMATION] > 0
        # always + everyone, no contrastive words, no attached scores
        assert signals[BiasSignal.CONFIRMATION] == pytest.approx(0.6)

    def test_consistent_emotions_raise_confirmation(self, evaluator, make_note):
        notes = [make_note("Lunch was nice today", valence=0.5) for _ in range(3)]
        assert evaluator.confirmation_bias(notes) == pytest.approx(0.5)

    def test_identical_first_numbers_raise_anchoring(self, evaluator, make_note):
        notes = [
            make_note("I paid 100 for it"),
            make_note("It cost 100 again"),
            make_note("About 100 today"),
        ]
        assert evaluator.anchoring_bias(notes) == pytest.approx(0.4)

    def test_scattered_numbers_do_not_anchor(self, evaluator, make_note):
        notes = [make_note("I paid 10"), make_note("It cost 500"), make_note("About 90")]
        assert evaluator.anchoring_bias(notes) == pytest.approx(0.0)

    def test_loss_aversion_counts_negative_scores(self, evaluator, make_note):
        notes = [make_note("I don't want to lose this", valence=-0.5) for _ in range(3)]
        assert evaluator.loss_aversion(notes) == pytest.approx(0.7)

    def test_sunk_cost_is_clamped(self, evaluator, make_note):
        notes = [make_note("I already invested so much time, I have to continue") for _ in range(3)]
        assert evaluator.sunk_cost(notes) == 1.0

    def test_japanese_phrases(self, evaluator, make_note):
        notes = [make_note("すでに時間とお金を投資した") for _ in range(3)]
        assert evaluator.sunk_cost(notes) > 0

    def test_all_signals_are_bounded(self, evaluator, make_note):
        text = "Recently I think everyone always fails, but I already invested money. Compared to 5 first."
        notes = [make_note(text, valence=-0.9) for _ in range(6)]
        for value in evaluator.evaluate(notes).values():
            assert 0.0 <= value <= 1.0

    def test_evaluation_is_repeatable(self, evaluator, make_note):
        notes = [make_note(f"I always worry about work {i}", valence=-0.4) for i in range(6)]
        assert evaluator.evaluate(notes) == evaluator.evaluate(notes)


class TestHelpers:

    def test_emotion_consistency_ignores_near_zero(self):
        assert emotion_consistency([0.5, 0.6, 0.0, -0.05]) == pytest.approx(0.5)
        assert emotion_consistency([0.5]) == 0.0

    def test_population_variance(self):
        assert population_variance([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(4.0)
        assert population_variance([3]) == 0.0
