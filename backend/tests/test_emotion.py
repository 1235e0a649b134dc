"""Tests for valence/arousal scoring and the richer emotion analyses."""

import pytest

from metawave.core.analysis.emotion import (
    AdvancedEmotionScorer,
    BasicEmotionScorer,
    EmotionAnalyzer,
    confidence,
    secondary_emotions,
    select_primary_emotion,
)
from metawave.core.models.analysis import EmotionCategory, EmotionDomain, EmotionTrigger
from metawave.core.models.note import EmotionScore


@pytest.fixture
def basic():
    return BasicEmotionScorer()


@pytest.fixture
def advanced():
    return AdvancedEmotionScorer()


SAMPLES = [
    "",
    "ok",
    "calm quiet evening",
    "URGENT!!! critical panic, everything is terrible and awful",
    "今日はとても嬉しい！",
    "x" * 2000,
]


class TestBasicEmotionScorer:

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_is_neutral(self, basic, text):
        assert basic.analyze(text) == EmotionScore(valence=0.0, arousal=0.0)

    @pytest.mark.parametrize("text", SAMPLES)
    def test_scores_stay_in_range(self, basic, text):
        score = basic.analyze(text)
        assert 0.0 <= score.arousal <= 1.0
        assert -1.0 <= score.valence <= 1.0

    def test_positive_and_negative_text(self, basic):
        assert basic.analyze("I am so happy today").valence > 0
        assert basic.analyze("I feel terrible and sad").valence < 0

    def test_negation_flips_polarity(self, basic):
        assert basic.analyze("I am not happy").valence < 0

    def test_intensifier_strengthens_polarity(self, basic):
        plain = basic.analyze("I am happy").valence
        boosted = basic.analyze("I am extremely happy").valence
        assert boosted > plain > 0

    def test_japanese_polarity(self, basic):
        assert basic.analyze("今日は嬉しい").valence > 0
        assert basic.analyze("仕事が辛い").valence < 0

    def test_arousal_follows_keyword_balance(self, basic):
        calm = basic.analyze("calm quiet evening").arousal
        tense = basic.analyze("urgent critical panic").arousal
        assert calm < 0.25
        assert tense > 0.5

    def test_text_without_arousal_keywords_starts_neutral(self, basic):
        # (0.5 + 4/500) / 2
        assert basic.arousal("plan") == pytest.approx(0.254)

    def test_is_an_emotion_analyzer(self, basic, advanced):
        assert isinstance(basic, EmotionAnalyzer)
        assert isinstance(advanced, EmotionAnalyzer)


class TestMultipleEmotions:

    def test_primary_and_secondary(self, advanced):
        result = advanced.analyze_multiple_emotions("I am so happy and glad")
        assert result.primary_emotion is EmotionCategory.JOY
        assert result.scores[EmotionCategory.JOY] == pytest.approx(2 / 6)
        assert EmotionCategory.JOY not in result.secondary_emotions
        assert len(result.secondary_emotions) == 2

    def test_negated_joy_counts_as_sadness(self, advanced):
        result = advanced.analyze_multiple_emotions("I am not happy")
        assert result.primary_emotion is EmotionCategory.SADNESS
        assert result.scores[EmotionCategory.JOY] == pytest.approx(0.05)

    def test_scores_are_never_negative(self, advanced):
        scores = advanced.emotion_breakdown("not bad, not sad")
        assert all(v >= 0.0 for v in scores.values())

    def test_empty_text_defaults_to_joy(self, advanced):
        result = advanced.analyze_multiple_emotions("")
        assert result.primary_emotion is EmotionCategory.JOY
        assert result.base_score == EmotionScore.neutral()

    def test_select_primary_prefers_first_maximum(self):
        scores = {c: 0.0 for c in EmotionCategory}
        scores[EmotionCategory.ANGER] = 0.5
        scores[EmotionCategory.FEAR] = 0.5
        assert select_primary_emotion(scores) is EmotionCategory.ANGER

    def test_secondary_respects_count(self):
        scores = {c: float(i) for i, c in enumerate(EmotionCategory)}
        assert secondary_emotions(scores, EmotionCategory.DISGUST, 3) == [
            EmotionCategory.SURPRISE,
            EmotionCategory.FEAR,
            EmotionCategory.ANGER,
        ]


class TestIntensity:

    def test_empty_text_has_no_intensity(self, advanced):
        assert advanced.intensity("") == 0.0
        assert advanced.emotion_intensity("") == 0.0

    @pytest.mark.parametrize("text", SAMPLES)
    def test_intensity_is_bounded(self, advanced, text):
        assert 0.0 <= advanced.intensity(text) <= 1.0
        assert 0.0 <= advanced.emotion_intensity(text) <= 1.0

    def test_shouting_is_more_intense(self, advanced):
        assert advanced.intensity("NOOOO!!! REALLY!!!") > advanced.intensity("no, really.")

    def test_confidence(self):
        assert confidence("") == 0.0
        assert confidence("x" * 200 + ".") == 1.0
        assert confidence("x" * 50) == pytest.approx(0.35)


class TestContext:

    def test_domains_and_triggers(self, advanced):
        context = advanced.analyze_context("Meeting with my boss about the project deadline")
        assert context.domains == [EmotionDomain.WORK]
        assert context.triggers == [EmotionTrigger.DEADLINE, EmotionTrigger.SOCIAL_EVENT]

    def test_defaults_to_general(self, advanced):
        context = advanced.analyze_context("hello there")
        assert context.domains == [EmotionDomain.GENERAL]
        assert context.triggers == []


class TestEmotionalShift:

    @pytest.mark.parametrize("text", ["", "I am so happy today!", "  \n I am sad \n  "])
    def test_single_line_has_no_shift(self, advanced, text):
        assert advanced.detect_emotional_shift(text) is None

    def test_unchanged_tone_has_no_shift(self, advanced):
        assert advanced.detect_emotional_shift("Good day.\nGood day.") is None

    def test_detects_downturn(self, advanced):
        text = "I am so happy and excited today!\nEverything is terrible and awful, I hate it."
        shift = advanced.detect_emotional_shift(text)
        assert shift is not None
        assert shift.valence_shift < -0.2
        assert not shift.is_positive
        assert shift.magnitude > 0
        assert shift.from_score.valence > 0 > shift.to_score.valence


class TestDetailedAnalysis:

    def test_detailed_analysis(self, advanced):
        text = "I am so happy today! " * 6
        detailed = advanced.analyze_detailed(text)
        assert detailed.base_score == advanced.analyze(text)
        assert detailed.emotions[EmotionCategory.JOY] > 0
        assert detailed.confidence == 1.0
        assert 0.0 <= detailed.intensity <= 1.0
