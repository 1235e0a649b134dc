"""Tests for hourly, weekly and daily emotion patterns."""

from datetime import date, timedelta, timezone

import pytest

from metawave.core.analysis.patterns import PatternAnalyzer, category_for, dominant_emotion
from metawave.core.models.analysis import EmotionCategory
from metawave.core.models.note import EmotionScore, Modality

# The fixed clock is Sunday 2026-03-01 12:00 UTC


@pytest.fixture
def analyzer():
    return PatternAnalyzer(tz=timezone.utc, trend_days=3)


class TestDominantEmotion:

    @pytest.mark.parametrize(
        ("valence", "arousal", "expected"),
        [
            (0.5, 0.9, EmotionCategory.JOY),
            (0.5, 0.1, EmotionCategory.JOY),
            (-0.5, 0.8, EmotionCategory.ANGER),
            (-0.5, 0.2, EmotionCategory.SADNESS),
            (0.0, 0.8, EmotionCategory.SURPRISE),
            (0.0, 0.1, EmotionCategory.DISGUST),
            (0.0, 0.4, None),
            (0.3, 0.5, None),
            (-0.3, 0.5, None),
        ],
    )
    def test_category_for(self, valence, arousal, expected):
        assert category_for(EmotionScore(valence=valence, arousal=arousal)) is expected

    def test_most_frequent_category_wins(self, make_note):
        notes = [
            make_note("a", valence=-0.6, arousal=0.1),
            make_note("b", valence=-0.7, arousal=0.2),
            make_note("c", valence=0.8),
        ]
        assert dominant_emotion(notes) is EmotionCategory.SADNESS

    def test_ties_go_to_the_earlier_category(self, make_note):
        notes = [make_note("a", valence=-0.6, arousal=0.1), make_note("b", valence=0.8)]
        assert dominant_emotion(notes) is EmotionCategory.JOY

    def test_unscored_or_unmapped_notes_have_none(self, make_note):
        assert dominant_emotion([make_note("a")]) is None
        assert dominant_emotion([make_note("a", valence=0.0, arousal=0.4)]) is None
        assert dominant_emotion([]) is None


class TestHourlyAndWeekly:

    def test_hourly_buckets(self, analyzer, make_note):
        notes = [
            make_note("noon", valence=0.4, arousal=0.6),
            make_note("noon, unscored"),
            make_note("morning", age=timedelta(hours=3), valence=-0.2, arousal=0.2),
        ]

        hourly = analyzer.hourly_patterns(notes)

        assert [p.hour for p in hourly] == list(range(24))
        assert hourly[12].note_count == 2
        assert hourly[12].average_valence == pytest.approx(0.4)
        assert hourly[12].average_arousal == pytest.approx(0.6)
        assert hourly[9].note_count == 1
        assert hourly[9].time_label == "09:00"
        assert (hourly[0].note_count, hourly[0].average_valence) == (0, 0.0)

    def test_hours_follow_the_configured_zone(self, make_note):
        tokyo = PatternAnalyzer(tz=timezone(timedelta(hours=9)))
        hourly = tokyo.hourly_patterns([make_note("noon UTC")])
        assert hourly[21].note_count == 1

    def test_weekly_buckets_use_iso_weekdays(self, analyzer, make_note):
        notes = [
            make_note("sunday", valence=0.5),
            make_note("saturday", age=timedelta(days=1), valence=-0.5),
            make_note("no timestamp", created_at=None),
        ]

        weekly = analyzer.weekly_patterns(notes)

        assert [p.weekday for p in weekly] == [1, 2, 3, 4, 5, 6, 7]
        assert weekly[6].note_count == 1
        assert weekly[6].day_label == "Sun"
        assert weekly[5].average_valence == pytest.approx(-0.5)
        assert sum(p.note_count for p in weekly) == 2


class TestTrends:

    def test_one_entry_per_day_through_today(self, analyzer, make_note, now):
        notes = [
            make_note("angry yesterday", age=timedelta(days=1), valence=-0.5, arousal=0.8),
            make_note("too old", age=timedelta(days=10), valence=0.9),
            make_note("undated", created_at=None, valence=0.9),
        ]

        trends = analyzer.emotion_trends(notes, now=now)

        assert [t.day for t in trends] == [
            date(2026, 2, 26), date(2026, 2, 27), date(2026, 2, 28), date(2026, 3, 1),
        ]
        assert [t.note_count for t in trends] == [0, 0, 1, 0]
        assert trends[2].dominant_emotion is EmotionCategory.ANGER
        assert trends[2].average_arousal == pytest.approx(0.8)
        assert trends[0].dominant_emotion is None

    def test_window_length_is_configurable(self, make_note, now):
        assert len(PatternAnalyzer(trend_days=30).emotion_trends([], now=now)) == 31
        assert len(PatternAnalyzer().emotion_trends([], now=now, days=7)) == 8


class TestSummary:

    def test_most_active_hour_and_day(self, analyzer, make_note):
        notes = [
            make_note("a", valence=0.2, arousal=0.4),
            make_note("b", valence=0.4, arousal=0.6),
            make_note("c", age=timedelta(days=1, hours=3)),
        ]

        summary = analyzer.summary(notes)

        assert summary.total_notes == 3
        assert summary.average_valence == pytest.approx(0.3)
        assert summary.average_arousal == pytest.approx(0.5)
        assert (summary.most_active_hour, summary.most_active_day) == (12, 7)
        assert summary.most_active_hour_label == "12:00"
        assert summary.most_active_day_label == "Sun"

    def test_ties_pick_the_earliest_slot(self, analyzer, make_note):
        notes = [make_note("a"), make_note("b", age=timedelta(days=1, hours=3))]
        summary = analyzer.summary(notes)
        assert (summary.most_active_hour, summary.most_active_day) == (9, 6)

    def test_empty_collection(self, analyzer):
        summary = analyzer.summary([])
        assert summary.total_notes == 0
        assert summary.most_active_hour is None
        assert summary.most_active_day_label is None


class TestReport:

    def test_blank_notes_are_left_out(self, analyzer, make_note, now):
        notes = [make_note("hello", valence=0.5), make_note("   "), make_note("memo", modality=Modality.VOICE)]

        report = analyzer.analyze(notes, now=now)

        assert report.summary.total_notes == 2
        assert report.hourly[12].note_count == 2
        assert report.trends[-1].note_count == 2
        assert len(report.weekly) == 7
