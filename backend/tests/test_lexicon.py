"""Tests for the packaged keyword tables and directory overrides."""

import pytest
from pydantic import ValidationError

from metawave.core.analysis.lexicon import (
    BiasLexicon,
    bias_lexicon,
    emotion_lexicon,
    load_table,
    merge_tables,
    prediction_lexicon,
    pruning_lexicon,
    sentiment_lexicon,
    tagger_lexicon,
)
from metawave.core.analysis.pruning import PruningScorer


class TestPackagedTables:

    def test_tables_load(self):
        assert "always" in bias_lexicon().confirmation["extreme"]
        assert set(emotion_lexicon().categories) == {"joy", "sadness", "anger", "fear", "surprise", "disgust"}
        assert sentiment_lexicon().polarity()["happy"] > 0
        assert "no" in pruning_lexicon().low_value
        assert "the" in tagger_lexicon().function_words
        assert "always" in prediction_lexicon().absolutes

    def test_yaml_booleans_stay_strings(self):
        assert "yes" in pruning_lexicon().low_value
        assert "true" in tagger_lexicon().adjectives


class TestOverrides:

    def test_directory_extends_packaged_table(self, tmp_path):
        (tmp_path / "pruning.yaml").write_text("low_value: [lorem, test]\n", encoding="utf-8")

        table = pruning_lexicon(str(tmp_path))

        assert "lorem" in table.low_value
        assert table.low_value.count("test") == 1

    def test_extended_table_changes_scoring(self, tmp_path, make_note, now):
        (tmp_path / "pruning.yaml").write_text("low_value: [lorem]\n", encoding="utf-8")
        scorer = PruningScorer(lexicon=pruning_lexicon(str(tmp_path)))
        note = make_note("lorem ipsum placeholder draft text", tags=["x"])
        assert scorer.value_score(note).value == 0.6

    def test_missing_override_file_is_ignored(self, tmp_path):
        assert pruning_lexicon(str(tmp_path)) == pruning_lexicon()

    def test_invalid_table_is_rejected(self, tmp_path):
        (tmp_path / "bias.yaml").write_text("confirmation: nonsense\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_table("bias", BiasLexicon, str(tmp_path))


class TestMergeTables:

    def test_lists_extend_without_duplicates(self):
        assert merge_tables(["a", "b"], ["b", "c"]) == ["a", "b", "c"]

    def test_mappings_merge_recursively(self):
        base = {"extreme": ["always"], "contrastive": ["but"]}
        extra = {"extreme": ["forever"], "new": ["x"]}
        assert merge_tables(base, extra) == {
            "extreme": ["always", "forever"],
            "contrastive": ["but"],
            "new": ["x"],
        }

    def test_scalars_are_replaced(self):
        assert merge_tables({"happy": 2.7}, {"happy": 3.0}) == {"happy": 3.0}
