"""Tests for the shared text helpers and the rule-based tagger."""

import pytest

from metawave.core.analysis.lexical import (
    RuleBasedTagger,
    WordClass,
    contains_phrase,
    count_occurrences,
    count_phrases,
    first_integer,
    is_latin,
    jaccard,
    keyword_similarity,
    tokens_containing,
    word_tokens,
)


class TestPhraseMatching:

    def test_latin_phrases_respect_word_boundaries(self):
        assert contains_phrase("It was really fun", "really")
        assert not contains_phrase("It was really fun", "all")

    def test_multi_word_phrase_is_case_insensitive(self):
        assert contains_phrase("I Think so.", "i think")

    def test_non_latin_phrases_match_inside_words(self):
        assert contains_phrase("最近忙しい", "最近")

    def test_blank_phrase_never_matches(self):
        assert not contains_phrase("anything", "  ")

    def test_count_phrases_counts_each_phrase_once(self):
        text = "always always everyone"
        assert count_phrases(text, ["always", "everyone", "nobody"]) == 2

    def test_count_occurrences_counts_substrings(self):
        assert count_occurrences("Happy happy unhappy", ["happy"]) == 3

    def test_tokens_containing(self):
        tokens = ["stressful", "calm", "day"]
        assert tokens_containing(tokens, ["stress", "calm"]) == 2


class TestTokenization:

    def test_word_tokens_drop_punctuation_and_digits(self):
        assert word_tokens("Ship it, 2 days late!") == ["Ship", "it", "days", "late"]

    def test_word_tokens_keep_contractions(self):
        assert word_tokens("I don't know") == ["I", "don't", "know"]

    def test_first_integer(self):
        assert first_integer("about 120 yen, maybe 80") == 120
        assert first_integer("no numbers here") is None

    def test_is_latin(self):
        assert is_latin("deadline!")
        assert not is_latin("締切")


class TestSimilarity:

    def test_jaccard_of_empty_sets_is_zero(self):
        assert jaccard(set(), set()) == 0.0

    def test_keyword_similarity(self):
        assert keyword_similarity("a b c", "A B d") == pytest.approx(0.5)


class TestRuleBasedTagger:

    @pytest.fixture
    def tagger(self):
        return RuleBasedTagger()

    def test_separates_nouns_and_verbs(self, tagger):
        tags = dict(tagger.tag("The project deadline is stressing me out"))
        assert tags["project"] is WordClass.NOUN
        assert tags["deadline"] is WordClass.NOUN
        assert tags["stressing"] is WordClass.VERB
        assert tags["The"] is WordClass.OTHER

    def test_pronoun_before_word_makes_it_a_verb(self, tagger):
        tags = dict(tagger.tag("we groceries"))
        assert tags["groceries"] is WordClass.VERB

    def test_adjectives_and_adverbs(self, tagger):
        tags = dict(tagger.tag("sunny weather arrived quickly"))
        assert tags["sunny"] is WordClass.ADJECTIVE
        assert tags["quickly"] is WordClass.ADVERB

    def test_non_latin_words_are_nouns(self, tagger):
        assert tagger.tag("締切") == [("締切", WordClass.NOUN)]

    def test_words_of_lowercases_and_skips_short_tokens(self, tagger):
        assert tagger.words_of("The Project and the ox", WordClass.NOUN) == {"project"}
