"""Keyword tables used by the analyzers.

Tables ship as YAML files under ``data/``. A deployment can extend them without
code changes by pointing ``APP_LEXICON_DIR`` at a directory holding files with
the same names: lists are appended, mappings are merged key by key.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import Field

from metawave.config import settings
from metawave.core.models.base import AppBaseModel
from metawave.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=AppBaseModel)


class ArousalTable(AppBaseModel):
    high: list[str]
    low: list[str]


class NegationTable(AppBaseModel):
    positive: list[str] = Field(default_factory=list)
    negative: list[str] = Field(default_factory=list)


class EmotionLexicon(AppBaseModel):
    arousal: ArousalTable
    categories: dict[str, list[str]]
    negations: NegationTable = Field(default_factory=NegationTable)
    intensity_keywords: list[str] = Field(default_factory=list)
    emphasis_keywords: list[str] = Field(default_factory=list)
    domains: dict[str, list[str]] = Field(default_factory=dict)
    triggers: dict[str, list[str]] = Field(default_factory=dict)


class SentimentLexicon(AppBaseModel):
    positive: dict[str, float]
    negative: dict[str, float]
    negators: list[str] = Field(default_factory=list)
    intensifiers: dict[str, float] = Field(default_factory=dict)

    def polarity(self) -> dict[str, float]:
        merged = {k.lower(): v for k, v in self.positive.items()}
        merged.update({k.lower(): v for k, v in self.negative.items()})
        return merged


class BiasLexicon(AppBaseModel):
    """Phrase groups per bias signal, keyed by signal value then group name."""

    confirmation: dict[str, list[str]]
    availability: dict[str, list[str]]
    anchoring: dict[str, list[str]]
    loss_aversion: dict[str, list[str]]
    sunk_cost: dict[str, list[str]]


class PruningLexicon(AppBaseModel):
    low_value: list[str] = Field(default_factory=list)


class PredictionLexicon(AppBaseModel):
    stopwords: list[str] = Field(default_factory=list)
    absolutes: list[str] = Field(default_factory=list)


class TaggerSuffixes(AppBaseModel):
    verb: list[str] = Field(default_factory=list)
    adjective: list[str] = Field(default_factory=list)
    adverb: list[str] = Field(default_factory=list)


class TaggerLexicon(AppBaseModel):
    function_words: list[str] = Field(default_factory=list)
    auxiliaries: list[str] = Field(default_factory=list)
    verbs: list[str] = Field(default_factory=list)
    adjectives: list[str] = Field(default_factory=list)
    suffixes: TaggerSuffixes = Field(default_factory=TaggerSuffixes)


def merge_tables(base: Any, extra: Any) -> Any:
    """Deep-merge ``extra`` into ``base``: lists extend (deduplicated), mappings merge."""
    if isinstance(base, dict) and isinstance(extra, dict):
        merged = dict(base)
        for key, value in extra.items():
            merged[key] = merge_tables(base[key], value) if key in base else value
        return merged
    if isinstance(base, list) and isinstance(extra, list):
        return base + [item for item in extra if item not in base]
    return extra


def _read_packaged(name: str) -> dict[str, Any]:
    source = resources.files("metawave.core.analysis").joinpath("data", f"{name}.yaml")
    return yaml.safe_load(source.read_text(encoding="utf-8")) or {}


def _read_override(name: str, directory: str | None) -> dict[str, Any]:
    if not directory:
        return {}
    path = Path(directory).expanduser() / f"{name}.yaml"
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    logger.info("Extending %s keyword table from %s", name, path)
    return data


@lru_cache(maxsize=32)
def _load_raw(name: str, directory: str | None) -> dict[str, Any]:
    return merge_tables(_read_packaged(name), _read_override(name, directory))


def load_table(name: str, model: type[T], directory: str | None = None) -> T:
    """Load and validate one keyword table.

    ``directory`` defaults to ``settings.lexicon_dir``.
    """
    directory = directory if directory is not None else settings.lexicon_dir
    return model.model_validate(_load_raw(name, directory))


def emotion_lexicon(directory: str | None = None) -> EmotionLexicon:
    return load_table("emotion", EmotionLexicon, directory)


def sentiment_lexicon(directory: str | None = None) -> SentimentLexicon:
    return load_table("sentiment", SentimentLexicon, directory)


def bias_lexicon(directory: str | None = None) -> BiasLexicon:
    return load_table("bias", BiasLexicon, directory)


def pruning_lexicon(directory: str | None = None) -> PruningLexicon:
    return load_table("pruning", PruningLexicon, directory)


def tagger_lexicon(directory: str | None = None) -> TaggerLexicon:
    return load_table("tagger", TaggerLexicon, directory)


def prediction_lexicon(directory: str | None = None) -> PredictionLexicon:
    return load_table("prediction", PredictionLexicon, directory)
