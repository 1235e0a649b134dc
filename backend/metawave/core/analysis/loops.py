"""Thought-loop detection.

Notes are grouped into time windows (a new window starts after a gap longer
than ``max_window``), then clustered greedily inside each window: every
unprocessed note seeds a cluster and absorbs the later notes similar enough to
it. A seed is never revisited, so a note that failed to gather a cluster
cannot join a later one as a member either. Clusters are recomputed from
scratch on every run.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import NAMESPACE_URL, uuid5

from metawave.config import settings
from metawave.core.models.analysis import LoopCluster
from metawave.core.models.note import Modality
from metawave.utils.logging import get_logger

from .lexical import RuleBasedTagger, WordClass, clamp, jaccard, keyword_similarity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from metawave.core.models.note import Note

    from .lexical import LexicalTagger

logger = get_logger(__name__)

DISTANT_PAST = datetime.min.replace(tzinfo=UTC)
CLUSTER_NAMESPACE = uuid5(NAMESPACE_URL, "metawave/loop-cluster")
UNKNOWN_TOPIC = "Unknown Topic"

MIN_LENGTH_RATIO = 0.3
KEYWORD_WEIGHT = 0.4
SEMANTIC_WEIGHT = 0.4
TEMPORAL_WEIGHT = 0.2
SAME_DAY = timedelta(hours=24)
SAME_WEEK = timedelta(days=7)
TOPIC_WORDS = 3
COUNT_SATURATION = 10


class LoopClusterer:
    """Finds recurring, similar notes written close together in time."""

    def __init__(
        self,
        tagger: LexicalTagger | None = None,
        *,
        similarity_threshold: float | None = None,
        min_cluster_size: int | None = None,
        max_window: timedelta | None = None,
        include_voice: bool | None = None,
    ) -> None:
        self._tagger = tagger or RuleBasedTagger()
        self.similarity_threshold = (
            similarity_threshold if similarity_threshold is not None else settings.loop_similarity_threshold
        )
        self.min_cluster_size = min_cluster_size if min_cluster_size is not None else settings.loop_min_cluster_size
        self.max_window = max_window if max_window is not None else timedelta(days=settings.loop_max_window_days)
        self.include_voice = include_voice if include_voice is not None else settings.loop_include_voice

    def cluster(self, notes: Sequence[Note]) -> list[LoopCluster]:
        """Return loop clusters, strongest first."""
        eligible = [n for n in notes if n.has_text and self._eligible_modality(n)]
        if len(eligible) < self.min_cluster_size:
            return []

        clusters: list[LoopCluster] = []
        windows = self.group_by_time_window(eligible)
        for window in windows:
            clusters.extend(self._cluster_window(window))

        logger.info(
            "Loop detection: %d eligible notes, %d windows, %d clusters",
            len(eligible), len(windows), len(clusters),
        )
        # sorted() is stable, so equal strengths keep discovery order
        return sorted(clusters, key=lambda c: c.strength, reverse=True)

    def group_by_time_window(self, notes: Sequence[Note]) -> list[list[Note]]:
        ordered = sorted(notes, key=_timestamp)
        windows: list[list[Note]] = []
        current: list[Note] = []
        last: datetime | None = None

        for note in ordered:
            stamp = _timestamp(note)
            if last is not None and stamp - last > self.max_window:
                if len(current) >= self.min_cluster_size:
                    windows.append(current)
                current = [note]
            else:
                current.append(note)
            last = stamp

        if len(current) >= self.min_cluster_size:
            windows.append(current)
        return windows

    def similarity(self, a: Note, b: Note) -> float:
        """Weighted lexical, semantic and temporal similarity in [0, 1]."""
        shorter, longer = sorted((len(a.text), len(b.text)))
        if longer == 0 or shorter / longer < MIN_LENGTH_RATIO:
            return 0.0

        score = (
            keyword_similarity(a.text, b.text) * KEYWORD_WEIGHT
            + self.semantic_similarity(a.text, b.text) * SEMANTIC_WEIGHT
            + temporal_similarity(a, b) * TEMPORAL_WEIGHT
        )
        return clamp(score)

    def semantic_similarity(self, text1: str, text2: str) -> float:
        nouns = jaccard(
            self._tagger.words_of(text1, WordClass.NOUN),
            self._tagger.words_of(text2, WordClass.NOUN),
        )
        verbs = jaccard(
            self._tagger.words_of(text1, WordClass.VERB),
            self._tagger.words_of(text2, WordClass.VERB),
        )
        return (nouns + verbs) / 2.0

    def extract_topic(self, text: str) -> str | None:
        """First few nouns and adjectives of the text, in their original casing."""
        words = [
            token
            for token, cls in self._tagger.tag(text)
            if cls in (WordClass.NOUN, WordClass.ADJECTIVE) and len(token) > 2
        ]
        return " ".join(words[:TOPIC_WORDS]) or None

    def cluster_strength(self, members: Sequence[Note]) -> float:
        normalized_count = min(len(members) / COUNT_SATURATION, 1.0)
        return clamp(
            normalized_count * 0.4
            + time_concentration(members) * 0.3
            + self.content_consistency(members) * 0.3
        )

    def content_consistency(self, members: Sequence[Note]) -> float:
        pairs = list(itertools.combinations(members, 2))
        if not pairs:
            return 1.0
        return sum(self.similarity(a, b) for a, b in pairs) / len(pairs)

    def _cluster_window(self, window: Sequence[Note]) -> list[LoopCluster]:
        clusters: list[LoopCluster] = []
        processed: set = set()

        for i, seed in enumerate(window):
            if seed.id in processed:
                continue
            processed.add(seed.id)
            members = [seed]

            for candidate in window[i + 1:]:
                if candidate.id in processed:
                    continue
                if self.similarity(seed, candidate) >= self.similarity_threshold:
                    members.append(candidate)
                    processed.add(candidate.id)

            if len(members) >= self.min_cluster_size:
                clusters.append(self._build_cluster(members))

        return clusters

    def _build_cluster(self, members: Sequence[Note]) -> LoopCluster:
        note_ids = [m.id for m in members]
        topic = next(
            (t for t in (self.extract_topic(m.text) for m in members) if t),
            UNKNOWN_TOPIC,
        )
        stamps = [m.created_at for m in members if m.created_at is not None]
        return LoopCluster(
            id=str(uuid5(CLUSTER_NAMESPACE, ",".join(str(i) for i in note_ids))),
            note_ids=note_ids,
            topic=topic,
            strength=self.cluster_strength(members),
            created_at=min(stamps) if stamps else None,
        )

    def _eligible_modality(self, note: Note) -> bool:
        return note.modality is Modality.TEXT or (self.include_voice and note.modality is Modality.VOICE)


def temporal_similarity(a: Note, b: Note) -> float:
    if a.created_at is None or b.created_at is None:
        return 0.0
    gap = abs(a.created_at - b.created_at)
    if gap <= SAME_DAY:
        return 1.0
    if gap <= SAME_WEEK:
        return 0.5
    return 0.0


def time_concentration(members: Sequence[Note]) -> float:
    """How much tighter than one note per day the members were written.

    A zero span (all at the same instant) counts as fully concentrated.
    """
    stamps = sorted(m.created_at for m in members if m.created_at is not None)
    if len(stamps) < 2:
        return 1.0
    span = stamps[-1] - stamps[0]
    if span <= timedelta(0):
        return 1.0
    expected = timedelta(days=1) * len(members)
    return min(1.0, expected / span)


def _timestamp(note: Note) -> datetime:
    return note.created_at or DISTANT_PAST
