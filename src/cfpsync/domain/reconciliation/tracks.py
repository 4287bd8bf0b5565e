"""Track synthesis from submission categories."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.labels import label_key
from cfpsync.domain.model import Track

from .batch import PutTrack

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from cfpsync.domain.model import Submission

    from .batch import BatchCommitCoordinator
    from .report import ImportReport

log = getLogger(__name__)


def collect_categories(submissions: Iterable[Submission]) -> dict[str, str]:
    """Map each category key to the first raw label seen for it."""

    labels: dict[str, str] = {}
    for submission in submissions:
        for category in submission.categories:
            raw = (category or "").strip()
            key = label_key(raw)
            if key and key not in labels:
                labels[key] = raw
    return labels


def synthesize_tracks(
    submissions: Sequence[Submission],
    *,
    conference_id: str,
    existing_tracks: Sequence[Track],
    batch: BatchCommitCoordinator,
    report: ImportReport,
) -> list[Track]:
    """Create or rename tracks for the categories found in ``submissions``.

    Returns the conference's track list after synthesis, in which renamed and
    created tracks replace or extend ``existing_tracks``. Tracks are never
    deleted here.
    """

    tracks = list(existing_tracks)
    position_by_key: dict[str, int] = {}
    for position, track in enumerate(tracks):
        position_by_key.setdefault(label_key(track.name), position)

    for key, raw in collect_categories(submissions).items():
        position = position_by_key.get(key)
        if position is None:
            track = Track(conference_id=conference_id, name=raw)
            tracks.append(track)
            position_by_key[key] = len(tracks) - 1
            batch.stage(PutTrack(track), label=f"track:{raw}")
            report.track_added += 1
            continue

        current = tracks[position]
        if current.name == raw:
            report.track_unchanged += 1
            continue

        log.info("Renaming track %s from %r to %r", current.id, current.name, raw)
        renamed = replace(current, name=raw)
        tracks[position] = renamed
        batch.stage(PutTrack(renamed), label=f"track:{raw}")
        report.track_updated += 1

    return tracks
