"""Speaker reconciliation: submitted speakers -> Person records.

All speakers of the run are merged before any Person decision is made, since
a later submission may carry data an earlier one omitted for the same
external speaker id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.errors import EmailExistsError
from cfpsync.domain.labels import normalize_email
from cfpsync.domain.model import (
    Person,
    SocialLink,
    SocialNetwork,
    SpeakerProfile,
    SubmittedSpeaker,
    person_search_text,
)

from .batch import ClaimEmail, PutPerson, ReleaseEmail
from .identity import EmailIdentityIndex

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from .identity import IdentityIndex

    from cfpsync.domain.model import Conference, Submission
    from cfpsync.domain.ports.unit_of_work import ConferenceRepositories

    from .batch import BatchCommitCoordinator, Mutation
    from .report import ImportReport

log = getLogger(__name__)

MISSING_EMAIL_REASON = "no usable email"

_NETWORK_MARKERS: tuple[tuple[tuple[str, ...], SocialNetwork], ...] = (
    (("linkedin.com",), SocialNetwork.LINKEDIN),
    (("github.com",), SocialNetwork.GITHUB),
    (("x.com", "twitter.com"), SocialNetwork.X),
    (("bsky.app",), SocialNetwork.BLUESKY),
    (("mastodon",), SocialNetwork.MASTODON),
)


@dataclass(slots=True)
class SpeakerResolution:
    """Outcome of speaker reconciliation consumed by the session reconciler."""

    person_ids_by_external_id: dict[str, UUID] = field(default_factory=dict[str, "UUID"])

    def resolve(self, external_ids: Iterable[str]) -> list[UUID]:
        """Resolved person ids for ``external_ids`` in order.

        Skipped speakers are left out and a person reached through two
        external ids is listed once.
        """

        resolved: list[UUID] = []
        for external_id in external_ids:
            person_id = self.person_ids_by_external_id.get((external_id or "").strip())
            if person_id is not None and person_id not in resolved:
                resolved.append(person_id)
        return resolved


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def collect_unique_speakers(submissions: Iterable[Submission]) -> dict[str, SubmittedSpeaker]:
    """Merge speakers by external id, first non-empty value winning per field."""

    merged: dict[str, SubmittedSpeaker] = {}
    for submission in submissions:
        for speaker in submission.speakers:
            external_id = (speaker.external_id or "").strip()
            if not external_id:
                continue
            current = merged.get(external_id)
            if current is None:
                merged[external_id] = replace(speaker, external_id=external_id)
            else:
                merged[external_id] = _merge_speaker(current, speaker)
    return merged


def _merge_speaker(first: SubmittedSpeaker, later: SubmittedSpeaker) -> SubmittedSpeaker:
    changes: dict[str, object] = {}
    for item in fields(SubmittedSpeaker):
        if item.name == "external_id":
            continue
        if not getattr(first, item.name) and getattr(later, item.name):
            changes[item.name] = getattr(later, item.name)
    return replace(first, **changes) if changes else first


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def split_name(name: str | None) -> tuple[str, str]:
    tokens = (name or "").split()
    if not tokens:
        return "", ""
    return tokens[0], " ".join(tokens[1:])


def classify_social_link(url: str) -> SocialNetwork:
    value = url.lower()
    for markers, network in _NETWORK_MARKERS:
        if any(marker in value for marker in markers):
            return network
    return SocialNetwork.WEBSITE


def merge_conference_ids(current: Iterable[str], *added: str) -> tuple[str, ...]:
    """Order preserving union of conference ids, blanks dropped."""

    merged: dict[str, None] = {}
    for conference_id in (*current, *added):
        value = conference_id.strip()
        if value:
            merged.setdefault(value, None)
    return tuple(merged)


def map_person(
    speaker: SubmittedSpeaker,
    conference: Conference,
    existing: Person | None = None,
) -> Person:
    """Build the Person a submitted speaker should be stored as.

    Account flags and the preferred language are owned locally and carried
    over from ``existing``. A blank submitted name keeps the stored names.
    """

    first_name, last_name = split_name(speaker.name)
    if not first_name and existing is not None:
        first_name, last_name = existing.first_name, existing.last_name

    email = (speaker.email or "").strip()
    if not email and existing is not None:
        email = existing.email

    previous_ids = existing.speaker.submitted_conference_ids if existing is not None else ()
    profile = SpeakerProfile(
        external_id=speaker.external_id,
        company=speaker.company or "",
        bio=speaker.bio or "",
        reference=speaker.references or "",
        photo_url=speaker.picture or "",
        social_links=tuple(
            SocialLink(network=classify_social_link(url), url=url)
            for url in speaker.social_links
            if url
        ),
        submitted_conference_ids=merge_conference_ids(previous_ids, conference.id),
    )

    if existing is None:
        person = Person(
            email=email,
            first_name=first_name,
            last_name=last_name,
            is_speaker=True,
            preferred_language=conference.primary_language,
            speaker=profile,
        )
    else:
        person = replace(
            existing,
            email=email,
            first_name=first_name,
            last_name=last_name,
            is_speaker=True,
            preferred_language=existing.preferred_language or conference.primary_language,
            speaker=profile,
        )
    person.search = person_search_text(person)
    return person


def same_imported_person(left: Person, right: Person) -> bool:
    return _imported_fields(left) == _imported_fields(right)


def _imported_fields(person: Person) -> tuple[object, ...]:
    return (
        person.first_name,
        person.last_name,
        person.email,
        person.speaker,
        person.preferred_language,
        person.has_account,
        person.is_platform_admin,
        person.is_speaker,
    )


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _RunState:
    """Identity decisions already taken in the current run."""

    index: IdentityIndex
    persons_by_id: dict[UUID, Person] = field(default_factory=dict["UUID", "Person"])
    claimed: dict[str, UUID] = field(default_factory=dict[str, "UUID"])

    def owner_of(self, key: str) -> UUID | None:
        owner_id = self.claimed.get(key)
        if owner_id is not None:
            return owner_id
        return self.index.owner_of(key)


def reconcile_speakers(
    submissions: Sequence[Submission],
    *,
    conference: Conference,
    repositories: ConferenceRepositories,
    batch: BatchCommitCoordinator,
    report: ImportReport,
) -> SpeakerResolution:
    """Resolve every submitted speaker to a Person id, staging the writes needed.

    Raises ``EmailExistsError`` when a speaker's email is owned by a
    different Person than the one it resolves to.
    """

    speakers = collect_unique_speakers(submissions)
    known = _index_by_external_id(repositories.persons.find_by_speaker_external_ids(speakers))
    state = _RunState(index=EmailIdentityIndex(repositories.email_index))
    resolution = SpeakerResolution()

    for external_id, speaker in speakers.items():
        existing = known.get(external_id) or _find_by_email(speaker, state, repositories)

        if existing is not None and existing.id in state.persons_by_id:
            # Second external id for a person settled earlier in this run.
            log.info(
                "Speaker %s resolves to person %s already imported in this run",
                external_id,
                existing.id,
            )
            resolution.person_ids_by_external_id[external_id] = existing.id
            report.speaker_unchanged += 1
            continue

        mapped = map_person(speaker, conference, existing)
        key = mapped.email_key
        if not key:
            log.warning("Skipping speaker %s: %s", external_id, MISSING_EMAIL_REASON)
            report.skip_speaker(external_id, MISSING_EMAIL_REASON)
            continue

        owner_id = state.owner_of(key)
        if owner_id is not None and owner_id != mapped.id:
            raise EmailExistsError(
                f"Email {key!r} of speaker {external_id} already belongs to person {owner_id}",
                key=key,
                owner_id=owner_id,
                claimant_id=mapped.id,
            )

        if existing is not None and same_imported_person(existing, mapped):
            report.speaker_unchanged += 1
            settled = existing
        else:
            batch.stage(*_person_mutations(mapped, existing), label=f"speaker:{external_id}")
            if existing is None:
                report.speaker_added += 1
            else:
                report.speaker_updated += 1
            settled = mapped

        state.claimed[key] = settled.id
        state.persons_by_id[settled.id] = settled
        resolution.person_ids_by_external_id[external_id] = settled.id

    log.info(
        "Speakers: %s added, %s updated, %s unchanged, %s skipped",
        report.speaker_added,
        report.speaker_updated,
        report.speaker_unchanged,
        report.speaker_skipped,
    )
    return resolution


def _index_by_external_id(persons: Iterable[Person]) -> dict[str, Person]:
    indexed: dict[str, Person] = {}
    for person in persons:
        external_id = person.speaker.external_id
        if external_id:
            indexed.setdefault(external_id, person)
    return indexed


def _find_by_email(
    speaker: SubmittedSpeaker,
    state: _RunState,
    repositories: ConferenceRepositories,
) -> Person | None:
    key = normalize_email(speaker.email)
    if not key:
        return None
    owner_id = state.owner_of(key)
    if owner_id is None:
        return None
    return state.persons_by_id.get(owner_id) or repositories.persons.get(owner_id)


def _person_mutations(person: Person, existing: Person | None) -> list[Mutation]:
    mutations: list[Mutation] = [PutPerson(person)]
    if existing is not None and existing.email_key and existing.email_key != person.email_key:
        mutations.append(ReleaseEmail(existing.email_key, existing.id))
    mutations.append(ClaimEmail(person.email, person.id))
    return mutations

