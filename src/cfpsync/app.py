"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.adapters.conference_hall import build_conference_hall_fetcher
from cfpsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from cfpsync.config import ConfigurationError, get_conference_hall_config, get_sync_config
from cfpsync.domain.model import (
    CONFERENCE_HALL_TOKEN_SECRET,
    Conference,
    ConferenceSecret,
    Person,
    SessionType,
)
from cfpsync.domain.ports.unit_of_work import ConferenceUnitOfWork
from cfpsync.domain.reconciliation import (
    ImportReport,
    ImportRequest,
    ResetReport,
    import_conference,
    reset_conference_import,
)
from cfpsync.domain.reconciliation import create_person as create_person_record

if TYPE_CHECKING:
    from cfpsync.domain.ports.fetching import SubmissionFetcher

UnitOfWorkFactory = Callable[[], ConferenceUnitOfWork]


log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def import_conference_hall(
    conference_id: str,
    *,
    requester_email: str = "",
    fetcher: SubmissionFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    batch_limit: int | None = None,
) -> ImportReport:
    """Import the Conference Hall submissions of one conference."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_fetcher = fetcher or build_conference_hall_fetcher(get_conference_hall_config())
    effective_limit = batch_limit if batch_limit is not None else get_sync_config().batch_limit
    log.info(
        "Starting Conference Hall import: conference=%s, batch_limit=%s",
        conference_id,
        effective_limit,
    )

    return import_conference(
        ImportRequest(conference_id=conference_id, requester_email=requester_email),
        fetcher=effective_fetcher,
        unit_of_work_factory=effective_uow,
        batch_limit=effective_limit,
    )


def reset_conference_hall_import(
    conference_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    batch_limit: int | None = None,
) -> ResetReport:
    """Delete the sessions and import-only speakers of one conference."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_limit = batch_limit if batch_limit is not None else get_sync_config().batch_limit
    return reset_conference_import(
        conference_id,
        unit_of_work_factory=effective_uow,
        batch_limit=effective_limit,
    )


def configure_conference(
    conference_id: str,
    *,
    name: str,
    conference_hall_name: str,
    token: str | None = None,
    languages: tuple[str, ...] = (),
    session_types: Sequence[SessionType] = (),
    format_mapping: Mapping[str, str] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Conference:
    """Create or update a conference and optionally store its Conference Hall token.

    ``session_types`` replaces the conference's session types when given.
    ``format_mapping`` (session type id -> Conference Hall format label)
    replaces the mapping when not ``None``; every id must name a session type.
    """

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        repositories = uow.repositories
        conference = repositories.conferences.get(conference_id)
        if conference is None:
            conference = Conference(id=conference_id, name=name)
        conference.name = name
        conference.conference_hall_name = conference_hall_name
        if languages:
            conference.languages = languages
        if session_types:
            conference.session_types = _unique_session_types(session_types)
        if format_mapping is not None:
            known = {session_type.id for session_type in conference.session_types}
            unknown = sorted(set(format_mapping) - known)
            if unknown:
                raise ConfigurationError(
                    f"Format mapping names unknown session types: {', '.join(unknown)}"
                )
            conference.session_type_format_mapping = dict(format_mapping)
        repositories.conferences.put(conference)

        if token is not None:
            secret = repositories.secrets.find(conference_id, CONFERENCE_HALL_TOKEN_SECRET)
            if secret is None:
                repositories.secrets.add(
                    ConferenceSecret(
                        conference_id=conference_id,
                        name=CONFERENCE_HALL_TOKEN_SECRET,
                        value=token,
                    )
                )
            else:
                secret.value = token
        uow.commit()

    log.info("Configured conference %s", conference_id)
    return conference


def _unique_session_types(session_types: Sequence[SessionType]) -> tuple[SessionType, ...]:
    ids = [session_type.id for session_type in session_types]
    duplicates = sorted({type_id for type_id in ids if ids.count(type_id) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate session type ids: {', '.join(duplicates)}")
    return tuple(session_types)


def create_person(
    *,
    email: str,
    first_name: str = "",
    last_name: str = "",
    preferred_language: str = "en",
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Person:
    """Create a person guarded by the email identity index."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    return create_person_record(
        Person(
            email=email,
            first_name=first_name,
            last_name=last_name,
            preferred_language=preferred_language,
        ),
        unit_of_work_factory=effective_uow,
    )
