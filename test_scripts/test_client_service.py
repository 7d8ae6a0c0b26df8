# Tests for ClientService: enrolment, access codes, SSDB notes, schedule updates
from datetime import datetime, timedelta, timezone

import pytest

from fasttrack.config import settings
from fasttrack.db.models.client import Client
from fasttrack.services.access_service import ClientAccessDenied, find_client_by_code
from fasttrack.services.client_service import ClientService
from fasttrack.services.population_store import StaleWriteError
from fasttrack.services.scoring import UnknownClientError

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def guru(make_associate):
    return make_associate()


@pytest.fixture()
def service(db_session):
    return ClientService(db_session)


def test_create_client_is_ranked_immediately(service, guru, make_client):
    make_client(associate=guru, on_time_completed=1, on_time_total=1, quality_scores=[90], rank=1)

    created = service.create_client(guru, name="  New Co  ", country_code="gb", program_champion="Ana")

    assert created.name == "New Co"
    assert created.country_code == "GB"
    assert created.status == "STARTING_SOON"
    assert created.current_sprint_name == settings.DEFAULT_FIRST_SPRINT_NAME
    assert created.access_code.startswith(settings.CLIENT_ACCESS_CODE_PREFIX)
    assert created.rank == 2
    assert created.previous_rank is None
    assert [a.action for a in service.recent_activity(guru)] == ["Client created"]


def test_create_client_requires_name(service, guru):
    with pytest.raises(ValueError):
        service.create_client(guru, name="   ")


def test_access_codes_are_unique(service, guru):
    a = service.create_client(guru, name="A")
    b = service.create_client(guru, name="B")
    assert a.access_code != b.access_code


def test_regenerate_access_code(service, guru, make_client):
    c = make_client(associate=guru, access_code="CLIENTOLD")

    updated = service.regenerate_access_code(guru, c.id)

    assert updated.access_code != "CLIENTOLD"
    assert find_client_by_code(service.db, "CLIENTOLD") is None
    assert find_client_by_code(service.db, updated.access_code).id == c.id


def test_deactivate_client_keeps_rank_but_blocks_login(service, guru, make_client):
    c = make_client(associate=guru, access_code="CLIENTLIVE", rank=3)

    updated = service.deactivate_client(guru, c.id)

    assert updated.access_code == settings.DEACTIVATED_ACCESS_CODE
    assert updated.rank == 3
    assert find_client_by_code(service.db, settings.DEACTIVATED_ACCESS_CODE) is None


def test_mutations_check_ownership(service, make_associate, make_client):
    owner = make_associate(name="Owner", access_code="ASSOC_OWNER")
    other = make_associate(name="Other", access_code="ASSOC_OTHER")
    c = make_client(associate=owner)

    with pytest.raises(ClientAccessDenied):
        service.regenerate_access_code(other, c.id)
    with pytest.raises(ClientAccessDenied):
        service.update_progress(other, c.id, is_paused=True)
    with pytest.raises(UnknownClientError):
        service.deactivate_client(owner, 9999)


def test_save_ssdb_insight_trims_and_logs(service, guru, make_client):
    c = make_client(associate=guru)

    insight = service.save_ssdb_insight(guru, c.id, start_insight="  Daily standups ", stop_insight="")

    assert insight.start_insight == "Daily standups"
    assert insight.stop_insight is None
    assert insight.created_by == guru.id
    assert service.latest_insight(c).id == insight.id
    assert service.recent_activity(guru)[0].action == "SSDB insights updated"


def test_save_ssdb_insight_requires_one_field(service, guru, make_client):
    c = make_client(associate=guru)
    with pytest.raises(ValueError, match="at least one insight"):
        service.save_ssdb_insight(guru, c.id, start_insight=" ", stop_insight=None, do_better_insight="")


def test_save_ssdb_insight_enforces_length(service, guru, make_client):
    c = make_client(associate=guru)
    with pytest.raises(ValueError, match="do_better_insight"):
        service.save_ssdb_insight(guru, c.id, do_better_insight="x" * (settings.SSDB_MAX_CHARS + 1))


def test_latest_insight_is_most_recent(service, guru, make_client):
    c = make_client(associate=guru)
    service.save_ssdb_insight(guru, c.id, start_insight="first")
    second = service.save_ssdb_insight(guru, c.id, start_insight="second")

    assert service.latest_insight(c).id == second.id


def test_update_progress_marks_delayed_after_deadline(service, guru, make_client):
    c = make_client(associate=guru, completed_sprints=[1], on_time_completed=1, on_time_total=1, quality_scores=[70])

    updated = service.update_progress(guru, c.id, sprint_deadline=NOW - timedelta(days=2), current_sprint_number=2, now=NOW)

    assert updated.status == "DELAYED"
    assert updated.current_sprint_number == 2


def test_update_progress_on_time_before_deadline(service, guru, make_client):
    c = make_client(associate=guru, completed_sprints=[1], on_time_completed=1, on_time_total=1, quality_scores=[70])

    updated = service.update_progress(guru, c.id, sprint_deadline=NOW + timedelta(days=2), now=NOW)

    assert updated.status == "ON_TIME"


def test_update_progress_paused_and_starting(service, guru, make_client):
    fresh = make_client(associate=guru, status="ON_TIME")
    busy = make_client(associate=guru, completed_sprints=[1, 2], on_time_completed=2, on_time_total=2, quality_scores=[70, 70])

    assert service.update_progress(guru, fresh.id, week_number=2, now=NOW).status == "STARTING_SOON"
    assert service.update_progress(guru, busy.id, is_paused=True, now=NOW).status == "PROGRESS_MEETING"
    assert service.update_progress(guru, busy.id, is_paused=False, now=NOW).status == "ON_TIME"


def test_update_progress_can_clear_deadline(service, guru, make_client):
    c = make_client(associate=guru, completed_sprints=[1], sprint_deadline=NOW - timedelta(days=1))

    updated = service.update_progress(guru, c.id, sprint_deadline=None, now=NOW)

    assert updated.sprint_deadline is None
    assert updated.status == "ON_TIME"


def test_update_progress_keeps_graduated(service, guru, make_client):
    c = make_client(associate=guru, status="GRADUATED", completed_sprints=list(range(1, 31)))

    updated = service.update_progress(guru, c.id, sprint_deadline=NOW - timedelta(days=5), now=NOW)

    assert updated.status == "GRADUATED"


def test_analytics_and_ordering(service, guru, make_associate, make_client):
    other = make_associate(name="Other", access_code="ASSOC_OTHER")
    make_client(associate=guru, status="ON_TIME", quality_scores=[80], rank=2)
    make_client(associate=guru, status="DELAYED", quality_scores=[60, 70], rank=1)
    make_client(associate=guru, status="GRADUATED", quality_scores=[91], rank=None)
    make_client(associate=other, status="ON_TIME", quality_scores=[10], rank=3)

    clients = service.clients_for_associate(guru)
    a = service.analytics(clients)

    assert [c.rank for c in clients] == [1, 2, None]
    assert a.total_clients == 3
    assert (a.on_time_clients, a.delayed_clients, a.graduated_clients) == (1, 1, 1)
    assert a.average_quality == 75  # (80 + 60 + 70 + 91) / 4 = 75.25
    assert service.total_clients() == 4
    assert [c.rank for c in service.leaderboard()] == [1, 2, 3, None]


def test_recent_activity_is_limited_and_newest_first(service, guru, make_client):
    c = make_client(associate=guru)
    for week in range(1, 5):
        service.update_progress(guru, c.id, week_number=week, now=NOW)

    recent = service.recent_activity(guru, limit=2)

    assert len(recent) == 2
    assert recent[0].id > recent[1].id


def test_created_client_row_survives_in_database(db_session, service, guru):
    created = service.create_client(guru, name="Persisted")
    db_session.expire_all()
    assert db_session.get(Client, created.id).name == "Persisted"


class _AlwaysStaleSubmissions:
    def recompute_all(self):
        raise StaleWriteError(expected_version=0)


def test_create_client_survives_lost_recompute(db_session, guru):
    service = ClientService(db_session, submissions=_AlwaysStaleSubmissions())

    created = service.create_client(guru, name="Pending Rank")

    assert created.id is not None
    assert created.rank is None
    db_session.expire_all()
    assert db_session.get(Client, created.id).name == "Pending Rank"
    assert service.total_clients() == 1
