# HTTP tests for the leaderboard API (FastAPI TestClient over in-memory SQLite)
import pytest

from fasttrack.config import settings

DEADLINE = "2026-07-01T17:00:00+00:00"
BEFORE = "2026-07-01T09:00:00+00:00"
AFTER = "2026-07-02T09:00:00+00:00"


@pytest.fixture()
def guru(make_associate):
    return make_associate(name="Guru One", access_code="ASSOC001")


def headers(code):
    return {"X-Access-Code": code}


def submission(client_id, sprint, quality=80, submitted=BEFORE, **kw):
    body = {
        "client_id": client_id,
        "sprint_number": sprint,
        "quality_score": quality,
        "deadline": DEADLINE,
        "submission_timestamp": submitted,
    }
    body.update(kw)
    return body


def test_health(api_client):
    assert api_client.get("/health").json() == {"ok": True}


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

def test_login_roles(api_client, guru, make_client):
    make_client(associate=guru, access_code="CLIENT123")

    admin = api_client.post("/auth/login", json={"access_code": settings.ADMIN_ACCESS_CODES[0]})
    client = api_client.post("/auth/login", json={"access_code": " CLIENT123 "})
    associate = api_client.post("/auth/login", json={"access_code": "ASSOC001"})

    assert admin.json() == {"role": "admin", "redirect": "/admin"}
    assert client.json() == {"role": "client", "redirect": "/client?code=CLIENT123"}
    assert associate.json() == {"role": "associate", "redirect": "/associate?code=ASSOC001"}


def test_login_rejects_unknown_and_deactivated(api_client, make_client):
    make_client(access_code=settings.DEACTIVATED_ACCESS_CODE)

    assert api_client.post("/auth/login", json={"access_code": "NOPE"}).status_code == 401
    assert api_client.post("/auth/login", json={"access_code": settings.DEACTIVATED_ACCESS_CODE}).status_code == 401
    assert api_client.post("/auth/login", json={"access_code": "   "}).status_code == 401


# ---------------------------------------------------------------------------
# Client view
# ---------------------------------------------------------------------------

def test_client_me_shows_metrics_and_guru(api_client, guru, make_client):
    make_client(associate=guru, access_code="CLIENTTOP", on_time_completed=2, on_time_total=2, quality_scores=[90, 90], rank=1)
    me = make_client(
        associate=guru,
        access_code="CLIENTME",
        name="Me Ltd",
        on_time_completed=1,
        on_time_total=2,
        quality_scores=[70, 80],
        completed_sprints=[2, 1],
        rank=2,
        previous_rank=1,
    )

    resp = api_client.get("/client/me", headers=headers("CLIENTME"))
    assert resp.status_code == 200
    body = resp.json()

    assert body["id"] == me.id
    assert body["current_guru"] == "Guru One"
    assert body["total_clients"] == 2
    assert body["completed_sprints"] == [1, 2]
    assert body["days_ahead_behind"] is None
    assert body["latest_insight"] is None
    m = body["metrics"]
    assert (m["speed_score"], m["quality_average"]) == (50, 75)
    assert m["combined_score"] == pytest.approx(60.0)
    assert m["overall_score"] == 60
    assert m["quality_trend"] == "UNKNOWN"
    assert (m["rank"], m["previous_rank"], m["rank_change"]) == (2, 1, "down")


def test_client_me_requires_code(api_client):
    assert api_client.get("/client/me").status_code == 401
    assert api_client.get("/client/me", headers=headers("ASSOC001")).status_code == 401


def test_leaderboard_for_clients_and_associates(api_client, guru, make_client):
    make_client(associate=guru, access_code="CLIENTA", rank=2)
    make_client(associate=guru, access_code="CLIENTB", rank=1)
    make_client(associate=guru, access_code="CLIENTC", rank=None)

    for code in ("CLIENTA", "ASSOC001"):
        resp = api_client.get("/leaderboard", headers=headers(code))
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_clients"] == 3
        assert [c["metrics"]["rank"] for c in body["clients"]] == [1, 2, None]
        assert body["clients"][2]["metrics"]["rank_change"] == "new"
        assert "access_code" not in body["clients"][0]

    assert api_client.get("/leaderboard", headers=headers("WHO")).status_code == 401


# ---------------------------------------------------------------------------
# Associate dashboard and management
# ---------------------------------------------------------------------------

def test_associate_dashboard(api_client, guru, make_associate, make_client):
    other = make_associate(name="Other", access_code="ASSOC002")
    make_client(associate=guru, status="DELAYED", quality_scores=[60], rank=2)
    make_client(associate=guru, status="ON_TIME", quality_scores=[80], rank=1)
    make_client(associate=other, rank=3)

    resp = api_client.get("/associate/me", headers=headers("ASSOC001"))
    assert resp.status_code == 200
    body = resp.json()

    assert body["associate"] == {"id": guru.id, "name": "Guru One"}
    assert [c["metrics"]["rank"] for c in body["clients"]] == [1, 2]
    assert all("access_code" in c for c in body["clients"])
    assert body["analytics"] == {
        "total_clients": 2,
        "on_time_clients": 1,
        "delayed_clients": 1,
        "graduated_clients": 0,
        "average_quality": 70,
    }
    assert body["activity"] == []


def test_associate_routes_reject_client_codes(api_client, make_client):
    make_client(access_code="CLIENTX")
    assert api_client.get("/associate/me", headers=headers("CLIENTX")).status_code == 401


def test_create_client_then_it_appears_ranked(api_client, guru):
    resp = api_client.post(
        "/associate/clients",
        json={"name": "Fresh Start", "country_code": "ke"},
        headers=headers("ASSOC001"),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "STARTING_SOON"
    assert body["country_code"] == "KE"
    assert body["current_sprint_number"] == 1
    assert body["metrics"]["rank"] == 1
    assert body["access_code"].startswith("CLIENT")

    login = api_client.post("/auth/login", json={"access_code": body["access_code"]})
    assert login.json()["role"] == "client"

    dash = api_client.get("/associate/me", headers=headers("ASSOC001")).json()
    assert [a["action"] for a in dash["activity"]] == ["Client created"]


def test_create_client_validates_name(api_client, guru):
    assert api_client.post("/associate/clients", json={"name": ""}, headers=headers("ASSOC001")).status_code == 422
    assert api_client.post("/associate/clients", json={"name": "   "}, headers=headers("ASSOC001")).status_code == 400


def test_regenerate_and_deactivate(api_client, guru, make_client):
    c = make_client(associate=guru, access_code="CLIENTOLD")

    regen = api_client.post(f"/associate/clients/{c.id}/access-code", headers=headers("ASSOC001"))
    assert regen.status_code == 200
    new_code = regen.json()["access_code"]
    assert new_code != "CLIENTOLD"
    assert api_client.get("/client/me", headers=headers("CLIENTOLD")).status_code == 401
    assert api_client.get("/client/me", headers=headers(new_code)).status_code == 200

    deact = api_client.post(f"/associate/clients/{c.id}/deactivate", headers=headers("ASSOC001"))
    assert deact.json()["access_code"] == settings.DEACTIVATED_ACCESS_CODE
    assert api_client.get("/client/me", headers=headers(new_code)).status_code == 401


def test_management_of_foreign_or_missing_client(api_client, guru, make_associate, make_client):
    other = make_associate(name="Other", access_code="ASSOC002")
    c = make_client(associate=other)

    assert api_client.post(f"/associate/clients/{c.id}/deactivate", headers=headers("ASSOC001")).status_code == 403
    assert api_client.post("/associate/clients/9999/deactivate", headers=headers("ASSOC001")).status_code == 404


def test_ssdb_insight_flow(api_client, guru, make_client):
    c = make_client(associate=guru, access_code="CLIENTSSDB")

    empty = api_client.post(f"/associate/clients/{c.id}/ssdb", json={"start_insight": "  "}, headers=headers("ASSOC001"))
    assert empty.status_code == 400

    saved = api_client.post(
        f"/associate/clients/{c.id}/ssdb",
        json={"start_insight": "Ship weekly", "do_better_insight": "Talk to users"},
        headers=headers("ASSOC001"),
    )
    assert saved.status_code == 201
    assert saved.json()["start_insight"] == "Ship weekly"

    me = api_client.get("/client/me", headers=headers("CLIENTSSDB")).json()
    assert me["latest_insight"]["do_better_insight"] == "Talk to users"


def test_progress_update(api_client, guru, make_client):
    c = make_client(associate=guru, completed_sprints=[1], on_time_completed=1, on_time_total=1, quality_scores=[70])

    resp = api_client.patch(
        f"/associate/clients/{c.id}/progress",
        json={"sprint_deadline": "2000-01-01T00:00:00+00:00", "current_sprint_number": 2},
        headers=headers("ASSOC001"),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "DELAYED"

    paused = api_client.patch(f"/associate/clients/{c.id}/progress", json={"is_paused": True}, headers=headers("ASSOC001"))
    assert paused.json()["status"] == "PROGRESS_MEETING"
    assert paused.json()["is_paused"] is True

    bad = api_client.patch(f"/associate/clients/{c.id}/progress", json={"current_sprint_number": 31}, headers=headers("ASSOC001"))
    assert bad.status_code == 422


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------

def test_submit_reranks_and_reports(api_client, guru, make_client):
    leader = make_client(associate=guru, access_code="CLIENTLEAD", on_time_completed=1, on_time_total=1, quality_scores=[70], completed_sprints=[1], rank=1)
    chaser = make_client(associate=guru, access_code="CLIENTCHASE", on_time_completed=1, on_time_total=1, quality_scores=[65], completed_sprints=[1], rank=2)

    resp = api_client.post("/associate/submissions", json=submission(chaser.id, 2, quality=100), headers=headers("ASSOC001"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["client_id"] == chaser.id
    assert body["is_on_time"] is True
    assert (body["metrics"]["rank"], body["metrics"]["previous_rank"]) == (1, 2)
    assert body["metrics"]["rank_change"] == "up"

    board = api_client.get("/leaderboard", headers=headers("CLIENTLEAD")).json()
    assert [c["id"] for c in board["clients"]] == [chaser.id, leader.id]


def test_submit_late_and_override(api_client, guru, make_client):
    c = make_client(associate=guru)

    late = api_client.post("/associate/submissions", json=submission(c.id, 1, submitted=AFTER), headers=headers("ASSOC001"))
    assert late.json()["is_on_time"] is False
    assert late.json()["metrics"]["speed_score"] == 0

    forced = api_client.post(
        "/associate/submissions",
        json=submission(c.id, 2, submitted=AFTER, manual_on_time_override=True),
        headers=headers("ASSOC001"),
    )
    assert forced.json()["is_on_time"] is True
    assert forced.json()["metrics"]["speed_score"] == 50


@pytest.mark.parametrize(
    "kwargs,status",
    [
        ({"sprint": 1}, 409),
        ({"sprint": 0}, 400),
        ({"sprint": 2, "quality": 101}, 400),
    ],
)
def test_submit_error_statuses(api_client, guru, make_client, kwargs, status):
    c = make_client(associate=guru, completed_sprints=[1], on_time_completed=1, on_time_total=1, quality_scores=[80])

    resp = api_client.post("/associate/submissions", json=submission(c.id, **kwargs), headers=headers("ASSOC001"))

    assert resp.status_code == status


def test_submit_unknown_or_foreign_client(api_client, guru, make_associate, make_client):
    other = make_associate(name="Other", access_code="ASSOC002")
    foreign = make_client(associate=other)

    assert api_client.post("/associate/submissions", json=submission(9999, 1), headers=headers("ASSOC001")).status_code == 404
    assert api_client.post("/associate/submissions", json=submission(foreign.id, 1), headers=headers("ASSOC001")).status_code == 403


def test_graduation_via_api(api_client, guru, make_client):
    c = make_client(
        associate=guru,
        access_code="CLIENTGRAD",
        on_time_completed=29,
        on_time_total=29,
        quality_scores=[85] * 29,
        completed_sprints=list(range(1, 30)),
    )

    resp = api_client.post("/associate/submissions", json=submission(c.id, 30), headers=headers("ASSOC001"))

    assert resp.json()["status"] == "GRADUATED"
    me = api_client.get("/client/me", headers=headers("CLIENTGRAD")).json()
    assert me["status"] == "GRADUATED"
    assert me["graduation_date"] is not None


def test_preview_predicts_without_saving(api_client, guru, make_client):
    make_client(associate=guru, on_time_completed=2, on_time_total=2, quality_scores=[88, 88], completed_sprints=[1, 2], rank=1)
    c = make_client(associate=guru, access_code="CLIENTPREV", on_time_completed=2, on_time_total=2, quality_scores=[85, 85], completed_sprints=[1, 2], rank=2)

    resp = api_client.post("/associate/submissions/preview", json=submission(c.id, 3, quality=100), headers=headers("ASSOC001"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["predicted_rank"] == 1
    assert body["quality_average"] == 90

    me = api_client.get("/client/me", headers=headers("CLIENTPREV")).json()
    assert me["quality_scores"] == [85, 85]
    assert me["metrics"]["rank"] == 2

    dup = api_client.post("/associate/submissions/preview", json=submission(c.id, 2), headers=headers("ASSOC001"))
    assert dup.status_code == 409


def test_preview_exact_tie_keeps_incumbent_first(api_client, guru, make_client):
    make_client(associate=guru, on_time_completed=2, on_time_total=2, quality_scores=[90, 90], completed_sprints=[1, 2], rank=1)
    c = make_client(associate=guru, on_time_completed=2, on_time_total=2, quality_scores=[85, 85], completed_sprints=[1, 2], rank=2)

    # Challenger lands on exactly the leader's combined score (96)
    resp = api_client.post("/associate/submissions/preview", json=submission(c.id, 3, quality=100), headers=headers("ASSOC001"))

    assert resp.status_code == 200
    assert resp.json()["combined_score"] == pytest.approx(96.0)
    assert resp.json()["predicted_rank"] == 2
