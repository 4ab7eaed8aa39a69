from sqlalchemy.exc import OperationalError

from conftest import expected_result
from matchday.models import Prediction


def auth(user_id="user-1"):
    return {"X-User-Id": user_id}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_missing_identity_is_unauthorized(client, user):
    response = client.get("/api/test/summary")

    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthorized"


def test_unregistered_identity_is_unauthorized(client, user):
    response = client.get("/api/test/summary", headers=auth("stranger"))

    assert response.status_code == 401


def test_register_me(client):
    response = client.put(
        "/api/users/me", json={"display_name": "Luca"}, headers=auth("new-user")
    )

    assert response.status_code == 200
    assert response.get_json()["id"] == "new-user"

    summary = client.get("/api/test/summary", headers=auth("new-user"))
    assert summary.status_code == 200


def test_unknown_mode_is_not_found(client, user):
    response = client.get("/api/practice/summary", headers=auth())

    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"


def test_catalog_endpoints(client, make_round):
    fixtures = make_round(week=2, count=3)

    weeks = client.get("/api/test/weeks").get_json()
    round_ = client.get("/api/test/fixtures/week/2").get_json()

    assert weeks == {"mode": "test", "weeks": [2]}
    assert [f["id"] for f in round_["fixtures"]] == [f.id for f in fixtures]
    assert round_["fixtures"][0]["result"] == "1"


def test_submit_then_overwrite(client, user, make_round):
    fixture = make_round(week=1, count=1)[0]

    first = client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "x"},
        headers=auth(),
    )
    second = client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "1"},
        headers=auth(),
    )

    assert first.status_code == 201
    assert first.get_json()["choice"] == "X"
    assert second.status_code == 200
    assert second.get_json()["choice"] == "1"
    assert second.get_json()["is_correct"] is True
    assert Prediction.query.count() == 1


def test_submit_invalid_choice(client, user, make_round):
    fixture = make_round(week=1, count=1)[0]

    response = client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "3"},
        headers=auth(),
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert "choice" in body["details"]["fields"]
    assert Prediction.query.count() == 0


def test_submit_unknown_fixture(client, user):
    response = client.post(
        "/api/test/predictions",
        json={"fixture_id": 4242, "choice": "1"},
        headers=auth(),
    )

    assert response.status_code == 400


def test_submit_after_kickoff_is_conflict(client, user, make_round, app):
    fixture = make_round(week=1, count=1, mode="live")[0]

    response = client.post(
        "/api/live/predictions",
        json={"fixture_id": fixture.id, "choice": "1"},
        headers=auth(),
    )

    assert response.status_code == 409
    body = response.get_json()
    assert body["error"] == "conflict"
    assert body["retryable"] is False


def test_prediction_detail(client, user, make_round):
    fixture = make_round(week=1, count=1)[0]

    missing = client.get(f"/api/test/predictions/{fixture.id}", headers=auth())
    client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "SKIP"},
        headers=auth(),
    )
    found = client.get(f"/api/test/predictions/{fixture.id}", headers=auth())

    assert missing.status_code == 404
    assert found.status_code == 200
    assert found.get_json()["choice"] == "SKIP"


def test_weekly_stats_endpoint(client, user, make_round):
    fixtures = make_round(week=1, count=4)
    for i, fixture in enumerate(fixtures[:3]):
        client.post(
            "/api/test/predictions",
            json={"fixture_id": fixture.id, "choice": expected_result(i)},
            headers=auth(),
        )

    response = client.get("/api/test/stats/week/1", headers=auth())

    body = response.get_json()
    assert response.status_code == 200
    assert body["total_predictions"] == 3
    assert body["weekly_percentage"] == 100
    assert len(body["predictions"]) == 4


def test_weekly_stats_week_out_of_range(client, user):
    response = client.get("/api/test/stats/week/39", headers=auth())

    assert response.status_code == 400
    assert response.get_json()["details"]["field"] == "week"


def test_reveal_endpoint(client, user, make_round):
    make_round(week=2, count=2)

    response = client.get("/api/test/reveal/3", headers=auth())

    assert response.status_code == 200
    assert response.get_json()["allowed"] is False
    assert response.get_json()["blocking_week"] == 2


def test_summary_and_reset(client, user, make_round):
    fixture = make_round(week=1, count=1)[0]
    client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": expected_result(0)},
        headers=auth(),
    )

    summary = client.get("/api/test/summary", headers=auth()).get_json()
    reset = client.delete("/api/test/predictions", headers=auth())
    after = client.get("/api/test/summary", headers=auth()).get_json()

    assert summary["total_predictions"] == 1
    assert summary["best_week"]["week"] == 1
    assert reset.get_json() == {"mode": "test", "deleted": 1}
    assert after["total_predictions"] == 0
    assert after["best_week"] is None


def test_storage_failure_is_retryable(client, user, make_round, monkeypatch):
    make_round(week=1, count=1)

    def broken_read(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(Prediction, "get_for_user_week", staticmethod(broken_read))

    response = client.get("/api/test/stats/week/1", headers=auth())

    assert response.status_code == 503
    body = response.get_json()
    assert body["error"] == "dependency_unavailable"
    assert body["retryable"] is True


def test_security_headers(client):
    response = client.get("/api/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_turning_pick_into_skip_is_conflict(client, user, make_round):
    fixture = make_round(week=1, count=1)[0]
    client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "2"},
        headers=auth(),
    )

    response = client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "skip"},
        headers=auth(),
    )

    assert response.status_code == 409
    body = response.get_json()
    assert body["error"] == "conflict"
    assert body["details"]["current_choice"] == "2"


def test_json_api_needs_no_csrf_token(app, client, user, make_round):
    app.config["WTF_CSRF_ENABLED"] = True
    fixture = make_round(week=1, count=1)[0]

    response = client.post(
        "/api/test/predictions",
        json={"fixture_id": fixture.id, "choice": "1"},
        headers=auth(),
    )

    assert response.status_code == 201
    assert "csrf" not in app.extensions
