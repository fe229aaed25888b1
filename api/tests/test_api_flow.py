import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from roommate_match.config import RL_INTEREST_CREATE_LIMIT, RL_WINDOW_SECONDS
from roommate_match.main import create_app
from roommate_match.services.rate_limit import RateDecision
from roommate_match.store import InMemoryStore


@pytest.fixture
def client():
    app = create_app(store=InMemoryStore(), seed_demo_data=False)
    with TestClient(app) as c:
        yield c


def _create(client, email, **overrides):
    body = {
        "email": email,
        "first_name": "Pat",
        "last_name": "Doe",
        "age": 27,
        "bio": None,
        "location": "New York, NY",
        "budget_min": 800,
        "budget_max": 1200,
        "preferred_gender": None,
        "lifestyle_preferences": None,
        "profile_image_url": None,
    }
    body.update(overrides)
    res = client.post("/profiles", json=body)
    assert res.status_code == 201, res.text
    return res.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_profile_create_get_and_update(client):
    created = _create(
        client,
        "pat@example.com",
        lifestyle_preferences='{"smoking": false, "socialLevel": "medium"}',
    )
    assert created["lifestyle_preferences"] == {
        "smoking": False,
        "pets": None,
        "cleanliness": None,
        "quietness": None,
        "socialLevel": "medium",
    }

    fetched = client.get(f"/profiles/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["email"] == "pat@example.com"

    patched = client.patch(f"/profiles/{created['id']}", json={"bio": "Night owl", "age": 28})
    assert patched.status_code == 200
    assert patched.json()["bio"] == "Night owl"
    assert patched.json()["age"] == 28

    bad_budget = client.patch(f"/profiles/{created['id']}", json={"budget_max": 500})
    assert bad_budget.status_code == 422
    assert bad_budget.json()["error"] == "validation_error"


def test_profile_errors(client):
    assert client.get("/profiles/77").status_code == 404
    assert client.get("/profiles/77").json()["error"] == "not_found"
    assert client.patch("/profiles/77", json={"age": 30}).status_code == 404

    res = client.post(
        "/profiles",
        json={
            "email": "x@example.com",
            "first_name": "X",
            "last_name": "Y",
            "age": 30,
            "location": "NY",
            "budget_min": 1000,
            "budget_max": 900,
        },
    )
    assert res.status_code == 422

    _create(client, "dup@example.com")
    dup = client.post(
        "/profiles",
        json={
            "email": "dup@example.com",
            "first_name": "D",
            "last_name": "U",
            "age": 30,
            "location": "NY",
            "budget_min": 100,
            "budget_max": 200,
        },
    )
    assert dup.status_code == 422
    assert dup.json()["error"] == "validation_error"


def test_browse_filters_and_excludes_viewer(client):
    me = _create(client, "me@example.com")
    near = _create(client, "near@example.com", location="Brooklyn, NY", age=22, budget_min=700, budget_max=1000)
    far = _create(client, "far@example.com", location="Denver, CO", age=45)

    res = client.get("/profiles", headers={"X-Actor-User-Id": str(me["id"])})
    assert [p["id"] for p in res.json()] == [near["id"], far["id"]]

    res = client.get("/profiles", params={"location": "BROOKLYN", "max_age": 30}, headers={"X-Actor-User-Id": str(me["id"])})
    assert [p["id"] for p in res.json()] == [near["id"]]

    bad = client.get("/profiles", params={"min_age": 10})
    assert bad.status_code == 422
    assert bad.json()["error"] == "validation_error"

    bad_actor = client.get("/profiles", headers={"X-Actor-User-Id": "abc"})
    assert bad_actor.status_code == 400


def test_interest_to_match_flow(client):
    one = _create(client, "one@example.com", budget_min=800, budget_max=1200)
    two = _create(client, "two@example.com", budget_min=1000, budget_max=1500)

    res = client.post("/interests", json={"target_id": one["id"], "message": "hi"}, headers={"X-Actor-User-Id": str(two["id"])})
    assert res.status_code == 201, res.text
    interest = res.json()
    assert interest["status"] == "pending"

    received = client.get(f"/users/{one['id']}/interests", params={"direction": "received"}).json()
    assert [i["id"] for i in received] == [interest["id"]]
    assert received[0]["counterpart"]["id"] == two["id"]

    wrong = client.post(
        f"/interests/{interest['id']}/respond",
        json={"status": "accepted"},
        headers={"X-Actor-User-Id": str(two["id"])},
    )
    assert wrong.status_code == 403
    assert wrong.json()["error"] == "unauthorized"

    res = client.post(
        f"/interests/{interest['id']}/respond",
        json={"status": "accepted"},
        headers={"X-Actor-User-Id": str(one["id"])},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["interest"]["status"] == "accepted"
    assert (body["match"]["user1_id"], body["match"]["user2_id"]) == (one["id"], two["id"])

    again = client.post(
        f"/interests/{interest['id']}/respond",
        json={"status": "accepted"},
        headers={"X-Actor-User-Id": str(one["id"])},
    )
    assert again.status_code == 409
    assert again.json()["error"] == "invalid_state"

    mine = client.get(f"/users/{one['id']}/matches").json()
    theirs = client.get(f"/users/{two['id']}/matches").json()
    assert mine[0]["id"] == theirs[0]["id"] == body["match"]["id"]
    assert mine[0]["matched_user"]["id"] == two["id"]
    assert theirs[0]["matched_user"]["id"] == one["id"]


def test_interest_errors(client):
    one = _create(client, "one@example.com")
    two = _create(client, "two@example.com")
    headers = {"X-Actor-User-Id": str(one["id"])}

    assert client.post("/interests", json={"target_id": one["id"]}, headers=headers).json()["error"] == "self_interest"
    assert client.post("/interests", json={"target_id": 999}, headers=headers).status_code == 404
    assert client.post("/interests", json={"target_id": two["id"]}).status_code == 400
    assert client.post("/interests", json={"target_id": two["id"], "message": "y" * 1001}, headers=headers).status_code == 422

    assert client.post("/interests", json={"target_id": two["id"]}, headers=headers).status_code == 201
    dup = client.post("/interests", json={"target_id": two["id"]}, headers=headers)
    assert dup.status_code == 409
    assert dup.json()["error"] == "duplicate_interest"

    assert client.post("/interests/999/respond", json={"status": "accepted"}, headers=headers).status_code == 404
    assert client.post("/interests/1/respond", json={"status": "maybe"}, headers=headers).status_code == 422
    assert client.get("/users/999/interests").status_code == 404
    assert client.get("/users/999/matches").status_code == 404
    assert client.get(f"/users/{one['id']}/interests", params={"direction": "sideways"}).status_code == 422


def test_interest_create_is_rate_limited(client, monkeypatch):
    one = _create(client, "one@example.com")
    two = _create(client, "two@example.com")
    monkeypatch.setattr(
        client.app.state.rate_limiter,
        "hit",
        lambda key, limit, window_seconds: RateDecision(allowed=False, retry_after_seconds=7),
    )
    res = client.post("/interests", json={"target_id": two["id"]}, headers={"X-Actor-User-Id": str(one["id"])})
    assert res.status_code == 429
    assert res.headers["Retry-After"] == "7"


def test_rate_limit_counters_belong_to_each_app():
    busy_app = create_app(store=InMemoryStore(), seed_demo_data=False)
    quiet_app = create_app(store=InMemoryStore(), seed_demo_data=False)
    assert busy_app.state.rate_limiter is not quiet_app.state.rate_limiter

    with TestClient(busy_app) as busy, TestClient(quiet_app) as quiet:
        statuses = {}
        for name, c in (("busy", busy), ("quiet", quiet)):
            one = _create(c, "one@example.com")
            two = _create(c, "two@example.com")
            if name == "busy":
                key = f"interest_create:actor:{one['id']}"
                for _ in range(RL_INTEREST_CREATE_LIMIT):
                    busy_app.state.rate_limiter.hit(key, RL_INTEREST_CREATE_LIMIT, RL_WINDOW_SECONDS)
            res = c.post("/interests", json={"target_id": two["id"]}, headers={"X-Actor-User-Id": str(one["id"])})
            statuses[name] = res.status_code

    assert statuses == {"busy": 429, "quiet": 201}
