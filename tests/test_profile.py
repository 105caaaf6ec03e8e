from tests.conftest import AUTH_HEADERS, USER_ID


def test_profile_defaults_for_new_user(client):
    response = client.get("/api/profile", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "email": "student@example.com",
        "plan": "free",
        "front_bg_url": None,
        "back_bg_url": None,
    }


def test_profile_reports_premium_plan(client, store):
    store.profiles[USER_ID] = {"id": USER_ID, "plan": "premium", "front_bg_url": "https://img/front.jpg"}

    body = client.get("/api/profile", headers=AUTH_HEADERS).json()

    assert body["plan"] == "premium"
    assert body["front_bg_url"] == "https://img/front.jpg"


def test_update_profile_trims_and_clears(client, store):
    store.profiles[USER_ID] = {"id": USER_ID, "plan": "premium", "back_bg_url": "https://img/old.jpg"}

    response = client.put(
        "/api/profile",
        json={"front_bg_url": "  https://img/front.jpg  ", "back_bg_url": "   "},
        headers=AUTH_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["front_bg_url"] == "https://img/front.jpg"
    assert response.json()["back_bg_url"] is None
    assert store.profiles[USER_ID] == {
        "id": USER_ID,
        "plan": "premium",
        "front_bg_url": "https://img/front.jpg",
        "back_bg_url": None,
    }


def test_update_profile_creates_row(client, store):
    client.put("/api/profile", json={"front_bg_url": "https://img/a.png"}, headers=AUTH_HEADERS)

    assert store.profiles[USER_ID]["front_bg_url"] == "https://img/a.png"
    assert store.profiles[USER_ID]["back_bg_url"] is None


def test_update_profile_failure(client, store):
    store.fail_writes = True

    response = client.put("/api/profile", json={"front_bg_url": "https://img/a.png"}, headers=AUTH_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to save settings."}


def test_profile_requires_token(client):
    assert client.get("/api/profile").status_code == 401
    assert client.put("/api/profile", json={}).status_code == 401
