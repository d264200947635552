"""Tests for event domain router."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from neighborwatch.user.models import User

VIEWPORT = {"northEast": "-34.55,-58.35", "southWest": "-34.65,-58.45"}
THEFT = {
    "type": "THEFT",
    "description": "Bike stolen at the corner",
    "latitude": -34.6050,
    "longitude": -58.3800,
}


def _create_event(client: TestClient, **overrides) -> dict:
    response = client.post("/events", json={**THEFT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_event(client: TestClient, test_user: User):
    data = _create_event(client, isUrgent=True)

    assert data["authorId"] == str(test_user.id)
    assert data["status"] == "IN_PROGRESS"
    assert data["isUrgent"] is True
    assert data["closedAt"] is None


def test_create_event_notifies_area_members(
    client: TestClient,
    login_as,
    test_user: User,
    other_user: User,
    mock_push: MagicMock,
):
    area = login_as(other_user).post(
        "/areas",
        json={"name": "Centro", "latitude": -34.6037, "longitude": -58.3816, "radius": 5000},
    ).json()
    login_as(test_user).post(f"/areas/{area['id']}/join")

    _create_event(login_as(other_user))

    recipients = mock_push.notify.call_args[0][1]
    assert [u.id for u in recipients] == [test_user.id]

    summary = login_as(test_user).get("/areas/mine").json()[0]
    assert summary["newEventsCount"] == 1


def test_create_event_rejects_empty_description(client: TestClient):
    response = client.post("/events", json={**THEFT, "description": ""})

    assert response.status_code == 422


def test_create_tracking_event_without_device(client: TestClient):
    response = client.post("/events", json={**THEFT, "realTimeTracking": True})

    assert response.status_code == 400


def test_list_events_in_viewport(
    client: TestClient, login_as, test_user: User, other_user: User
):
    public = _create_event(login_as(other_user))
    _create_event(login_as(other_user), isPublic=False)
    _create_event(login_as(other_user), latitude=-31.42, longitude=-64.18)

    response = login_as(test_user).get("/events", params=VIEWPORT)

    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == [public["id"]]


def test_list_events_filters(client: TestClient):
    fire = _create_event(client, type="FIRE")
    theft = _create_event(client)
    client.patch(f"/events/{theft['id']}", json={"status": "CLOSED"})

    response = client.get("/events", params={**VIEWPORT, "status": "IN_PROGRESS"})
    assert [e["id"] for e in response.json()] == [fire["id"]]

    response = client.get("/events", params={**VIEWPORT, "type": "THEFT"})
    assert [e["id"] for e in response.json()] == [theft["id"]]


def test_list_events_sort_by_type(client: TestClient):
    theft = _create_event(client)
    accident = _create_event(client, type="ACCIDENT")

    response = client.get(
        "/events", params={**VIEWPORT, "sortBy": "type", "sortOrder": "asc"}
    )

    assert [e["id"] for e in response.json()] == [accident["id"], theft["id"]]


def test_list_events_requires_viewport(client: TestClient):
    response = client.get("/events")

    assert response.status_code == 422


def test_list_events_bad_corner(client: TestClient):
    response = client.get(
        "/events", params={"northEast": "north", "southWest": "-34.65,-58.45"}
    )

    assert response.status_code == 400
    assert response.json()["type"] == "validation_error"


def test_list_events_bad_sort(client: TestClient):
    response = client.get("/events", params={**VIEWPORT, "sortBy": "distance"})

    assert response.status_code == 422


def test_get_private_event_of_someone_else(
    client: TestClient, login_as, test_user: User, other_user: User
):
    event = _create_event(login_as(other_user), isPublic=False)

    response = login_as(test_user).get(f"/events/{event['id']}")

    assert response.status_code == 404
    assert response.json()["type"] == "event_not_found"


def test_list_my_events(
    client: TestClient, login_as, test_user: User, other_user: User
):
    mine = _create_event(client, isPublic=False)
    _create_event(login_as(other_user))

    response = login_as(test_user).get("/events/mine")

    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == [mine["id"]]


def test_close_then_reopen(client: TestClient):
    event = _create_event(client)

    response = client.patch(f"/events/{event['id']}", json={"status": "CLOSED"})
    assert response.status_code == 200
    assert response.json()["status"] == "CLOSED"
    assert response.json()["closedAt"] is not None

    response = client.patch(f"/events/{event['id']}", json={"status": "IN_PROGRESS"})
    assert response.status_code == 409
    assert response.json()["type"] == "invalid_event_transition"


def test_update_by_non_author(
    client: TestClient, login_as, test_user: User, other_user: User
):
    event = _create_event(login_as(other_user))

    response = login_as(test_user).patch(
        f"/events/{event['id']}", json={"status": "CLOSED"}
    )

    assert response.status_code == 403
    assert response.json()["type"] == "event_author_required"


def test_delete_event(client: TestClient):
    event = _create_event(client)

    response = client.delete(f"/events/{event['id']}")
    assert response.status_code == 204

    response = client.get(f"/events/{event['id']}")
    assert response.status_code == 404


def test_event_track(client: TestClient):
    device = client.post("/devices", json={"name": "Bike tracker"}).json()
    event = _create_event(client, deviceId=device["id"], realTimeTracking=True)
    client.post(
        f"/devices/{device['id']}/positions",
        json={"latitude": -34.61, "longitude": -58.39},
    )

    response = client.get(f"/events/{event['id']}/track")

    assert response.status_code == 200
    [point] = response.json()
    assert point["latitude"] == -34.61
    assert point["timestamp"].endswith("Z")


def test_public_region_without_account(
    client: TestClient, unauthenticated_client: TestClient
):
    public = _create_event(client)
    _create_event(client, isPublic=False, description="Private note")
    _create_event(client, latitude=-31.4, longitude=-64.2, description="Far away")
    fire = _create_event(client, type="FIRE", description="Smoke from a roof")

    response = unauthenticated_client.get("/events/public/region", params=VIEWPORT)

    assert response.status_code == 200
    assert {e["id"] for e in response.json()} == {public["id"], fire["id"]}

    response = unauthenticated_client.get(
        "/events/public/region", params={**VIEWPORT, "type": "FIRE"}
    )
    assert [e["id"] for e in response.json()] == [fire["id"]]


def test_public_region_bad_corner(unauthenticated_client: TestClient):
    response = unauthenticated_client.get(
        "/events/public/region", params={"northEast": "nope", "southWest": "-34,-58"}
    )

    assert response.status_code == 400


def test_public_event_by_id(client: TestClient, unauthenticated_client: TestClient):
    public = _create_event(client)
    private = _create_event(client, isPublic=False)

    response = unauthenticated_client.get(f"/events/public/{public['id']}")
    assert response.status_code == 200
    assert response.json()["description"] == "Bike stolen at the corner"

    response = unauthenticated_client.get(f"/events/public/{private['id']}")
    assert response.status_code == 404
    assert response.json()["type"] == "event_not_found"
