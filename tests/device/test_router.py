"""Tests for device domain routers."""

from fastapi.testclient import TestClient

from neighborwatch.user.models import User


def _register(client: TestClient, **body) -> dict:
    response = client.post("/devices", json={"name": "Bike tracker", **body})
    assert response.status_code == 201, response.text
    return response.json()


def test_register_device_issues_qr_code(client: TestClient):
    data = _register(client, imei="356938035643809")

    assert data["type"] == "GPS_TRACKER"
    assert data["imei"] == "356938035643809"
    assert len(data["qrCode"]) == 32
    assert data["qrEnabled"] is True


def test_register_tagged_object(client: TestClient):
    data = _register(client, name="Keys", type="TAGGED_OBJECT")

    assert data["type"] == "TAGGED_OBJECT"
    assert data["imei"] is None


def test_register_duplicate_imei(client: TestClient):
    _register(client, imei="356938035643809")

    response = client.post(
        "/devices", json={"name": "Other tracker", "imei": "356938035643809"}
    )

    assert response.status_code == 409
    assert response.json()["type"] == "device_exists"


def test_list_my_devices(client: TestClient, login_as, test_user: User, other_user: User):
    mine = _register(client)
    _register(login_as(other_user), name="Not mine")

    response = login_as(test_user).get("/devices")

    assert [d["id"] for d in response.json()] == [mine["id"]]


def test_disable_qr(client: TestClient):
    device = _register(client)

    response = client.patch(f"/devices/{device['id']}", json={"qrEnabled": False})

    assert response.status_code == 200
    assert response.json()["qrEnabled"] is False
    assert response.json()["name"] == "Bike tracker"

    response = client.get(f"/public/{device['qrCode']}/info")
    assert response.status_code == 403


def test_positions_newest_first(client: TestClient):
    device = _register(client)
    for minute in (0, 2, 1):
        response = client.post(
            f"/devices/{device['id']}/positions",
            json={
                "latitude": -34.6,
                "longitude": -58.4 + minute / 100,
                "timestamp": f"2026-03-01T12:0{minute}:00Z",
            },
        )
        assert response.status_code == 201

    response = client.get(f"/devices/{device['id']}/positions", params={"limit": 2})

    assert response.status_code == 200
    assert [p["timestamp"] for p in response.json()] == [
        "2026-03-01T12:02:00Z",
        "2026-03-01T12:01:00Z",
    ]


def test_position_out_of_range(client: TestClient):
    device = _register(client)

    response = client.post(
        f"/devices/{device['id']}/positions", json={"latitude": 95, "longitude": 0}
    )

    assert response.status_code == 422


def test_device_of_someone_else(
    client: TestClient, login_as, test_user: User, other_user: User
):
    device = _register(login_as(other_user))

    response = login_as(test_user).post(
        f"/devices/{device['id']}/positions", json={"latitude": 0, "longitude": 0}
    )

    assert response.status_code == 403
    assert response.json()["type"] == "device_not_owned"


def test_unknown_device(client: TestClient):
    response = client.get("/devices/00000000-0000-0000-0000-000000000000/positions")

    assert response.status_code == 404
    assert response.json()["type"] == "device_not_found"


def test_phone_position_requires_phone(client: TestClient):
    response = client.post(
        "/phone-device/positions", json={"latitude": -34.6, "longitude": -58.4}
    )

    assert response.status_code == 404
    assert response.json()["type"] == "phone_device_not_found"


def test_phone_device_flow(client: TestClient):
    response = client.put("/phone-device", json={"isActive": True})
    assert response.status_code == 200
    assert response.json()["name"] == "My phone"
    assert response.json()["lastPositionAt"] is None

    response = client.post(
        "/phone-device/positions",
        json={
            "latitude": -34.6,
            "longitude": -58.4,
            "timestamp": "2026-03-01T12:00:00Z",
        },
    )
    assert response.status_code == 201

    response = client.put("/phone-device", json={"isActive": False, "name": "Pixel"})
    body = response.json()
    assert body["isActive"] is False
    assert body["name"] == "Pixel"
    assert body["lastPositionAt"] == "2026-03-01T12:00:00Z"


def test_devices_require_authentication(unauthenticated_client: TestClient):
    response = unauthenticated_client.get("/devices")

    assert response.status_code == 401


def test_regenerate_qr_retires_old_code(client: TestClient):
    device = _register(client)

    response = client.post(f"/devices/{device['id']}/qr/regenerate")

    assert response.status_code == 200
    new_code = response.json()["qrCode"]
    assert new_code != device["qrCode"]
    assert client.get(f"/public/{device['qrCode']}/info").status_code == 404
    assert client.get(f"/public/{new_code}/info").status_code == 200


def test_regenerate_qr_owner_only(
    client: TestClient, login_as, test_user: User, other_user: User
):
    device = _register(login_as(other_user))

    response = login_as(test_user).post(f"/devices/{device['id']}/qr/regenerate")

    assert response.status_code == 403


def test_delete_device(client: TestClient):
    device = _register(client)
    client.post(
        f"/devices/{device['id']}/positions", json={"latitude": -34.6, "longitude": -58.4}
    )
    event = client.post(
        "/events",
        json={
            "type": "THEFT",
            "description": "Bike stolen outside the station",
            "latitude": -34.6,
            "longitude": -58.4,
            "deviceId": device["id"],
        },
    ).json()
    chat = client.post(
        f"/public/{device['qrCode']}/chat", json={"message": "Found it near the park"}
    ).json()

    response = client.delete(f"/devices/{device['id']}")

    assert response.status_code == 204
    assert client.get("/devices").json() == []
    assert client.get(f"/public/{device['qrCode']}/info").status_code == 404
    assert client.get(f"/found-chats/{chat['chatId']}").status_code == 404
    assert client.get(f"/events/{event['id']}").json()["deviceId"] is None


def test_delete_device_of_someone_else(
    client: TestClient, login_as, test_user: User, other_user: User
):
    device = _register(login_as(other_user))

    response = login_as(test_user).delete(f"/devices/{device['id']}")

    assert response.status_code == 403
    assert response.json()["type"] == "device_not_owned"
