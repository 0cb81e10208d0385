"""HTTP tests for the /boards and /services JSON APIs.

Each test runs against both URL prefixes.

Covers:
- Authentication (session login, bearer key + X-Acting-User)
- Container, lane and item routes and their JSON shapes
- Renaming and recoloring containers and lanes
- Error mapping (400/403/404) and the snap-back layout on failed moves
"""

import pytest

from conftest import api_headers


PREFIXES = ["/boards", "/services"]


@pytest.fixture(params=PREFIXES)
def prefix(request):
    return request.param


# ─── Helpers ──────────────────────────────────────────────────


def _create(client, app, prefix, owner_id, name="Visa Cases"):
    response = client.post(prefix, json={"name": name}, headers=api_headers(app, owner_id))
    assert response.status_code == 201
    return response.get_json()


def _add(client, app, prefix, owner_id, container_id, application_id, lane_id):
    return client.post(
        f"{prefix}/{container_id}/items",
        json={"application_id": application_id, "lane_id": lane_id},
        headers=api_headers(app, owner_id),
    )


class TestAuthentication:

    def test_requires_credentials(self, client, prefix):
        response = client.get(prefix)
        assert response.status_code == 401
        assert response.get_json()["error"] == "Authentication required"

    def test_rejects_wrong_api_key(self, client, prefix, seed_data):
        response = client.get(prefix, headers={
            "Authorization": "Bearer wrong-key",
            "X-Acting-User": seed_data["owner_id"],
        })
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid API key"

    def test_rejects_unknown_acting_user(self, app, client, prefix, seed_data):
        response = client.get(prefix, headers=api_headers(app, "nobody"))
        assert response.status_code == 401
        assert response.get_json()["error"] == "Unknown acting user"

    def test_rejects_inactive_acting_user(self, app, client, prefix, seed_data, db_session):
        seed_data["outsider"].is_active = False
        db_session.commit()

        response = client.get(prefix, headers=api_headers(app, seed_data["outsider_id"]))
        assert response.status_code == 401

    def test_session_login(self, client, prefix, seed_data):
        login = client.post(
            "/auth/login",
            json={"email": "nurse@example.com", "password": "password123"},
        )
        assert login.status_code == 200

        response = client.get(prefix)
        assert response.status_code == 200
        assert response.get_json() == []


class TestContainerRoutes:

    def test_create_returns_layout(self, app, client, prefix, seed_data):
        data = _create(client, app, prefix, seed_data["owner_id"])

        assert data["name"] == "Visa Cases"
        assert data["owner_id"] == seed_data["owner_id"]
        assert [lane["name"] for lane in data["lanes"]] == ["To Do", "In Progress", "Done"]
        assert all(lane["items"] == [] for lane in data["lanes"])
        assert data["unassigned"] == []
        assert {a["id"] for a in data["available"]} == set(seed_data["application_ids"])

    def test_create_requires_name(self, app, client, prefix, seed_data):
        response = client.post(
            prefix, json={"name": "  "}, headers=api_headers(app, seed_data["owner_id"])
        )
        assert response.status_code == 400
        assert "name is required" in response.get_json()["error"]

    def test_index_lists_own_containers_with_counts(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        _create(client, app, prefix, seed_data["outsider_id"], name="Not Mine")
        _add(client, app, prefix, owner_id, board["id"],
             seed_data["application_ids"][0], board["lanes"][0]["id"])

        response = client.get(prefix, headers=api_headers(app, owner_id))

        data = response.get_json()
        assert [c["name"] for c in data] == ["Visa Cases"]
        assert data[0]["lanes_count"] == 3
        assert data[0]["items_count"] == 1

    def test_show_other_owner_forbidden(self, app, client, prefix, seed_data):
        board = _create(client, app, prefix, seed_data["owner_id"])
        response = client.get(
            f"{prefix}/{board['id']}", headers=api_headers(app, seed_data["outsider_id"])
        )
        assert response.status_code == 403
        assert "error" in response.get_json()

    def test_show_missing(self, app, client, prefix, seed_data):
        response = client.get(
            f"{prefix}/missing", headers=api_headers(app, seed_data["owner_id"])
        )
        assert response.status_code == 404

    def test_star(self, app, client, prefix, seed_data):
        board = _create(client, app, prefix, seed_data["owner_id"])
        response = client.post(
            f"{prefix}/{board['id']}/star", headers=api_headers(app, seed_data["owner_id"])
        )
        assert response.get_json()["is_starred"] is True

    def test_update(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)

        response = client.patch(
            f"{prefix}/{board['id']}",
            json={"name": "Renewals", "description": "Q4", "color": "#EF4444"},
            headers=api_headers(app, owner_id),
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["id"] == board["id"]
        assert (data["name"], data["description"], data["color"]) == ("Renewals", "Q4", "#ef4444")
        assert data["position"] == board["position"]

    def test_update_bad_color(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)

        response = client.patch(
            f"{prefix}/{board['id']}", json={"color": "red"}, headers=api_headers(app, owner_id)
        )

        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_sync_positions(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        first = _create(client, app, prefix, owner_id, name="First")
        second = _create(client, app, prefix, owner_id, name="Second")

        response = client.put(
            f"{prefix}/positions",
            json={"positions": [
                {"id": second["id"], "position": 0},
                {"id": first["id"], "position": 1},
                {"id": "unknown", "position": 2},
            ]},
            headers=api_headers(app, owner_id),
        )

        assert response.get_json() == {"success": True, "updated": [second["id"], first["id"]]}
        listed = client.get(prefix, headers=api_headers(app, owner_id)).get_json()
        assert [c["name"] for c in listed] == ["Second", "First"]

    def test_sync_positions_rejects_negative(self, app, client, prefix, seed_data):
        response = client.put(
            f"{prefix}/positions",
            json={"positions": [{"id": "x", "position": -2}]},
            headers=api_headers(app, seed_data["owner_id"]),
        )
        assert response.status_code == 400

    def test_delete_detaches(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        _add(client, app, prefix, owner_id, board["id"],
             seed_data["application_ids"][0], board["lanes"][0]["id"])

        response = client.delete(f"{prefix}/{board['id']}", headers=api_headers(app, owner_id))

        assert response.get_json() == {"success": True, "detached": 1}
        assert client.get(
            f"{prefix}/{board['id']}", headers=api_headers(app, owner_id)
        ).status_code == 404


class TestLaneRoutes:

    def test_create_lane(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)

        response = client.post(
            f"{prefix}/{board['id']}/lanes",
            json={"name": "On Hold", "color": "#F59E0B"},
            headers=api_headers(app, owner_id),
        )

        assert response.status_code == 201
        lane = response.get_json()
        assert lane["position"] == 3
        assert lane["color"] == "#f59e0b"
        assert lane["items"] == []

    def test_create_lane_bad_color(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        response = client.post(
            f"{prefix}/{board['id']}/lanes",
            json={"name": "On Hold", "color": "orange"},
            headers=api_headers(app, owner_id),
        )
        assert response.status_code == 400

    def test_update_lane(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        lane = board["lanes"][2]

        response = client.patch(
            f"{prefix}/{board['id']}/lanes/{lane['id']}",
            json={"name": "Licensed", "color": "#22c55e"},
            headers=api_headers(app, owner_id),
        )

        assert response.status_code == 200
        assert response.get_json() == {
            "id": lane["id"],
            "container_id": board["id"],
            "name": "Licensed",
            "color": "#22c55e",
            "position": lane["position"],
        }

    def test_update_lane_on_other_container(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        other = _create(client, app, prefix, owner_id, name="Other")

        response = client.patch(
            f"{prefix}/{other['id']}/lanes/{board['lanes'][0]['id']}",
            json={"name": "Moved"},
            headers=api_headers(app, owner_id),
        )

        assert response.status_code == 404

    def test_sync_lane_positions(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        todo, doing, done = (lane["id"] for lane in board["lanes"])

        response = client.put(
            f"{prefix}/{board['id']}/lanes/positions",
            json={"positions": [
                {"id": done, "position": 0},
                {"id": doing, "position": 1},
                {"id": todo, "position": 2},
            ]},
            headers=api_headers(app, owner_id),
        )

        assert response.get_json()["updated"] == [done, doing, todo]
        layout = client.get(f"{prefix}/{board['id']}", headers=api_headers(app, owner_id)).get_json()
        assert [lane["name"] for lane in layout["lanes"]] == ["Done", "In Progress", "To Do"]

    def test_delete_lane(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        lane_id = board["lanes"][0]["id"]
        application_id = seed_data["application_ids"][0]
        _add(client, app, prefix, owner_id, board["id"], application_id, lane_id)

        response = client.delete(
            f"{prefix}/{board['id']}/lanes/{lane_id}", headers=api_headers(app, owner_id)
        )

        assert response.get_json() == {"success": True, "detached": 1}
        layout = client.get(f"{prefix}/{board['id']}", headers=api_headers(app, owner_id)).get_json()
        assert len(layout["lanes"]) == 2
        assert [a["id"] for a in layout["unassigned"]] == [application_id]


class TestItemRoutes:

    def test_add_appends(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        a, b = seed_data["application_ids"][:2]
        board = _create(client, app, prefix, owner_id)
        lane_id = board["lanes"][0]["id"]

        _add(client, app, prefix, owner_id, board["id"], a, lane_id)
        response = _add(client, app, prefix, owner_id, board["id"], b, lane_id)

        assert response.status_code == 201
        data = response.get_json()
        assert data["lane_id"] == lane_id
        assert [(i["id"], i["position"]) for i in data["items"]] == [(a, 0), (b, 1)]
        assert data["items"][0]["container_id"] == board["id"]

    def test_add_foreign_application(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        response = _add(client, app, prefix, owner_id, board["id"],
                        seed_data["foreign_application_id"], board["lanes"][0]["id"])
        assert response.status_code == 403

    def test_add_requires_lane(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        board = _create(client, app, prefix, owner_id)
        response = _add(client, app, prefix, owner_id, board["id"],
                        seed_data["application_ids"][0], None)
        assert response.status_code == 400

    def test_move_between_lanes(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        x, y, z = seed_data["application_ids"][:3]
        board = _create(client, app, prefix, owner_id)
        first, second = board["lanes"][0]["id"], board["lanes"][1]["id"]
        for app_id in (x, y):
            _add(client, app, prefix, owner_id, board["id"], app_id, first)
        _add(client, app, prefix, owner_id, board["id"], z, second)

        response = client.put(
            f"{prefix}/{board['id']}/items/move",
            json={"application_id": x, "lane_id": second, "position": 1},
            headers=api_headers(app, owner_id),
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert [(i["id"], i["position"]) for i in data["source"]] == [(y, 0)]
        assert [(i["id"], i["position"]) for i in data["target"]] == [(z, 0), (x, 1)]

    def test_move_within_lane(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        a, b, c = seed_data["application_ids"][:3]
        board = _create(client, app, prefix, owner_id)
        lane_id = board["lanes"][0]["id"]
        for app_id in (a, b, c):
            _add(client, app, prefix, owner_id, board["id"], app_id, lane_id)

        response = client.put(
            f"{prefix}/{board['id']}/items/move",
            json={"application_id": c, "lane_id": lane_id, "position": 0},
            headers=api_headers(app, owner_id),
        )

        data = response.get_json()
        assert [i["id"] for i in data["target"]] == [c, a, b]
        assert data["source"] == data["target"]

    def test_failed_move_returns_layout(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        a = seed_data["application_ids"][0]
        board = _create(client, app, prefix, owner_id)
        lane_id = board["lanes"][0]["id"]
        _add(client, app, prefix, owner_id, board["id"], a, lane_id)

        response = client.put(
            f"{prefix}/{board['id']}/items/move",
            json={"application_id": a, "lane_id": lane_id, "position": -1},
            headers=api_headers(app, owner_id),
        )

        assert response.status_code == 400
        data = response.get_json()
        assert "negative" in data["error"]
        assert data["layout"]["id"] == board["id"]
        assert [i["id"] for i in data["layout"]["lanes"][0]["items"]] == [a]

    def test_failed_move_on_foreign_container_has_no_layout(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        a = seed_data["application_ids"][0]
        board = _create(client, app, prefix, owner_id)
        lane_id = board["lanes"][0]["id"]
        _add(client, app, prefix, owner_id, board["id"], a, lane_id)

        response = client.put(
            f"{prefix}/{board['id']}/items/move",
            json={"application_id": a, "lane_id": lane_id, "position": 0},
            headers=api_headers(app, seed_data["outsider_id"]),
        )

        assert response.status_code == 403
        assert "layout" not in response.get_json()

    def test_detach(self, app, client, prefix, seed_data):
        owner_id = seed_data["owner_id"]
        a, b = seed_data["application_ids"][:2]
        board = _create(client, app, prefix, owner_id)
        lane_id = board["lanes"][0]["id"]
        for app_id in (a, b):
            _add(client, app, prefix, owner_id, board["id"], app_id, lane_id)

        response = client.delete(
            f"{prefix}/{board['id']}/items/{a}", headers=api_headers(app, owner_id)
        )

        item = response.get_json()
        assert item["container_id"] is None
        assert item["lane_id"] is None
        layout = client.get(f"{prefix}/{board['id']}", headers=api_headers(app, owner_id)).get_json()
        assert [(i["id"], i["position"]) for i in layout["lanes"][0]["items"]] == [(b, 0)]
        assert a in {i["id"] for i in layout["available"]}

    def test_families_are_independent(self, app, client, seed_data):
        """Placing an application on a board leaves its service placement alone."""
        owner_id = seed_data["owner_id"]
        a = seed_data["application_ids"][0]
        board = _create(client, app, "/boards", owner_id)
        service = _create(client, app, "/services", owner_id, name="License Processing")

        _add(client, app, "/boards", owner_id, board["id"], a, board["lanes"][0]["id"])
        _add(client, app, "/services", owner_id, service["id"], a, service["lanes"][2]["id"])
        client.delete(f"/boards/{board['id']}/items/{a}", headers=api_headers(app, owner_id))

        layout = client.get(f"/services/{service['id']}", headers=api_headers(app, owner_id)).get_json()
        assert [i["id"] for i in layout["lanes"][2]["items"]] == [a]
