from __future__ import annotations

from collections.abc import Callable

from fastapi.testclient import TestClient

from pollster.models import User

Headers = Callable[[User], dict[str, str]]


def _organization_row(client: TestClient, headers: dict[str, str], organization_id: int) -> dict:
    response = client.get("/api/organizations", headers=headers)
    assert response.status_code == 200
    return next(item for item in response.json()["items"] if item["id"] == organization_id)


def _vote_row(client: TestClient, headers: dict[str, str], organization_id: int, vote_id: int) -> dict:
    response = client.get(f"/api/organizations/{organization_id}/votes", headers=headers)
    assert response.status_code == 200
    return next(item for item in response.json()["items"] if item["id"] == vote_id)


def _create_eng_with_bob(client: TestClient, headers_for: Headers, alice: User, bob: User) -> int:
    response = client.post("/api/organizations", json={"name": "Eng"}, headers=headers_for(alice))
    assert response.status_code == 201
    organization_id = response.json()["id"]
    response = client.post(
        f"/api/organizations/{organization_id}/members",
        json={"user_ids": [bob.id]},
        headers=headers_for(alice),
    )
    assert response.status_code == 201
    assert response.json() == {"added": [bob.id]}
    return organization_id


def test_scenario_a_new_member_sees_organization_as_updated(
    client: TestClient, headers_for: Headers, alice: User, bob: User
) -> None:
    response = client.post("/api/organizations", json={"name": "Eng"}, headers=headers_for(alice))
    assert response.status_code == 201
    assert response.json()["version"] == 1
    organization_id = response.json()["id"]

    row = _organization_row(client, headers_for(alice), organization_id)
    assert row["version"] == 1
    assert row["has_updated"] is False

    client.post(
        f"/api/organizations/{organization_id}/members",
        json={"user_ids": [bob.id]},
        headers=headers_for(alice),
    )

    assert _organization_row(client, headers_for(bob), organization_id)["has_updated"] is True


def test_scenario_b_new_vote_bumps_organization(
    client: TestClient, headers_for: Headers, alice: User, bob: User
) -> None:
    organization_id = _create_eng_with_bob(client, headers_for, alice, bob)
    client.get(f"/api/organizations/{organization_id}", headers=headers_for(bob))
    assert _organization_row(client, headers_for(bob), organization_id)["has_updated"] is False

    response = client.post(
        f"/api/organizations/{organization_id}/votes",
        json={"name": "Q3 planning"},
        headers=headers_for(alice),
    )
    assert response.status_code == 201
    assert response.json()["version"] == 1

    row = _organization_row(client, headers_for(bob), organization_id)
    assert row["version"] == 2
    assert row["vote_count"] == 1
    assert row["has_updated"] is True


def test_scenario_c_viewing_a_vote_clears_only_the_vote(
    client: TestClient, headers_for: Headers, alice: User, bob: User
) -> None:
    organization_id = _create_eng_with_bob(client, headers_for, alice, bob)
    vote_id = client.post(
        f"/api/organizations/{organization_id}/votes",
        json={"name": "Q3 planning"},
        headers=headers_for(alice),
    ).json()["id"]
    assert _vote_row(client, headers_for(bob), organization_id, vote_id)["has_updated"] is True

    detail = client.get(f"/api/votes/{vote_id}", headers=headers_for(bob))
    assert detail.status_code == 200
    assert detail.json()["version"] == 1
    assert detail.json()["has_updated"] is False

    assert _vote_row(client, headers_for(bob), organization_id, vote_id)["has_updated"] is False
    # the organization mark is independent of the vote mark
    assert _organization_row(client, headers_for(bob), organization_id)["has_updated"] is True

    organization = client.get(f"/api/organizations/{organization_id}", headers=headers_for(bob))
    assert organization.json()["has_updated"] is False
    assert _organization_row(client, headers_for(bob), organization_id)["has_updated"] is False


def test_scenario_d_member_cannot_run_manager_operations(
    client: TestClient, headers_for: Headers, alice: User, bob: User, carol: User
) -> None:
    organization_id = _create_eng_with_bob(client, headers_for, alice, bob)

    assert client.get(f"/api/organizations/{organization_id}", headers=headers_for(bob)).status_code == 200
    assert client.delete(f"/api/organizations/{organization_id}", headers=headers_for(bob)).status_code == 403
    assert (
        client.post(
            f"/api/organizations/{organization_id}/managers",
            json={"user_id": carol.id},
            headers=headers_for(bob),
        ).status_code
        == 403
    )

    assert client.delete(f"/api/organizations/{organization_id}", headers=headers_for(alice)).status_code == 204
    assert client.get("/api/organizations", headers=headers_for(bob)).json() == {"items": [], "total": 0}


def test_outsiders_and_malformed_ids_are_stopped_at_the_gate(
    client: TestClient, headers_for: Headers, alice: User, bob: User, carol: User
) -> None:
    organization_id = _create_eng_with_bob(client, headers_for, alice, bob)

    assert client.get(f"/api/organizations/{organization_id}").status_code == 401
    assert client.get(f"/api/organizations/{organization_id}", headers=headers_for(carol)).status_code == 403
    assert client.get("/api/organizations/eng", headers=headers_for(alice)).status_code == 400
    assert client.get("/api/votes/abc/questions", headers=headers_for(alice)).status_code == 400
    assert client.get(f"/api/organizations/{'9' * 30}", headers=headers_for(alice)).status_code == 400
