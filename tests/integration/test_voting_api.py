from __future__ import annotations

from collections.abc import Callable
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from pollster.models import User

Headers = Callable[[User], dict[str, str]]


@pytest.fixture()
def board(client: TestClient, headers_for: Headers, alice: User, bob: User) -> dict[str, int]:
    """Organization with alice as manager, bob as member and one two-question vote."""

    organization_id = client.post(
        "/api/organizations", json={"name": "Eng", "description": "Engineering"}, headers=headers_for(alice)
    ).json()["id"]
    client.post(
        f"/api/organizations/{organization_id}/members",
        json={"user_ids": [bob.id]},
        headers=headers_for(alice),
    )
    response = client.post(
        f"/api/organizations/{organization_id}/votes",
        json={
            "name": "Offsite",
            "questions": [
                {"description": "Where?", "type": "SINGLE", "options": ["Lisbon", "Oslo"]},
                {"description": "Activities?", "type": "MULTI", "options": ["Hike", "Sail"]},
            ],
        },
        headers=headers_for(alice),
    )
    assert response.status_code == 201
    vote_id = response.json()["id"]
    questions = client.get(f"/api/votes/{vote_id}/questions", headers=headers_for(alice)).json()["items"]
    return {
        "organization_id": organization_id,
        "vote_id": vote_id,
        "single_id": questions[0]["id"],
        "multi_id": questions[1]["id"],
    }


def _options(client: TestClient, headers: dict[str, str], question_id: int) -> list[dict]:
    return client.get(f"/api/questions/{question_id}/options", headers=headers).json()["items"]


def test_vote_listing_reports_counts_and_status(
    client: TestClient, headers_for: Headers, alice: User, board: dict[str, int]
) -> None:
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    client.post(
        f"/api/organizations/{board['organization_id']}/votes",
        json={"name": "Last quarter", "deadline": yesterday},
        headers=headers_for(alice),
    )

    body = client.get(f"/api/organizations/{board['organization_id']}/votes", headers=headers_for(alice)).json()

    assert body["total"] == 2
    by_name = {item["name"]: item for item in body["items"]}
    assert by_name["Offsite"]["question_count"] == 2
    assert by_name["Offsite"]["status"] == "COLLECTING"
    assert by_name["Last quarter"]["status"] == "CLOSED"


def test_question_detail_lists_options_and_advances_mark(
    client: TestClient, headers_for: Headers, bob: User, board: dict[str, int]
) -> None:
    questions = client.get(f"/api/votes/{board['vote_id']}/questions", headers=headers_for(bob)).json()["items"]
    assert all(item["has_updated"] for item in questions)

    detail = client.get(f"/api/questions/{board['single_id']}", headers=headers_for(bob))
    assert detail.status_code == 200
    assert [option["text"] for option in detail.json()["options"]] == ["Lisbon", "Oslo"]
    assert detail.json()["has_updated"] is False

    questions = client.get(f"/api/votes/{board['vote_id']}/questions", headers=headers_for(bob)).json()["items"]
    assert [item["has_updated"] for item in questions] == [False, True]


def test_answering_flow(client: TestClient, headers_for: Headers, bob: User, board: dict[str, int]) -> None:
    lisbon, oslo = (option["id"] for option in _options(client, headers_for(bob), board["single_id"]))

    response = client.put(
        f"/api/questions/{board['single_id']}/answers",
        json={"option_ids": [lisbon]},
        headers=headers_for(bob),
    )
    assert response.status_code == 200
    assert response.json()["chosen_option_ids"] == [lisbon]

    response = client.put(
        f"/api/questions/{board['single_id']}/answers",
        json={"option_ids": [lisbon, oslo]},
        headers=headers_for(bob),
    )
    assert response.status_code == 422

    checked = {option["id"]: option["checked"] for option in _options(client, headers_for(bob), board["single_id"])}
    assert checked == {lisbon: True, oslo: False}

    questions = client.get(f"/api/votes/{board['vote_id']}/questions", headers=headers_for(bob)).json()["items"]
    assert [item["has_answered"] for item in questions] == [True, False]


def test_bulk_vote_answers(client: TestClient, headers_for: Headers, bob: User, board: dict[str, int]) -> None:
    single = [option["id"] for option in _options(client, headers_for(bob), board["single_id"])]
    multi = [option["id"] for option in _options(client, headers_for(bob), board["multi_id"])]

    response = client.put(
        f"/api/votes/{board['vote_id']}/answers",
        json={
            "answers": [
                {"question_id": board["single_id"], "option_ids": single[:1]},
                {"question_id": board["multi_id"], "option_ids": multi},
            ]
        },
        headers=headers_for(bob),
    )

    assert response.status_code == 200
    assert response.json() == {str(board["single_id"]): single[:1], str(board["multi_id"]): multi}
    answers = client.get(f"/api/questions/{board['multi_id']}/answers", headers=headers_for(bob)).json()
    assert sorted(answers["chosen_option_ids"]) == sorted(multi)


def test_options_can_be_added_and_unanswered_ones_deleted(
    client: TestClient, headers_for: Headers, alice: User, bob: User, board: dict[str, int]
) -> None:
    client.get(f"/api/questions/{board['single_id']}", headers=headers_for(bob))

    response = client.post(
        f"/api/questions/{board['single_id']}/options",
        json={"texts": ["Porto"]},
        headers=headers_for(alice),
    )
    assert response.status_code == 201
    porto = response.json()[0]["id"]

    detail = client.get(f"/api/questions/{board['single_id']}", headers=headers_for(alice)).json()
    assert detail["version"] == 2

    lisbon = _options(client, headers_for(bob), board["single_id"])[0]["id"]
    client.put(f"/api/questions/{board['single_id']}/answers", json={"option_ids": [lisbon]}, headers=headers_for(bob))

    assert client.delete(f"/api/options/{lisbon}", headers=headers_for(alice)).status_code == 409
    assert client.delete(f"/api/options/{porto}", headers=headers_for(alice)).status_code == 204
    assert client.delete("/api/options/nope", headers=headers_for(alice)).status_code == 400


def test_question_deletion_requires_owner_or_manager(
    client: TestClient, headers_for: Headers, alice: User, bob: User, carol: User, board: dict[str, int]
) -> None:
    client.post(
        f"/api/organizations/{board['organization_id']}/members",
        json={"user_ids": [carol.id]},
        headers=headers_for(alice),
    )
    bobs_question = client.post(
        f"/api/votes/{board['vote_id']}/questions",
        json={"description": "Budget?", "options": ["Low", "High"]},
        headers=headers_for(bob),
    ).json()["id"]

    assert client.delete(f"/api/questions/{bobs_question}", headers=headers_for(carol)).status_code == 403
    assert client.delete(f"/api/questions/{board['single_id']}", headers=headers_for(bob)).status_code == 403
    assert client.delete(f"/api/questions/{bobs_question}", headers=headers_for(bob)).status_code == 204
    assert client.delete(f"/api/questions/{board['single_id']}", headers=headers_for(alice)).status_code == 204


def test_vote_update_and_delete(
    client: TestClient, headers_for: Headers, alice: User, bob: User, board: dict[str, int]
) -> None:
    response = client.put(
        f"/api/votes/{board['vote_id']}",
        json={"name": "Offsite 2026"},
        headers=headers_for(bob),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Offsite 2026"
    assert response.json()["version"] == 2
    unchanged = client.put(f"/api/votes/{board['vote_id']}", json={}, headers=headers_for(bob))
    assert unchanged.status_code == 200
    assert unchanged.json()["version"] == 2

    assert client.delete(f"/api/votes/{board['vote_id']}", headers=headers_for(bob)).status_code == 403
    assert client.delete(f"/api/votes/{board['vote_id']}", headers=headers_for(alice)).status_code == 204

    organization = client.get(f"/api/organizations/{board['organization_id']}", headers=headers_for(alice)).json()
    assert organization["version"] == 4
    body = client.get(f"/api/organizations/{board['organization_id']}/votes", headers=headers_for(alice)).json()
    assert body == {"items": [], "total": 0}
