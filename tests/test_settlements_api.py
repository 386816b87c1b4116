from datetime import datetime, timezone
from unittest.mock import MagicMock

from bson import ObjectId
from fastapi import status

API = "/api/v1"

COMPLEX_BALANCES = [
    {"user": {"_id": "1", "name": "Alice"}, "amount": 50},
    {"user": {"_id": "2", "name": "Bob"}, "amount": 30},
    {"user": {"_id": "3", "name": "Charlie"}, "amount": -40},
    {"user": {"_id": "4", "name": "David"}, "amount": -40},
]


def test_root(test_client):
    response = test_client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Welcome to QuickSplit API"}


def test_plan_endpoint(test_client):
    response = test_client.post(f"{API}/settlements/plan", json={"balances": COMPLEX_BALANCES})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [(s["from"]["id"], s["to"]["id"], s["amount"]) for s in data["settlements"]] == [
        ("3", "1", 40.0),
        ("4", "1", 10.0),
        ("4", "2", 30.0),
    ]
    assert data["stats"]["total_amount"] == 80.0
    assert data["minimum_transactions"] == 2
    assert data["is_valid"] is True
    assert data["formatted"] is None


def test_plan_endpoint_with_viewer(test_client):
    response = test_client.post(
        f"{API}/settlements/plan",
        json={"balances": COMPLEX_BALANCES, "viewer_id": "4"},
    )

    data = response.json()
    assert [f["display_text"] for f in data["formatted"]] == [
        "Charlie pays Alice",
        "You pay Alice",
        "You pay Bob",
    ]
    assert data["user_settlements"]["net_amount"] == -40.0


def test_plan_endpoint_rejects_bad_amount(test_client):
    response = test_client.post(
        f"{API}/settlements/plan",
        json={"balances": [{"user": "1", "amount": "lots"}]},
    )

    assert response.status_code == 422


def test_validate_endpoint(test_client):
    settlements = [
        {"from": {"_id": "3"}, "to": {"_id": "1"}, "amount": 40},
        {"from": {"_id": "4"}, "to": {"_id": "1"}, "amount": 10},
        {"from": {"_id": "4"}, "to": {"_id": "2"}, "amount": 30},
    ]

    ok = test_client.post(
        f"{API}/settlements/validate",
        json={"balances": COMPLEX_BALANCES, "settlements": settlements},
    )
    short = test_client.post(
        f"{API}/settlements/validate",
        json={"balances": COMPLEX_BALANCES, "settlements": settlements[:2]},
    )

    assert ok.json() == {"valid": True}
    assert short.json() == {"valid": False}


def test_stats_and_user_endpoints(test_client):
    settlements = [
        {"from": "2", "to": "1", "amount": 30},
        {"from": "3", "to": "1", "amount": 20},
    ]

    stats = test_client.post(f"{API}/settlements/stats", json={"settlements": settlements}).json()
    user = test_client.post(f"{API}/settlements/user/1", json={"settlements": settlements}).json()

    assert stats == {
        "total_transactions": 2,
        "total_amount": 50.0,
        "unique_participants": 3,
        "average_amount": 25.0,
    }
    assert user["total_to_receive"] == 50.0
    assert user["to_pay"] == []


def test_minimum_endpoint(test_client):
    response = test_client.post(f"{API}/settlements/minimum", json={"balances": []})

    assert response.json() == {"minimum_transactions": 0, "can_settle_all": True}


def test_compare_endpoint(test_client):
    first = [{"from": "2", "to": "1", "amount": 30}]
    second = [{"from": "2", "to": "1", "amount": 20}, {"from": "3", "to": "1", "amount": 10}]

    data = test_client.post(f"{API}/settlements/compare", json={"first": first, "second": second}).json()

    assert data["count_match"] is False
    assert data["total_match"] is True
    assert data["difference"] == 0.0


def test_group_by_endpoint(test_client):
    settlements = [
        {"from": "2", "to": "1", "amount": 30},
        {"from": "3", "to": "1", "amount": 20},
    ]

    by_creditor = test_client.post(f"{API}/settlements/group-by/creditor", json={"settlements": settlements})
    bad_side = test_client.post(f"{API}/settlements/group-by/sideways", json={"settlements": settlements})

    assert list(by_creditor.json()["groups"]) == ["1"]
    assert bad_side.status_code == status.HTTP_400_BAD_REQUEST


# ===== RECORDED SETTLEMENTS =====

def test_record_settlement_endpoint(test_client, mock_db):
    mock_db.settlements.insert_one.return_value = MagicMock(inserted_id=ObjectId())

    response = test_client.post(
        f"{API}/groups/g1/settlements",
        json={"from_user_id": "2", "to_user_id": "1", "amount": 12.5},
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["group_id"] == "g1"
    assert data["amount"] == 12.5
    assert "id" in data


def test_record_settlement_validation_error(test_client, mock_db):
    response = test_client.post(
        f"{API}/groups/g1/settlements",
        json={"from_user_id": "1", "to_user_id": "1", "amount": 10},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    mock_db.settlements.insert_one.assert_not_called()


def test_settlement_history_endpoint(test_client, mock_db):
    now = datetime.now(timezone.utc)
    mock_db.settlements.find.return_value.__aiter__.return_value = [{
        "_id": ObjectId(),
        "group_id": "g1",
        "from_user_id": "2",
        "to_user_id": "1",
        "amount_cents": 1999,
        "is_deleted": False,
        "created_at": now,
        "updated_at": now,
    }]

    response = test_client.get(f"{API}/groups/g1/settlements")

    assert response.status_code == status.HTTP_200_OK
    assert [r["amount"] for r in response.json()] == [19.99]


def test_undo_unknown_settlement(test_client):
    response = test_client.delete(f"{API}/groups/g1/settlements/{ObjectId()}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
