import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from quicksplit.schemas.settlement import Balance, UserRef


ALICE = UserRef(id="1", name="Alice", email="alice@example.com")
BOB = UserRef(id="2", name="Bob", email="bob@example.com")
CHARLIE = UserRef(id="3", name="Charlie", email="charlie@example.com")
DAVID = UserRef(id="4", name="David", email="david@example.com")


@pytest.fixture
def mock_db():
    """MagicMock standing in for a Motor database (settlements collection only)."""
    db = MagicMock()
    db.settlements.insert_one = AsyncMock()
    db.settlements.find_one = AsyncMock(return_value=None)
    db.settlements.update_one = AsyncMock()

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.__aiter__.return_value = []
    db.settlements.find.return_value = cursor
    return db


@pytest.fixture
def test_client(mock_db):
    """FastAPI test client with MongoDB connect/disconnect patched out."""
    from quicksplit.main import app

    with patch("quicksplit.main.connect_to_mongo", new=AsyncMock()), \
         patch("quicksplit.main.close_mongo_connection", new=AsyncMock()), \
         patch("quicksplit.services.settlement_service.get_database", new=AsyncMock(return_value=mock_db)):
        with TestClient(app) as client:
            yield client


@pytest.fixture
def simple_balances():
    """One creditor, two debtors."""
    return [
        Balance(user=ALICE, amount=50),
        Balance(user=BOB, amount=-30),
        Balance(user=CHARLIE, amount=-20),
    ]


@pytest.fixture
def complex_balances():
    """Two creditors, two debtors."""
    return [
        Balance(user=ALICE, amount=50),
        Balance(user=BOB, amount=30),
        Balance(user=CHARLIE, amount=-40),
        Balance(user=DAVID, amount=-40),
    ]
