import pytest

from api.transaction_api import TransactionAPI
from models.transaction import Transaction
from services.transaction_service import TransactionService


def make_service(client):
    return TransactionService(TransactionAPI(client))


def test_get_page_passes_filters_and_parses_rows(make_client):
    client = make_client({("GET", "/transactions"): {
        "transactions": [{
            "_id": "t1", "type": "expense", "category": "food", "amount": 850,
            "date": "2025-03-02T00:00:00.000Z", "walletId": {"_id": "w1", "name": "Cash"},
        }],
        "pagination": {"page": 1, "pages": 3, "total": 41},
    }})
    rows, pagination = make_service(client).get_page(type_filter="expense", page=1)
    query = client.last("GET", "/transactions")[2]
    assert query["type"] == "expense"
    assert query["limit"] == 20
    assert query["category"] is None
    assert rows[0].date == "2025-03-02"
    assert rows[0].wallet_name == "Cash"
    assert rows[0].signed_amount == -850
    assert pagination["pages"] == 3


def test_summary_computes_balance(make_client):
    client = make_client({("GET", "/transactions/summary"): {"income": 1000, "expense": 400}})
    summary = make_service(client).get_summary(start_date="2025-03-01", end_date="2025-03-31")
    assert summary == {"income": 1000.0, "expense": 400.0, "balance": 600.0}


@pytest.mark.parametrize("kwargs", [
    dict(type_="loan"),
    dict(amount=0),
    dict(date="03/02/2025"),
    dict(wallet_id=""),
    dict(category=""),
])
def test_create_validation(make_client, kwargs):
    args = dict(wallet_id="w1", type_="expense", category="food", amount=10, date="2025-03-02")
    args.update(kwargs)
    client = make_client()
    with pytest.raises(ValueError):
        make_service(client).create(**args)
    assert client.calls == []


def test_create_payload(make_client):
    client = make_client()
    make_service(client).create("w1", "income", "student_fee", 4500, "2025-03-02",
                                note=" March fee ", workspace="tuition")
    body = client.last("POST", "/transactions")[2]
    assert body["workspace"] == "tuition"
    assert body["note"] == "March fee"
    assert body["isRecurring"] is False


def test_update_keeps_type(make_client):
    client = make_client()
    tx = Transaction(id="t1", wallet_id="w1", type="expense", category="food",
                     amount=10, date="2025-03-02")
    make_service(client).update(tx, "transport", 12, "2025-03-03")
    assert client.last("PUT", "/transactions/t1")[2] == {
        "category": "transport", "amount": 12, "date": "2025-03-03", "note": "",
    }


def test_clear_all_sends_workspace(make_client):
    client = make_client()
    make_service(client).clear_all("tuition")
    assert client.last("DELETE", "/transactions/clear")[2] == {"workspace": "tuition"}
