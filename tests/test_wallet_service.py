import pytest

from api.wallet_api import WalletAPI
from services.wallet_service import WalletService


def make_service(client):
    return WalletService(WalletAPI(client))


def test_get_all_uses_server_total(make_client):
    client = make_client({("GET", "/wallets"): {
        "wallets": [
            {"_id": "w1", "name": "Cash", "type": "cash", "balance": 1500},
            {"_id": "w2", "name": "HBL", "type": "bank", "balance": "2500.5", "isDefault": True},
        ],
        "totalBalance": 4000.5,
    }})
    wallets, total = make_service(client).get_all()
    assert [w.name for w in wallets] == ["Cash", "HBL"]
    assert wallets[1].balance == 2500.5
    assert wallets[1].is_default
    assert wallets[1].type_label == "Bank Account"
    assert total == 4000.5


def test_get_all_sums_when_total_missing(make_client):
    client = make_client({("GET", "/wallets"): {"wallets": [
        {"_id": "w1", "name": "Cash", "balance": 100},
        {"_id": "w2", "name": "Card", "balance": -40},
    ]}})
    _, total = make_service(client).get_all()
    assert total == 60


def test_create_validates(make_client):
    service = make_service(make_client())
    with pytest.raises(ValueError):
        service.create("  ", "cash")
    with pytest.raises(ValueError):
        service.create("Cash", "piggy_bank")
    with pytest.raises(ValueError):
        service.create("Cash", "cash", initial_balance=-1)


def test_create_payload(make_client):
    client = make_client({("POST", "/wallets"): {"wallet": {"_id": "w9", "name": "JazzCash", "type": "e_wallet"}}})
    wallet = make_service(client).create(" JazzCash ", "e_wallet", 250, color="#10b981")
    body = client.last("POST", "/wallets")[2]
    assert body["name"] == "JazzCash"
    assert body["initialBalance"] == 250
    assert body["color"] == "#10b981"
    assert wallet.id == "w9"
    assert wallet.display_icon == "📱"


def test_update_sends_only_given_fields(make_client):
    client = make_client()
    make_service(client).update("w1", "Wallet", is_default=True)
    assert client.last("PUT", "/wallets/w1")[2] == {"name": "Wallet", "isDefault": True}


def test_transfer_rules(make_client):
    client = make_client()
    service = make_service(client)
    with pytest.raises(ValueError):
        service.transfer("w1", "w1", 10)
    with pytest.raises(ValueError):
        service.transfer("w1", "w2", 0)
    with pytest.raises(ValueError):
        service.transfer("", "w2", 10)
    service.transfer("w1", "w2", 10, " rent share ")
    assert client.last("POST", "/wallets/transfer")[2] == {
        "fromWalletId": "w1", "toWalletId": "w2", "amount": 10, "note": "rent share",
    }
