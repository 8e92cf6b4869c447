from typing import Optional
from api.api_client import ApiClient, record_id
from models.wallet import Wallet


class WalletAPI:
    def __init__(self, client: ApiClient):
        self._client = client

    def _to_model(self, data: dict) -> Wallet:
        return Wallet(
            id=record_id(data),
            name=data.get("name", ""),
            type=data.get("type") or "cash",
            balance=float(data.get("balance") or 0),
            color=data.get("color") or "#6366f1",
            icon=data.get("icon") or "",
            is_default=bool(data.get("isDefault")),
        )

    def get_all(self) -> tuple[list[Wallet], float]:
        """Return (wallets, total_balance)."""
        data = self._client.get("/wallets")
        wallets = [self._to_model(w) for w in data.get("wallets") or [] if w]
        total = data.get("totalBalance")
        if total is None:
            total = sum(w.balance for w in wallets)
        return wallets, float(total)

    def get_by_id(self, wallet_id: str) -> Optional[Wallet]:
        data = self._client.get(f"/wallets/{wallet_id}")
        wallet = data.get("wallet", data)
        return self._to_model(wallet) if wallet else None

    def create(self, name: str, type_: str, initial_balance: float = 0.0,
               color: str | None = None, icon: str | None = None) -> Wallet:
        data = self._client.post("/wallets", {
            "name": name,
            "type": type_,
            "initialBalance": initial_balance,
            "color": color,
            "icon": icon,
        })
        return self._to_model(data.get("wallet", data))

    def update(self, wallet_id: str, **fields) -> Wallet:
        """fields: name, color, icon, isDefault."""
        data = self._client.put(f"/wallets/{wallet_id}", fields)
        return self._to_model(data.get("wallet", data))

    def delete(self, wallet_id: str):
        self._client.delete(f"/wallets/{wallet_id}")

    def transfer(self, from_wallet_id: str, to_wallet_id: str, amount: float, note: str = "") -> dict:
        return self._client.post("/wallets/transfer", {
            "fromWalletId": from_wallet_id,
            "toWalletId": to_wallet_id,
            "amount": amount,
            "note": note,
        })
