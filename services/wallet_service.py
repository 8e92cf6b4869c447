import logging

from api.wallet_api import WalletAPI
from models.wallet import Wallet, WALLET_TYPE_LABELS

logger = logging.getLogger(__name__)


class WalletService:
    def __init__(self, wallet_api: WalletAPI):
        self._api = wallet_api

    def get_all(self) -> tuple[list[Wallet], float]:
        return self._api.get_all()

    def get_by_id(self, wallet_id: str) -> Wallet | None:
        return self._api.get_by_id(wallet_id)

    def create(
        self,
        name: str,
        type_: str = "cash",
        initial_balance: float = 0.0,
        color: str | None = None,
        icon: str | None = None,
    ) -> Wallet:
        name = name.strip()
        if not name:
            raise ValueError("Wallet name cannot be empty.")
        self._validate_type(type_)
        if initial_balance is None or initial_balance < 0:
            raise ValueError("Initial balance must be 0 or greater.")
        wallet = self._api.create(name, type_, initial_balance, color, icon)
        logger.info("Created wallet %s (%s)", wallet.id, type_)
        return wallet

    def update(
        self,
        wallet_id: str,
        name: str,
        color: str | None = None,
        icon: str | None = None,
        is_default: bool | None = None,
    ) -> Wallet:
        name = name.strip()
        if not name:
            raise ValueError("Wallet name cannot be empty.")
        fields = {"name": name, "color": color, "icon": icon, "isDefault": is_default}
        return self._api.update(wallet_id, **{k: v for k, v in fields.items() if v is not None})

    def delete(self, wallet_id: str):
        """The server archives the wallet; its transactions are kept."""
        self._api.delete(wallet_id)

    def transfer(self, from_wallet_id: str, to_wallet_id: str, amount: float,
                 note: str = "") -> dict:
        if not from_wallet_id or not to_wallet_id:
            raise ValueError("Please select both wallets.")
        if from_wallet_id == to_wallet_id:
            raise ValueError("Cannot transfer to the same wallet.")
        if amount is None or amount <= 0:
            raise ValueError("Amount must be positive.")
        result = self._api.transfer(from_wallet_id, to_wallet_id, amount, note.strip())
        logger.info("Transferred between wallets %s -> %s", from_wallet_id, to_wallet_id)
        return result

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _validate_type(type_: str):
        if type_ not in WALLET_TYPE_LABELS:
            raise ValueError(
                f"Invalid wallet type '{type_}'. "
                f"Must be one of: {', '.join(WALLET_TYPE_LABELS)}."
            )
