from models.wallet import Wallet
from services.wallet_service import WalletService
from ui.components.form_dialog import FormDialog
from utils.currency import format_currency


class TransferForm(FormDialog):
    """Move money between two wallets."""

    def __init__(self, master, wallet_service: WalletService, wallets: list[Wallet],
                 symbol: str = "Rs. ", from_wallet: Wallet | None = None, **kwargs):
        super().__init__(master, "Transfer Between Wallets", **kwargs)
        self._svc = wallet_service
        self._wallets = wallets

        self._labels = [f"{w.display_icon} {w.name} ({format_currency(w.balance, symbol)})"
                        for w in wallets]
        first = from_wallet or (wallets[0] if wallets else None)
        second = next((w for w in wallets if first and w.id != first.id), None)

        self._from_var, _ = self._add_combo("From:", self._labels, self._label_for(first))
        self._to_var, _ = self._add_combo("To:", self._labels, self._label_for(second))
        self._amount_var = self._add_entry("Amount:")
        self._note_var = self._add_entry("Note (optional):")

        self._finish(save_text="Transfer")

    def _label_for(self, wallet: Wallet | None) -> str:
        if wallet is None:
            return ""
        return self._labels[self._wallets.index(wallet)]

    def _wallet_for(self, label: str) -> Wallet | None:
        if label in self._labels:
            return self._wallets[self._labels.index(label)]
        return None

    def _on_save(self):
        amount = self._parse_amount(self._amount_var)
        if amount is None:
            return
        source = self._wallet_for(self._from_var.get())
        target = self._wallet_for(self._to_var.get())
        self._submit(lambda: self._svc.transfer(
            source.id if source else "", target.id if target else "",
            amount, self._note_var.get(),
        ))
