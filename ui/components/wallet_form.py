import customtkinter as ctk

from models.wallet import Wallet, WALLET_TYPE_LABELS
from services.wallet_service import WalletService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.form_dialog import FormDialog
from utils.constants import WALLET_COLORS


class WalletForm(FormDialog):
    """Add or edit a wallet. Sets self.saved = True on success."""

    _LABEL_TO_KEY = {v: k for k, v in WALLET_TYPE_LABELS.items()}

    def __init__(self, master, wallet_service: WalletService,
                 wallet: Wallet | None = None, **kwargs):
        super().__init__(master, "Edit Wallet" if wallet else "New Wallet", **kwargs)
        self._svc = wallet_service
        self._wallet = wallet

        self._name_var = self._add_entry("Name:", wallet.name if wallet else "")

        if wallet:
            # type and opening balance are fixed once the wallet exists
            self._add_widget("Type:", ctk.CTkLabel(self, text=wallet.type_label, anchor="w"))
        else:
            self._type_var, _ = self._add_combo("Type:", list(WALLET_TYPE_LABELS.values()))
            self._balance_var = self._add_entry("Initial Balance:", "0")

        self._color_var = ctk.StringVar(value=wallet.color if wallet else WALLET_COLORS[0])
        swatches = ctk.CTkFrame(self, fg_color="transparent")
        for i, color in enumerate(WALLET_COLORS):
            ctk.CTkRadioButton(
                swatches, text="", width=22, variable=self._color_var, value=color,
                fg_color=color, hover_color=color, border_color=color,
            ).grid(row=i // 6, column=i % 6, padx=2, pady=2)
        self._add_widget("Color:", swatches, sticky="w")

        self._default_var = ctk.BooleanVar(value=wallet.is_default if wallet else False)
        self._add_widget("", ctk.CTkCheckBox(
            self, text="Default wallet", variable=self._default_var,
        ), sticky="w")

        self._finish(on_delete=self._on_delete if wallet else None)

    def _on_save(self):
        name = self._name_var.get()
        color = self._color_var.get()
        if self._wallet:
            self._submit(lambda: self._svc.update(
                self._wallet.id, name, color=color, is_default=self._default_var.get(),
            ))
            return

        balance = self._parse_amount(self._balance_var, "initial balance", allow_zero=True)
        if balance is None:
            return
        type_ = self._LABEL_TO_KEY.get(self._type_var.get(), "cash")

        def create():
            wallet = self._svc.create(name, type_, balance, color=color)
            if self._default_var.get():
                self._svc.update(wallet.id, wallet.name, is_default=True)

        self._submit(create)

    def _on_delete(self):
        dlg = ConfirmDialog(
            self, "Delete Wallet",
            f"Delete wallet '{self._wallet.name}'? Its transactions are kept.",
            confirm_text="Delete",
        )
        if dlg.result:
            self._submit(lambda: self._svc.delete(self._wallet.id))
