import customtkinter as ctk

from models.wallet import Wallet
from services.wallet_service import WalletService
from ui.components.loader import BackgroundLoader
from ui.components.transfer_form import TransferForm
from ui.components.wallet_form import WalletForm
from utils.currency import format_currency

_COLUMNS = 3


class WalletsTab(ctk.CTkFrame):
    """Wallet cards with balances.

    This tab is the one place the wallet list is fetched; every load is
    passed to on_wallets so forms elsewhere can offer the same list.
    """

    def __init__(
        self,
        master,
        wallet_service: WalletService,
        get_symbol,       # callable -> str
        notify_refresh,
        on_wallets=None,  # callable(list[Wallet])
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = wallet_service
        self._get_symbol = get_symbol
        self._notify_refresh = notify_refresh
        self._on_wallets = on_wallets or (lambda _w: None)
        self._wallets: list[Wallet] = []
        self._loader = BackgroundLoader(self)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_grid()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Total Balance:", font=ctk.CTkFont(size=14, weight="bold"),
        ).pack(side="left", padx=(12, 4), pady=8)
        self._total_label = ctk.CTkLabel(bar, text="-", font=ctk.CTkFont(size=14, weight="bold"))
        self._total_label.pack(side="left")

        ctk.CTkButton(bar, text="+ New Wallet", command=self._open_add).pack(
            side="right", padx=8, pady=6
        )
        ctk.CTkButton(
            bar, text="Transfer", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._open_transfer,
        ).pack(side="right")

    def _build_grid(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(tuple(range(_COLUMNS)), weight=1)

    def _message(self, text: str, color="gray60"):
        for w in self._scroll.winfo_children():
            w.destroy()
        ctk.CTkLabel(self._scroll, text=text, text_color=color).grid(
            row=0, column=0, columnspan=_COLUMNS, pady=40
        )

    def _load(self):
        if not self._wallets:
            self._message("Loading...")
        self._loader.run(self._svc.get_all, self._show, lambda msg: self._message(msg, "#F44336"))

    def _show(self, result: tuple[list[Wallet], float]):
        wallets, total = result
        self._wallets = wallets
        self._on_wallets(wallets)
        symbol = self._get_symbol()
        self._total_label.configure(text=format_currency(total, symbol))

        for w in self._scroll.winfo_children():
            w.destroy()
        if not wallets:
            self._message("No wallets yet. Click '+ New Wallet' to add one.")
            return
        for idx, wallet in enumerate(wallets):
            self._make_card(idx // _COLUMNS, idx % _COLUMNS, wallet, symbol)

    def _make_card(self, row: int, col: int, wallet: Wallet, symbol: str):
        card = ctk.CTkFrame(
            self._scroll, fg_color=("gray90", "gray20"), corner_radius=10,
            border_width=2, border_color=wallet.color,
        )
        card.grid(row=row, column=col, padx=6, pady=6, sticky="ew")
        card.grid_columnconfigure(0, weight=1)

        title = f"{wallet.display_icon} {wallet.name}" + ("  ★" if wallet.is_default else "")
        ctk.CTkLabel(
            card, text=title, font=ctk.CTkFont(size=14, weight="bold"), anchor="w",
        ).grid(row=0, column=0, padx=12, pady=(10, 0), sticky="ew")
        ctk.CTkLabel(
            card, text=wallet.type_label, text_color="gray60", anchor="w",
        ).grid(row=1, column=0, padx=12, sticky="ew")
        ctk.CTkLabel(
            card, text=format_currency(wallet.balance, symbol),
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color="#4CAF50" if wallet.balance >= 0 else "#F44336", anchor="w",
        ).grid(row=2, column=0, padx=12, pady=(4, 4), sticky="ew")

        acts = ctk.CTkFrame(card, fg_color="transparent")
        acts.grid(row=3, column=0, padx=8, pady=(0, 10), sticky="w")
        ctk.CTkButton(
            acts, text="Edit", width=50, height=24,
            command=lambda w=wallet: self._open_edit(w),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Transfer", width=70, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda w=wallet: self._open_transfer(w),
        ).pack(side="left", padx=2)

    def _open_add(self):
        form = WalletForm(self.winfo_toplevel(), self._svc)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("wallet")

    def _open_edit(self, wallet: Wallet):
        form = WalletForm(self.winfo_toplevel(), self._svc, wallet=wallet)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("wallet")

    def _open_transfer(self, from_wallet: Wallet | None = None):
        if len(self._wallets) < 2:
            self._message("You need at least two wallets to transfer money.", "#FF9800")
            self.after(2500, self._load)
            return
        form = TransferForm(
            self.winfo_toplevel(), self._svc, self._wallets,
            symbol=self._get_symbol(), from_wallet=from_wallet,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")
