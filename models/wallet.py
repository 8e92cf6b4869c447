from dataclasses import dataclass

from utils.constants import WALLET_TYPES

WALLET_TYPE_LABELS = {t["value"]: t["label"] for t in WALLET_TYPES}
WALLET_TYPE_ICONS = {t["value"]: t["icon"] for t in WALLET_TYPES}


@dataclass
class Wallet:
    id: str
    name: str
    type: str = "cash"      # 'cash' | 'bank' | 'credit_card' | 'e_wallet' | 'other'
    balance: float = 0.0
    color: str = "#6366f1"
    icon: str = ""
    is_default: bool = False

    @property
    def type_label(self) -> str:
        return WALLET_TYPE_LABELS.get(self.type, self.type.title())

    @property
    def display_icon(self) -> str:
        return self.icon or WALLET_TYPE_ICONS.get(self.type, "💰")
