from dataclasses import dataclass
from typing import Optional


@dataclass
class Transaction:
    id: str
    wallet_id: Optional[str]
    type: str               # 'income' | 'expense' | 'transfer'
    category: str
    amount: float
    date: str               # 'YYYY-MM-DD'
    note: str = ""
    workspace: str = "personal"
    is_recurring: bool = False
    wallet_name: str = ""
    created_at: str = ""

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == "income" else -self.amount
