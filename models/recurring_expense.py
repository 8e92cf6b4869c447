from dataclasses import dataclass
from typing import Optional


@dataclass
class RecurringExpense:
    id: str
    name: str
    amount: float
    category: str
    wallet_id: Optional[str]
    frequency: str                          # 'weekly' | 'monthly' | 'yearly'
    start_month: str                        # 'YYYY-MM'
    day_of_month: int = 1                   # 1-31, not clamped to month length
    end_month: Optional[str] = None         # 'YYYY-MM'
    last_processed_month: Optional[str] = None
    status: str = "active"                  # 'active' | 'paused' | 'completed'
    workspace: str = "personal"
    wallet_name: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == "active"
