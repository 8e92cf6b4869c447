from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FeeHistoryEntry:
    month: str              # 'YYYY-MM'
    due: float
    paid: float = 0.0
    remaining: float = 0.0
    method: str = ""
    date: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.remaining <= 0


@dataclass
class Student:
    id: str
    name: str
    monthly_fee: float
    discount: float = 0.0
    phone: str = ""
    guardian_phone: str = ""
    class_name: str = ""
    subjects: list[str] = field(default_factory=list)
    admission_fee: float = 0.0
    status: str = "active"  # 'active' | 'inactive'
    start_date: Optional[str] = None
    fee_history: list[FeeHistoryEntry] = field(default_factory=list)

    @property
    def net_fee(self) -> float:
        return self.monthly_fee - self.discount

    @property
    def is_active(self) -> bool:
        return self.status == "active"
