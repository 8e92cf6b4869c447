from dataclasses import dataclass, field
from typing import Optional


@dataclass
class UserSettings:
    currency: str = "PKR"
    notifications_enabled: bool = True
    dark_mode_enabled: bool = False
    biometric_enabled: bool = False


@dataclass
class User:
    id: str
    full_name: str
    email: str
    tuition_center_name: Optional[str] = None
    avatar: Optional[str] = None
    settings: UserSettings = field(default_factory=UserSettings)

    @property
    def initials(self) -> str:
        parts = [p for p in self.full_name.split() if p]
        return "".join(p[0] for p in parts[:2]).upper() or "?"
