"""Request-scoped identity passed explicitly into every workflow call."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Actor:
    """The user performing an operation and the role they act under."""

    user_id: int
    role: str
    email: Optional[str] = None

    def owns(self, owner_id: Optional[int]) -> bool:
        return owner_id is not None and self.user_id == owner_id
