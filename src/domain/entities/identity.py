"""Identity domain entity."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as resolved by the identity provider."""

    id: str
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None
