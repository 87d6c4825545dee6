from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Scanner:
    """A physical scan point; redemption may name one as its context."""

    scanner_id: int
    owner_id: int
    name: str
    location: Optional[str] = None
    is_active: bool = True
