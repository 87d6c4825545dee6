from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class Worker:
    """Thực thể miền (domain): Worker.

    Identity never changes and workers are never deleted, only deactivated.
    `break_day` is the weekly day off, 0=Sunday .. 6=Saturday.
    """

    worker_id: int
    owner_id: int
    name: str
    email: Optional[str] = None
    is_active: bool = True
    custom_start_time: Optional[time] = None
    custom_end_time: Optional[time] = None
    break_day: Optional[int] = None
