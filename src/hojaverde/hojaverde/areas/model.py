from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class Area:
    """Domain entity: a work zone with its default schedule."""

    area_id: str
    name: str
    default_entry_time: time
    default_exit_time: time
    default_lunch_minutes: int = 30
    default_working_hours: int = 8
