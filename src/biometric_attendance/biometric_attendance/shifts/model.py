from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class Shift:
    """Default work times a schedule falls back to."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
