from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..config import WorkConfig


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how one attendance outcome is reported."""

    @abstractmethod
    def decide(
        self,
        *,
        punch_in: Optional[datetime],
        punch_out: Optional[datetime],
        config: WorkConfig,
    ) -> StatusDecision:
        raise NotImplementedError
