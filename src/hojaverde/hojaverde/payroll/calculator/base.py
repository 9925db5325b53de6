from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from ..hours import round_hours

Number = Union[Decimal, int, float]

ZERO = Decimal("0")


@dataclass(frozen=True)
class OvertimeSplit:
    night: Decimal = ZERO
    supplementary: Decimal = ZERO
    extraordinary: Decimal = ZERO

    @property
    def has_overtime(self) -> bool:
        return self.night > 0 or self.supplementary > 0 or self.extraordinary > 0

    def rounded(self) -> "OvertimeSplit":
        return OvertimeSplit(
            night=round_hours(self.night),
            supplementary=round_hours(self.supplementary),
            extraordinary=round_hours(self.extraordinary),
        )


class OvertimeClassifier(ABC):
    """Classifier interface (Strategy Pattern for overtime buckets)."""

    @abstractmethod
    def classify(self, worked_hours: Number, standard_daily_hours: Optional[Number] = None) -> OvertimeSplit:
        raise NotImplementedError
