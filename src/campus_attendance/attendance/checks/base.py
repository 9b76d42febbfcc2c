from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..admission import AdmissionContext, Rejection


class AdmissionCheck(ABC):
    """Strategy Pattern: one step of the admission decision.

    Returns None to let the attempt through, a Rejection to stop it.
    """

    @abstractmethod
    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        raise NotImplementedError
