"""Source adapter contract shared by every business-data provider."""

from abc import ABC, abstractmethod
from typing import List

from leadscout.models import Candidate


class SourceError(RuntimeError):
    """Raised when a source cannot answer (network, quota, credentials).

    Distinct from an empty result list, which means the source answered and
    found nothing.
    """


class SourceAdapter(ABC):
    name = "source"

    @abstractmethod
    def search(self, location: str, category: str, radius_km: float) -> List[Candidate]:
        """Return candidates near ``location``; ``category`` may be empty for all types."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
