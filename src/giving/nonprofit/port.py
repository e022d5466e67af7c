"""Nonprofit directory port (abstract interface).

Nonprofits themselves (name, EIN, verification) are owned by the
marketplace's nonprofit administration. The ledger only needs display
metadata to label pending summaries and payout history, so it reads it
through this port.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class NonprofitProfile:
    """Display metadata for a nonprofit."""

    nonprofit_id: str
    name: str
    ein: str | None = None
    logo: str | None = None


class NonprofitDirectory(ABC):
    """Abstract nonprofit lookup."""

    @abstractmethod
    def profiles(self, nonprofit_ids: Iterable[str]) -> dict[str, NonprofitProfile]:
        """Return profiles keyed by id. Unknown ids are left out."""
        ...
