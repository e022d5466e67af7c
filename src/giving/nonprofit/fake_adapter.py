"""In-memory nonprofit directory for development and testing."""

from collections.abc import Iterable

from giving.nonprofit.port import NonprofitDirectory, NonprofitProfile


class InMemoryNonprofitDirectory(NonprofitDirectory):
    def __init__(self):
        self._profiles: dict[str, NonprofitProfile] = {}

    def register(self, nonprofit_id: str, name: str, ein: str | None = None, logo: str | None = None) -> NonprofitProfile:
        profile = NonprofitProfile(nonprofit_id=str(nonprofit_id), name=name, ein=ein, logo=logo)
        self._profiles[profile.nonprofit_id] = profile
        return profile

    def profiles(self, nonprofit_ids: Iterable[str]) -> dict[str, NonprofitProfile]:
        return {str(nid): self._profiles[str(nid)] for nid in nonprofit_ids if str(nid) in self._profiles}
