import threading

import pytest

from ipcheck.errors import GeoLookupError
from ipcheck.geo import GeoService
from ipcheck.geo_cache import GeoCache
from ipcheck.models import GeoRecord


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResolver:
    """Stand-in for the ipwho.is resolver that counts calls.

    ``answers`` is consumed in order; each item is a GeoRecord to return or an
    exception to raise. Once exhausted, ``default`` is returned.
    """

    def __init__(self, *answers, default: GeoRecord = GeoRecord("Germany", "DE")) -> None:
        self.answers = list(answers)
        self.default = default
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def resolve(self, ip: str) -> GeoRecord:
        with self._lock:
            self.calls.append(ip)
            answer = self.answers.pop(0) if self.answers else self.default
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def geo(resolver: FakeResolver, clock: ManualClock) -> GeoService:
    return GeoService(resolver, cache=GeoCache(clock=clock), ttl=60)


def lookup_failure(ip: str = "8.8.8.8") -> GeoLookupError:
    return GeoLookupError(ip, "ReadTimeout: timed out")
