"""Address geocoding via OpenStreetMap Nominatim, one request at a time."""

import os
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from typing import TypeVar

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from berlin_schools.cache import TTLCache
from berlin_schools.exceptions import GeocodeError
from berlin_schools.utils import DEFAULT_TIMEOUT

NOMINATIM_DOMAIN = "nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "Berlin Schools Map App"
# Nominatim allows one request per second per client.
NOMINATIM_MIN_INTERVAL = 1.1

Coordinates = tuple[float, float]
Geocoder = Callable[[str], Coordinates | None]

T = TypeVar("T")
R = TypeVar("R")

_MISSING = object()


class RateLimitedQueue:
    """Runs tasks one at a time with a minimum spacing between task starts.

    The interval is measured from the start of one task to the start of the
    next, so a slow request counts towards the wait. Any two requests still
    begin at least ``min_interval`` apart. There is no wait before the first
    task and none after the last. The queue is safe to share between
    threads: callers are serialized.
    """

    def __init__(
        self,
        min_interval: float = NOMINATIM_MIN_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_start: float | None = None

    def submit(self, func: Callable[..., R], *args, **kwargs) -> R:
        """Run ``func`` once the spacing since the previous start has elapsed."""
        with self._lock:
            if self._last_start is not None:
                remaining = self._last_start + self.min_interval - self._clock()
                if remaining > 0:
                    self._sleep(remaining)
            self._last_start = self._clock()
            return func(*args, **kwargs)

    def map(self, func: Callable[[T], R], items: Iterable[T]) -> Iterator[tuple[T, R]]:
        """Yield ``(item, func(item))`` for each item, in order."""
        for item in items:
            yield item, self.submit(func, item)


class NominatimGeocoder:
    """Callable that turns a free-text address into ``(longitude, latitude)``.

    Returns None when the service finds nothing. Timeouts and service errors
    raised by geopy become GeocodeError. Pacing is left to RateLimitedQueue.
    """

    def __init__(
        self,
        *,
        user_agent: str | None = None,
        country_codes: str = "de",
        cache: TTLCache | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        domain: str = NOMINATIM_DOMAIN,
    ):
        self.user_agent = (
            user_agent or os.environ.get("BERLIN_SCHOOLS_USER_AGENT") or DEFAULT_USER_AGENT
        )
        self.country_codes = country_codes
        self.cache = cache
        self.timeout = timeout
        self._nominatim = Nominatim(user_agent=self.user_agent, domain=domain, timeout=timeout)

    def __call__(self, address: str) -> Coordinates | None:
        if self.cache is not None:
            cached = self.cache.get(address, _MISSING)
            if cached is not _MISSING:
                return cached
        coords = self._lookup(address)
        if self.cache is not None:
            self.cache.set(address, coords)
        return coords

    def _lookup(self, address: str) -> Coordinates | None:
        try:
            location = self._nominatim.geocode(
                address,
                exactly_one=True,
                country_codes=self.country_codes,
                timeout=self.timeout,
            )
        except GeopyError as e:
            raise GeocodeError(address, f"{type(e).__name__}: {e}") from e

        if location is None:
            return None
        return location.longitude, location.latitude
