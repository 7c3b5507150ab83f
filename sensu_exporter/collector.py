"""Prometheus collector for Sensu check results.

The collector is scraped on demand and fetches from Sensu on demand. With the
cache disabled every scrape queries Sensu while holding the collector lock.
With the cache enabled only the first scrape blocks on Sensu; later scrapes
answer from the cached snapshot and kick off a background refresh, so a slow
Sensu API never delays ``/metrics`` past its first response.
"""

import logging
import threading
from typing import Iterator, List, Optional, Sequence, Tuple

from prometheus_client.core import GaugeMetricFamily

from .client import SensuClient
from .errors import SensuAPIError
from .models import CheckResult
from .translate import label_names, translate

log = logging.getLogger(__name__)

METRIC_NAME = "sensu_check_status"
METRIC_HELP = "Sensu Check Status(1:Up, 0:Down)"


class SensuCollector:
    def __init__(self, client: SensuClient, cache: bool = False, include_severity: bool = False):
        self.client = client
        self.cache = cache
        self.include_severity = include_severity
        self._labels = label_names(include_severity)
        # guards _cached and _refreshing, and serializes uncached fetches
        self._lock = threading.Lock()
        self._cached: Optional[Tuple[CheckResult, ...]] = None
        self._refreshing = False
        self._refresh_thread: Optional[threading.Thread] = None

    def _family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(METRIC_NAME, METRIC_HELP, labels=self._labels)

    def describe(self) -> List[GaugeMetricFamily]:
        return [self._family()]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        with self._lock:
            if not self.cache:
                results: Sequence[CheckResult] = self._fetch() or ()
            elif self._cached is None:
                fetched = self._fetch()
                if fetched is not None:
                    self._cached = tuple(fetched)
                results = self._cached or ()
            else:
                results = self._cached
                self._schedule_refresh()

        family = self._family()
        for result in results:
            sample = translate(result, self.include_severity)
            log.debug("%s/%s status=%d", result.client, result.check.name, result.check.status)
            family.add_metric(list(sample.labels), sample.value)
        yield family

    def refresh(self) -> bool:
        """Fetch a fresh snapshot and swap it into the cache.

        Skipped when another refresh is already in flight, so an older fetch
        can never overwrite a newer snapshot. The fetch runs without the lock
        so scrapes keep answering from the old snapshot meanwhile. A failed
        fetch keeps the old snapshot. Returns True when the cache was replaced.
        """
        with self._lock:
            if self._refreshing:
                return False
            self._refreshing = True
        return self._claimed_refresh()

    @property
    def cached_results(self) -> Optional[Tuple[CheckResult, ...]]:
        with self._lock:
            return self._cached

    def _fetch(self) -> Optional[List[CheckResult]]:
        try:
            return self.client.fetch_results()
        except SensuAPIError as e:
            log.error("Query Sensu failed: %s", e, extra={"url": e.url})
            return None

    def _schedule_refresh(self) -> None:
        # caller holds self._lock
        if self._refreshing:
            return
        self._refreshing = True
        self._refresh_thread = threading.Thread(
            target=self._claimed_refresh, name="sensu-cache-refresh", daemon=True
        )
        self._refresh_thread.start()

    def _claimed_refresh(self) -> bool:
        # caller has set self._refreshing
        try:
            fetched = self._fetch()
            if fetched is None:
                return False
            with self._lock:
                self._cached = tuple(fetched)
            log.info("cache refreshed with %d results", len(fetched))
            return True
        finally:
            with self._lock:
                self._refreshing = False


class CachePoller:
    """Refreshes a caching collector on a fixed interval."""

    def __init__(self, collector: SensuCollector, interval: float):
        self.collector = collector
        self.interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="sensu-cache-poller", daemon=True)

    def start(self) -> None:
        log.info("polling Sensu every %.1fs", self.interval)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.collector.refresh()
