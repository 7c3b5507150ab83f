"""HTTP client for the Sensu results API."""

import logging
from typing import List, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import ProtocolError, TransportError
from .models import CheckResult, DecodeError, decode_results

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0
RESULTS_PATH = "/results"


def _requests_session() -> requests.Session:
    s = requests.Session()
    # a failed fetch is reported as-is; the next scrape is the retry
    retries = Retry(total=0, raise_on_status=False)
    s.mount("https://", HTTPAdapter(max_retries=retries))
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.headers["Accept"] = "application/json"
    return s


def _excerpt(text: str, limit: int = 200) -> str:
    return " ".join(text.split())[:limit]


class SensuClient:
    def __init__(
        self,
        api_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.verify = verify
        self.http = session if session is not None else _requests_session()
        if not verify:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def results_url(self) -> str:
        return self.api_url.rstrip("/") + RESULTS_PATH

    def fetch_results(self) -> List[CheckResult]:
        """Fetch and decode the current check results, in upstream order.

        Raises TransportError when the API cannot be reached within the
        timeout and ProtocolError when it answers with a non-2xx status or a
        body that is not a JSON array of results. Never retries.
        """
        url = self.results_url
        log.debug("GET %s", url)
        try:
            resp = self.http.get(url, timeout=self.timeout, verify=self.verify)
        except requests.RequestException as e:
            raise TransportError(url, f"{type(e).__name__}: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise ProtocolError(url, f"HTTP {resp.status_code} {_excerpt(resp.text)}")

        try:
            payload = resp.json()
        except (ValueError, RecursionError) as e:
            raise ProtocolError(url, f"invalid JSON body: {e}") from e

        try:
            return decode_results(payload)
        except DecodeError as e:
            raise ProtocolError(url, str(e)) from e
