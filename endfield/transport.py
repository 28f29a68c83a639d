import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import requests

from endfield.errors import TransportError

logger = logging.getLogger(__name__)


class Throttle:
    """
    Minimum-interval pacing between events sharing a key.

    ``space(key, interval)`` blocks until ``interval`` seconds have passed since
    the last ``touch(key)``. Keys never touched do not wait.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.clock = clock
        self.sleep = sleep
        self._last: Dict[str, float] = {}

    def space(self, key: str, interval: float) -> float:
        last = self._last.get(key)
        if last is None or interval <= 0:
            return 0.0
        remaining = interval - (self.clock() - last)
        if remaining > 0:
            logger.debug(f"Waiting {remaining:.2f}s before next '{key}' call")
            self.sleep(remaining)
            return remaining
        return 0.0

    def touch(self, key: str) -> None:
        self._last[key] = self.clock()


@dataclass
class Response:
    status: int
    body: Dict[str, Any] = field(default_factory=dict)


class Transport:
    """
    Blocking JSON-over-HTTP transport on a shared ``requests.Session``.

    Calls to the same host are spaced by ``min_interval`` seconds.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        min_interval: float = 0.0,
        throttle: Optional[Throttle] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.min_interval = min_interval
        self.throttle = throttle or Throttle()

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Any] = None,
    ) -> Response:
        host = urlparse(url).netloc
        self.throttle.space(host, self.min_interval)
        try:
            response = self.session.request(
                method.upper(),
                url,
                headers=headers,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method.upper()} {urlparse(url).path} failed: {e}") from e
        finally:
            self.throttle.touch(host)

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"non-json response (HTTP {response.status_code}): {response.text[:200]}",
                status=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise TransportError(
                f"unexpected response (HTTP {response.status_code}): {str(body)[:200]}",
                status=response.status_code,
            )

        logger.debug(f"{method.upper()} {host}{urlparse(url).path} -> HTTP {response.status_code}")
        return Response(status=response.status_code, body=body)

    def close(self) -> None:
        self.session.close()
