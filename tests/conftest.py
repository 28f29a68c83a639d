from urllib.parse import urlparse

import pytest

from endfield.transport import Response


class FakeTransport:
    """Replays queued JSON bodies per (method, path) and records every call."""

    def __init__(self, routes=None):
        self.routes = {k: list(v) for k, v in (routes or {}).items()}
        self.calls = []

    def add(self, method, path, *bodies):
        self.routes.setdefault((method, path), []).extend(bodies)

    def request(self, method, url, headers=None, json=None):
        path = urlparse(url).path
        self.calls.append({"method": method, "url": url, "path": path, "headers": headers, "json": json})
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected call: {method} {path}")
        body = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(body, Exception):
            raise body
        return Response(status=200, body=body)

    def paths(self, method=None):
        return [c["path"] for c in self.calls if method is None or c["method"] == method]


class FakeClock:
    def __init__(self, now=1700000000.0):
        self.now = now
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def clock():
    return FakeClock()
