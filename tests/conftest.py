"""Shared fixtures."""

import httpx
import pytest


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CatalogServer:
    """httpx.MockTransport handler that serves queued responses.

    The last queued response repeats once the queue is exhausted.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if callable(response):
            return response(request)
        # Fresh copy so a repeated response can be read again
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


SAMPLE_CATALOG = {
    "101": {"Model": "GeForce RTX 4090", "Vendor": "NVIDIA", "Memory Size (GB)": 24},
    "102": {"Model": "GeForce RTX 3070", "Vendor": "NVIDIA", "Memory": "8 GB"},
    "103": {"Model": "Radeon RX 7900 XTX", "Vendor": "AMD", "Memory Size": "24 GB"},
    "104": {"Model": "A100", "Vendor": "NVIDIA", "Memory": "80 GB"},
    "105": {"Model": "M2 Ultra", "Vendor": "Apple", "Memory": "192 GB"},
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_catalog():
    return {key: dict(record) for key, record in SAMPLE_CATALOG.items()}


def ok(payload) -> httpx.Response:
    return httpx.Response(200, json=payload)


def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)
