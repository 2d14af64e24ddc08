"""Shared fixtures: an in-memory transport that records requests."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from ch_http.db import ClickHouseClient, ClickHouseConfig, TransportResponse


class FakeTransport:
    """Returns queued responses and records every call."""

    def __init__(self) -> None:
        self.calls: List[Dict] = []
        self.responses: List[TransportResponse] = []
        self.error: Optional[Exception] = None

    def reply(self, body: str = "", status_code: int = 200) -> "FakeTransport":
        self.responses.append(TransportResponse(status_code=status_code, body=body.encode("utf-8")))
        return self

    def __call__(self, method, url, headers, body, timeout):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout}
        )
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return TransportResponse(status_code=200, body=b"")

    @property
    def last(self) -> Dict:
        return self.calls[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport) -> ClickHouseClient:
    return ClickHouseClient(ClickHouseConfig(database="test_db"), transport=transport)
