"""Live status of the intensive care register."""

from __future__ import annotations

from typing import Any, Protocol

from divi_sync.common.models import CurrentStatus


class JsonClient(Protocol):
    def get_json(self, url: str) -> Any: ...


def fetch_current_status(client: JsonClient, url: str) -> CurrentStatus:
    return CurrentStatus.from_payload(client.get_json(url))
