"""HTTP client with timeouts and opt-in retries."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from divi_sync.common.constants import USER_AGENT
from divi_sync.common.errors import DecodeError, TransportError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(TransportError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, accept: str, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": accept}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status_or_retry(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(f"Retryable HTTP status {status} from {url}")
        if status >= 400:
            raise HttpRequestError(f"HTTP status {status} from {url}")

    def _send(
        self,
        method: str,
        url: str,
        *,
        accept: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: TimeoutConfig | None,
    ) -> requests.Response:
        req_timeout = timeout or self.timeout
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                headers=self._headers(accept, headers),
                timeout=(req_timeout.connect, req_timeout.read),
            )
        except requests.RequestException as exc:
            raise HttpRequestError(f"Request to {url} failed: {exc}") from exc
        self._raise_for_status_or_retry(response, url)
        return response

    def request(
        self,
        method: str,
        url: str,
        *,
        accept: str = "*/*",
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> requests.Response:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        def _wrapped() -> requests.Response:
            return self._send(method, url, accept=accept, params=params, headers=headers, timeout=timeout)

        return _wrapped()

    def get_bytes(self, url: str, *, timeout: TimeoutConfig | None = None) -> bytes:
        return self.request("GET", url, accept="text/csv, */*", timeout=timeout).content

    def get_text(self, url: str, *, timeout: TimeoutConfig | None = None) -> str:
        return self.request("GET", url, accept="text/html, */*", timeout=timeout).text

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        response = self.request("GET", url, accept="application/json", params=params, timeout=timeout)
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Invalid JSON payload from {url}") from exc
