"""Lazy crawler over the paginated report archive.

Each archive page lists a table of CSV downloads and links to the following
page, so pages can only be visited one after another in link order.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterator, Protocol
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from divi_sync.common.config_loader import SourceConfig
from divi_sync.common.errors import DecodeError
from divi_sync.common.logging import get_logger, log_debug
from divi_sync.common.models import PageListing


class TextClient(Protocol):
    def get_text(self, url: str) -> str: ...


def _resolve_href(anchor, base_url: str) -> str:
    href = anchor.get("href")
    if href is None or not str(href).strip():
        raise DecodeError("Missing href in <a> tag")
    url = urljoin(base_url, str(href).strip())
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise DecodeError(f"Malformed link in archive page: {href!r}")
    return url


def _find_next_anchor(soup: BeautifulSoup, next_page_label: str):
    for attr in ("title", "aria-label"):
        anchor = soup.find("a", attrs={attr: next_page_label})
        if anchor is not None:
            return anchor
    return None


def parse_archive_page(
    html: str,
    base_url: str,
    *,
    results_table_id: str,
    next_page_label: str,
) -> PageListing:
    soup = BeautifulSoup(html, "html.parser")

    table = soup.find(id=results_table_id)
    if table is None:
        raise DecodeError(f"Can't find results table #{results_table_id}")

    resource_urls = tuple(_resolve_href(anchor, base_url) for anchor in table.find_all("a"))

    next_anchor = _find_next_anchor(soup, next_page_label)
    next_page_url = _resolve_href(next_anchor, base_url) if next_anchor is not None else None

    return PageListing(resource_urls=resource_urls, next_page_url=next_page_url)


class ArchiveLister:
    """Iterator over resource URLs, fetching one archive page per refill.

    The iterator is single-use. A failed page fetch or parse exhausts it; a new
    lister has to be built from the archive root to crawl again.
    """

    def __init__(
        self,
        client: TextClient,
        start_url: str,
        *,
        base_url: str,
        results_table_id: str,
        next_page_label: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.base_url = base_url
        self.results_table_id = results_table_id
        self.next_page_label = next_page_label
        self.logger = logger or get_logger("harvest.listing")
        self.pages_fetched = 0
        self._buffer: deque[str] = deque()
        self._next_page_url: str | None = start_url

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while not self._buffer:
            if self._next_page_url is None:
                raise StopIteration
            page_url, self._next_page_url = self._next_page_url, None
            page = self._fetch_page(page_url)
            self._buffer.extend(page.resource_urls)
            self._next_page_url = page.next_page_url
        return self._buffer.popleft()

    def _fetch_page(self, page_url: str) -> PageListing:
        html = self.client.get_text(page_url)
        page = parse_archive_page(
            html,
            self.base_url,
            results_table_id=self.results_table_id,
            next_page_label=self.next_page_label,
        )
        self.pages_fetched += 1
        for url in page.resource_urls:
            log_debug(self.logger, f"Found URL: {url}", stage="list", source=page_url, event="RESOURCE_FOUND")
        if page.next_page_url:
            log_debug(
                self.logger,
                f"Next url: {page.next_page_url}",
                stage="list",
                source=page_url,
                event="NEXT_PAGE",
            )
        return page


def build_archive_lister(
    client: TextClient,
    source: SourceConfig,
    logger: logging.Logger | None = None,
) -> ArchiveLister:
    return ArchiveLister(
        client,
        source.archive_url,
        base_url=source.base_url,
        results_table_id=source.results_table_id,
        next_page_label=source.next_page_label,
        logger=logger,
    )
