"""Debounced, paginated court search with stale-response suppression.

Every query, page request or clear takes a new request token; a response is
applied only if its token is still the latest one issued. Results of an
outdated request that arrive late are dropped, so the last issued request
wins rather than the last to arrive.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from courtdesk.domain.errors import friendly_error_message

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from courtdesk.domain.model import Court
    from courtdesk.domain.ports import CourtCatalog

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
NEW_COURT_LABEL = "New Court"


@dataclass(frozen=True, slots=True)
class SearchPage:
    courts: tuple[Court, ...] = ()
    has_more: bool = False

    @classmethod
    def from_courts(cls, courts: Sequence[Court], page_size: int = DEFAULT_PAGE_SIZE) -> SearchPage:
        """A full page means more results may exist; a short page ends the listing."""

        return cls(courts=tuple(courts), has_more=len(courts) >= page_size)


class CourtSearch:
    """Incremental search box over the court catalog."""

    def __init__(
        self,
        catalog: CourtCatalog,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_seconds: float = 0.3,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._catalog = catalog
        self._page_size = page_size
        self._debounce_seconds = debounce_seconds
        self._sleep = sleep
        self._token = 0
        self._term = ""
        self._offset = 0
        self._results: tuple[Court, ...] = ()
        self._has_more = False
        self._is_searching = False
        self._error: str | None = None

    @property
    def term(self) -> str:
        return self._term

    @property
    def results(self) -> tuple[Court, ...]:
        return self._results

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_searching(self) -> bool:
        return self._is_searching

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def new_court_label(self) -> str:
        """Label of the "create a new court" option; offered even before anything is typed."""

        term = self._term.strip()
        if not term:
            return NEW_COURT_LABEL
        return f'{NEW_COURT_LABEL}: "{term}"'

    async def query(self, term: str) -> SearchPage | None:
        """Start a new search for ``term``; returns ``None`` if superseded."""

        token = self._next_token()
        self._term = term
        if self._debounce_seconds > 0:
            await self._sleep(self._debounce_seconds)
            if token != self._token:
                log.debug("Search for %r superseded during debounce", term)
                return None
        return await self._fetch(token, term, offset=0, append=False)

    async def browse(self) -> SearchPage | None:
        """First page for an empty term, issued immediately (search box focused)."""

        token = self._next_token()
        self._term = ""
        return await self._fetch(token, "", offset=0, append=False)

    async def load_more(self) -> SearchPage | None:
        if not self._has_more:
            return None
        token = self._next_token()
        offset = self._offset + self._page_size
        return await self._fetch(token, self._term, offset=offset, append=True)

    def clear(self) -> None:
        self._next_token()
        self._term = ""
        self._offset = 0
        self._results = ()
        self._has_more = False
        self._is_searching = False
        self._error = None

    def _next_token(self) -> int:
        self._token += 1
        return self._token

    async def _fetch(
        self, token: int, term: str, *, offset: int, append: bool
    ) -> SearchPage | None:
        self._is_searching = True
        try:
            result = await self._catalog.search_courts(term, offset)
        except Exception as exc:  # noqa: BLE001
            if token != self._token:
                log.debug("Ignoring failure of stale search for %r", term)
                return None
            self._error = f"Error searching courts: {friendly_error_message(exc)}"
            log.warning(self._error)
            self._results = ()
            self._has_more = False
            self._is_searching = False
            return SearchPage()

        if token != self._token:
            log.debug("Discarding stale search results for %r", term)
            return None

        page = SearchPage.from_courts(result.courts, self._page_size)
        self._results = self._results + page.courts if append else page.courts
        self._offset = offset
        self._has_more = page.has_more
        self._is_searching = False
        self._error = None
        return page
