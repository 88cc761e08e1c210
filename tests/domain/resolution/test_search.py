from __future__ import annotations

import asyncio

from courtdesk.domain.model import Court, ResolutionHints
from courtdesk.domain.ports import CatalogSaveResult, CatalogSearchResult
from courtdesk.domain.resolution import CourtSearch, SearchPage


def _courts(prefix: str, count: int) -> tuple[Court, ...]:
    return tuple(Court(id=f"{prefix}-{index}", name=f"{prefix} {index}") for index in range(count))


class FakeCatalog:
    def __init__(self, pages: dict[tuple[str, int], tuple[Court, ...]] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[tuple[str, int]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.error: Exception | None = None

    async def search_courts(
        self, term: str, offset: int = 0, hints: ResolutionHints | None = None
    ) -> CatalogSearchResult:
        self.calls.append((term, offset))
        gate = self.gates.get(term)
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        return CatalogSearchResult(courts=self.pages.get((term, offset), ()))

    async def create_court(self, draft: Court) -> CatalogSaveResult:
        raise NotImplementedError

    async def update_court(self, court_id: str, draft: Court) -> CatalogSaveResult:
        raise NotImplementedError


def test_full_page_signals_more_results() -> None:
    assert SearchPage.from_courts(_courts("c", 10)).has_more is True
    assert SearchPage.from_courts(_courts("c", 9)).has_more is False
    assert SearchPage.from_courts(()).has_more is False


def test_query_and_load_more_append_pages() -> None:
    catalog = FakeCatalog({("metro", 0): _courts("a", 10), ("metro", 10): _courts("b", 3)})
    search = CourtSearch(catalog, debounce_seconds=0)

    async def run() -> None:
        first = await search.query("metro")
        assert first is not None
        assert search.has_more is True

        second = await search.load_more()
        assert second is not None
        assert len(second.courts) == 3

    asyncio.run(run())

    assert catalog.calls == [("metro", 0), ("metro", 10)]
    assert len(search.results) == 13
    assert search.has_more is False
    assert search.is_searching is False


def test_load_more_without_more_results_is_a_no_op() -> None:
    catalog = FakeCatalog({("x", 0): _courts("a", 2)})
    search = CourtSearch(catalog, debounce_seconds=0)

    async def run() -> None:
        await search.query("x")
        assert await search.load_more() is None

    asyncio.run(run())

    assert catalog.calls == [("x", 0)]


def test_late_response_of_superseded_query_is_discarded() -> None:
    catalog = FakeCatalog({("old", 0): _courts("old", 2), ("new", 0): _courts("new", 1)})
    search = CourtSearch(catalog, debounce_seconds=0)

    async def run() -> SearchPage | None:
        catalog.gates["old"] = asyncio.Event()
        old_task = asyncio.create_task(search.query("old"))
        await asyncio.sleep(0)
        await search.query("new")
        catalog.gates["old"].set()
        return await old_task

    stale = asyncio.run(run())

    assert stale is None
    assert [court.id for court in search.results] == ["new-0"]
    assert search.term == "new"


def test_debounce_only_issues_the_last_term() -> None:
    catalog = FakeCatalog({("metro co", 0): _courts("m", 1)})
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)
        await asyncio.sleep(0)

    search = CourtSearch(catalog, debounce_seconds=0.3, sleep=fake_sleep)

    async def run() -> list[SearchPage | None]:
        return list(await asyncio.gather(search.query("metro"), search.query("metro co")))

    superseded, latest = asyncio.run(run())

    assert superseded is None
    assert latest is not None
    assert catalog.calls == [("metro co", 0)]
    assert delays == [0.3, 0.3]


def test_failure_sets_error_text_and_empties_results() -> None:
    catalog = FakeCatalog()
    catalog.error = RuntimeError("catalog offline")
    search = CourtSearch(catalog, debounce_seconds=0)

    page = asyncio.run(search.query("metro"))

    assert page == SearchPage()
    assert search.error == "Error searching courts: catalog offline"
    assert search.results == ()


def test_browse_and_new_court_label() -> None:
    catalog = FakeCatalog({("", 0): _courts("d", 10)})
    search = CourtSearch(catalog, debounce_seconds=0)

    asyncio.run(search.browse())

    assert search.new_court_label == "New Court"
    assert len(search.results) == 10

    search.clear()
    assert search.results == ()

    async def typed() -> None:
        await search.query("  Metro Court ")

    asyncio.run(typed())
    assert search.new_court_label == 'New Court: "Metro Court"'
