"""Application entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from courtdesk.adapters.backend import HttpReviewBackend
from courtdesk.config import get_review_config
from courtdesk.domain.model import DeclaredType, SourceDocument
from courtdesk.domain.model.ticket import COURT_DATE, DATE_OF_TICKET, REVIEWED_FIELDS
from courtdesk.domain.reconciliation import reconcile
from courtdesk.domain.workflow import ReviewSession

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from courtdesk.config import ReviewConfig
    from courtdesk.domain.ports import ReviewBackend, SessionEvents
    from courtdesk.domain.reconciliation import ReconciliationResult

log = getLogger(__name__)

OFFLINE_FIELD_TYPES: dict[str, DeclaredType] = {
    DATE_OF_TICKET: DeclaredType.DATE,
    COURT_DATE: DeclaredType.DATE,
}


def load_documents(paths: Iterable[Path | str]) -> list[SourceDocument]:
    """Read extraction payload files; file order is ingestion order."""

    documents: list[SourceDocument] = []
    for raw_path in paths:
        path = Path(raw_path)
        documents.append(
            SourceDocument(
                id=str(path),
                display_name=path.name,
                extraction_payload=path.read_text(encoding="utf-8"),
            )
        )
    return documents


def reconcile_files(
    paths: Iterable[Path | str],
    *,
    labels: Mapping[str, str] | None = None,
) -> ReconciliationResult:
    """Reconcile local extraction payload files without a backend."""

    documents = load_documents(paths)
    log.info("Reconciling %d local files", len(documents))
    return reconcile(documents, REVIEWED_FIELDS, OFFLINE_FIELD_TYPES, {}, labels=labels)


def review_case(
    case_id: str,
    *,
    backend: ReviewBackend | None = None,
    events: SessionEvents | None = None,
    config: ReviewConfig | None = None,
) -> ReviewSession:
    """Open a review session and run it until its feeds have settled."""

    return asyncio.run(
        _review_case_async(case_id, backend=backend, events=events, config=config)
    )


async def _review_case_async(
    case_id: str,
    *,
    backend: ReviewBackend | None,
    events: SessionEvents | None,
    config: ReviewConfig | None,
) -> ReviewSession:
    effective_config = config or get_review_config()
    if backend is not None:
        return await _run_session(case_id, backend, events, effective_config)

    async with HttpReviewBackend() as http_backend:
        return await _run_session(case_id, http_backend, events, effective_config)


async def _run_session(
    case_id: str,
    backend: ReviewBackend,
    events: SessionEvents | None,
    config: ReviewConfig,
) -> ReviewSession:
    session = ReviewSession(case_id, backend, events, config)
    await session.start()
    await session.drain()
    log.info(f"Review session for case {case_id} settled in state {session.state}")
    return session
