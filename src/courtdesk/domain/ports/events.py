"""Ports for events a review session raises towards its host."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SessionEvents(Protocol):
    def closed(self) -> None: ...

    def record_saved(self, record_id: str, wants_follow_on_entity: bool) -> None: ...

    def request_new_entity(self, initial_term: str) -> None: ...


class NullSessionEvents:
    """Event sink that ignores everything."""

    def closed(self) -> None:
        return None

    def record_saved(self, record_id: str, wants_follow_on_entity: bool) -> None:
        return None

    def request_new_entity(self, initial_term: str) -> None:
        return None
