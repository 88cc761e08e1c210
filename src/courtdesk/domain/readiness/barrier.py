"""Readiness barrier over independent asynchronous feeds.

Each registered feed owns one slot holding its latest outcome. Once every slot
is settled (succeeded or failed) the registered callbacks run synchronously with
an immutable snapshot of all outcomes. A feed may report again at any time; the
latest report replaces the slot (last write wins) and the barrier re-evaluates.

Callbacks fire once per distinct combination of settled outcomes: a re-report
that leaves the snapshot unchanged is a no-op. ``reset`` returns a slot to
unresolved and starts a new settling epoch, so the next settle fires even when
the refreshed data is identical.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Final

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Unresolved:
    """Feed has not reported yet (or was reset)."""


@dataclass(frozen=True, slots=True)
class Succeeded:
    payload: object = None


@dataclass(frozen=True, slots=True)
class Failed:
    error: BaseException | str


type FeedOutcome = Unresolved | Succeeded | Failed

UNRESOLVED: Final = Unresolved()


class UnknownFeedError(KeyError):
    """Raised when reporting an outcome for a feed that was never registered."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown feed: {self.key!r}"


@dataclass(frozen=True, slots=True)
class SettledOutcomes(Mapping[str, FeedOutcome]):
    """Snapshot of every feed's outcome at the moment the barrier settled."""

    entries: tuple[tuple[str, Succeeded | Failed], ...]

    def __getitem__(self, key: str) -> Succeeded | Failed:
        for entry_key, outcome in self.entries:
            if entry_key == key:
                return outcome
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def failed(self) -> bool:
        """Aggregate failure: at least one feed's latest outcome is a failure."""

        return any(isinstance(outcome, Failed) for _, outcome in self.entries)

    @property
    def failures(self) -> dict[str, BaseException | str]:
        return {
            key: outcome.error for key, outcome in self.entries if isinstance(outcome, Failed)
        }

    def succeeded(self, key: str) -> bool:
        return isinstance(self.get(key), Succeeded)

    def payload(self, key: str, default: object = None) -> object:
        outcome = self.get(key)
        if isinstance(outcome, Succeeded):
            return outcome.payload
        return default

    def error(self, key: str) -> BaseException | str | None:
        outcome = self.get(key)
        if isinstance(outcome, Failed):
            return outcome.error
        return None


type SettledCallback = Callable[[SettledOutcomes], None]


class ReadinessBarrier:
    """Gate a decision on N independent feeds, re-firing whenever a feed re-settles."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._slots: dict[str, FeedOutcome] = {}
        self._callbacks: list[SettledCallback] = []
        self._last_fired: SettledOutcomes | None = None
        for key in keys:
            self.register_feed(key)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._slots)

    @property
    def is_settled(self) -> bool:
        return bool(self._slots) and not any(
            isinstance(outcome, Unresolved) for outcome in self._slots.values()
        )

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(key for key, outcome in self._slots.items() if isinstance(outcome, Unresolved))

    @property
    def outcomes(self) -> dict[str, FeedOutcome]:
        return dict(self._slots)

    def outcome(self, key: str) -> FeedOutcome:
        try:
            return self._slots[key]
        except KeyError:
            raise UnknownFeedError(key) from None

    def register_feed(self, key: str) -> None:
        if key in self._slots:
            raise ValueError(f"Feed already registered: {key!r}")
        self._slots[key] = UNRESOLVED

    def on_all_settled(self, callback: SettledCallback) -> None:
        """Register ``callback``; it runs immediately if the barrier is already settled."""

        self._callbacks.append(callback)
        snapshot = self.snapshot()
        if snapshot is not None:
            callback(snapshot)

    def report(self, key: str, outcome: FeedOutcome) -> None:
        if key not in self._slots:
            raise UnknownFeedError(key)
        self._slots[key] = outcome
        log.debug("Feed %s reported %s", key, type(outcome).__name__)
        self._evaluate()

    def reset(self, key: str) -> None:
        """Mark ``key`` unresolved again and forget the last fired combination."""

        if key not in self._slots:
            raise UnknownFeedError(key)
        self._slots[key] = UNRESOLVED
        self._last_fired = None

    def snapshot(self) -> SettledOutcomes | None:
        """Current outcomes, or ``None`` while any feed is unresolved."""

        entries: list[tuple[str, Succeeded | Failed]] = []
        for key, outcome in self._slots.items():
            if isinstance(outcome, Unresolved):
                return None
            entries.append((key, outcome))
        if not entries:
            return None
        return SettledOutcomes(entries=tuple(entries))

    def _evaluate(self) -> None:
        snapshot = self.snapshot()
        if snapshot is None:
            return
        if snapshot == self._last_fired:
            log.debug("Barrier re-settled with unchanged outcomes; not firing")
            return
        self._last_fired = snapshot
        for callback in tuple(self._callbacks):
            callback(snapshot)
