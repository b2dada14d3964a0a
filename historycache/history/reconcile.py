"""Pure merge of cached histories with freshly fetched pages."""

from __future__ import annotations

from typing import Sequence

from .models import History, HistoryUpdate, Record


def combine_fetched(
    incoming: Sequence[Record],
    existing: Sequence[Record] | None,
    before: str | None,
) -> tuple[Record, ...]:
    """Combine a newly fetched page with the records already cached.

    The page is appended only when it continues from the cached tail, i.e.
    the last cached record carries the cursor the page was requested with.
    Any other combination (refresh, race, stale cursor) keeps only the new
    page: the last fetch wins on mismatch. A missing ``before`` never counts
    as a match.
    """

    if existing is None:
        return tuple(incoming)

    if existing and before is not None and existing[-1].cursor == before:
        return tuple(existing) + tuple(incoming)
    return tuple(incoming)


def reconcile(history: History | None, update: HistoryUpdate | None) -> History | None:
    """Apply ``update`` to ``history`` and return the resulting history.

    Updates without a history payload (failures, status changes) leave the
    cached history untouched. ``found_oldest`` is sticky: once true it is
    never reset by a later page.
    """

    if update is None or update.history is None:
        return history

    return History(
        fetched=combine_fetched(
            update.history.fetched,
            history.fetched if history is not None else None,
            update.before,
        ),
        found_oldest=bool(
            update.history.found_oldest or (history is not None and history.found_oldest)
        ),
    )


__all__ = ["combine_fetched", "reconcile"]
