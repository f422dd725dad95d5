"""
Conflict resolution strategies for sync upserts.

A strategy receives the stored row and the incoming row as plain dicts of
column values (both carrying ``updated_at`` and ``deleted_at``) and returns
the dict that should be stored. The push orchestration never looks inside;
swapping strategies does not touch the transaction code.
"""

from typing import Any, Callable, Dict

from ledback.app.core.timeutils import as_utc, later_of

Row = Dict[str, Any]
MergeStrategy = Callable[[Row, Row], Row]


def incoming_is_newer(existing: Row, incoming: Row) -> bool:
    """Strictly newer ``updated_at`` on the incoming side."""
    existing_ts = as_utc(existing.get("updated_at"))
    incoming_ts = as_utc(incoming.get("updated_at"))
    if existing_ts is None:
        return True
    if incoming_ts is None:
        return False
    return incoming_ts > existing_ts


def last_writer_wins(existing: Row, incoming: Row) -> Row:
    """
    Apply the incoming row only when its ``updated_at`` is strictly newer.

    A stale or identical write leaves the stored row (including a deletion)
    untouched, so replaying a batch is a no-op.
    """
    if not incoming_is_newer(existing, incoming):
        return dict(existing)
    resolved = dict(incoming)
    resolved["updated_at"] = as_utc(incoming.get("updated_at"))
    resolved["deleted_at"] = None
    return resolved


def incoming_wins(existing: Row, incoming: Row) -> Row:
    """
    Field values always come from the incoming row; the timestamp keeps the
    later of the two. Every upsert undeletes.
    """
    resolved = dict(incoming)
    resolved["updated_at"] = later_of(existing.get("updated_at"), incoming.get("updated_at"))
    resolved["deleted_at"] = None
    return resolved


MERGE_STRATEGIES: Dict[str, MergeStrategy] = {
    "last_writer_wins": last_writer_wins,
    "incoming_wins": incoming_wins,
}


def get_merge_strategy(name: str) -> MergeStrategy:
    """Look up a strategy by its configuration name."""
    try:
        return MERGE_STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown sync merge strategy '{name}'. Choose one of: {', '.join(sorted(MERGE_STRATEGIES))}"
        ) from None
