"""
Ticket Board - the set of ticket rows a subscriber can currently see

Rows are refreshed from change events. Local edits go through
apply_optimistic: the patch is shown at once, replaced by the confirmed
row when the write succeeds, and rolled back when it fails. Once closed,
the board ignores everything so late results never reach a gone view.
"""
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from ..domain.enums import ChangeOperation
from ..domain.models import ChangeEvent


Row = Dict[str, Any]


class TicketBoard:
    """Visible ticket rows keyed by ticket_id"""

    def __init__(self, rows: Iterable[Row] = ()):
        self._rows: Dict[str, Row] = {}
        self._closed = False
        for row in rows:
            self._rows[row["ticket_id"]] = dict(row)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, ticket_id: str) -> Optional[Row]:
        row = self._rows.get(ticket_id)
        return dict(row) if row is not None else None

    def rows(self) -> List[Row]:
        return [dict(row) for row in self._rows.values()]

    def __len__(self) -> int:
        return len(self._rows)

    def apply(self, event: ChangeEvent) -> bool:
        """Apply a change event; returns False when discarded"""
        if self._closed or not event.ticket_id:
            return False
        if event.operation == ChangeOperation.DELETE:
            self._rows.pop(event.ticket_id, None)
            return True
        if event.new is None:
            return False
        self._rows[event.ticket_id] = dict(event.new)
        return True

    async def apply_optimistic(
        self,
        ticket_id: str,
        patch: Row,
        commit: Callable[[], Awaitable[Row]]
    ) -> Optional[Row]:
        """
        Patch a row locally, then confirm it with the server write.

        Args:
            ticket_id: Row to patch
            patch: Fields shown immediately
            commit: Performs the write and returns the confirmed row

        Returns:
            The confirmed row, or None if the board closed meanwhile

        Raises:
            Whatever commit raises, after restoring the previous row
        """
        snapshot = self._rows.get(ticket_id)
        if not self._closed:
            self._rows[ticket_id] = {**(snapshot or {"ticket_id": ticket_id}), **patch}

        try:
            confirmed = await commit()
        except Exception:
            if not self._closed:
                if snapshot is None:
                    self._rows.pop(ticket_id, None)
                else:
                    self._rows[ticket_id] = snapshot
            raise

        if self._closed:
            return None
        self._rows[ticket_id] = dict(confirmed)
        return dict(confirmed)

    def close(self) -> None:
        """Stop accepting updates and drop all rows"""
        self._closed = True
        self._rows.clear()
