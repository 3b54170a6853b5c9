from __future__ import annotations

from chat_sync.domain.entities.summary import LastMessageSummary


class SummaryProjection:
    """Published last-message summaries keyed by (conversation, viewer)."""

    def __init__(self) -> None:
        self._summaries: dict[tuple[str, str], LastMessageSummary] = {}

    def get(self, conversation_id: str, viewer_id: str) -> LastMessageSummary | None:
        return self._summaries.get((conversation_id, viewer_id))

    def publish(
        self,
        conversation_id: str,
        viewer_id: str,
        summary: LastMessageSummary | None,
    ) -> bool:
        """Store ``summary`` (or drop it when None). Returns True if anything changed."""
        key = (conversation_id, viewer_id)
        if self._summaries.get(key) == summary:
            return False
        if summary is None:
            del self._summaries[key]
        else:
            self._summaries[key] = summary
        return True

    def for_viewer(self, viewer_id: str) -> list[LastMessageSummary]:
        """Contact list order: most recently active conversation first."""
        summaries = [s for (_cid, vid), s in self._summaries.items() if vid == viewer_id]
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)
