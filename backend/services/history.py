"""Conversation history compaction.

Trims persisted turns to a bounded window before they are reused in a
new model request.
"""

from collections.abc import Iterable, Sequence

from services.media import normalize_media
from services.types import StoredTurn, Turn

DEFAULT_MAX_TURNS = 10


def compact_history(turns: Sequence[Turn], max_turns: int = DEFAULT_MAX_TURNS) -> list[Turn]:
    """Keep the last ``max_turns`` turns and drop the empty ones.

    The window is taken first and filtered second, so an empty turn inside
    the window shrinks the result instead of pulling in an older turn.
    Order and media references are preserved.
    """
    if max_turns <= 0:
        return []
    window = list(turns)[-max_turns:]
    return [turn for turn in window if turn.has_content]


def turn_from_record(record: StoredTurn) -> Turn:
    """Snapshot a stored record as a read-only pipeline turn."""
    media = normalize_media(record.image_data_uri) if record.image_data_uri else None
    return Turn(speaker=record.role, text=record.content or "", media=media)


def turns_from_records(records: Iterable[StoredTurn]) -> list[Turn]:
    """Snapshot a stored turn log, oldest first."""
    return [turn_from_record(record) for record in records]
