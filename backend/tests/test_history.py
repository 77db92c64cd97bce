"""Tests for history compaction."""

from services.history import compact_history, turn_from_record, turns_from_records
from services.media import normalize_media
from services.types import MediaKind, Speaker, StoredTurn, Turn


def _turn(i: int, text: str | None = None) -> Turn:
    speaker = Speaker.USER if i % 2 == 0 else Speaker.ASSISTANT
    return Turn(speaker=speaker, text=f"turn {i}" if text is None else text)


class TestCompactHistory:
    """Tests for compact_history."""

    def test_keeps_last_n(self):
        """Test only the last N turns survive, oldest dropped first."""
        turns = [_turn(i) for i in range(15)]
        result = compact_history(turns, 10)

        assert len(result) == 10
        assert result[0].text == "turn 5"
        assert result[-1].text == "turn 14"

    def test_drops_empty_turns_inside_window(self):
        """Test whitespace-only turns without media are dropped."""
        turns = [_turn(0), _turn(1, "   "), _turn(2, ""), _turn(3)]
        result = compact_history(turns, 10)

        assert [t.text for t in result] == ["turn 0", "turn 3"]

    def test_window_is_taken_before_filtering(self):
        """Test an empty turn in the window does not pull in an older one."""
        turns = [_turn(0), _turn(1), _turn(2, ""), _turn(3)]
        result = compact_history(turns, 3)

        assert [t.text for t in result] == ["turn 1", "turn 3"]

    def test_keeps_media_only_turns(self):
        """Test a turn with media but no text is kept, media untouched."""
        media = normalize_media("https://example.com/a.png")
        turns = [Turn(speaker=Speaker.USER, text="", media=media)]
        result = compact_history(turns, 10)

        assert len(result) == 1
        assert result[0].media is media

    def test_keeps_document_only_turns(self):
        """Test a turn carrying only a document counts as content."""
        document = normalize_media("JVBERi0", MediaKind.DOCUMENT)
        turn = Turn(speaker=Speaker.USER, text="", document=document)

        assert turn.has_content
        assert compact_history([turn], 10) == [turn]

    def test_idempotent(self):
        """Test compacting twice equals compacting once."""
        turns = [_turn(i, "" if i % 4 == 0 else None) for i in range(25)]
        once = compact_history(turns, 10)
        twice = compact_history(once, 10)

        assert once == twice
        assert len(once) <= 10
        assert all(t.has_content for t in once)

    def test_preserves_order(self):
        """Test relative order is unchanged."""
        turns = [_turn(i) for i in range(5)]
        assert compact_history(turns, 10) == turns

    def test_non_positive_window(self):
        """Test a zero window yields nothing."""
        assert compact_history([_turn(0)], 0) == []


class TestTurnFromRecord:
    """Tests for converting stored turns."""

    def test_converts_image(self):
        """Test the stored image becomes a normalized media reference."""
        record = StoredTurn(
            role=Speaker.USER, content="look", image_data_uri="data:image/png;base64,AA"
        )
        turn = turn_from_record(record)

        assert turn.speaker is Speaker.USER
        assert turn.text == "look"
        assert turn.media.mime_type == "image/png"

    def test_converts_list(self):
        """Test a record list keeps its order."""
        records = [
            StoredTurn(role=Speaker.USER, content="q"),
            StoredTurn(role=Speaker.ASSISTANT, content="a"),
        ]
        turns = turns_from_records(records)

        assert [t.speaker for t in turns] == [Speaker.USER, Speaker.ASSISTANT]
        assert turns[1].media is None
