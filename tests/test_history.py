"""Unit tests for outbound request construction."""
from hypothesis import given
from hypothesis import strategies as st

from bananachat.chat import build_current_turn, build_history_turns, build_request
from bananachat.chat.history import IMAGE_PLACEHOLDER_TEXT
from bananachat.conversation import Message, MessageRole


class TestCurrentTurn:
    """Tests for build_current_turn."""

    def test_text_only_prompt(self):
        """Scenario: plain prompt with no history gives one text turn."""
        turns = build_request([], "Hello")

        assert len(turns) == 1
        assert turns[0].role == "user"
        assert [part.text for part in turns[0].parts] == ["Hello"]
        assert not any(part.is_image for part in turns[0].parts)

    def test_images_precede_text(self, png_b64):
        """Scenario: attached images come before the prompt text."""
        turn = build_current_turn("Describe this", [png_b64])

        assert len(turn.parts) == 2
        assert turn.parts[0].is_image
        assert turn.parts[0].data == png_b64
        assert turn.parts[1].text == "Describe this"

    def test_image_only_prompt_has_no_text_part(self, png_b64):
        """Test that an empty prompt adds no text part."""
        turn = build_current_turn("", [png_b64])

        assert len(turn.parts) == 1
        assert turn.parts[0].is_image

    def test_blank_prompt_with_image_has_no_text_part(self, png_b64):
        """Test that a whitespace-only prompt is not sent after the image."""
        turn = build_current_turn("   \n", [png_b64])

        assert len(turn.parts) == 1
        assert turn.parts[0].is_image

    def test_data_uri_prefix_is_stripped(self, png_b64):
        """Test that a data URI prefix never reaches the provider."""
        turn = build_current_turn("x", [f"data:image/png;base64,{png_b64}"])
        assert turn.parts[0].data == png_b64

    def test_media_type_is_sniffed(self, png_b64, jpeg_b64):
        """Test that each image carries its own media type."""
        turn = build_current_turn("", [png_b64, jpeg_b64])

        assert [part.mime_type for part in turn.parts] == ["image/png", "image/jpeg"]

    def test_image_order_is_kept(self, png_b64, jpeg_b64):
        """Test that images keep attachment order."""
        turn = build_current_turn("two", [jpeg_b64, png_b64])
        assert [part.data for part in turn.parts[:2]] == [jpeg_b64, png_b64]


class TestHistoryTurns:
    """Tests for build_history_turns."""

    def test_roles_map_one_to_one(self):
        """Test that internal roles map to user/model."""
        history = [
            Message(role=MessageRole.USER, text="Hi"),
            Message(role=MessageRole.MODEL, text="Hello!"),
        ]
        turns = build_history_turns(history)

        assert [turn.role for turn in turns] == ["user", "model"]
        assert [turn.parts[0].text for turn in turns] == ["Hi", "Hello!"]

    def test_contentless_record_is_skipped(self):
        """Scenario: a stale empty placeholder is not replayed."""
        history = [
            Message(role=MessageRole.USER, text="Hi"),
            Message(role=MessageRole.MODEL, text=""),
            Message(role=MessageRole.USER, text="Anyone there?"),
        ]
        turns = build_request(history, "Hello?")

        assert [turn.role for turn in turns] == ["user", "user", "user"]
        assert [turn.parts[-1].text for turn in turns] == ["Hi", "Anyone there?", "Hello?"]

    def test_history_images_are_not_replayed(self, png_b64):
        """Test that earlier attachments are dropped from history."""
        history = [
            Message(role=MessageRole.USER, text="Look", images=(png_b64,)),
            Message(role=MessageRole.MODEL, text="Nice", images=(png_b64,)),
        ]
        turns = build_request(history, "Again", [png_b64])

        for turn in turns[:-1]:
            assert not any(part.is_image for part in turn.parts)
        assert turns[-1].parts[0].is_image

    def test_image_only_record_gets_stand_in_text(self, png_b64):
        """Test that a record with only images is replayed as a short stand-in."""
        history = [Message(role=MessageRole.USER, images=(png_b64,))]
        turns = build_history_turns(history)

        assert len(turns) == 1
        assert turns[0].role == "user"
        assert [part.text for part in turns[0].parts] == [IMAGE_PLACEHOLDER_TEXT]

    def test_image_only_turn_keeps_alternation(self, png_b64):
        """Scenario: an image-only prompt between two replies is still a user turn."""
        history = [
            Message(role=MessageRole.USER, text="Hi"),
            Message(role=MessageRole.MODEL, text="Hello!"),
            Message(role=MessageRole.USER, images=(png_b64,)),
            Message(role=MessageRole.MODEL, text="A banana"),
        ]
        turns = build_request(history, "Thanks")

        assert [turn.role for turn in turns] == ["user", "model", "user", "model", "user"]
        assert not any(part.is_image for turn in turns[:-1] for part in turn.parts)

    def test_blank_text_with_no_images_is_skipped(self):
        history = [Message(role=MessageRole.USER, text="   ")]
        assert build_history_turns(history) == []

    @given(st.lists(st.tuples(st.sampled_from(["user", "model"]), st.text(max_size=10)), max_size=12))
    def test_history_never_contains_empty_turns(self, records):
        """Property test: every replayed turn has exactly one text part."""
        history = [Message(role=role, text=text) for role, text in records]
        turns = build_history_turns(history)

        assert len(turns) == sum(1 for _, text in records if text.strip())
        for turn in turns:
            assert len(turn.parts) == 1
            assert turn.parts[0].text
