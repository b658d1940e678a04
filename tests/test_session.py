"""Unit tests for ChatSession."""
import pytest
from conftest import FakeClock, FakeProvider, text_fragments

from bananachat.chat import (
    ERROR_MESSAGE,
    ChatSession,
    EmptyPromptError,
    ExchangeInProgressError,
    StreamAggregator,
)
from bananachat.conversation import ConversationStore, Message, MessageRole


def _session(provider, clock=None):
    store = ConversationStore()
    aggregator = StreamAggregator(provider, store, clock=clock or FakeClock())
    return ChatSession(provider, store=store, aggregator=aggregator)


class TestSubmit:
    """Tests for ChatSession.submit."""

    async def test_records_user_and_model_messages(self):
        """Test that one exchange appends a user and a model message."""
        session = _session(FakeProvider(text_fragments("Hi", " there")))

        reply = await session.submit("Hello")

        user, model = session.store.messages
        assert user.role == MessageRole.USER
        assert user.text == "Hello"
        assert user.is_streaming is False
        assert model == reply
        assert reply.role == MessageRole.MODEL
        assert reply.text == "Hi there"
        assert reply.latency == 250.0
        assert not session.is_loading

    async def test_first_request_has_one_turn(self):
        """Scenario: empty history sends only the new prompt."""
        provider = FakeProvider(text_fragments("ok"))
        session = _session(provider)

        await session.submit("Hello")

        (turns,) = provider.calls
        assert len(turns) == 1
        assert turns[0].role == "user"
        assert [part.text for part in turns[0].parts] == ["Hello"]

    async def test_history_excludes_current_exchange(self):
        """Test that the new user message is not replayed as history."""
        provider = FakeProvider(text_fragments("ok"))
        session = _session(provider)

        await session.submit("first")
        await session.submit("second")

        turns = provider.calls[-1]
        assert [turn.role for turn in turns] == ["user", "model", "user"]
        assert [turn.parts[-1].text for turn in turns] == ["first", "ok", "second"]

    async def test_stale_placeholder_is_not_replayed(self):
        """Scenario: an empty model record in history is skipped."""
        provider = FakeProvider(text_fragments("ok"))
        session = _session(provider)
        session.store.append(Message(role=MessageRole.USER, text="Hi"))
        session.store.append(Message(role=MessageRole.MODEL, text=""))

        await session.submit("Still there?")

        turns = provider.calls[-1]
        assert [turn.parts[-1].text for turn in turns] == ["Hi", "Still there?"]

    async def test_data_uri_prefix_is_stripped_on_entry(self, png_b64):
        """Test that stored and sent images carry no prefix."""
        provider = FakeProvider(text_fragments("A banana"))
        session = _session(provider)

        await session.submit("Describe this", [f"data:image/png;base64,{png_b64}"])

        user = session.store.messages[0]
        assert user.images == (png_b64,)
        parts = provider.calls[-1][-1].parts
        assert parts[0].data == png_b64
        assert parts[0].mime_type == "image/png"
        assert parts[1].text == "Describe this"

    async def test_image_only_submission(self, png_b64):
        """Test that images without text may be submitted."""
        session = _session(FakeProvider(text_fragments("ok")))
        reply = await session.submit("", [png_b64])
        assert reply.text == "ok"

    async def test_blank_text_with_image_sends_image_only(self, png_b64):
        """Test that whitespace around an image-only submission is not sent."""
        provider = FakeProvider(text_fragments("ok"))
        session = _session(provider)

        await session.submit("   ", [png_b64])

        parts = provider.calls[-1][-1].parts
        assert len(parts) == 1
        assert parts[0].is_image

    async def test_provider_failure_becomes_reply_text(self):
        """Test that failures are reported in band, never raised."""
        session = _session(FakeProvider(fail_before=ConnectionError("offline")))

        reply = await session.submit("Hello")

        assert reply.text == ERROR_MESSAGE
        assert not session.is_loading


class TestSubmitValidation:
    """Tests for rejected submissions."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_prompt_is_rejected(self, text):
        """Test that blank text with no images is never sent."""
        provider = FakeProvider()
        session = _session(provider)

        with pytest.raises(EmptyPromptError):
            await session.submit(text)
        assert provider.calls == []
        assert len(session.store) == 0

    async def test_rejected_while_streaming(self):
        """Test the one-exchange-at-a-time gate."""
        provider = FakeProvider(text_fragments("ok"))
        session = _session(provider)
        in_flight = Message(role=MessageRole.MODEL, is_streaming=True)
        session.store.append(in_flight)

        with pytest.raises(ExchangeInProgressError) as exc_info:
            await session.submit("Hello")
        assert exc_info.value.message_id == in_flight.id
        assert provider.calls == []


class TestLifecycle:
    """Tests for debug logging and cleanup."""

    async def test_debug_callback_reaches_aggregator(self):
        """Test that session and stream events share one callback."""
        events = []
        session = _session(FakeProvider(text_fragments("ok")))
        session.set_debug_callback(lambda level, component, message: events.append(component))

        await session.submit("Hello")

        assert "Chat" in events
        assert "Stream" in events

    async def test_context_manager_closes_provider(self):
        """Test that leaving the session closes the provider."""
        provider = FakeProvider()
        async with ChatSession(provider) as session:
            assert session.provider is provider
        assert provider.closed
