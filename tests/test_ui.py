"""Tests for the Textual TUI using the headless pilot."""
from conftest import FakeProvider, text_fragments
from textual.widgets import TextArea

from bananachat.chat import ChatSession
from bananachat.conversation import Message, MessageRole
from bananachat.ui import BananaChatApp, ChatHistoryWidget, ChatInputBar, MessageView, StatusPanel


async def _submit(app, pilot, text: str) -> None:
    app.query_one("#chat-input", TextArea).text = text
    app.query_one(ChatInputBar)._submit()
    await pilot.pause()
    await app.workers.wait_for_complete()
    await pilot.pause()


class TestBananaChatApp:
    """Tests for the chat flow through the UI."""

    async def test_exchange_is_rendered(self):
        provider = FakeProvider(text_fragments("Hi", " there"))
        app = BananaChatApp(ChatSession(provider))

        async with app.run_test() as pilot:
            await _submit(app, pilot, "Hello")

            views = list(app.query(MessageView))
            assert [view.message.role for view in views] == [MessageRole.USER, MessageRole.MODEL]
            assert views[1].message.text == "Hi there"
            assert not views[1].message.is_streaming
            assert app.query_one(ChatHistoryWidget).get_last_response() == "Hi there"
            assert "READY" in app.query_one(StatusPanel).get_plain_text()

    async def test_blank_input_is_not_sent(self):
        provider = FakeProvider(text_fragments("unused"))
        app = BananaChatApp(ChatSession(provider))

        async with app.run_test() as pilot:
            await _submit(app, pilot, "   ")

            assert provider.calls == []
            assert len(app.session.store) == 0

    async def test_attachments_are_sent_and_cleared(self, png_b64):
        provider = FakeProvider(text_fragments("A banana"))
        app = BananaChatApp(ChatSession(provider))

        async with app.run_test() as pilot:
            input_bar = app.query_one(ChatInputBar)
            input_bar.add_image(png_b64)
            input_bar.add_image(png_b64)
            input_bar.remove_image(1)
            await _submit(app, pilot, "What is it?")

            assert input_bar.images == []
            parts = provider.calls[0][-1].parts
            assert [part.is_image for part in parts] == [True, False]

    async def test_existing_messages_are_shown_on_start(self):
        session = ChatSession(FakeProvider())
        session.store.append(Message(role=MessageRole.USER, text="Earlier"))
        app = BananaChatApp(session)

        async with app.run_test() as pilot:
            await pilot.pause()
            views = list(app.query(MessageView))
            assert len(views) == 1
            assert views[0].message.text == "Earlier"
