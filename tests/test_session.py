"""Unit tests for the conversation session."""
import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from geminichat.credentials import CredentialManager, InMemoryKeyValueStore
from geminichat.errors import (
    AssetError,
    CredentialError,
    TransportError,
    ValidationError,
)
from geminichat.models import InlineAsset, InlineDataPart, Message, Role, TextPart
from geminichat.session import (
    MISSING_KEY_MESSAGE,
    NO_CONTENT_PLACEHOLDER,
    ConversationSession,
)

from conftest import PNG_BASE64, FakeProvider


@pytest.fixture
def image_asset():
    return InlineAsset(mime_type="image/png", data=PNG_BASE64)


class TestAppendUserTurn:
    """Tests for building user turns."""

    def test_text_only(self):
        session = ConversationSession()
        msg = session.append_user_turn("Hello")

        assert msg.role == Role.USER
        assert msg.parts == (TextPart(text="Hello"),)

    def test_text_is_stripped(self):
        msg = ConversationSession().append_user_turn("  Hello \n")
        assert msg.text == "Hello"

    def test_image_without_text_has_single_part(self, image_asset):
        msg = ConversationSession().append_user_turn(None, image_asset)

        assert len(msg.parts) == 1
        assert isinstance(msg.parts[0], InlineDataPart)
        assert msg.parts[0].inline_data == image_asset

    def test_asset_part_comes_before_text(self, image_asset):
        msg = ConversationSession().append_user_turn("What is this?", image_asset)

        assert [p.kind for p in msg.parts] == ["inline_data", "text"]
        assert msg.text == "What is this?"

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t"])
    def test_empty_input_raises_validation_error(self, text):
        with pytest.raises(ValidationError):
            ConversationSession().append_user_turn(text, None)

    def test_does_not_touch_log(self):
        session = ConversationSession()
        session.append_user_turn("Hello")
        assert session.log == ()

    def test_message_is_frozen(self):
        msg = ConversationSession().append_user_turn("Hello")
        with pytest.raises(Exception):
            msg.role = Role.MODEL  # type: ignore


class TestSendTurn:
    """Tests for the request/response exchange."""

    @pytest.mark.asyncio
    async def test_round_trip(self, make_session):
        provider = FakeProvider("Hi there")
        session = make_session(provider)

        reply = await session.send_turn(session.append_user_turn("Hello"))

        assert reply == Message(role=Role.MODEL, parts=(TextPart(text="Hi there"),))
        assert session.log == (
            Message(role=Role.USER, parts=(TextPart(text="Hello"),)),
            Message(role=Role.MODEL, parts=(TextPart(text="Hi there"),)),
        )
        assert session.in_flight is False
        assert session.error is None

    @pytest.mark.asyncio
    async def test_sends_model_and_full_history(self, make_session):
        provider = FakeProvider("first", "second")
        session = make_session(provider, model="gemini-2.5-pro", greeting="Welcome")

        await session.send_turn(session.append_user_turn("one"))
        await session.send_turn(session.append_user_turn("two"))

        model, contents = provider.calls[-1]
        assert model == "gemini-2.5-pro"
        assert [m.text for m in contents] == ["Welcome", "one", "first", "two"]

    @pytest.mark.asyncio
    async def test_empty_reply_uses_placeholder(self, make_session):
        session = make_session(FakeProvider(None))

        reply = await session.send_turn(session.append_user_turn("Hello"))

        assert reply.text == NO_CONTENT_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_missing_credential_issues_no_call(self, provider):
        credentials = CredentialManager(InMemoryKeyValueStore())
        session = ConversationSession(credentials=credentials, provider_factory=lambda key: provider)

        with pytest.raises(CredentialError, match=MISSING_KEY_MESSAGE):
            await session.send_turn(session.append_user_turn("Hello"))

        assert provider.calls == []
        assert session.log == ()
        assert session.in_flight is False
        assert session.error == MISSING_KEY_MESSAGE

    @pytest.mark.asyncio
    async def test_whitespace_credential_counts_as_missing(self, provider, store):
        credentials = CredentialManager(store, api_key="   ")
        session = ConversationSession(credentials=credentials, provider_factory=lambda key: provider)

        with pytest.raises(CredentialError):
            await session.send_turn(session.append_user_turn("Hello"))
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_provider_factory_failure_is_credential_error(self, credentials):
        def broken_factory(key):
            raise ValueError("bad key format")

        session = ConversationSession(credentials=credentials, provider_factory=broken_factory)

        with pytest.raises(CredentialError, match="bad key format"):
            await session.send_turn(session.append_user_turn("Hello"))
        assert session.log == ()

    @pytest.mark.asyncio
    async def test_failed_call_keeps_only_user_turn(self, make_session):
        session = make_session(FakeProvider(ConnectionError("connection reset")))
        user_turn = session.append_user_turn("Hello")

        with pytest.raises(TransportError, match="connection reset"):
            await session.send_turn(user_turn)

        assert session.log == (user_turn,)
        assert session.in_flight is False
        assert session.error == "connection reset"

    @pytest.mark.asyncio
    async def test_chat_errors_pass_through_unwrapped(self, make_session):
        session = make_session(FakeProvider(AssetError("payload too large")))

        with pytest.raises(AssetError):
            await session.send_turn(session.append_user_turn("Hello"))
        assert session.error == "payload too large"

    @pytest.mark.asyncio
    async def test_error_cleared_by_next_success(self, make_session):
        session = make_session(FakeProvider(TransportError("boom"), "ok"))

        with pytest.raises(TransportError):
            await session.send_turn(session.append_user_turn("first"))
        await session.send_turn(session.append_user_turn("second"))

        assert session.error is None
        assert [m.text for m in session.log] == ["first", "second", "ok"]

    @pytest.mark.asyncio
    async def test_second_send_while_busy_is_noop(self, make_session):
        gate = asyncio.Event()
        provider = FakeProvider("Hi there", gate=gate)
        session = make_session(provider)

        first = asyncio.create_task(session.send_turn(session.append_user_turn("one")))
        await asyncio.sleep(0)
        assert session.in_flight is True
        length = len(session.log)

        second = await session.send_turn(session.append_user_turn("two"))

        assert second is None
        assert len(session.log) == length
        assert len(provider.calls) == 1

        gate.set()
        await first
        assert session.in_flight is False
        assert [m.text for m in session.log] == ["one", "Hi there"]

    @pytest.mark.asyncio
    async def test_user_turn_visible_before_reply(self, make_session):
        gate = asyncio.Event()
        session = make_session(FakeProvider("Hi there", gate=gate))
        snapshots = []
        session.subscribe(lambda s: snapshots.append((s.in_flight, len(s.log))))

        task = asyncio.create_task(session.send_turn(session.append_user_turn("Hello")))
        await asyncio.sleep(0)
        assert session.log[-1].text == "Hello"
        gate.set()
        await task

        assert (True, 1) in snapshots
        assert snapshots[-1] == (False, 2)

    @pytest.mark.asyncio
    async def test_cancellation_clears_in_flight(self, make_session):
        session = make_session(FakeProvider("never", gate=asyncio.Event()))

        task = asyncio.create_task(session.send_turn(session.append_user_turn("Hello")))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert session.in_flight is False
        assert [m.role for m in session.log] == [Role.USER]

    @pytest.mark.asyncio
    async def test_pending_file_cleared_after_append(self, make_session, image_asset):
        session = make_session(FakeProvider("A pixel"))
        session.attach(image_asset)

        await session.send_turn(session.append_user_turn(None, session.pending_file))

        assert session.pending_file is None

    @pytest.mark.asyncio
    async def test_provider_rebuilt_when_key_changes(self, credentials):
        keys = []

        def factory(key):
            keys.append(key)
            return FakeProvider("ok")

        session = ConversationSession(credentials=credentials, provider_factory=factory)
        await session.send_turn(session.append_user_turn("one"))
        await session.send_turn(session.append_user_turn("two"))
        await session.set_credential("other-key")
        await session.send_turn(session.append_user_turn("three"))

        assert keys == ["test-key", "other-key"]

    @given(script=st.lists(st.booleans(), min_size=1, max_size=8))
    @settings(deadline=None)
    def test_log_is_append_only(self, script):
        """Property test: earlier log entries never change across sends."""
        replies = ["reply" if ok else TransportError("down") for ok in script]
        session = ConversationSession(
            credentials=CredentialManager(InMemoryKeyValueStore(), api_key="k"),
            provider_factory=lambda key: FakeProvider(*replies),
            greeting="hello",
        )

        async def _run():
            for i, ok in enumerate(script):
                before = session.log
                try:
                    await session.send_turn(session.append_user_turn(f"turn {i}"))
                except TransportError:
                    pass
                after = session.log
                assert after[:len(before)] == before
                assert len(after) == len(before) + (2 if ok else 1)

        asyncio.run(_run())


class TestSubmit:
    """Tests for the full user-input flow."""

    @pytest.mark.asyncio
    async def test_submit_with_file_path(self, make_session, png_file):
        provider = FakeProvider("A tiny pixel")
        session = make_session(provider)

        reply = await session.submit("", path=png_file)

        user_turn = provider.calls[0][1][-1]
        assert len(user_turn.parts) == 1
        assert user_turn.assets[0].mime_type == "image/png"
        assert reply.text == "A tiny pixel"

    @pytest.mark.asyncio
    async def test_submit_uses_pending_file(self, make_session, image_asset):
        provider = FakeProvider("ok")
        session = make_session(provider)
        session.attach(image_asset)

        await session.submit("Describe it")

        assert [p.kind for p in session.log[0].parts] == ["inline_data", "text"]
        assert session.pending_file is None

    @pytest.mark.asyncio
    async def test_submit_empty_raises_and_records(self, make_session, provider):
        session = make_session(provider)

        with pytest.raises(ValidationError):
            await session.submit("   ")

        assert session.error is not None
        assert session.log == ()
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_submit_missing_file_is_asset_error(self, make_session, provider, tmp_path):
        session = make_session(provider)

        with pytest.raises(AssetError):
            await session.submit("hi", path=tmp_path / "missing.png")

        assert session.log == ()
        assert provider.calls == []
        assert session.in_flight is False

    @pytest.mark.asyncio
    async def test_submit_checks_key_before_file(self, provider, tmp_path):
        session = ConversationSession(provider_factory=lambda key: provider)

        with pytest.raises(CredentialError):
            await session.submit("hi", path=tmp_path / "missing.png")


class TestNotifications:
    """Tests for change notification."""

    def test_subscribe_and_unsubscribe(self, image_asset):
        session = ConversationSession()
        seen = []

        def listener(s):
            seen.append(s.pending_file)

        session.subscribe(listener)
        session.subscribe(listener)
        session.attach(image_asset)
        session.unsubscribe(listener)
        session.detach()

        assert seen == [image_asset]

    def test_model_change_notifies(self):
        session = ConversationSession()
        seen = []
        session.subscribe(lambda s: seen.append(s.model))

        session.model = "gemini-2.5-pro"

        assert seen == ["gemini-2.5-pro"]

    @pytest.mark.asyncio
    async def test_debug_callback_receives_events(self, make_session):
        session = make_session(FakeProvider("ok"))
        events = []
        session.set_debug_callback(lambda level, component, message: events.append((level, component)))

        await session.send_turn(session.append_user_turn("Hello"))

        assert ("info", "LLM") in events


class TestSessionCredentials:
    """Tests for credential operations exposed by the session."""

    @pytest.mark.asyncio
    async def test_set_and_clear_credential(self, store):
        session = ConversationSession(credentials=CredentialManager(store))

        await session.set_credential("abc123")
        assert session.has_credential
        assert await store.get("gemini_api_key") == "abc123"

        await session.clear_credential()
        assert not session.has_credential
        assert await store.get("gemini_api_key") is None

    @pytest.mark.asyncio
    async def test_load_credential_reads_store(self):
        store = InMemoryKeyValueStore({"gemini_api_key": "saved"})
        session = ConversationSession(credentials=CredentialManager(store))

        await session.load_credential()

        assert session.credentials.api_key == "saved"

    @pytest.mark.asyncio
    async def test_close_releases_provider(self, make_session):
        provider = FakeProvider("ok")
        session = make_session(provider)
        await session.send_turn(session.append_user_turn("Hello"))

        await session.close()

        assert provider.closed
