"""
Tests for the conversation reconciler.

Coverage:
- optimistic append + reconciliation into the confirmed pair
- exact rollback on failure
- in-flight guard and inert submits
- retention cap for the full-page preset
- session adoption, restore and reset
"""

from datetime import datetime, timezone
from itertools import count

import httpx
import pytest

from cepa_chat.chat.chat_types import AssistantMessage, UserMessage, is_optimistic
from cepa_chat.chat.reconciler import ChatConversation, ExchangeState
from cepa_chat.chat.session_store import InMemorySessionStore
from cepa_chat.client.base import APIError
from cepa_chat.config import FULL_PAGE, WIDGET, ChatViewConfig

FIXED_NOW = datetime(2024, 5, 1, 9, 59, tzinfo=timezone.utc)


def _ids(conversation):
    return [m.id for m in conversation.messages]


@pytest.fixture
def temp_ids():
    counter = count(1)
    return lambda: f"temp-{next(counter)}"


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def conversation(fake_transport, store, temp_ids):
    return ChatConversation(fake_transport, store, id_factory=temp_ids, clock=lambda: FIXED_NOW)


class TestOptimisticUpdate:
    def test_begin_appends_optimistic_user_message(self, conversation):
        pending = conversation.begin("  What is CEPA?  ")

        assert pending is not None
        assert pending.query == "What is CEPA?"
        assert conversation.awaiting_response
        assert conversation.state == ExchangeState.AWAITING_RESPONSE
        [message] = conversation.messages
        assert isinstance(message, UserMessage)
        assert message.id == "temp-1"
        assert message.content == "What is CEPA?"
        assert message.created_at == FIXED_NOW
        assert is_optimistic(message)

    def test_begin_clears_previous_error(self, conversation, fake_transport):
        fake_transport.replies = [APIError(500, "boom")]
        conversation.submit("first")
        assert conversation.error == "boom"

        conversation.begin("second")
        assert conversation.error is None

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_input_is_inert(self, conversation, fake_transport, text):
        assert conversation.begin(text) is None
        assert conversation.submit(text) is False
        assert conversation.messages == []
        assert conversation.state == ExchangeState.IDLE
        assert fake_transport.sent == []

    def test_submit_while_awaiting_is_a_no_op(self, conversation, fake_transport):
        pending = conversation.begin("first")
        before = conversation.messages

        assert conversation.begin("second") is None
        assert conversation.submit("second") is False
        assert conversation.messages == before
        assert conversation.pending is pending
        assert fake_transport.sent == []


class TestReconciliation:
    def test_first_exchange_scenario(self, conversation, fake_transport, store, make_reply):
        fake_transport.replies = [make_reply(1, session_id="sess-42", answer="CEPA is a think tank.")]

        assert conversation.submit("What is CEPA?") is True

        user, assistant = conversation.messages
        assert isinstance(user, UserMessage)
        assert (user.id, user.content) == ("u1", "What is CEPA?")
        assert isinstance(assistant, AssistantMessage)
        assert (assistant.id, assistant.content) == ("a1", "CEPA is a think tank.")
        assert assistant.source_document_name == "Annual Report 2023"
        assert assistant.confidence == pytest.approx(0.87)
        assert conversation.session_id == "sess-42"
        assert store.get() == "sess-42"
        assert fake_transport.sent == [("What is CEPA?", None)]
        assert conversation.state == ExchangeState.RECONCILED
        assert not conversation.awaiting_response

    def test_each_send_replaces_optimistic_entry_with_two_messages(self, conversation, fake_transport, make_reply):
        fake_transport.replies = [make_reply(n) for n in range(1, 4)]

        history = []
        for n in range(1, 4):
            previous = _ids(conversation)
            pending = conversation.begin(f"question {n}")
            assert _ids(conversation) == previous + [pending.temp_id]
            assert conversation.complete(pending) is True
            assert _ids(conversation) == previous + [f"u{n}", f"a{n}"]
            history.extend([f"u{n}", f"a{n}"])

        assert _ids(conversation) == history
        assert not any(is_optimistic(m) for m in conversation.messages)

    def test_later_sends_reuse_session_id(self, conversation, fake_transport, make_reply):
        fake_transport.replies = [make_reply(1, session_id="s1"), make_reply(2, session_id="s1")]

        conversation.submit("one")
        conversation.submit("two")

        assert fake_transport.sent == [("one", None), ("two", "s1")]

    def test_session_id_not_replaced_by_later_response(self, conversation, fake_transport, store, make_reply):
        fake_transport.replies = [make_reply(1, session_id="s1"), make_reply(2, session_id="other")]

        conversation.submit("one")
        conversation.submit("two")

        assert conversation.session_id == "s1"
        assert store.get() == "s1"

    def test_resolve_rejects_stale_exchange(self, conversation, fake_transport, make_reply):
        fake_transport.replies = [make_reply(1)]
        pending = conversation.begin("hello")
        conversation.complete(pending)

        with pytest.raises(RuntimeError):
            conversation.complete(pending)


class TestRollback:
    def test_failed_send_restores_previous_list(self, conversation, fake_transport, make_reply):
        fake_transport.replies = [make_reply(1), APIError(503, "Service unavailable")]
        conversation.submit("first")
        before = conversation.messages

        assert conversation.submit("second") is False

        assert conversation.messages == before
        assert conversation.error == "Service unavailable"
        assert conversation.state == ExchangeState.ROLLED_BACK
        assert not conversation.awaiting_response

    def test_network_failure_on_first_message_keeps_no_session(self, conversation, fake_transport, store):
        fake_transport.replies = [APIError(0, "Network error: connection refused")]

        conversation.submit("hello")

        assert conversation.messages == []
        assert conversation.error == "Network error: connection refused"
        assert conversation.session_id is None
        assert store.get() is None

    def test_empty_error_message_uses_default(self, conversation, fake_transport):
        fake_transport.replies = [ValueError()]

        conversation.submit("hello")

        assert conversation.error == "Failed to send message"

    def test_unexpected_error_rolls_back_then_propagates(self, conversation, fake_transport):
        fake_transport.replies = [KeyError("boom")]

        with pytest.raises(KeyError):
            conversation.submit("hello")

        assert conversation.messages == []
        assert not conversation.awaiting_response

    def test_can_retry_after_failure(self, conversation, fake_transport, make_reply):
        fake_transport.replies = [httpx_error(), make_reply(1)]

        assert conversation.submit("hello") is False
        assert conversation.submit("hello") is True
        assert _ids(conversation) == ["u1", "a1"]
        assert conversation.error is None


def httpx_error():
    # Transport errors reach the reconciler already wrapped by BaseHTTPClient
    try:
        raise httpx.ConnectError("unreachable")
    except httpx.ConnectError as exc:
        return APIError(status_code=0, message=f"Network error: {exc}")


class TestRetention:
    def test_full_page_keeps_latest_five_exchanges(self, fake_transport, make_reply):
        fake_transport.replies = [make_reply(n) for n in range(1, 7)]
        conversation = ChatConversation.for_view(fake_transport, FULL_PAGE, InMemorySessionStore())

        for n in range(1, 7):
            conversation.submit(f"question {n}")

        assert len(conversation.messages) == 10
        assert _ids(conversation) == [x for n in range(2, 7) for x in (f"u{n}", f"a{n}")]

    def test_widget_keeps_everything(self, fake_transport, make_reply):
        fake_transport.replies = [make_reply(n) for n in range(1, 7)]
        conversation = ChatConversation.for_view(fake_transport, WIDGET)

        for n in range(1, 7):
            conversation.submit(f"question {n}")

        assert len(conversation.messages) == 12

    def test_widget_ignores_persistent_store(self, fake_transport, make_reply):
        fake_transport.replies = [make_reply(1)]
        persistent = InMemorySessionStore()
        conversation = ChatConversation.for_view(fake_transport, WIDGET, persistent)

        conversation.submit("hello")

        assert conversation.session_id == "sess-1"
        assert persistent.get() is None

    def test_rejects_cap_smaller_than_one_exchange(self, fake_transport):
        view = ChatViewConfig(name="tiny", max_messages=1, persist_session=False)
        with pytest.raises(ValueError):
            ChatConversation.for_view(fake_transport, view)

    @pytest.mark.parametrize("cap", [3, 5, 11])
    def test_rejects_cap_that_would_split_an_exchange(self, fake_transport, cap):
        with pytest.raises(ValueError, match="even"):
            ChatConversation(fake_transport, max_messages=cap)

    def test_even_cap_never_leaves_orphan_reply(self, fake_transport, make_reply):
        fake_transport.replies = [make_reply(n) for n in range(1, 5)]
        conversation = ChatConversation(fake_transport, max_messages=4)

        for n in range(1, 5):
            conversation.submit(f"question {n}")

        assert [m.message_type for m in conversation.messages] == ["user", "assistant"] * 2
        assert _ids(conversation) == ["u3", "a3", "u4", "a4"]


class TestSessionLifecycle:
    def test_restore_loads_persisted_history(self, fake_transport, make_session):
        fake_transport.sessions = {
            "s1": make_session(
                "s1",
                messages=[
                    {"id": "u1", "message_type": "user", "content": "hi", "created_at": "2024-05-01T09:00:00Z"},
                    {
                        "id": "a1",
                        "message_type": "assistant",
                        "content": "hello",
                        "confidence": 0.5,
                        "created_at": "2024-05-01T09:00:01Z",
                    },
                ],
            )
        }
        conversation = ChatConversation(fake_transport, InMemorySessionStore("s1"))

        assert conversation.restore() is True
        assert conversation.session_id == "s1"
        assert _ids(conversation) == ["u1", "a1"]
        assert isinstance(conversation.messages[1], AssistantMessage)

    def test_restore_with_stale_id_degrades_silently(self, fake_transport):
        store = InMemorySessionStore("gone")
        conversation = ChatConversation(fake_transport, store)

        assert conversation.restore() is False
        assert fake_transport.session_lookups == ["gone"]
        assert store.get() is None
        assert conversation.session_id is None
        assert conversation.messages == []
        assert conversation.error is None

    def test_restore_without_saved_id_skips_lookup(self, fake_transport):
        conversation = ChatConversation(fake_transport, InMemorySessionStore())

        assert conversation.restore() is False
        assert fake_transport.session_lookups == []

    def test_new_chat_forgets_local_state(self, conversation, fake_transport, store, make_reply):
        fake_transport.replies = [make_reply(1), APIError(500, "boom"), make_reply(2, session_id="s2")]
        conversation.submit("one")
        conversation.submit("two")

        conversation.new_chat()

        assert conversation.messages == []
        assert conversation.session_id is None
        assert conversation.error is None
        assert store.get() is None

        conversation.submit("three")
        assert fake_transport.sent[-1] == ("three", None)
        assert conversation.session_id == "s2"

    def test_new_chat_ignored_while_awaiting(self, conversation):
        conversation.begin("hello")

        conversation.new_chat()

        assert len(conversation.messages) == 1
        assert conversation.awaiting_response
