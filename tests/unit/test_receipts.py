"""Tests for read receipts."""

from conftest import START_MS

from miniphone_sync.core.receipts import ReadReceipts
from miniphone_sync.models.chat import Chat
from miniphone_sync.models.message import Message, MessageRole
from miniphone_sync.storage.settings import READ_RECEIPTS_KEY, SettingsStore


def make_chat() -> Chat:
    chat = Chat(id="chat_2", name="AI assistant")
    for offset, role in enumerate(
        [MessageRole.USER, MessageRole.ASSISTANT, MessageRole.ASSISTANT]
    ):
        chat.history.append(
            Message(
                id=START_MS + offset,
                chat_id=chat.id,
                role=role,
                content=f"m{offset}",
                timestamp=START_MS + offset,
            )
        )
    return chat


class TestReadReceipts:
    """Test marking and persistence."""

    def test_mark_read_is_idempotent(self, settings: SettingsStore) -> None:
        receipts = ReadReceipts(settings)
        assert receipts.mark_read("chat_2", START_MS) is True
        assert receipts.mark_read("chat_2", START_MS) is False
        assert receipts.is_read("chat_2", START_MS)

    def test_unknown_is_unread(self, settings: SettingsStore) -> None:
        assert not ReadReceipts(settings).is_read("chat_2", START_MS)

    def test_mark_chat_read_only_assistant(self, settings: SettingsStore) -> None:
        receipts = ReadReceipts(settings)
        chat = make_chat()

        marked = receipts.mark_chat_read(chat)

        assert [m.id for m in marked] == [START_MS + 1, START_MS + 2]
        assert not receipts.is_read("chat_2", START_MS)
        assert receipts.mark_chat_read(chat) == []

    def test_persist_and_reload(self, settings: SettingsStore) -> None:
        ReadReceipts(settings).mark_chat_read(make_chat())

        stored = SettingsStore(settings.path).get(READ_RECEIPTS_KEY)
        assert stored == {"chat_2": {str(START_MS + 1): True, str(START_MS + 2): True}}

        reloaded = ReadReceipts(SettingsStore(settings.path))
        reloaded.load()
        assert reloaded.is_read("chat_2", START_MS + 1)
        assert reloaded.as_dict() == {"chat_2": {START_MS + 1: True, START_MS + 2: True}}

    def test_load_skips_malformed(self, settings: SettingsStore) -> None:
        settings.set(READ_RECEIPTS_KEY, {"chat_2": {"abc": True, "17": True}, "chat_1": []})
        receipts = ReadReceipts(settings)
        receipts.load()
        assert receipts.as_dict() == {"chat_2": {17: True}}

    def test_load_non_dict(self, settings: SettingsStore) -> None:
        settings.set(READ_RECEIPTS_KEY, ["nope"])
        receipts = ReadReceipts(settings)
        receipts.load()
        assert receipts.as_dict() == {}
