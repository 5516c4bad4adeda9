"""Tests for the SQLite chat log."""

import asyncio

import pytest

from cougar_tutor.chat_log import ChatLog
from cougar_tutor.errors import LoggingError


@pytest.fixture()
def chat_log(tmp_path):
    return ChatLog(db_path=tmp_path / "logs" / "chat_log.db")


def test_write_creates_database(chat_log):
    asyncio.run(chat_log.write("abc", "free_use", "user", "What is a limit?"))
    assert chat_log.db_path.exists()


def test_entries_read_back_in_order(chat_log):
    chat_log.write_sync("abc", "homework", "user", "What is a limit?")
    chat_log.write_sync("abc", "homework", "assistant", "What happens near the point?")
    chat_log.write_sync("other", "free_use", "user", "hello")

    entries = chat_log.get_session_entries("abc")
    assert [(e["role"], e["content"]) for e in entries] == [
        ("user", "What is a limit?"),
        ("assistant", "What happens near the point?"),
    ]
    assert {e["context"] for e in entries} == {"homework"}
    assert all(e["created_at"] for e in entries)


def test_missing_database_has_no_entries(tmp_path):
    assert ChatLog(db_path=tmp_path / "absent.db").get_session_entries("abc") == []


def test_unwritable_path_raises_logging_error(tmp_path):
    # A directory cannot be opened as a database file
    chat_log = ChatLog(db_path=tmp_path)
    with pytest.raises(LoggingError):
        chat_log.write_sync("abc", "free_use", "user", "hi")
