"""
Chat Archive Module - verbatim transcript storage per character

Keeps the complete message history of every chat so it can be listed,
fetched and re-indexed later, independent of the vector store.

Quick Start:
    from chat_archive import ChatArchive, ChatTranscript

    archive = ChatArchive("data/rag")
    archive.save("Aria", ChatTranscript(id="c1", title="Hello", messages=[...]))
    print(archive.list_chats("Aria"))
"""

from .archive import CHAT_SUFFIX, INDEX_FILE, ChatArchive
from .models import ChatInfo, ChatMessage, ChatRecord, ChatTranscript, MessageRole
from .render import ROLE_LABELS, chat_metadata, format_chat_context, render_transcript

__all__ = [
    "ChatArchive",
    "INDEX_FILE",
    "CHAT_SUFFIX",
    "ChatInfo",
    "ChatMessage",
    "ChatRecord",
    "ChatTranscript",
    "MessageRole",
    "ROLE_LABELS",
    "chat_metadata",
    "format_chat_context",
    "render_transcript",
]
