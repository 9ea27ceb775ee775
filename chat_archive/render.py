"""
Transcript rendering helpers.

Turns a transcript into the text blob that gets chunked and embedded, builds
the custom metadata attached to every fragment of a chat, and formats
retrieved chat fragments for inclusion in a prompt.
"""

from datetime import datetime, timezone
from typing import Optional

from .models import ChatTranscript, MessageRole

ROLE_LABELS = {
    MessageRole.USER: "User",
    MessageRole.ASSISTANT: "Assistant",
    MessageRole.SYSTEM: "System",
    MessageRole.OTHER: "Other",
}


def render_transcript(transcript: ChatTranscript) -> str:
    """
    Render a transcript as role-prefixed text in chronological order.

    Each message becomes its own paragraph ("User: [time]\\ncontent"),
    so the chunker keeps whole messages together where it can.
    """
    parts = [f"Chat title: {transcript.title}"]
    for message in transcript.messages:
        label = ROLE_LABELS[message.role]
        time_info = f" [{message.timestamp}]" if message.timestamp else ""
        parts.append(f"{label}:{time_info}\n{message.content}")
    return "\n\n".join(parts)


def chat_metadata(
    transcript: ChatTranscript,
    character: Optional[str] = None,
    upload_time: Optional[datetime] = None,
) -> dict[str, str]:
    """
    Build the custom metadata stored with every fragment of a chat.

    Keys: title, chat_id, message_count, upload_time and, when known,
    start_time/end_time (first/last message timestamps) and character.
    """
    upload_time = upload_time or datetime.now(timezone.utc)
    metadata = {
        "title": transcript.title,
        "chat_id": transcript.id,
        "message_count": str(len(transcript.messages)),
        "upload_time": upload_time.isoformat(),
    }

    if transcript.messages:
        first, last = transcript.messages[0], transcript.messages[-1]
        if first.timestamp:
            metadata["start_time"] = first.timestamp
        if last.timestamp:
            metadata["end_time"] = last.timestamp

    if character:
        metadata["character"] = character

    return metadata


def format_chat_context(contents: list[str], source: str) -> str:
    """Format retrieved chat fragments as a numbered block for a prompt."""
    lines = [f"\n\n[Relevant information from {source}]"]
    for i, content in enumerate(contents, start=1):
        lines.append(f"{i}. {content}\n")
    return "\n".join(lines) + "\n"
