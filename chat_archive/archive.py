"""
Chat Archive - verbatim per-character storage of chat transcripts

Layout on disk:
    <base_dir>/chats/<character>/<chat_id>.json   one ChatRecord per transcript
    <base_dir>/chats/<character>/_index.json      list of ChatInfo for that character

Design:
- Transcripts are saved wholesale and overwrite earlier versions of the
  same id; created_at is carried forward, updated_at is always refreshed
- The index entry is written only after the transcript write succeeded,
  so the index never points at a transcript that does not exist
- A missing or corrupt index is rebuilt from the transcript files
- All files are written via temp file + rename
- One reader/writer lock per character; characters never block each other

Usage:
    from chat_archive import ChatArchive, ChatTranscript

    archive = ChatArchive("data/rag")
    archive.save("Aria", transcript)
    chats = archive.list_chats("Aria")
"""

import json
import logging
import os
import tempfile
import threading
import weakref
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.exceptions import InvalidInputError, NotFoundError, StorageFaultError
from core.locks import ReadWriteLock

from .models import ChatInfo, ChatRecord, ChatTranscript

logger = logging.getLogger(__name__)

INDEX_FILE = "_index.json"
CHAT_SUFFIX = ".json"


class ChatArchive:
    """
    File-based archive of chat transcripts, partitioned by character.
    """

    def __init__(self, base_dir: str):
        """
        Initialize the archive.

        Args:
            base_dir: Root data directory; transcripts go under <base_dir>/chats.
        """
        self.base_dir = Path(base_dir)
        self.chats_dir = self.base_dir / "chats"
        # A lock lives only while some call holds it.
        self._locks: "weakref.WeakValueDictionary[str, ReadWriteLock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def save(self, character: str, transcript: ChatTranscript) -> ChatInfo:
        """
        Save (create or overwrite) a transcript for a character.

        Returns:
            The ChatInfo now listed in the character's index.

        Raises:
            InvalidInputError: If the character or chat id is not a safe name.
            StorageFaultError: If the transcript or index cannot be written.
        """
        _check_name(character, "character")
        _check_chat_id(transcript.id)

        chat_path = self._chat_path(character, transcript.id)
        with self._lock_for(character).write_locked():
            now = datetime.now(timezone.utc)
            created_at = now
            if chat_path.exists():
                try:
                    created_at = self._read_record(chat_path).info.created_at
                except StorageFaultError as e:
                    logger.warning(f"Replacing unreadable transcript {chat_path}: {e}")

            info = ChatInfo(
                id=transcript.id,
                title=transcript.title,
                character=character,
                created_at=created_at,
                updated_at=now,
                message_count=len(transcript.messages),
            )
            record = ChatRecord(info=info, messages=transcript.messages)

            try:
                chat_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageFaultError(f"Cannot create namespace for {character!r}", e) from e
            self._write_json(chat_path, record.model_dump(mode="json"))

            entries = [e for e in self._load_index(character) if e.id != info.id]
            entries.append(info)
            self._write_index(character, entries)

        logger.info(
            f"Saved chat {character}/{transcript.id} ({info.message_count} messages)"
        )
        return info

    def get(self, character: str, chat_id: str) -> ChatTranscript:
        """
        Load a transcript.

        Raises:
            NotFoundError: If no transcript with this id exists for the character.
        """
        return self._get_record(character, chat_id).to_transcript()

    def get_info(self, character: str, chat_id: str) -> ChatInfo:
        """Load the info block of a transcript (NotFoundError if absent)."""
        return self._get_record(character, chat_id).info

    def delete(self, character: str, chat_id: str) -> None:
        """
        Delete a transcript and its index entry.

        Raises:
            NotFoundError: If the transcript does not exist.
            StorageFaultError: If the file or index cannot be updated.
        """
        _check_name(character, "character")
        _check_chat_id(chat_id)
        chat_path = self._chat_path(character, chat_id)

        with self._lock_for(character).write_locked():
            if not chat_path.is_file():
                raise NotFoundError("transcript", f"{character}/{chat_id}")
            try:
                chat_path.unlink()
            except OSError as e:
                raise StorageFaultError(f"Cannot delete transcript {character}/{chat_id}", e) from e

            entries = [e for e in self._load_index(character) if e.id != chat_id]
            self._write_index(character, entries)

        logger.info(f"Deleted chat {character}/{chat_id}")

    def list_characters(self) -> set[str]:
        """Names of all character namespaces; empty if nothing was archived yet."""
        if not self.chats_dir.is_dir():
            return set()
        try:
            return {entry.name for entry in self.chats_dir.iterdir() if entry.is_dir()}
        except OSError as e:
            raise StorageFaultError("Cannot list characters", e) from e

    def list_chats(self, character: str) -> list[ChatInfo]:
        """Index entries of a character; empty for an unknown character."""
        _check_name(character, "character")
        with self._lock_for(character).read_locked():
            return self._load_index(character)

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _lock_for(self, character: str) -> ReadWriteLock:
        with self._locks_guard:
            lock = self._locks.get(character)
            if lock is None:
                lock = self._locks[character] = ReadWriteLock()
            return lock

    def _character_dir(self, character: str) -> Path:
        return self.chats_dir / character

    def _chat_path(self, character: str, chat_id: str) -> Path:
        return self._character_dir(character) / f"{chat_id}{CHAT_SUFFIX}"

    def _index_path(self, character: str) -> Path:
        return self._character_dir(character) / INDEX_FILE

    def _get_record(self, character: str, chat_id: str) -> ChatRecord:
        _check_name(character, "character")
        _check_chat_id(chat_id)
        chat_path = self._chat_path(character, chat_id)
        with self._lock_for(character).read_locked():
            if not chat_path.is_file():
                raise NotFoundError("transcript", f"{character}/{chat_id}")
            return self._read_record(chat_path)

    def _read_record(self, path: Path) -> ChatRecord:
        data = self._read_json(path)
        try:
            return ChatRecord.model_validate(data)
        except ValidationError as e:
            raise StorageFaultError(f"Corrupt transcript {path}", e) from e

    def _load_index(self, character: str) -> list[ChatInfo]:
        index_path = self._index_path(character)
        if not self._character_dir(character).is_dir():
            return []
        if not index_path.exists():
            return self._rebuild_index(character)
        try:
            return [ChatInfo.model_validate(item) for item in self._read_json(index_path)]
        except (StorageFaultError, ValidationError, TypeError) as e:
            logger.warning(f"Rebuilding corrupt index for {character!r}: {e}")
            return self._rebuild_index(character)

    def _rebuild_index(self, character: str) -> list[ChatInfo]:
        entries = []
        for path in sorted(self._character_dir(character).glob(f"*{CHAT_SUFFIX}")):
            if path.name == INDEX_FILE:
                continue
            try:
                entries.append(self._read_record(path).info)
            except StorageFaultError as e:
                logger.warning(f"Leaving unreadable transcript out of the index: {e}")
        entries.sort(key=lambda info: info.created_at)
        return entries

    def _write_index(self, character: str, entries: list[ChatInfo]) -> None:
        self._write_json(
            self._index_path(character),
            [entry.model_dump(mode="json") for entry in entries],
        )

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageFaultError(f"Cannot read {path}", e) from e

    @staticmethod
    def _write_json(path: Path, data: Any) -> None:
        text = json.dumps(data, ensure_ascii=False, indent=2)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageFaultError(f"Cannot write {path}", e) from e


def _check_name(value: str, kind: str) -> None:
    """Reject names that are not a single, visible path component."""
    if (
        not value
        or value != value.strip()
        or value in (".", "..")
        or value.startswith(".")
        or any(sep in value for sep in ("/", "\\", "\x00"))
    ):
        raise InvalidInputError(f"Invalid {kind}: {value!r}")


def _check_chat_id(chat_id: str) -> None:
    _check_name(chat_id, "chat id")
    if chat_id + CHAT_SUFFIX == INDEX_FILE:
        raise InvalidInputError(f"Chat id {chat_id!r} is reserved")
