"""
Cache module for transcript2audio package.

A content-addressed store of parsed transcripts. Keys are the SHA-256 of the
raw transcript bytes; values are Conversations serialised as JSON. The cache
is best-effort: every storage failure is a miss on read and a no-op on write.
"""

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from platformdirs import user_cache_dir

from .conversation import Conversation

APP_NAME = "transcript2audio"


def default_cache_dir() -> Path:
    """Per-user cache directory for this application."""
    return Path(user_cache_dir(APP_NAME))


def compute_transcript_hash(transcript: bytes) -> str:
    """Hex SHA-256 of the raw transcript bytes, used as the cache key."""
    return hashlib.sha256(transcript).hexdigest()


class TranscriptCache:
    """Directory-backed store with one JSON file per transcript hash."""

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            # put() retries the mkdir; an unusable directory just means misses.
            pass

    def _entry_path(self, key: str) -> Path:
        return self.cache_dir / key[:2] / f"{key}.json"

    def get(self, key: str) -> Optional[Conversation]:
        """Return the cached Conversation for key, or None on any failure."""
        try:
            raw = self._entry_path(key).read_bytes()
            return Conversation.from_dict(json.loads(raw))
        except (OSError, ValueError, RecursionError):
            # Absent, unreadable and corrupt entries all count as a miss.
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors.
            return None

    def put(self, key: str, conversation: Conversation) -> None:
        """Store conversation under key; failures are silently ignored."""
        path = self._entry_path(key)
        tmp_name = None
        try:
            data = json.dumps(conversation.to_dict(), ensure_ascii=False).encode("utf-8")
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".json")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError):
            pass
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
