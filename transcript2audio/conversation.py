"""
Conversation module for transcript2audio package.

Contains the immutable data model shared by the parsers, the cache and the
pipeline, along with its JSON representation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple


@dataclass(frozen=True)
class Utterance:
    """One speaker turn: the speaker label and the words they say."""

    voice: str
    words: str

    def to_dict(self) -> Dict[str, str]:
        return {"voice": self.voice, "words": self.words}


@dataclass(frozen=True)
class Conversation:
    """
    Ordered, immutable sequence of utterances.

    The JSON form is ``{"interjections": [{"voice": ..., "words": ...}]}``.
    It is what the language model is asked to produce and what the cache
    stores on disk.
    """

    utterances: Tuple[Utterance, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable (lists from callers) but always store a tuple.
        object.__setattr__(self, "utterances", tuple(self.utterances))

    def __len__(self) -> int:
        return len(self.utterances)

    def __iter__(self) -> Iterator[Utterance]:
        return iter(self.utterances)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {"interjections": [u.to_dict() for u in self.utterances]}

    @classmethod
    def from_dict(cls, payload: Any) -> "Conversation":
        """
        Build a Conversation from its JSON form.

        Raises:
            ValueError: if payload does not have the expected shape.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        items = payload.get("interjections")
        if not isinstance(items, list):
            raise ValueError("expected an 'interjections' list")

        utterances = []
        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValueError(f"interjection {position} is not an object")
            voice, words = item.get("voice"), item.get("words")
            if not isinstance(voice, str) or not isinstance(words, str):
                raise ValueError(
                    f"interjection {position} needs string 'voice' and 'words' fields"
                )
            utterances.append(Utterance(voice=voice, words=words))
        return cls(tuple(utterances))
