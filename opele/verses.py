"""
Verse library.

Index-keyed lookup of the verse database. Entries are JSON objects:
``{index, name, alias?, verses: [{chant_yoruba, translation, message,
prescription}]}``.
"""

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .errors import VerseLibraryError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "odu_database.json"


@dataclass(frozen=True)
class Verse:
    chant_yoruba: str = ""
    translation: str = ""
    message: str = ""
    prescription: str = ""


@dataclass(frozen=True)
class OduEntry:
    """Verse database record for one sign."""
    index: int
    name: str
    verses: Tuple[Verse, ...] = ()
    alias: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def first_verse(self) -> Optional[Verse]:
        return self.verses[0] if self.verses else None

    @classmethod
    def from_dict(cls, data: dict) -> "OduEntry":
        known = set(Verse.__dataclass_fields__)
        verses = tuple(
            Verse(**{k: v for k, v in verse.items() if k in known})
            for verse in data.get("verses", [])
        )
        return cls(
            index=int(data["index"]),
            name=data.get("name", ""),
            verses=verses,
            alias=tuple(data.get("alias", [])),
        )


class VerseLibrary:
    """In-memory verse database keyed by sign index."""

    def __init__(self, entries: List[OduEntry]):
        self._entries: Dict[int, OduEntry] = {}
        for entry in entries:
            if entry.index in self._entries:
                logger.warning("Duplicate verse entry for index %d, keeping the first", entry.index)
                continue
            self._entries[entry.index] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: int) -> bool:
        return index in self._entries

    def lookup(self, index: int) -> Optional[OduEntry]:
        """Entry for a sign index, or None when the library has no verse yet."""
        return self._entries.get(index)

    @classmethod
    def from_json(cls, text: str) -> "VerseLibrary":
        try:
            records = json.loads(text)
            return cls([OduEntry.from_dict(record) for record in records])
        except (ValueError, KeyError, TypeError) as e:
            raise VerseLibraryError(f"Malformed verse database: {e}") from e

    @classmethod
    def load(cls, path: Union[Path, str]) -> "VerseLibrary":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise VerseLibraryError(f"Cannot read verse database {path}: {e}") from e
        return cls.from_json(text)

    @classmethod
    def default(cls) -> "VerseLibrary":
        """Library bundled with the package."""
        text = resources.files("opele.resources").joinpath(DEFAULT_DATABASE).read_text(encoding="utf-8")
        return cls.from_json(text)
