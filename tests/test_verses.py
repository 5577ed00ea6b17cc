import pytest

from opele.errors import VerseLibraryError
from opele.verses import OduEntry, VerseLibrary


def test_default_library_has_zero_index():
    library = VerseLibrary.default()
    entry = library.lookup(0)
    assert entry is not None
    assert entry.name == "Eji Ogbe"
    assert entry.first_verse.translation
    assert 0 in library


def test_missing_entry_is_none():
    assert VerseLibrary.default().lookup(1) is None


def test_entry_without_verses():
    entry = VerseLibrary.default().lookup(102)
    assert entry.name == "Odi Meji"
    assert entry.first_verse is None


def test_from_json_ignores_unknown_verse_fields():
    library = VerseLibrary.from_json(
        '[{"index": 7, "name": "Ogbe-Obara", "alias": ["Ogbe Bara"],'
        ' "verses": [{"translation": "t", "audio": "x.mp3"}]}]'
    )
    entry = library.lookup(7)
    assert entry.alias == ("Ogbe Bara",)
    assert entry.first_verse.translation == "t"
    assert entry.first_verse.chant_yoruba == ""


def test_duplicate_index_keeps_first():
    library = VerseLibrary([OduEntry(index=3, name="first"), OduEntry(index=3, name="second")])
    assert len(library) == 1
    assert library.lookup(3).name == "first"


def test_malformed_database():
    with pytest.raises(VerseLibraryError):
        VerseLibrary.from_json("{not json")
    with pytest.raises(VerseLibraryError):
        VerseLibrary.from_json('[{"name": "no index"}]')


def test_load_from_path(tmp_path):
    path = tmp_path / "db.json"
    path.write_text('[{"index": 255, "name": "Oyeku Meji", "verses": []}]', encoding="utf-8")
    assert VerseLibrary.load(path).lookup(255).name == "Oyeku Meji"
    with pytest.raises(VerseLibraryError):
        VerseLibrary.load(tmp_path / "missing.json")
