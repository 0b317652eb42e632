"""Tests for collection variant detection."""

import itertools

import pytest
from danki.apkg_reader.detector import CollectionFormat, detect_format
from danki.apkg_reader.errors import NoCollectionFoundError

ALL_ENTRIES = ["collection.anki21b", "collection.anki21", "collection.anki2"]


class TestDetectFormat:
    """Test variant priority."""

    @pytest.mark.parametrize("entry,expected", [
        ("collection.anki21b", CollectionFormat.ANKI21B),
        ("collection.anki21", CollectionFormat.ANKI21),
        ("collection.anki2", CollectionFormat.ANKI2),
    ])
    def test_single_variant(self, entry, expected):
        assert detect_format([entry, "media"]) is expected

    @pytest.mark.parametrize("order", list(itertools.permutations(ALL_ENTRIES)))
    def test_newest_wins_regardless_of_order(self, order):
        assert detect_format(list(order) + ["media"]) is CollectionFormat.ANKI21B

    def test_anki21_beats_legacy_stub(self):
        assert detect_format(["collection.anki2", "collection.anki21"]) is CollectionFormat.ANKI21

    def test_no_collection(self):
        with pytest.raises(NoCollectionFoundError) as exc_info:
            detect_format(["media", "0", "collection.anki3"])

        assert "collection.anki21b" in exc_info.value.message
        assert exc_info.value.context["entries"] == ["0", "collection.anki3", "media"]

    def test_names_must_match_exactly(self):
        with pytest.raises(NoCollectionFoundError):
            detect_format(["deck/collection.anki2", "COLLECTION.ANKI2"])


class TestCollectionFormat:
    """Test variant properties."""

    def test_compressed_variants(self):
        assert CollectionFormat.ANKI21B.compressed
        assert CollectionFormat.ANKI21.compressed
        assert not CollectionFormat.ANKI2.compressed

    def test_priority_order(self):
        assert [fmt.entry_name for fmt in CollectionFormat] == ALL_ENTRIES
