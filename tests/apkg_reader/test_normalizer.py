"""Tests for card normalization."""

import pytest
from danki.apkg_reader.models import Card, RawNoteRow
from danki.apkg_reader.normalizer import normalize_row, parse_tags, split_fields


class TestSplitFields:
    """Test field blob splitting."""

    def test_three_fields(self):
        assert split_fields("A\x1fB\x1fC") == ("A", "B<br/>C")

    def test_single_field(self):
        assert split_fields("Only front") == ("Only front", "")

    @pytest.mark.parametrize("blob", ["", None])
    def test_empty_blob(self, blob):
        assert split_fields(blob) == ("", "")

    def test_empty_front_field(self):
        assert split_fields("\x1fBack") == ("", "Back")

    def test_empty_trailing_fields_are_kept(self):
        assert split_fields("Q\x1f\x1f") == ("Q", "<br/>")

    def test_markup_passes_through(self):
        front, back = split_fields('<b>bold</b>\x1f<img src="a.png"><script>x</script>')

        assert front == "<b>bold</b>"
        assert back == '<img src="a.png"><script>x</script>'


class TestParseTags:
    """Test tag string parsing."""

    def test_drops_empty_segments(self):
        assert parse_tags(" foo bar  baz ") == ("foo", "bar", "baz")

    @pytest.mark.parametrize("blob", ["", None, "   "])
    def test_no_tags(self, blob):
        assert parse_tags(blob) == ()

    def test_keeps_duplicates_and_order(self):
        assert parse_tags("b a b") == ("b", "a", "b")

    def test_hierarchical_tags_are_single_labels(self):
        assert parse_tags(" lang::es verbs ") == ("lang::es", "verbs")


class TestNormalizeRow:
    """Test row to card conversion."""

    def test_builds_card(self):
        card = normalize_row(RawNoteRow(card_id=7, fields="Q1\x1fA1", tags=" t1 "), archive_index=2)

        assert card == Card(id=7, front="Q1", back="A1", tags=("t1",), archive_index=2)
        assert card.key == "2:7"

    def test_cards_are_immutable(self):
        card = normalize_row(RawNoteRow(card_id=1, fields="Q", tags=""))

        with pytest.raises(AttributeError):
            card.front = "changed"
