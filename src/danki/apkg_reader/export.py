"""CSV export of cards for flashcard tools that import Term/Definition files."""

import logging
import re
from html.parser import HTMLParser
from pathlib import Path
from typing import Iterable, List, Union

from .config import DEFAULT_EXPORT_FILENAME
from .models import Card

logger = logging.getLogger(__name__)

CSV_HEADER = ("Term", "Definition")

_LINE_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_CHARS_NEEDING_QUOTES = ('"', ',', '\n', '\r')


class _TextExtractor(HTMLParser):
    """Collects the text content of a markup fragment."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []

    def handle_data(self, data: str) -> None:
        self.parts.append(data)


def strip_markup(html: str) -> str:
    """Turn card markup into plain text.

    Line break tags become newlines, other tags are dropped and entities
    are decoded.
    """
    if not html:
        return ""
    extractor = _TextExtractor()
    extractor.feed(_LINE_BREAK_TAG.sub("\n", html))
    extractor.close()
    return "".join(extractor.parts)


def escape_field(text: str) -> str:
    """Quote a CSV field if it contains a quote, comma or line break."""
    if any(char in text for char in _CHARS_NEEDING_QUOTES):
        return '"' + text.replace('"', '""') + '"'
    return text


def cards_to_csv(cards: Iterable[Card]) -> str:
    """Render cards as Term/Definition CSV text without a trailing newline."""
    rows = [",".join(CSV_HEADER)]
    for card in cards:
        rows.append(",".join((
            escape_field(strip_markup(card.front)),
            escape_field(strip_markup(card.back)),
        )))
    return "\n".join(rows)


def save_csv(
    cards: Iterable[Card],
    directory: Union[Path, str] = ".",
    filename: str = DEFAULT_EXPORT_FILENAME
) -> Path:
    """Write cards as CSV.

    Args:
        cards: Cards to export
        directory: Target directory, created if missing
        filename: File name inside the directory

    Returns:
        Path of the written file
    """
    cards = list(cards)
    target = Path(directory) / filename
    target.parent.mkdir(parents=True, exist_ok=True)

    # newline="" keeps line breaks inside quoted fields exactly as rendered
    with open(target, "w", encoding="utf-8", newline="") as f:
        f.write(cards_to_csv(cards))

    logger.info(f"Exported {len(cards)} card(s) to {target}")
    return target
