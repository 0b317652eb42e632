"""Tag helpers for choosing what to study."""

from typing import Iterable, List, Sequence

from .models import Card


def collect_tags(cards: Iterable[Card]) -> List[str]:
    """Distinct tags across all cards, sorted."""
    return sorted({tag for card in cards for tag in card.tags})


def filter_by_tags(cards: Sequence[Card], selected: Iterable[str]) -> List[Card]:
    """Cards carrying at least one of the selected tags.

    An empty selection means studying everything, so all cards are returned.
    The returned list holds the same card objects, in their original order.
    """
    wanted = set(selected)
    if not wanted:
        return list(cards)
    return [card for card in cards if wanted.intersection(card.tags)]
