"""Tarot reference data shared by detectors and snapshot generators."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

MAJOR_ARCANA_SUIT = "Major Arcana"

MINOR_SUITS: Tuple[str, ...] = ("Cups", "Wands", "Swords", "Pentacles")

MAJOR_ARCANA: Tuple[str, ...] = (
    "The Fool",
    "The Magician",
    "The High Priestess",
    "The Empress",
    "The Emperor",
    "The Hierophant",
    "The Lovers",
    "The Chariot",
    "Strength",
    "The Hermit",
    "Wheel of Fortune",
    "Justice",
    "The Hanged Man",
    "Death",
    "Temperance",
    "The Devil",
    "The Tower",
    "The Star",
    "The Moon",
    "The Sun",
    "Judgement",
    "The World",
)

# suit -> (season name, description)
SUIT_SEASONS: Dict[str, Tuple[str, str]] = {
    "Cups": ("Emotional Depth", "feelings, relationships, intuition"),
    "Wands": ("Creative Fire", "passion, action, inspiration"),
    "Swords": ("Mental Clarity", "truth, communication, decisions"),
    "Pentacles": ("Grounded Growth", "stability, resources, manifestation"),
    MAJOR_ARCANA_SUIT: ("Soul Journey", "major life lessons and transitions"),
}
DEFAULT_SEASON: Tuple[str, str] = ("Unfolding Journey", "diverse energies at play")

KEYWORD_THEMES: Dict[str, Tuple[str, ...]] = {
    "healing": ("healing", "recovery", "restoration", "peace", "calm"),
    "transformation": ("change", "transformation", "rebirth", "renewal", "evolution"),
    "creativity": ("creativity", "inspiration", "expression", "art", "creation"),
    "action": ("action", "movement", "progress", "momentum", "energy"),
    "reflection": ("reflection", "contemplation", "meditation", "introspection", "wisdom"),
    "truth": ("truth", "clarity", "honesty", "revelation", "insight"),
    "abundance": ("abundance", "prosperity", "wealth", "success", "manifestation"),
    "connection": ("connection", "relationship", "love", "partnership", "community"),
}


def is_major_arcana(card_name: str) -> bool:
    return card_name in MAJOR_ARCANA


def suit_of(card_name: str) -> str:
    """Suit for a card name; anything that is not a minor card is a major."""
    for suit in MINOR_SUITS:
        if card_name.endswith(f"of {suit}"):
            return suit
    return MAJOR_ARCANA_SUIT


def season_for_suit(suit: str) -> Tuple[str, str]:
    return SUIT_SEASONS.get(suit, DEFAULT_SEASON)


def infer_theme_from_keyword(keyword: str) -> Optional[str]:
    lowered = keyword.lower()
    for theme, keywords in KEYWORD_THEMES.items():
        if any(candidate in lowered for candidate in keywords):
            return theme
    return None
