"""Emotion extraction for journal-like entries.

Order of preference:
1. explicit emotion tags chosen by the user
2. entry tags matched against the emotion keyword table
3. whole-word keyword search in the free text, first hit per emotion

An entry yields each emotion at most once, however many keywords match.
"""

from __future__ import annotations

import re
from typing import Dict, List, Pattern, Tuple

from cosmicpatterns.models.events import RawEvent

EMOTION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "joy": ("joy", "joyful", "happy", "happiness", "delighted", "elated", "glad"),
    "gratitude": ("grateful", "gratitude", "thankful", "blessed", "appreciative"),
    "calm": ("calm", "peaceful", "serene", "relaxed", "grounded", "centered"),
    "hope": ("hope", "hopeful", "optimistic", "looking forward"),
    "love": ("love", "loving", "affection", "tender", "adore"),
    "anxiety": ("anxious", "anxiety", "worried", "nervous", "uneasy", "overwhelmed", "stressed"),
    "sadness": ("sad", "sadness", "grief", "lonely", "down", "melancholy", "heartbroken"),
    "anger": ("angry", "anger", "frustrated", "irritated", "furious", "resentful"),
    "fear": ("afraid", "fear", "scared", "frightened", "terrified"),
    "restless": ("restless", "unsettled", "agitated", "impatient"),
    "tired": ("tired", "exhausted", "drained", "fatigued", "weary"),
    "inspired": ("inspired", "creative", "motivated", "energized", "excited"),
    "confused": ("confused", "uncertain", "lost", "unsure", "torn"),
}

_KEYWORD_TO_EMOTION: Dict[str, str] = {
    keyword: emotion
    for emotion, keywords in EMOTION_KEYWORDS.items()
    for keyword in (emotion, *keywords)
}

_WORD_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    emotion: tuple(
        re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
        for keyword in keywords
    )
    for emotion, keywords in EMOTION_KEYWORDS.items()
}


def normalize_emotion(value: str) -> str:
    return value.strip().lower()


def emotions_from_tags(tags: Tuple[str, ...] | List[str]) -> List[str]:
    found: List[str] = []
    for tag in tags:
        emotion = _KEYWORD_TO_EMOTION.get(normalize_emotion(tag))
        if emotion and emotion not in found:
            found.append(emotion)
    return found


def emotions_from_text(text: str) -> List[str]:
    found: List[str] = []
    if not text:
        return found
    for emotion, patterns in _WORD_PATTERNS.items():
        for pattern in patterns:
            if pattern.search(text):
                found.append(emotion)
                break
    return found


def extract_emotions(event: RawEvent) -> List[str]:
    """Distinct emotions expressed by an entry."""
    explicit: List[str] = []
    for value in event.emotions:
        emotion = normalize_emotion(value)
        if emotion and emotion not in explicit:
            explicit.append(emotion)
    if explicit:
        return explicit

    tagged = emotions_from_tags(event.tags)
    if tagged:
        return tagged

    return emotions_from_text(event.content)


__all__ = [
    "EMOTION_KEYWORDS",
    "emotions_from_tags",
    "emotions_from_text",
    "extract_emotions",
]
