"""Text predicates and transforms used to pick a reply.

``reverse_preserving_format`` reverses a message unit by unit. A unit is
either a multi-character formatting token (```` ``` ````, ``**``, ``__``,
``~~``) or one user-perceived character: a base code point plus any
combining marks, variation selectors, skin-tone modifiers and zero-width
joiner continuations, a regional-indicator flag pair, or ``\\r\\n``.
"""

from __future__ import annotations

import re
import unicodedata


_GREETINGS = (
    "hi",
    "hello",
    "hey",
    "hola",
    "ciao",
    "salut",
    "hallo",
    "howdy",
    "yo",
    "greetings",
    r"good\s+morning",
    r"good\s+afternoon",
    r"good\s+evening",
)
_GREETING_RE = re.compile(r"\b(?:" + "|".join(_GREETINGS) + r")\b", re.IGNORECASE)

_SHOPPING_KEYWORDS = ("sell", "buy", "shop")

_FORMAT_TOKEN_RE = re.compile(r"```|\*\*|__|~~")

_ZWJ = "\u200d"


def has_greeting(text: str) -> bool:
    return bool(_GREETING_RE.search(text))


def has_shopping_keyword(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in _SHOPPING_KEYWORDS)


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def _is_extender(ch: str) -> bool:
    cp = ord(ch)
    return (
        unicodedata.combining(ch) != 0
        or 0xFE00 <= cp <= 0xFE0F  # variation selectors
        or 0x1F3FB <= cp <= 0x1F3FF  # skin tones
        or 0xE0020 <= cp <= 0xE007F  # emoji tag sequences
        or ch == _ZWJ
    )


def split_units(text: str) -> list[str]:
    """Split text into the atomic units that reversal must not break apart."""
    units: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        token = _FORMAT_TOKEN_RE.match(text, i)
        if token:
            units.append(token.group())
            i = token.end()
            continue

        if text.startswith("\r\n", i):
            units.append("\r\n")
            i += 2
            continue

        j = i + 1
        if _is_regional_indicator(text[i]) and j < n and _is_regional_indicator(text[j]):
            j += 1
        while j < n and (_is_extender(text[j]) or text[j - 1] == _ZWJ):
            if _FORMAT_TOKEN_RE.match(text, j):
                break
            j += 1
        units.append(text[i:j])
        i = j
    return units


def reverse_preserving_format(text: str) -> str:
    return "".join(reversed(split_units(text)))
