"""Identifier case conversion for icon and glyph names."""

import re

_WORD_BOUNDARY = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def split_words(name: str) -> list[str]:
    """Split an identifier into words.

    Splits on runs of non-alphanumeric characters and on lower-to-upper
    case transitions ("arrowLeft", "SVGIcon").
    """
    words: list[str] = []
    for chunk in _WORD_BOUNDARY.split(name):
        if chunk:
            words.extend(part for part in _CAMEL_BOUNDARY.split(chunk) if part)
    return words


def pascal_case(name: str) -> str:
    """Convert an identifier to PascalCase.

    A word after the first that starts with a digit is prefixed with "_",
    so the digit stays readable as a separate word.

    Examples:
        arrow-left -> ArrowLeft
        chevron_down_2 -> ChevronDown_2
        2-columns -> 2Columns
    """
    parts = []
    for index, word in enumerate(split_words(name)):
        if index > 0 and word[0].isdigit():
            parts.append("_")
        parts.append(word[:1].upper() + word[1:].lower())
    return "".join(parts)


def kebab_case(name: str) -> str:
    """Convert an identifier to kebab-case.

    Examples:
        ArrowLeft -> arrow-left
        Chevron Down 2 -> chevron-down-2
    """
    return "-".join(word.lower() for word in split_words(name))
