"""Locate balanced JSON-like blocks inside free-form generation output.

Providers wrap JSON in prose, code fences and commentary, and sometimes
emit several fragments in one response. ``iter_blocks`` walks the text once
and yields each top-level ``[...]`` or ``{...}`` substring in order. Bracket
characters inside double-quoted strings are ignored, and a backslash inside
a string consumes the next character.

A block whose brackets never close (a truncated response) ends the scan:
the remainder is dropped rather than yielded as a partial block. Recovering
truncated output is left to the normalizer.
"""

from __future__ import annotations

from collections.abc import Iterator


_OPENERS = "[{"


def _next_opener(text: str, pos: int) -> int:
    """Index of the next ``[`` or ``{`` at or after ``pos``; -1 if none."""
    candidates = [i for i in (text.find(c, pos) for c in _OPENERS) if i != -1]
    return min(candidates) if candidates else -1


def find_block_end(text: str, start: int) -> int:
    """Return the index just past the block opened at ``start``, or -1.

    Square brackets and braces are counted independently; the block ends
    at the first position where both counts are back to zero.
    """
    brackets = 0
    braces = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if escaped:
            escaped = False
            continue
        if in_string:
            if char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            brackets += 1
        elif char == "]":
            brackets -= 1
        elif char == "{":
            braces += 1
        elif char == "}":
            braces -= 1
        else:
            continue
        if brackets == 0 and braces == 0:
            return i + 1
    return -1


def iter_blocks(text: str) -> Iterator[str]:
    """Yield every balanced top-level block in ``text``, left to right."""
    pos = 0
    while pos < len(text):
        start = _next_opener(text, pos)
        if start == -1:
            return
        end = find_block_end(text, start)
        if end == -1:
            # Unterminated: everything after ``start`` belongs to it
            return
        yield text[start:end]
        pos = end


def extract_blocks(text: str) -> list[str]:
    """Materialised form of :func:`iter_blocks`."""
    return list(iter_blocks(text))
