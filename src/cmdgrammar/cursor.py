"""Cloneable character cursor over a command string."""

from __future__ import annotations


class Cursor:
    """A view over the not-yet-consumed part of a command string.

    The backing string is never mutated, so ``clone()`` only copies an offset.
    Backtracking is done by keeping a clone and switching back to it.

    ``count`` is informational: it tracks how many characters have been
    consumed, and matchers overwrite it on the cursor handed to a type
    resolver so resolvers can report the token index in their errors.
    """

    __slots__ = ("_text", "_pos", "count")

    def __init__(self, text: str, count: int = 0) -> None:
        self._text = text
        self._pos = 0
        self.count = count

    @property
    def remaining(self) -> str:
        return self._text[self._pos :]

    def __len__(self) -> int:
        return len(self._text) - self._pos

    def __repr__(self) -> str:
        return f"Cursor({self.remaining!r}, count={self.count})"

    def at_end(self) -> bool:
        return self._pos >= len(self._text)

    def peek(self, offset: int = 0) -> str | None:
        """Return the character ``offset`` places ahead, or None past the end."""
        idx = self._pos + offset
        if offset < 0 or idx >= len(self._text):
            return None
        return self._text[idx]

    def consume(self, offset: int = 0) -> str | None:
        """Remove and return the character ``offset`` places ahead.

        Characters after it shift left. Out of range is a no-op returning None.
        """
        idx = self._pos + offset
        if offset < 0 or idx >= len(self._text):
            return None
        ch = self._text[idx]
        if offset == 0:
            self._pos += 1
        else:
            self._text = self._text[:idx] + self._text[idx + 1 :]
        self.count += 1
        return ch

    def next_n(self, n: int) -> str:
        """Return up to ``n`` upcoming characters without consuming them."""
        return self._text[self._pos : self._pos + max(n, 0)]

    def consume_n(self, n: int) -> str:
        """Remove and return up to ``n`` upcoming characters."""
        chunk = self.next_n(n)
        self._pos += len(chunk)
        self.count += len(chunk)
        return chunk

    def clone(self) -> Cursor:
        dup = Cursor.__new__(Cursor)
        dup._text = self._text
        dup._pos = self._pos
        dup.count = self.count
        return dup
