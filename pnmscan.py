# Token scanner for the text headers of Netpbm (PNM) files.
#
# Netpbm headers are whitespace separated ASCII tokens, and a line starting
# with "#" is a comment that may appear anywhere whitespace could, even in the
# middle of a token. The scanner walks a fully buffered file with a single
# forward cursor; reading one byte too far to find the end of a token is undone
# by stepping the cursor back by exactly one.
#
# Copyright 2023 Philip Boulain.
# Licensed under the EUPL-1.2-or-later.

import typing

_WHITESPACE = frozenset(b" \t\n\r\x0b\x0c")
_DIGITS = frozenset(b"0123456789")
_COMMENT = ord("#")
_NEWLINE = ord("\n")

def is_whitespace(ch: int) -> bool:
    return ch in _WHITESPACE

def is_digit(ch: int) -> bool:
    return ch in _DIGITS

def skip_comments(data: bytes, position: int) -> int:
    """Return the position after any comment lines starting at position."""
    length = len(data)
    while (position < length and data[position] == _COMMENT
           and (position == 0 or data[position - 1] == _NEWLINE)):
        newline = data.find(b"\n", position)
        if newline < 0:
            # Comment runs to the end of the data.
            return length
        position = newline + 1
    return position

class NetpbmScanner:
    """Cursor over Netpbm file data, yielding header tokens."""

    def __init__(self, data: typing.Union[bytes, bytearray, memoryview]):
        self.data = bytes(data)
        self.length = len(self.data)
        self.position = 0

    def _retreat(self) -> None:
        # Undo the read of the delimiter that ended a token.
        if self.position > 0:
            self.position -= 1

    def next_character(self) -> typing.Optional[int]:
        """Return the next byte, invisibly skipping comments, or None at end."""
        if self.position >= self.length:
            return None
        self.position = skip_comments(self.data, self.position)
        if self.position >= self.length:
            return None
        ch = self.data[self.position]
        self.position += 1
        return ch

    def next_word(self) -> typing.Optional[bytes]:
        """Return the next run of non-whitespace bytes, or None if none left."""
        word = bytearray()
        while True:
            ch = self.next_character()
            if ch is None:
                break
            if not is_whitespace(ch):
                word.append(ch)
            elif word:
                self._retreat()
                break
        return bytes(word) if word else None

    def next_unsigned_integer(self) -> typing.Optional[int]:
        """Return the next run of decimal digits as an int, or None."""
        # Anything that isn't a digit is skipped over until one turns up, so a
        # leading "-" is ignored rather than making the number negative.
        digits = bytearray()
        while True:
            ch = self.next_character()
            if ch is None:
                break
            if is_digit(ch):
                digits.append(ch)
            elif digits:
                self._retreat()
                break
        return int(digits) if digits else None

    def remaining_data(self) -> bytes:
        """Return the unscanned rest of the data after any whitespace.

        Only the whitespace and comments immediately ahead of the cursor are
        skipped; comments further on are left in the returned bytes.
        """
        while True:
            ch = self.next_character()
            if ch is None:
                break
            if not is_whitespace(ch):
                self._retreat()
                break
        return self.data[self.position:]
