"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chesscore.core.enums import Color, PieceType


@dataclass(frozen=True, slots=True)
class Piece:
    """A (color, kind) pair; board squares hold these or ``None``."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        letter = self.piece_type.symbol
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Inverse of :meth:`__str__`, e.g. ``'N'`` -> white knight.

        Raises:
            ValueError: if *char* is not one of ``PNBRQKpnbrqk``.
        """
        if len(char) != 1 or not char.isalpha():
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, PieceType.from_symbol(char))

    @property
    def value_cp(self) -> int:
        return self.piece_type.value_cp
