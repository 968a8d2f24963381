"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from chesscore.core.move import MoveIntent
from chesscore.core.position import Position
from chesscore.core.transition import apply_move
from chesscore.core.validation import validate_move

PlayFn = Callable[..., Position]


def play_tokens(position: Position, *tokens: str) -> Position:
    """Validate and apply coordinate tokens in order."""
    for token in tokens:
        move = validate_move(position, MoveIntent.from_token(token)).unwrap()
        position, _ = apply_move(position, move)
    return position


@pytest.fixture
def initial() -> Position:
    return Position.initial()


@pytest.fixture
def play() -> PlayFn:
    """``play(position, "e2e4", "e7e5", ...)`` returns the resulting position."""
    return play_tokens
