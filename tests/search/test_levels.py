from __future__ import annotations

import random

import pytest

from chessrules.engine.board import BLACK, Board
from chessrules.engine.move import parse_uci
from chessrules.engine.movegen import all_legal_moves
from chessrules.search import levels
from chessrules.search.service import SearchResult, SearchService


HANGING_QUEEN_WHITE = "k7/8/8/3q4/8/8/7K/3R4 w - - 0 1"


def test_level_one_plays_a_legal_move() -> None:
    b = Board.startpos()
    mv = levels.choose_move(b, 1, rng=random.Random(7))
    assert mv in all_legal_moves(b)


def test_level_one_is_reproducible_with_seed() -> None:
    b = Board.startpos()
    a = levels.choose_move(b, 1, rng=random.Random(42))
    c = levels.choose_move(b, 1, rng=random.Random(42))
    assert a == c


@pytest.mark.parametrize("level", [2, 3])
def test_low_levels_take_the_only_capture(level: int) -> None:
    mv = levels.choose_move(Board.from_fen(HANGING_QUEEN_WHITE), level, rng=random.Random(1))
    assert mv == parse_uci("d1d5")


def test_greedy_takes_most_valuable_victim() -> None:
    # Rook may take a knight on d4 or a queen on h1
    b = Board.from_fen("k7/8/8/8/3n4/8/K7/3R3q w - - 0 1")
    mv = levels.choose_move(b, 3)
    assert mv == parse_uci("d1h1")


def test_greedy_heads_for_the_centre() -> None:
    mv = levels.choose_move(Board.startpos(), 3)
    assert mv is not None
    assert mv.to_uci() in {"d2d4", "e2e4"}


def test_level_for_black() -> None:
    b = Board.startpos()
    mv = levels.choose_move(b, 2, color=BLACK, rng=random.Random(3))
    assert b.piece_at(mv.from_sq).color == BLACK


def test_no_moves_returns_none() -> None:
    b = Board.from_fen("8/8/8/8/8/kq6/8/K7 w - - 0 1")
    for level in (1, 2, 3):
        assert levels.choose_move(b, level) is None


def test_level_below_one_rejected() -> None:
    with pytest.raises(ValueError):
        levels.choose_move(Board.startpos(), 0)


@pytest.mark.parametrize("level,depth", [(4, 4), (5, 5), (9, 5)])
def test_search_levels_use_capped_depth(monkeypatch, level: int, depth: int) -> None:
    seen = []

    def fake_search(self, board, depth=3, color=None, repetition=None):
        seen.append(depth)
        return SearchResult(None, 0, 1, depth, 0)

    monkeypatch.setattr(SearchService, "search", fake_search)
    levels.choose_move(Board.startpos(), level)
    assert seen == [depth]
    assert levels.search_depth_for_level(level) == depth
