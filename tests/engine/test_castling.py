from __future__ import annotations

from chessrules.engine.board import Board, KING, ROOK, WHITE, Piece
from chessrules.engine.game import Game
from chessrules.engine.move import Special, parse_uci, str_to_square
from chessrules.engine.movegen import all_legal_moves


def moves_set(b: Board) -> set[str]:
    return {m.to_uci() for m in all_legal_moves(b)}


def _play(game: Game, *moves: str) -> None:
    for uci in moves:
        game.apply_move(parse_uci(uci))


def test_white_castling_available_when_clear_and_not_in_check() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    castles = {m.to_uci(): m.special for m in all_legal_moves(b) if m.is_castle}
    assert castles == {"e1g1": Special.CASTLE_KINGSIDE, "e1c1": Special.CASTLE_QUEENSIDE}


def test_white_castling_blocked_when_in_check() -> None:
    b = Board.from_fen("4r2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    ms = moves_set(b)
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_through_attacked_square_rejected() -> None:
    # Black rook f8 covers f1, the kingside transit square
    ms = moves_set(Board.from_fen("r3kr2/8/8/8/8/8/8/R3K2R w KQq - 0 1"))
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_castling_into_attacked_square_rejected() -> None:
    ms = moves_set(Board.from_fen("r3k1r1/8/8/8/8/8/8/R3K2R w KQq - 0 1"))
    assert "e1g1" not in ms


def test_queenside_b_file_attack_does_not_matter() -> None:
    # b1 is crossed by the rook only, never by the king
    ms = moves_set(Board.from_fen("1r2k2r/8/8/8/8/8/8/R3K2R w KQk - 0 1"))
    assert "e1c1" in ms


def test_castling_blocked_by_piece_between() -> None:
    ms = moves_set(Board.from_fen("r3k2r/8/8/8/8/8/8/RN2K1NR w KQkq - 0 1"))
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_moves_rook_and_unmake_restores() -> None:
    fen = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
    b = Board.from_fen(fen)
    mv = next(m for m in all_legal_moves(b) if m.to_uci() == "e1c1")
    b.make_move(mv)
    assert b.piece_at(str_to_square("c1")) == Piece(WHITE, KING)
    assert b.piece_at(str_to_square("d1")) == Piece(WHITE, ROOK)
    assert b.piece_at(str_to_square("a1")) is None
    assert b.castling == "kq"
    b.unmake_move()
    assert b.to_fen() == fen


def test_black_kingside_castle() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    mv = next(m for m in all_legal_moves(b) if m.to_uci() == "e8g8")
    b2 = b.apply(mv)
    assert b2.to_fen() == "r4rk1/8/8/8/8/8/8/R3K2R w KQ - 1 2"


def test_rook_away_and_back_does_not_restore_rights() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    _play(game, "h1h2", "a8a7", "h2h1", "a7a8")
    assert game.board.castling == "Qk"
    ms = moves_set(game.board)
    assert "e1g1" not in ms
    assert "e1c1" in ms


def test_king_move_clears_both_rights() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    _play(game, "e1e2", "e8d8", "e2e1", "d8e8")
    assert game.board.castling == ""


def test_capturing_unmoved_rook_on_corner_revokes_right() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/1B6/R3K2R w KQkq - 0 1")
    _play(game, "b2h8")
    assert game.board.castling == "KQq"
    assert "e8g8" not in moves_set(game.board)
