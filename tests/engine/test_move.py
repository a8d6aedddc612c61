from __future__ import annotations

import pytest

from chessrules.engine.move import Move, Special, parse_uci, square_to_str, str_to_square


def test_square_conversion() -> None:
    assert str_to_square("a8") == (0, 0)
    assert str_to_square("h1") == (7, 7)
    assert str_to_square("e2") == (6, 4)
    assert square_to_str((4, 3)) == "d4"


@pytest.mark.parametrize("bad", ["", "i1", "a9", "a0", "e22"])
def test_invalid_square_names(bad: str) -> None:
    with pytest.raises(ValueError):
        str_to_square(bad)


def test_square_index_out_of_range() -> None:
    with pytest.raises(ValueError):
        square_to_str((8, 0))


def test_parse_and_serialize() -> None:
    m = parse_uci("e7e8N")
    assert m.from_sq == (1, 4)
    assert m.to_sq == (0, 4)
    assert m.promotion == "n"
    assert m.to_uci() == "e7e8n"


@pytest.mark.parametrize("bad", ["e2", "e2e4e", "e7e8k", "z2e4"])
def test_parse_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_uci(bad)


def test_equality_ignores_tags() -> None:
    generated = Move((6, 4), (4, 4), special=Special.DOUBLE_PUSH)
    assert parse_uci("e2e4") == generated
    assert hash(parse_uci("e2e4")) == hash(generated)


def test_to_dict_shape() -> None:
    d = Move((1, 4), (0, 3), capture=True, special=Special.PROMOTION, promotion="q").to_dict()
    assert d == {
        "from_sq": "e7",
        "to_sq": "d8",
        "capture": True,
        "special": "promotion",
        "promotion": "q",
        "uci": "e7d8q",
    }
