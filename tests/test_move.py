import pytest

from uciclient.engine.move import Move
from uciclient.protocol.errors import MalformedMoveText

FILES = "abcdefgh"
RANKS = "12345678"


def test_from_uci_splits_squares_and_promotion():
    move = Move.from_uci("e7e8q")
    assert move.from_square == "e7"
    assert move.to_square == "e8"
    assert move.promotion == "q"
    assert Move.from_uci("e2e4").promotion is None


def test_round_trip_every_square_pair():
    squares = [f + r for f in FILES for r in RANKS]
    for from_square in squares:
        for to_square in squares:
            for promotion in (None, "q", "r", "b", "n"):
                move = Move(from_square, to_square, promotion)
                text = move.uci()
                assert Move.from_uci(text) == move
                assert Move.from_uci(text).uci() == text


@pytest.mark.parametrize("text", ["", "e", "e2", "e2e"])
def test_short_text_is_rejected(text):
    with pytest.raises(MalformedMoveText):
        Move.from_uci(text)


@pytest.mark.parametrize("text", ["e2e4qq", "i2e4", "e9e4", "e2e4k", "e2e4Q", "nodes", "E2E4"])
def test_malformed_text_is_rejected(text):
    with pytest.raises(MalformedMoveText):
        Move.from_uci(text)


def test_malformed_move_text_is_a_value_error():
    with pytest.raises(ValueError):
        Move.from_uci("xx")


def test_constructor_validates_squares():
    with pytest.raises(MalformedMoveText):
        Move("z1", "a2")
    with pytest.raises(MalformedMoveText):
        Move("a7", "a8", "queen")


def test_str_and_equality():
    assert str(Move("g1", "f3")) == "g1f3"
    assert Move("g1", "f3") == Move.from_uci("g1f3")
    assert len({Move.from_uci("g1f3"), Move("g1", "f3")}) == 1
