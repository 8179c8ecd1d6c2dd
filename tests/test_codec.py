import pytest

from sudoku_sat.codec import decode, encode, num_variables


def test_known_values():
    assert encode(1, 1, 1) == 1
    assert encode(1, 1, 9) == 9
    assert encode(1, 2, 1) == 10
    assert encode(2, 1, 1) == 82
    assert encode(9, 9, 9) == 729
    assert decode(10) == (1, 2, 1)
    assert decode(729) == (9, 9, 9)


def test_round_trip_covers_all_variables():
    seen = set()
    for row in range(1, 10):
        for col in range(1, 10):
            for digit in range(1, 10):
                variable = encode(row, col, digit)
                assert decode(variable) == (row, col, digit)
                seen.add(variable)
    assert seen == set(range(1, num_variables() + 1))


def test_other_sizes():
    assert num_variables(4) == 64
    assert encode(4, 4, 4, size=4) == 64
    assert decode(encode(3, 2, 1, size=4), size=4) == (3, 2, 1)
    assert decode(encode(16, 1, 7, size=16), size=16) == (16, 1, 7)


@pytest.mark.parametrize("args", [(0, 1, 1), (1, 10, 1), (1, 1, 0), (1, 1, 10)])
def test_encode_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        encode(*args)


@pytest.mark.parametrize("variable", [0, -5, 730])
def test_decode_rejects_out_of_range(variable):
    with pytest.raises(ValueError):
        decode(variable)
