import pytest

from sudoku_sat.validate import expected_counts, main, validate, validate_grid_encoding


def test_expected_counts():
    assert expected_counts(9, 19) == (729, 81 + 3 * 2916 + 19)
    assert expected_counts(9, 0, extended=True) == (729, 81 + 4 * 2916 + 243)
    assert expected_counts(4, 6) == (64, 16 + 3 * 16 * 6 + 6)


def test_report_passes(example_puzzle):
    ok, report = validate_grid_encoding(example_puzzle)
    assert ok
    assert report[-1] == "Result: PASS"
    ok, report = validate_grid_encoding(example_puzzle, extended=True)
    assert ok
    assert "extended=True" in report[1]


def test_validate_file(puzzle_file, small_puzzle, capsys):
    assert validate(puzzle_file(small_puzzle)) == 0
    assert "Result: PASS" in capsys.readouterr().out


def test_main(puzzle_file, example_puzzle, tmp_path, capsys):
    assert main(["--in", puzzle_file(example_puzzle), "--extended"]) == 0
    assert main(["--in", str(tmp_path / "missing.txt")]) == 1
    assert "error:" in capsys.readouterr().err


@pytest.mark.parametrize("name", ["example_n4.txt", "example_n9.txt", "unsat_n9.txt"])
def test_sample_puzzles_encode_correctly(puzzles_dir, name, capsys):
    assert main(["--in", str(puzzles_dir / name)]) == 0
    assert main(["--in", str(puzzles_dir / name), "--extended"]) == 0
    assert "Result: FAIL" not in capsys.readouterr().out
