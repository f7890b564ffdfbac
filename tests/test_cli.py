import pytest

from country.cli import main

from conftest import DIAMOND, DISCONNECTED, LINE


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "regions.txt", tmp_path / "result.txt"


class Test_Unit_CLI:
    def test_success(self, paths, capsys):
        input_file, output_file = paths
        input_file.write_text(LINE)

        assert main([str(input_file), str(output_file), "2", "--workers", "1"]) == 0

        assert output_file.read_text() == "A-B\nC-D"
        assert "Done!" in capsys.readouterr().out

    def test_same_count(self, paths):
        input_file, output_file = paths
        input_file.write_text(DIAMOND)
        assert main([str(input_file), str(output_file), "4", "--workers", "1"]) == 0
        assert output_file.read_text() == "A\nB\nC\nD"

    @pytest.mark.parametrize("text, count", [
        (DIAMOND, "5"),
        (DIAMOND, "0"),
        (DISCONNECTED, "1"),
        ("A : x : B\nB : 1 : A", "1"),
        ("A : 1 : B", "1"),
    ])
    def test_failure_writes_error(self, paths, capsys, text, count):
        input_file, output_file = paths
        input_file.write_text(text)
        output_file.write_text("stale")

        assert main([str(input_file), str(output_file), count, "--workers", "1"]) == 1

        assert output_file.read_text() == "Error\n"
        assert capsys.readouterr().err.startswith("Error: ")

    def test_missing_input(self, paths):
        input_file, output_file = paths
        assert main([str(input_file), str(output_file), "2"]) == 1
        assert output_file.read_text() == "Error\n"

    @pytest.mark.parametrize("argv", [
        [],
        ["in.txt", "out.txt"],
        ["in.txt", "out.txt", "two"],
        ["in.txt", "out.txt", "-1"],
    ])
    def test_bad_arguments(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2

    def test_verbose(self, paths, capsys):
        input_file, output_file = paths
        input_file.write_text(DIAMOND)
        assert main([str(input_file), str(output_file), "2", "--workers", "1", "--verbose"]) == 0
        out = capsys.readouterr().out
        assert "The std_dev_sq is 1.0" in out
        assert output_file.read_text().split("\n")[-1] == "D"

    def test_hyphenated_region_name(self, paths, capsys):
        input_file, output_file = paths
        input_file.write_text("A : 1 : B\nB : 1 : A\nA-B : 1 : \n")
        output_file.write_text("stale")

        assert main([str(input_file), str(output_file), "2", "--workers", "1"]) == 1

        assert output_file.read_text() == "Error\n"
        assert "cannot contain" in capsys.readouterr().err
