from anode.quad_bench import main
from anode.quad_harness import header, separator


def test_runs_single_configuration(capsys):
    assert main(["0", "1", "0", "0", "0"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == separator()
    assert lines[-1] == separator()
    assert header() in lines
    result_lines = [line for line in lines if "anode.lock_spec.MutexSpec" in line]
    assert len(result_lines) == 1
    assert len(result_lines[0]) == len(separator())


def test_range_argument_repeats_configurations(capsys):
    assert main(["0:1", "1", "0", "0", "0"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines.count(separator()) == 3
    assert lines.count(header()) == 2


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "Usage:" in out
    assert "readers writers downgraders upgraders duration" in out


def test_wrong_argument_count(capsys):
    assert main(["1"]) == 1
    out = capsys.readouterr().out
    assert "Invalid number of arguments (expected 5, got 1)" in out


def test_invalid_value(capsys):
    assert main(["x", "1", "0", "0", "0"]) == 1
    assert "Invalid value for readers: x" in capsys.readouterr().out