import json
import numpy as np
import pytest
from pathlib import Path
from pycsim.cli.main import build_parser, main

TRACE = [
    " L 10,1",
    " M 20,1",
    " L 22,1",
    " S 18,1",
    " L 110,1",
    " L 210,1",
    " M 12,1",
]


@pytest.fixture
def trace_path(write_trace):
    return write_trace(TRACE, name="yi.trace")


def test_run_prints_summary_and_writes_results(trace_path, tmp_path: Path, capsys):
    results = tmp_path / ".csim_results"

    rc = main(["run", "-s", "4", "-E", "2", "-b", "4", "-t", trace_path, "--results", str(results)])

    assert rc == 0
    assert capsys.readouterr().out.strip() == "hits:4 misses:5 evictions:2"
    assert results.read_text() == "4 5 2\n"


def test_run_verbose(trace_path, tmp_path: Path, capsys):
    main(["run", "-v", "-s", "4", "-E", "1", "-b", "4", "-t", trace_path,
          "--results", str(tmp_path / "r")])

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "L 10,1 miss",
        "M 20,1 miss hit",
        "L 22,1 hit",
        "S 18,1 hit",
        "L 110,1 miss eviction",
        "L 210,1 miss eviction",
        "M 12,1 miss eviction hit",
        "hits:4 misses:5 evictions:3",
    ]


def test_run_from_yaml_config(trace_path, tmp_path: Path, capsys):
    cfg = tmp_path / "cache.yaml"
    cfg.write_text(f"set_index_bits: 4\nlines_per_set: 2\noffset_bits: 4\ntrace_file: {trace_path}\n"
                   f"results_file: {tmp_path / 'r'}\n")

    assert main(["run", "-c", str(cfg)]) == 0
    assert "hits:4 misses:5 evictions:2" in capsys.readouterr().out


def test_run_with_report(trace_path, tmp_path: Path):
    report_dir = tmp_path / "report"

    main(["run", "-s", "4", "-E", "2", "-b", "4", "-t", trace_path,
          "--results", str(tmp_path / "r"), "--report", str(report_dir)])

    data = json.loads((report_dir / "report.json").read_text())
    assert (data["hits"], data["misses"], data["evictions"]) == (4, 5, 2)
    assert (report_dir / "report.html").exists()


@pytest.mark.parametrize("argv", [
    ["run", "-E", "1", "-b", "4", "-t", "x.trace"],
    ["run", "-s", "0", "-E", "1", "-b", "4", "-t", "x.trace"],
    ["run", "-s", "4", "-E", "1", "-b", "4"],
    ["run", "-s", "40", "-E", "1", "-b", "30", "-t", "x.trace"],
])
def test_run_usage_errors_exit_2(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
    assert "error" in capsys.readouterr().err


def test_run_missing_trace_exits_1(tmp_path: Path, capsys):
    rc = main(["run", "-s", "1", "-E", "1", "-b", "1", "-t", str(tmp_path / "missing.trace"),
               "--results", str(tmp_path / "r")])

    assert rc == 1
    err = capsys.readouterr().err
    assert err.startswith("pycsim: ")
    assert "missing.trace" in err
    assert not (tmp_path / "r").exists()


def test_run_malformed_trace_exits_1(write_trace, tmp_path: Path, capsys):
    path = write_trace([" L 10,1", " Q 10,1"])

    rc = main(["run", "-s", "1", "-E", "1", "-b", "1", "-t", path, "--results", str(tmp_path / "r")])

    assert rc == 1
    assert "line 2" in capsys.readouterr().err


def test_decode_command(capsys):
    assert main(["decode", "-s", "3", "-b", "6", "0x1f6a"]) == 0
    out = capsys.readouterr().out
    assert "tag   : 0xf (55 bits)" in out
    assert "set   : 5 (3 bits)" in out
    assert "offset: 42 (6 bits)" in out


def test_decode_rejects_bad_address():
    with pytest.raises(SystemExit) as excinfo:
        main(["decode", "-s", "3", "-b", "6", "nothex"])
    assert excinfo.value.code == 2


def test_help_lists_commands():
    help_text = build_parser().format_help()
    assert "run" in help_text
    assert "decode" in help_text


def test_run_usage_error_shows_run_usage(capsys):
    with pytest.raises(SystemExit):
        main(["run", "-E", "1", "-b", "4", "-t", "x.trace"])
    assert "usage: pycsim run" in capsys.readouterr().err


def test_run_quoted_yaml_geometry(trace_path, tmp_path: Path, capsys):
    config = tmp_path / "quoted.yaml"
    config.write_text("set_index_bits: '4'\nlines_per_set: '2'\noffset_bits: '4'\n")

    rc = main(["run", "-c", str(config), "-t", trace_path, "--results", str(tmp_path / "r")])

    assert rc == 0
    assert capsys.readouterr().out.strip() == "hits:4 misses:5 evictions:2"


def test_run_bad_yaml_geometry_exits_2(trace_path, tmp_path: Path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("set_index_bits: four\nlines_per_set: 1\noffset_bits: 4\n")

    with pytest.raises(SystemExit) as excinfo:
        main(["run", "-c", str(config), "-t", trace_path])
    assert excinfo.value.code == 2
    assert "set_index_bits must be an integer" in capsys.readouterr().err


def test_run_unwritable_results_exits_1(trace_path, tmp_path: Path, capsys):
    results = tmp_path / "no_such_dir" / "r"

    rc = main(["run", "-s", "4", "-E", "2", "-b", "4", "-t", trace_path, "--results", str(results)])

    assert rc == 1
    err = capsys.readouterr().err
    assert err.startswith("pycsim: ")
    assert "no_such_dir" in err


def test_run_counter_allocation_failure_exits_1(trace_path, tmp_path: Path, monkeypatch, capsys):
    real_zeros = np.zeros

    def zeros(shape, dtype=float, **kwargs):
        if dtype is np.int64:
            raise MemoryError("no room")
        return real_zeros(shape, dtype=dtype, **kwargs)

    monkeypatch.setattr(np, "zeros", zeros)

    rc = main(["run", "-s", "1", "-E", "1", "-b", "1", "-t", trace_path, "--results", str(tmp_path / "r")])

    assert rc == 1
    assert "Could not allocate" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [
    ["decode", "-s", "3", "-b", "6", "0x1ffffffffffffffff"],
    ["decode", "-s", "1", "-b", "1", "--", "-5"],
])
def test_decode_rejects_out_of_range_address(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "usage: pycsim decode" in err
    assert "does not fit in 64 bits" in err


def test_decode_accepts_largest_address(capsys):
    assert main(["decode", "-s", "0", "-b", "0", "0xffffffffffffffff"]) == 0
    assert "address: 0xffffffffffffffff" in capsys.readouterr().out
