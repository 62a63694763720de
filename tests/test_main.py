import logging
import os

import pytest

import main as cli


def _write_curve(path, a, b):
    rows = [f"{v:.1f} {a + b * v:.4f} 0.01 0.05" for v in (0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5)]
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_main_writes_tables(tmp_path, capsys, restore_root_logger):
    low = _write_curve(tmp_path / "50.txt", 5.0, 0.1)
    high = _write_curve(tmp_path / "100.txt", 10.0, 0.2)
    outdir = tmp_path / "out"

    code = cli.main(
        [
            "--data", f"50:{low}",
            "--data", f"100:{high}",
            "--outdir", str(outdir),
            "--no-plot",
            "--log-file", "",
        ]
    )

    assert code == 0
    assert os.path.exists(outdir / "fit_results.csv")
    assert os.path.exists(outdir / "current_gain.csv")
    assert not os.path.exists(outdir / "output_characteristics.png")
    assert "BETA =" in capsys.readouterr().out


def test_main_returns_error_when_nothing_fits(tmp_path, restore_root_logger):
    code = cli.main(
        [
            "--data", f"50:{tmp_path / 'missing.txt'}",
            "--outdir", str(tmp_path / "out"),
            "--log-file", "",
        ]
    )
    assert code == 1


def test_bad_data_option_exits_with_usage_error(restore_root_logger):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--data", "no-separator", "--log-file", ""])
    assert excinfo.value.code == 2


def test_arg_parser_defaults():
    args = cli._build_arg_parser().parse_args([])
    assert (args.fit_min, args.fit_max, args.v_eval) == (1.0, 3.5, 3.0)
    assert args.data is None
    assert not args.skip_malformed


def test_inverted_fit_domain_exits_with_usage_error(tmp_path, capsys, restore_root_logger):
    data = _write_curve(tmp_path / "50.txt", 5.0, 0.1)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                "--data", f"50:{data}",
                "--fit-min", "3",
                "--fit-max", "1",
                "--outdir", str(tmp_path / "out"),
                "--log-file", "",
            ]
        )
    assert excinfo.value.code == 2
    assert "Fit domain is inverted" in capsys.readouterr().err
    assert not os.path.exists(tmp_path / "out")
