"""Tests for the command-line entry point"""

import pytest

from titan_engine.main import build_parser, main


class TestMain:

    def test_successful_run(self, capsys):
        assert main(["--seed", "1", "--sims", "5"]) == 0
        out = capsys.readouterr().out
        assert "ANALYSIS — BTC-USD" in out
        assert "SIGNAL" in out
        assert "var_95_cash" in out
        assert "MONTE CARLO" in out
        assert "SPECTRUM (synthetic)" in out

    def test_zero_horizon(self, capsys):
        assert main(["--seed", "2", "--horizon", "0"]) == 0
        assert "anchor price" in capsys.readouterr().out

    def test_parallel_flag(self, capsys):
        assert main(["--seed", "3", "--parallel", "--ticker", "ETH-USD"]) == 0
        assert "ETH-USD" in capsys.readouterr().out

    def test_plots_written(self, tmp_path, capsys):
        assert main(["--seed", "4", "--sims", "3", "--plot", str(tmp_path)]) == 0
        assert (tmp_path / "market.png").exists()
        assert (tmp_path / "monte_carlo.png").exists()
        assert (tmp_path / "spectrum.png").exists()

    def test_engine_error_exit_code(self, capsys):
        assert main(["--capital", "nan"]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_short_history_exit_code(self, capsys):
        assert main(["--days", "5"]) == 1

    def test_bad_argument_exits_2(self):
        with pytest.raises(SystemExit) as exc:
            main(["--sims", "many"])
        assert exc.value.code == 2

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.ticker == "BTC-USD"
        assert args.capital == 1_000_000.0
        assert args.days == 100
        assert args.horizon == 10
        assert args.sims == 50
        assert args.seed is None

    def test_unknown_log_level_exits_2(self):
        with pytest.raises(SystemExit) as exc:
            main(["--seed", "1", "--log-level", "verbose"])
        assert exc.value.code == 2

    def test_non_level_logging_attribute_exits_2(self):
        with pytest.raises(SystemExit) as exc:
            main(["--log-level", "Handler"])
        assert exc.value.code == 2

    def test_log_level_is_case_insensitive(self, capsys):
        assert main(["--seed", "1", "--sims", "3", "--log-level", "error"]) == 0

    def test_unwritable_plot_dir_exit_code(self, tmp_path, capsys):
        target = tmp_path / "not_a_dir"
        target.write_text("occupied")
        assert main(["--seed", "4", "--sims", "3", "--plot", str(target)]) == 1
        assert "could not write charts" in capsys.readouterr().err
