"""
Tests for the CLI interface.
"""
from typer.testing import CliRunner

from ai_usage_recon.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL

runner = CliRunner()


class TestCLI:
    """Test CLI commands."""

    def test_no_command_prints_hint(self):
        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_CODE_PASS
        assert "--help" in result.output

    def test_events_command(self, usage_events_csv):
        """Test trailing-window output for a usage events CSV."""
        result = runner.invoke(app, ["events", usage_events_csv])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Trailing Window Usage" in result.output
        assert "Latest event: 2025-01-02 02:00:00 UTC" in result.output
        assert "Events (successful/total): 1/3" in result.output
        assert "Total Tokens: 4,700" in result.output
        assert "Cost: $0.50" in result.output

    def test_events_legacy_pair(self, tokens_csv, details_csv):
        result = runner.invoke(app, ["events", "--tokens", tokens_csv, "--details", details_csv])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Total Tokens: 1,350" in result.output
        assert "Errored events: 1" in result.output

    def test_events_without_input_fails(self):
        result = runner.invoke(app, ["events"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Error" in result.output

    def test_missing_file_fails(self, tmp_path):
        result = runner.invoke(app, ["events", str(tmp_path / "missing.csv")])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Usage file not found" in result.output

    def test_summary_command(self, snapshot_csv):
        """Test latest-vs-previous deltas for the default model."""
        result = runner.invoke(app, ["summary", snapshot_csv])

        assert result.exit_code == EXIT_CODE_PASS
        assert "auto on 2025-01-04" in result.output
        assert "+50" in result.output
        assert "+400" in result.output

    def test_summary_unknown_model(self, snapshot_csv):
        result = runner.invoke(app, ["summary", snapshot_csv, "--model", "gpt-9"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "No snapshot rows found" in result.output

    def test_series_command(self, snapshot_csv):
        result = runner.invoke(app, ["series", snapshot_csv, "--model", "auto", "--metric", "total"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "2025-01-03" in result.output
        assert "yes" in result.output

    def test_series_unknown_metric(self, snapshot_csv):
        result = runner.invoke(app, ["series", snapshot_csv, "--metric", "bogus"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Unknown metric" in result.output

    def test_daily_command(self, usage_events_csv):
        result = runner.invoke(app, ["daily", usage_events_csv])

        assert result.exit_code == EXIT_CODE_PASS
        assert "2025-01-01" in result.output
        assert "2025-01-02" in result.output
        assert "$0.85" in result.output

    def test_config_option(self, usage_events_csv, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("window:\n  hours: 1\n", encoding="utf-8")

        result = runner.invoke(app, ["events", usage_events_csv, "--config", str(config_path)])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Events (successful/total): 1/1" in result.output

    def test_invalid_config_fails(self, usage_events_csv, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("bogus: 1\n", encoding="utf-8")

        result = runner.invoke(app, ["events", usage_events_csv, "--config", str(config_path)])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Unknown configuration keys" in result.output

    def test_series_model_from_config(self, snapshot_csv, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("summary:\n  default_model: total\n", encoding="utf-8")

        result = runner.invoke(app, ["series", snapshot_csv, "--config", str(config_path)])

        assert result.exit_code == EXIT_CODE_PASS
        assert "total / total" in result.output
        assert "No snapshot rows found" not in result.output

    def test_series_model_case_insensitive(self, snapshot_csv):
        result = runner.invoke(app, ["series", snapshot_csv, "--model", "AUTO"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "AUTO / total" in result.output
        assert "2025-01-04" in result.output
