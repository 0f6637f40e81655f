"""Tests for the typer CLI."""

from typer.testing import CliRunner

from clusterscope.cli import app

runner = CliRunner()
WIDE = {"COLUMNS": "500"}

BAD_CLOUD_ID = """
elasticsearch:
  - name: a
    credential: {username: elastic, password: x, cloud_id: nocolon}
"""


class TestConfigErrors:
    """Invalid cluster files exit with code 1 and a message, not a traceback."""

    def test_health_with_malformed_cloud_id(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(BAD_CLOUD_ID)

        result = runner.invoke(app, ["health", "--config", str(path)], env=WIDE)

        assert result.exit_code == 1
        assert "malformed" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_clusters_with_missing_file(self, tmp_path):
        path = tmp_path / "nope.yaml"

        result = runner.invoke(app, ["clusters", "--config", str(path)], env=WIDE)

        assert result.exit_code == 1
        assert "file not found" in result.output
