"""
Tests for the CLI and HTTP surfaces.

Tests cover:
- CLI list/eval/corr commands and exit codes
- HTTP formula endpoint, validation and unknown names
"""

import pytest
from unittest.mock import Mock, patch
from fastapi.testclient import TestClient
from finformula import cli
from finformula.config import Settings
from finformula.entities import FormulaResult
from finformula.errors import ConfigError, NotFoundError
from finformula.web import app, get_client


class TestCli:
    """Tests for the command-line interface."""

    def test_list(self, capsys):
        """Test list prints every formula name."""
        cli.main(["list"])
        out = capsys.readouterr().out.split()
        assert "Corr" in out
        assert "YahooFinance" in out

    @patch('finformula.cli.evaluate')
    def test_eval_prints_rendered_value(self, mock_evaluate, capsys):
        """Test eval prints the cell value."""
        mock_evaluate.return_value = FormulaResult.ok(1.8e13)
        cli.main(["--no-pacing", "eval", "GDP", "US", "2015"])

        assert capsys.readouterr().out.strip() == "18000000000000.0"
        args, kwargs = mock_evaluate.call_args
        assert args == ("GDP", "US", "2015")
        assert kwargs["client"].settings == Settings()

    @patch('finformula.cli.evaluate')
    def test_eval_error_exits_nonzero(self, mock_evaluate, capsys):
        """Test error results print their text and exit 1."""
        mock_evaluate.return_value = FormulaResult.err("NotFound", "No entry for 1900")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--no-pacing", "eval", "GDP", "US", "1900"])
        assert exc_info.value.code == 1
        assert capsys.readouterr().out.strip() == "Not Found"

    def test_eval_unknown_formula(self, capsys):
        """Test unknown formulas exit with status 2."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["eval", "VLOOKUP"])
        assert exc_info.value.code == 2
        assert "Unknown formula" in capsys.readouterr().err

    @patch('finformula.cli.evaluate')
    def test_corr(self, mock_evaluate, capsys):
        """Test corr prints the coefficient."""
        mock_evaluate.return_value = FormulaResult.ok(0.8731)
        cli.main(["--no-pacing", "corr", "aapl", "msft", "--start", "2023-01-01", "--end", "2023-06-30"])

        assert "Correlation = 0.8731" in capsys.readouterr().out
        args, _ = mock_evaluate.call_args
        assert args == ("Corr", "AAPL", "MSFT", "2023-01-01", "2023-06-30", 86400)

    def test_bad_config_exits(self, capsys):
        """Test configuration errors exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--config", "/nonexistent.yaml", "eval", "RFR10"])
        assert exc_info.value.code == 1
        assert "Config file not found" in capsys.readouterr().err


@pytest.fixture
def http_client():
    data_client = Mock()
    data_client.settings = Settings()
    app.dependency_overrides[get_client] = lambda: data_client
    yield TestClient(app), data_client
    app.dependency_overrides.clear()


class TestWeb:
    """Tests for the HTTP interface."""

    def test_list_formulas(self, http_client):
        """Test the formula listing endpoint."""
        client, _ = http_client
        response = client.get("/api/formulas")
        assert response.status_code == 200
        assert "Corr" in response.json()["formulas"]

    def test_formula_plain_text(self, http_client):
        """Test a formula result is returned as plain text."""
        client, data_client = http_client
        data_client.fetch_scalar_field.return_value = "12.5B"

        response = client.get("/formula/EBITDA", params={"args": ["AAPL"]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "12500000000.0"

    def test_formula_error_text(self, http_client):
        """Test error results are rendered, not raised."""
        client, data_client = http_client
        data_client.fetch_indicator.side_effect = NotFoundError("No entry for 1900")

        response = client.get("/formula/GDP", params={"args": ["US", "1900"]})
        assert response.status_code == 200
        assert response.text == "Not Found"

    def test_unknown_formula_404(self, http_client):
        """Test unknown formulas return 404."""
        client, _ = http_client
        response = client.get("/formula/VLOOKUP")
        assert response.status_code == 404

    def test_too_many_args_400(self, http_client):
        """Test the argument limit."""
        client, _ = http_client
        response = client.get("/formula/Corr", params={"args": ["x"] * 9})
        assert response.status_code == 400

    def test_invalid_characters_400(self, http_client):
        """Test arguments with unexpected characters are rejected."""
        client, _ = http_client
        response = client.get("/formula/YahooFinance", params={"args": ["AAPL", "<script>"]})
        assert response.status_code == 400

    @patch('finformula.web.default_client')
    def test_bad_configuration_500(self, mock_default_client):
        """Test configuration errors become an HTTP error with a message."""
        mock_default_client.side_effect = ConfigError("Invalid settings: pacing")

        response = TestClient(app).get("/formula/RFR10")

        assert response.status_code == 500
        assert "Invalid configuration" in response.json()["detail"]
