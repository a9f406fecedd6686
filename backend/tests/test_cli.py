"""
Tests for the development CLI.
"""

from typer.testing import CliRunner

from cli import app
from shared.security.auth import verify_jwt

runner = CliRunner()


class TestTokenCommand:

    def test_issues_verifiable_token(self):
        result = runner.invoke(app, ["token", "user-123", "--role", "counselor"])

        assert result.exit_code == 0
        claims = verify_jwt(result.stdout.strip())
        assert claims["sub"] == "user-123"
        assert claims["role"] == "counselor"

    def test_rejects_unknown_role(self):
        result = runner.invoke(app, ["token", "user-123", "--role", "dean"])

        assert result.exit_code == 1
        assert "Unknown role" in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.stdout
