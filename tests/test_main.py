"""Tests for the command line entry point."""
from controle_tecnico.__main__ import main


class TestMain:
    def test_passphrase_command(self, capsys):
        """Test the passphrase helper prints a usable value."""
        assert main(["passphrase"]) == 0
        out = capsys.readouterr().out.strip()
        assert len(out) >= 32

    def test_invalid_env_exits(self, monkeypatch, caplog):
        """Test a bad environment is reported and returns 1."""
        monkeypatch.delenv("JWT_SECRET", raising=False)
        with caplog.at_level("CRITICAL", logger="controle"):
            assert main([]) == 1
        assert "jwt_secret" in caplog.text
