"""Tests for portal.cli — command line interface."""

import base64
import os
from unittest.mock import patch

from portal.cli import main


class TestCli:
    def test_version(self, capsys):
        rc = main(["version"])
        assert rc == 0
        out = capsys.readouterr().out
        assert "portal" in out
        assert "0.1.0" in out

    def test_version_flag(self, capsys):
        rc = main(["--version"])
        assert rc == 0
        assert "portal" in capsys.readouterr().out

    def test_no_args(self, capsys):
        rc = main([])
        assert rc == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_keygen(self, capsys):
        rc = main(["keygen"])
        assert rc == 0
        key = capsys.readouterr().out.strip()
        assert len(base64.b64decode(key)) == 32

    def test_env_file_loaded(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("PORTAL_DOTENV_MARKER=loaded\n")
        monkeypatch.delenv("PORTAL_DOTENV_MARKER", raising=False)
        try:
            main(["--env-file", str(env), "version"])
            assert os.environ["PORTAL_DOTENV_MARKER"] == "loaded"
        finally:
            os.environ.pop("PORTAL_DOTENV_MARKER", None)


class TestMigrateCommand:
    def test_check_reports_problems(self, capsys):
        problems = ["missing table secret_access_logs"]
        with patch("portal.db.migrate.schema_problems", return_value=problems):
            rc = main(["migrate", "--check"])
        assert rc == 1
        assert "secret_access_logs" in capsys.readouterr().out

    def test_check_ok(self, capsys):
        with patch("portal.db.migrate.schema_problems", return_value=[]):
            rc = main(["migrate", "--check"])
        assert rc == 0
        assert "Schema OK" in capsys.readouterr().out

    def test_apply(self, capsys):
        with patch("portal.db.migrate.apply", return_value=["001"]) as apply:
            rc = main(["migrate", "apply"])
        assert rc == 0
        apply.assert_called_once_with(version=None, dry_run=False)
        assert "Applied 1 migration(s)" in capsys.readouterr().out

    def test_dry_run(self, capsys):
        with patch("portal.db.migrate.apply", return_value=["001"]):
            rc = main(["migrate", "apply", "--dry-run"])
        assert rc == 0
        assert "Would apply 1" in capsys.readouterr().out

    def test_status(self, capsys):
        rows = [{"version": "001", "filename": "001_init.sql", "status": "pending", "applied_at": None}]
        with patch("portal.db.migrate.status", return_value=rows):
            rc = main(["migrate", "status"])
        assert rc == 0
        assert "001_init.sql" in capsys.readouterr().out

    def test_database_unreachable(self, capsys):
        with patch("portal.db.migrate.apply", side_effect=ConnectionError("no db")):
            rc = main(["migrate"])
        assert rc == 1
        assert "no db" in capsys.readouterr().err


class TestServeCommand:
    def test_serve_uses_config(self, monkeypatch, clean_env):
        monkeypatch.setenv("PORTAL_API_PORT", "9555")
        with patch("uvicorn.run") as run:
            rc = main(["serve"])
        assert rc == 0
        args, kwargs = run.call_args
        assert args == ("portal.api.app:app",)
        assert kwargs["port"] == 9555
        assert kwargs["host"] == "127.0.0.1"

    def test_serve_flags_override(self, clean_env):
        with patch("uvicorn.run") as run:
            main(["serve", "--host", "0.0.0.0", "--port", "9001"])
        assert run.call_args.kwargs["host"] == "0.0.0.0"
        assert run.call_args.kwargs["port"] == 9001
