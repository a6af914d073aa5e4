"""Tests for the seed_db command line."""

import pytest

from seed_db import build_parser, main

ACCOUNTS_CSV = "login,active\njohn.doe,1\njane.doe,0\n"


@pytest.fixture
def db_env(monkeypatch, db_manager, sqlite_url):
    monkeypatch.setenv("DB_URL", sqlite_url)
    return db_manager


class TestLoadCommand:
    def test_load(self, db_env, write_csv, fetch_accounts, capsys):
        path = write_csv("accounts.csv", ACCOUNTS_CSV)

        exit_code = main(["load", "--table", "accounts", "--file", str(path)])

        assert exit_code == 0
        assert "Loaded: accounts (2 rows, 0 skipped)" in capsys.readouterr().out
        assert len(fetch_accounts()) == 2

    def test_load_gzip_with_malformed_row(self, db_env, write_csv, capsys):
        path = write_csv(
            "accounts.csv", "login,active\njohn.doe,1\nbroken\n", compress=True
        )

        exit_code = main(
            ["load", "--table", "accounts", "--file", str(path), "--chunk-size", "auto"]
        )

        captured = capsys.readouterr()
        assert exit_code == 0
        assert "Loaded: accounts (1 rows, 1 skipped)" in captured.out
        assert "Skipped: Line 3: expected 2 fields, got 1" in captured.err

    def test_dry_run_needs_no_database(self, write_csv, capsys):
        path = write_csv("accounts.csv", ACCOUNTS_CSV)

        exit_code = main(
            ["load", "--table", "accounts", "--file", str(path), "--dry-run"]
        )

        assert exit_code == 0
        assert "Loaded: accounts (2 rows, 0 skipped)" in capsys.readouterr().out

    def test_missing_file(self, db_env, tmp_path):
        exit_code = main(
            ["load", "--table", "accounts", "--file", str(tmp_path / "nope.csv")]
        )

        assert exit_code == 1

    def test_missing_database_config(self, write_csv):
        path = write_csv("accounts.csv", ACCOUNTS_CSV)

        assert main(["load", "--table", "accounts", "--file", str(path)]) == 2

    def test_invalid_environment(self, monkeypatch, write_csv):
        monkeypatch.setenv("ENVIRONMENT", "qa")
        path = write_csv("accounts.csv", ACCOUNTS_CSV)

        exit_code = main(
            ["load", "--table", "accounts", "--file", str(path), "--dry-run"]
        )

        assert exit_code == 2


class TestSeedCommand:
    def test_seed(self, db_env, write_csv, tmp_path, fetch_accounts, capsys):
        write_csv("tests_accounts.csv", ACCOUNTS_CSV)

        exit_code = main(["seed", "accounts", "--csv-dir", str(tmp_path)])

        assert exit_code == 0
        assert "Seeded: tests.accounts (2 rows)" in capsys.readouterr().out
        assert len(fetch_accounts()) == 2

    def test_seed_with_database_name(self, db_env, write_csv, tmp_path, capsys):
        write_csv("legacy_accounts.csv", ACCOUNTS_CSV)

        exit_code = main(
            [
                "seed",
                "accounts",
                "--csv-dir",
                str(tmp_path),
                "--database-name",
                "legacy",
            ]
        )

        assert exit_code == 0
        assert "Seeded: legacy.accounts (2 rows)" in capsys.readouterr().out

    def test_seed_missing_csv(self, db_env, tmp_path):
        assert main(["seed", "accounts", "--csv-dir", str(tmp_path)]) == 1

    def test_seed_without_database(self, tmp_path):
        assert main(["seed", "accounts", "--csv-dir", str(tmp_path)]) == 2

    def test_dry_run_with_database_name_needs_no_database(
        self, write_csv, tmp_path, capsys
    ):
        write_csv("tests_accounts.csv", ACCOUNTS_CSV)

        exit_code = main(
            [
                "seed",
                "accounts",
                "--csv-dir",
                str(tmp_path),
                "--dry-run",
                "--database-name",
                "tests",
            ]
        )

        assert exit_code == 0
        assert "Seeded: tests.accounts (2 rows)" in capsys.readouterr().out

    def test_dry_run_never_connects(self, monkeypatch, write_csv, tmp_path, capsys):
        # Nothing listens on port 1; a connection attempt would fail the run
        monkeypatch.setenv("DB_URL", "postgresql+psycopg://u:p@127.0.0.1:1/appdb")
        write_csv("appdb_accounts.csv", ACCOUNTS_CSV)

        exit_code = main(["seed", "accounts", "--csv-dir", str(tmp_path), "--dry-run"])

        assert exit_code == 0
        assert "Seeded: appdb.accounts (2 rows)" in capsys.readouterr().out

    def test_dry_run_without_database_or_name(self, write_csv, tmp_path):
        write_csv("tests_accounts.csv", ACCOUNTS_CSV)

        exit_code = main(["seed", "accounts", "--csv-dir", str(tmp_path), "--dry-run"])

        assert exit_code == 2

    def test_invalid_delimiter(self, db_env, tmp_path):
        exit_code = main(
            ["seed", "accounts", "--csv-dir", str(tmp_path), "--delimiter", ";;"]
        )

        assert exit_code == 2


class TestParser:
    def test_chunk_size_argument(self):
        args = build_parser().parse_args(
            ["load", "--table", "t", "--file", "f.csv", "--chunk-size", "auto"]
        )

        assert args.chunk_size == "auto"
        assert args.clear is True

    def test_no_clear(self):
        args = build_parser().parse_args(
            ["load", "--table", "t", "--file", "f.csv", "--no-clear"]
        )

        assert args.clear is False

    def test_invalid_chunk_size(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(
                ["load", "--table", "t", "--file", "f.csv", "--chunk-size", "0"]
            )
