"""
Tests for the rolegrant command line interface.
"""

import importlib
import json

import pytest

from rolegrant.cli import privileges_to_grant


cli_main = importlib.import_module("rolegrant.cli.main")


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from rebinding root handlers to captured streams"""
    monkeypatch.setattr(cli_main, "setup_logging", lambda level="INFO": None)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "tokens.json"


@pytest.fixture
def run(store_path, capsys):
    def _run(*argv):
        code = cli_main.main(["--store", str(store_path), *argv])
        out, err = capsys.readouterr()
        return code, out, err
    return _run


class TestPrivilegesToGrant:
    """Test the redeemer-side role filtering"""

    def test_removes_held_and_duplicates(self):
        assert privileges_to_grant(["30", "10", "30", "20"], ["20"]) == ["10", "30"]

    def test_all_held(self):
        assert privileges_to_grant(["1", "2"], ["2", "1", "9"]) == []


class TestCommands:
    """Test the subcommands end to end"""

    def test_init_creates_store(self, run, store_path):
        code, out, _ = run("init")

        assert code == 0
        assert "created" in out
        assert json.loads(store_path.read_text(encoding="utf-8")) == {"version": 1, "tokens": {}}

    def test_init_twice_fails(self, run):
        run("init")
        code, _, err = run("init")

        assert code == 1
        assert "already exists" in err

    def test_commands_need_existing_store(self, run, store_path):
        code, _, err = run("issue", "1001")

        assert code == 1
        assert "not found" in err
        assert not store_path.exists()

    def test_issue_and_redeem(self, run):
        run("init")
        code, out, _ = run("issue", "1001", "1002", "--uses", "2", "--hours", "1")
        assert code == 0
        token = out.strip()
        assert token.isdigit()

        code, out, _ = run("redeem", token, "--held", "1001")
        assert code == 0
        assert out.split() == ["1002"]

        code, out, _ = run("redeem", token)
        assert out.split() == ["1001", "1002"]

        code, _, err = run("redeem", token)
        assert code == 1
        assert "token not found" in err

    def test_too_many_roles(self, run):
        run("init")
        code, _, err = run("issue", "1", "2", "3", "4", "5")

        assert code == 2
        assert "at most 4" in err

    def test_revoke_and_inspect(self, run):
        run("init")
        token = run("issue", "1001", "--uses", "3")[1].strip()

        code, out, _ = run("inspect", token)
        assert code == 0
        assert "uses=3" in out and "privileges=1001" in out

        assert run("revoke", token)[:2] == (0, "success\n")
        code, _, err = run("inspect", token)
        assert code == 1
        assert "not found" in err

    def test_expired_token(self, run):
        run("init")
        token = run("issue", "1001", "--hours", "0")[1].strip()

        code, _, err = run("redeem", token)
        assert code == 1
        assert "token expired" in err

    def test_list_and_purge(self, run):
        run("init")
        live = run("issue", "1001")[1].strip()
        run("issue", "1002", "--hours", "0")

        code, out, _ = run("list")
        assert code == 0
        assert len(out.splitlines()) == 2

        code, out, _ = run("purge")
        assert out.strip() == "purged 1"
        assert run("list")[1].split()[0] == live

    @pytest.mark.parametrize("hours", ["100000000", str(10 ** 20)])
    def test_huge_hours_is_an_error(self, run, hours):
        run("init")
        code, _, err = run("issue", "R1", "--hours", hours)

        assert code == 1
        assert "out of range" in err or "too large" in err

    def test_malformed_token(self, run):
        run("init")
        code, _, err = run("redeem", "abc")

        assert code == 1
        assert "invalid token id" in err

    def test_config_file(self, tmp_path, capsys):
        store = tmp_path / "from-config.json"
        config = tmp_path / "rolegrant.yaml"
        config.write_text(f"store_path: {store}\ncreate_if_missing: true\n", encoding="utf-8")

        code = cli_main.main(["--config", str(config), "issue", "42"])
        out, _ = capsys.readouterr()

        assert code == 0
        assert out.strip() in json.loads(store.read_text(encoding="utf-8"))["tokens"]
