# Tests for ConfigStore CRUD against real files
import json
import os
import threading
from pathlib import Path

import pytest
import tomli

from mcpmgr.errors import (
    DuplicateName,
    InvalidEntry,
    IOFailure,
    ParseFailure,
    ServerNotFound,
    ToolNotFound,
    UnsupportedDialect,
)
from mcpmgr.models import SseTransport

from conftest import sse, stdio


def write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))


class TestList:
    """Tests for reading entries."""

    def test_absent_file_is_empty(self, store):
        assert store.list("alpha") == []

    def test_reads_entries(self, store, home):
        write_json(home / "alpha.json", {
            "mcpServers": {
                "fs": {"command": "npx", "args": ["-y", "fs"]},
                "remote": {"url": "https://example.com/sse", "disabled": True},
            }
        })
        entries = store.list("alpha")
        assert [e.name for e in entries] == ["fs", "remote"]
        assert entries[1].enabled is False

    def test_reads_bom(self, store, home):
        (home / "alpha.json").write_bytes(b"\xef\xbb\xbf" + b'{"mcpServers": {"fs": {"command": "npx"}}}')
        assert [e.name for e in store.list("alpha")] == ["fs"]

    def test_unknown_tool(self, store):
        with pytest.raises(ToolNotFound):
            store.list("roo")

    def test_parse_failure_names_file(self, store, home):
        (home / "alpha.json").write_text("{broken")
        with pytest.raises(ParseFailure, match="alpha.json"):
            store.list("alpha")

    def test_wrong_shape_is_unsupported(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": ["fs"]})
        with pytest.raises(UnsupportedDialect, match="alpha.json"):
            store.list("alpha")

    def test_not_utf8(self, store, home):
        (home / "alpha.json").write_bytes(b"\xff\xfe{}")
        with pytest.raises(ParseFailure):
            store.list("alpha")

    def test_get(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"fs": {"command": "npx"}}})
        assert store.get("alpha", "fs").transport.command == "npx"
        with pytest.raises(ServerNotFound):
            store.get("alpha", "git")

    def test_list_all_isolates_broken_tool(self, store, home):
        """Test that one unparsable file doesn't hide the other tools."""
        write_json(home / "alpha.json", {"mcpServers": {"fs": {"command": "npx"}}})
        (home / ".beta").mkdir()
        (home / ".beta" / "settings.json").write_text("{broken")

        configs, errors = store.list_all()
        assert list(configs) == ["alpha", "gamma", "delta"]
        assert [e.name for e in configs["alpha"]] == ["fs"]
        assert isinstance(errors["beta"], ParseFailure)


class TestUpsert:
    """Tests for upsert/add."""

    def test_creates_file_and_parents(self, store, home):
        store.upsert("beta", stdio("fs", args=["-y", "fs"]))

        data = json.loads((home / ".beta" / "settings.json").read_text())
        assert data == {"mcpServers": {"fs": {"command": "npx", "args": ["-y", "fs"]}}}

    def test_replaces_in_place(self, store, home):
        write_json(home / "alpha.json", {
            "mcpServers": {"a": {"command": "x"}, "fs": {"command": "old"}, "z": {"command": "y"}}
        })
        store.upsert("alpha", stdio("fs", command="new"))

        entries = store.list("alpha")
        assert [e.name for e in entries] == ["a", "fs", "z"]
        assert entries[1].transport.command == "new"

    def test_appends_new_name(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"command": "x"}}})
        store.upsert("alpha", stdio("b"))
        assert [e.name for e in store.list("alpha")] == ["a", "b"]

    def test_preserves_other_fields(self, store, home):
        """Test that settings outside the server map are left exactly as they were."""
        original = {
            "theme": "dark",
            "mcpServers": {"fs": {"command": "npx"}},
            "projects": {"/work": {"history": [1, 2, 3]}},
        }
        write_json(home / "alpha.json", original)

        store.upsert("alpha", sse("remote"))

        data = json.loads((home / "alpha.json").read_text())
        assert list(data) == ["theme", "mcpServers", "projects"]
        assert data["theme"] == "dark"
        assert data["projects"] == original["projects"]

    def test_add_rejects_duplicate(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"fs": {"command": "npx"}}})
        before = (home / "alpha.json").read_bytes()

        with pytest.raises(DuplicateName):
            store.add("alpha", stdio("fs"))
        assert (home / "alpha.json").read_bytes() == before

    def test_invalid_entry_not_written(self, store, home):
        with pytest.raises(InvalidEntry, match="URL"):
            store.upsert("alpha", sse("remote", url=""))
        assert not (home / "alpha.json").exists()

    def test_codex_toml(self, store, home):
        path = home / ".gamma" / "config.toml"
        path.parent.mkdir()
        path.write_text('model = "o3"\n')

        store.upsert("gamma", stdio("fs", env={"ROOT": "/tmp"}))

        data = tomli.loads(path.read_text())
        assert data == {"model": "o3", "mcp_servers": {"fs": {"command": "npx", "env": {"ROOT": "/tmp"}}}}

    def test_vscode_servers_key(self, store, home):
        store.upsert("delta", sse("remote", extras={"type": "http"}))
        data = json.loads((home / "delta" / "mcp.json").read_text())
        assert data == {"servers": {"remote": {"url": "https://example.com/mcp", "type": "http"}}}

    def test_parse_failure_leaves_file_alone(self, store, home):
        (home / "alpha.json").write_text("{broken")
        with pytest.raises(ParseFailure):
            store.upsert("alpha", stdio("fs"))
        assert (home / "alpha.json").read_text() == "{broken"


class TestWrites:
    """Tests for atomic write behaviour."""

    def test_no_temp_files_left(self, store, home):
        store.upsert("alpha", stdio("a"))
        store.upsert("alpha", stdio("b"))
        store.delete("alpha", "a")
        assert [p.name for p in home.iterdir()] == ["alpha.json"]

    def test_keeps_file_mode(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {}})
        os.chmod(home / "alpha.json", 0o600)

        store.upsert("alpha", stdio("fs"))
        assert (home / "alpha.json").stat().st_mode & 0o777 == 0o600

    def test_symlinked_config_stays_a_link(self, store, home, tmp_path: Path):
        """Test that a dotfiles-style symlink is written through, not replaced."""
        real = tmp_path / "dotfiles" / "alpha.json"
        write_json(real, {"mcpServers": {"fs": {"command": "npx"}}})
        os.chmod(real, 0o600)
        (home / "alpha.json").symlink_to(real)

        store.upsert("alpha", stdio("git", command="uvx"))

        assert (home / "alpha.json").is_symlink()
        assert [e.name for e in store.list("alpha")] == ["fs", "git"]
        assert json.loads(real.read_text())["mcpServers"]["git"] == {"command": "uvx"}
        assert real.stat().st_mode & 0o777 == 0o600
        assert [p.name for p in real.parent.iterdir()] == ["alpha.json"]

    def test_concurrent_upserts_all_survive(self, store, home):
        """Test that threads writing one file don't lose each other's entries."""
        errors: list[Exception] = []

        def worker(thread_id: int) -> None:
            try:
                for i in range(8):
                    store.upsert("alpha", stdio(f"t{thread_id}-s{i}"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        names = {e.name for e in store.list("alpha")}
        assert names == {f"t{t}-s{i}" for t in range(8) for i in range(8)}
        assert [p.name for p in home.iterdir()] == ["alpha.json"]

    def test_failed_write_keeps_original(self, store, home, monkeypatch):
        write_json(home / "alpha.json", {"mcpServers": {"fs": {"command": "npx"}}})
        before = (home / "alpha.json").read_bytes()

        def fail_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("mcpmgr.utils.fileio.os.replace", fail_replace)
        with pytest.raises(IOFailure, match="No space left"):
            store.upsert("alpha", stdio("git"))

        assert (home / "alpha.json").read_bytes() == before
        assert [p.name for p in home.iterdir()] == ["alpha.json"]


class TestDelete:
    """Tests for delete."""

    def test_removes_entry(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"command": "x"}, "b": {"command": "y"}}})
        store.delete("alpha", "a")
        assert [e.name for e in store.list("alpha")] == ["b"]

    def test_last_entry_leaves_empty_map(self, store, home):
        write_json(home / "alpha.json", {"other": 1, "mcpServers": {"a": {"command": "x"}}})
        store.delete("alpha", "a")
        assert json.loads((home / "alpha.json").read_text()) == {"other": 1, "mcpServers": {}}

    def test_missing_name(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"command": "x"}}})
        before = (home / "alpha.json").read_bytes()

        with pytest.raises(ServerNotFound):
            store.delete("alpha", "zzz")
        assert (home / "alpha.json").read_bytes() == before

    def test_missing_file(self, store, home):
        with pytest.raises(ServerNotFound):
            store.delete("alpha", "a")
        assert not (home / "alpha.json").exists()


class TestToggle:
    """Tests for toggle_enabled/set_enabled."""

    def test_toggle_twice_is_identity(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"fs": {"command": "npx"}}})
        before = json.loads((home / "alpha.json").read_text())

        assert store.toggle_enabled("alpha", "fs").enabled is False
        data = json.loads((home / "alpha.json").read_text())
        assert data["mcpServers"]["fs"]["disabled"] is True

        assert store.toggle_enabled("alpha", "fs").enabled is True
        assert json.loads((home / "alpha.json").read_text()) == before

    def test_untouched_entry_keeps_explicit_marker(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {
            "fs": {"command": "npx"},
            "git": {"command": "uvx", "disabled": False},
        }})
        store.toggle_enabled("alpha", "fs")
        data = json.loads((home / "alpha.json").read_text())
        assert data["mcpServers"]["git"] == {"command": "uvx", "disabled": False}

    def test_set_enabled_is_idempotent(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"fs": {"command": "npx"}}})
        store.set_enabled("alpha", "fs", False)
        store.set_enabled("alpha", "fs", False)
        assert store.get("alpha", "fs").enabled is False

    def test_missing_name(self, store):
        with pytest.raises(ServerNotFound):
            store.toggle_enabled("alpha", "fs")

    def test_codex_toggle(self, store, home):
        store.upsert("gamma", stdio("fs"))
        store.toggle_enabled("gamma", "fs")
        data = tomli.loads((home / ".gamma" / "config.toml").read_text())
        assert data["mcp_servers"]["fs"]["disabled"] is True


class TestRenameAndReplace:
    """Tests for rename and replace_all."""

    def test_rename_keeps_position(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"command": "x"}, "b": {"command": "y"}}})
        store.rename("alpha", "a", "c")
        assert [e.name for e in store.list("alpha")] == ["c", "b"]

    def test_rename_to_taken_name(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"command": "x"}, "b": {"command": "y"}}})
        with pytest.raises(DuplicateName):
            store.rename("alpha", "a", "b")

    def test_rename_to_blank_name(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"command": "x"}}})
        with pytest.raises(InvalidEntry):
            store.rename("alpha", "a", "  ")
        assert [e.name for e in store.list("alpha")] == ["a"]

    def test_rename_keeps_entries_add_would_reject(self, store, home):
        write_json(home / "alpha.json", {"mcpServers": {"a": {"url": "ws://localhost:9000/mcp"}}})
        store.rename("alpha", "a", "socket")
        assert store.get("alpha", "socket").transport == SseTransport(url="ws://localhost:9000/mcp")

    def test_rename_missing(self, store):
        with pytest.raises(ServerNotFound):
            store.rename("alpha", "a", "b")

    def test_replace_all(self, store, home):
        write_json(home / "alpha.json", {"keep": True, "mcpServers": {"old": {"command": "x"}}})
        store.replace_all("alpha", [stdio("new1"), sse("new2")])

        entries = store.list("alpha")
        assert [e.name for e in entries] == ["new1", "new2"]
        assert entries[1].transport == SseTransport(url="https://example.com/mcp")
        assert json.loads((home / "alpha.json").read_text())["keep"] is True

    def test_replace_all_empty_does_not_create_file(self, store, home):
        store.replace_all("beta", [])
        assert not (home / ".beta").exists()

    def test_replace_all_rejects_duplicates(self, store, home):
        with pytest.raises(DuplicateName):
            store.replace_all("alpha", [stdio("a"), stdio("a")])
        assert not (home / "alpha.json").exists()
