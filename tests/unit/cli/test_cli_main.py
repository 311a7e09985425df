"""Unit tests for the sandpatch CLI (sandpatch.cli.main and commands)."""

import io
import json
from pathlib import Path

import pytest

from sandpatch.cli.arg_parser import parse_args
from sandpatch.cli.main import main

DIFF = """\
--- a/main.py
+++ b/main.py
@@ -1,3 +1,3 @@
 a
-b
+B
 c
"""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    (root / "main.py").write_text("a\nb\nc\n")
    return root


@pytest.fixture
def config_file(tmp_path: Path, workspace: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "security": {
                    "allowed_identity_patterns": ["ai-*"],
                    "allowed_roots": [str(workspace)],
                    "restricted_prefixes": [str(workspace / "private")],
                },
                "audit": {"enabled": False},
            }
        )
    )
    return path


@pytest.fixture
def diff_file(tmp_path: Path) -> Path:
    path = tmp_path / "change.diff"
    path.write_text(DIFF)
    return path


def _apply_args(config_file: Path, workspace: Path, diff_file: Path, *extra: str) -> list[str]:
    return [
        "apply",
        "--identity", "ai-box",
        "--root", str(workspace),
        "--path", "main.py",
        "--config", str(config_file),
        *extra,
        str(diff_file),
    ]


class TestArgParser:
    def test_apply_flags_default_to_none(self) -> None:
        args = parse_args(["apply", "--root", "/app", "--path", "x.py", "d.diff"])

        assert args.identity == ""
        assert args.dry_run is None
        assert args.strict is None
        assert args.store is None
        assert args.config is None

    def test_verbose(self) -> None:
        assert parse_args(["-v", "infer", "x"]).verbose is True


class TestCheckCommand:
    def test_valid_diff(self, diff_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["check", str(diff_file)]) == 0

        out = capsys.readouterr().out
        assert "source: a/main.py" in out
        assert "hunk 1: @@ -1,3 +1,3 @@" in out
        assert "Diff OK: 1 hunk(s), +1 -1 (2 changes)" in out

    def test_count_mismatch_noted(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "loose.diff"
        path.write_text("@@ -1,5 +1,5 @@\n-a\n+b\n")

        assert main(["check", str(path)]) == 0

        assert "body has -1,+1" in capsys.readouterr().out

    def test_empty_diff(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "empty.diff"
        path.write_text("")

        assert main(["check", str(path)]) == 1

        assert "empty_diff" in capsys.readouterr().err

    def test_strict(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "junk.diff"
        path.write_text("@@ -1 +1 @@\n-a\n~junk\n+b\n")

        assert main(["check", str(path)]) == 0
        assert main(["check", "--strict", str(path)]) == 1

        assert "malformed_line" in capsys.readouterr().err

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(DIFF))

        assert main(["check", "-"]) == 0

        assert "Diff OK" in capsys.readouterr().out

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["check", str(tmp_path / "nope.diff")]) == 1

        assert "Cannot read diff file" in capsys.readouterr().err


@pytest.mark.unix_only
class TestApplyCommand:
    def test_apply(
        self,
        config_file: Path,
        workspace: Path,
        diff_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(_apply_args(config_file, workspace, diff_file)) == 0

        assert (workspace / "main.py").read_text() == "a\nB\nc\n"
        assert "Applied 1 hunk(s)" in capsys.readouterr().out

    def test_dry_run(
        self,
        config_file: Path,
        workspace: Path,
        diff_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(_apply_args(config_file, workspace, diff_file, "--dry-run")) == 0

        assert (workspace / "main.py").read_text() == "a\nb\nc\n"
        assert "Would apply 1 hunk(s)" in capsys.readouterr().out

    def test_apply_mismatch(
        self,
        config_file: Path,
        workspace: Path,
        diff_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (workspace / "main.py").write_text("x\ny\nz\n")

        assert main(_apply_args(config_file, workspace, diff_file)) == 1

        captured = capsys.readouterr()
        assert "apply failed" in captured.err
        assert "No changes made." in captured.out
        assert (workspace / "main.py").read_text() == "x\ny\nz\n"

    def test_denied_identity(
        self,
        config_file: Path,
        workspace: Path,
        diff_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        args = _apply_args(config_file, workspace, diff_file)
        args[2] = "random"

        assert main(args) == 1

        assert "validate failed" in capsys.readouterr().err
        assert (workspace / "main.py").read_text() == "a\nb\nc\n"

    def test_invalid_config(
        self, tmp_path: Path, workspace: Path, diff_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{")

        assert main(_apply_args(bad, workspace, diff_file)) == 1

        assert "Invalid JSON" in capsys.readouterr().err


@pytest.mark.unix_only
class TestPolicyCommands:
    def test_show(self, config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["policy", "show", "--config", str(config_file)]) == 0

        out = capsys.readouterr().out
        assert "require_identity: True" in out
        assert "- ai-*" in out

    def test_check_identity(self, config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["policy", "check-identity", "ai-box", "--config", str(config_file)]) == 0
        assert "ai-box is allowed (matches ai-*)" in capsys.readouterr().out

        assert main(["policy", "check-identity", "other", "--config", str(config_file)]) == 1
        assert "other is not in the allowed list" in capsys.readouterr().err

    def test_check_path(
        self, config_file: Path, workspace: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        base = ["policy", "check-path", "--identity", "ai-box", "--root", str(workspace)]

        assert main([*base, "--path", "main.py", "--config", str(config_file)]) == 0
        assert "Allowed:" in capsys.readouterr().out

        assert main([*base, "--path", "../x", "--config", str(config_file)]) == 1
        assert "path_traversal" in capsys.readouterr().err

        assert main([*base, "--path", "private/key", "--config", str(config_file)]) == 1
        assert "restricted_path" in capsys.readouterr().err

    def test_bare_policy(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["policy"]) == 1

        assert "Usage: sandpatch policy" in capsys.readouterr().out


class TestInferAndHelp:
    def test_infer(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["infer", "ai-web-ide-todo-app-1700000000"]) == 0

        assert capsys.readouterr().out.strip() == "todo_app"

    def test_infer_no_match(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["infer", "redis"]) == 1

        assert "No identity rule matches" in capsys.readouterr().err

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 1

        assert "usage: sandpatch" in capsys.readouterr().out
