"""命令行入口测试"""

import io

import pytest
from rich.console import Console

from termide import cli


class TestBuildParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.path is None
        assert args.log_level is None
        assert args.files is False

    def test_options(self):
        args = cli.build_parser().parse_args(["/w", "--log-level", "debug", "--files"])
        assert args.path == "/w"
        assert args.log_level == "debug"
        assert args.files is True


class TestRun:
    @pytest.mark.asyncio
    async def test_runs_lines_until_quit(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setattr(cli.config, "SETTINGS_FILE", tmp_path / "settings.json")
        (tmp_path / "notes.md").write_text("# notes\n")
        monkeypatch.setattr(
            "sys.stdin", io.StringIO(":e notes.md\n\n:bogus\n:e missing.md\n:q\n:tabn\n")
        )
        console = Console(file=io.StringIO(), width=120, color_system=None)

        code = await cli.run(str(tmp_path), console=console)

        output = console.file.getvalue()
        assert code == 0
        assert "notes.md" in output
        assert "Command file.open failed" in output

    @pytest.mark.asyncio
    async def test_eof_stops(self, tmp_path, monkeypatch):
        monkeypatch.setattr(cli.config, "SETTINGS_FILE", tmp_path / "settings.json")
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        console = Console(file=io.StringIO(), width=120, color_system=None)

        assert await cli.run(None, console=console) == 0
