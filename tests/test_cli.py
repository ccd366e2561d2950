from __future__ import annotations

import logging

import pytest

from fileshare_tool import main as entry
from fileshare_tool.cli import COMMANDS, parse_args
from fileshare_tool.config import ConfigStore


@pytest.fixture(autouse=True)
def detach_log_file():
    yield
    logger = logging.getLogger("fileshare")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_upload_is_the_default_command():
    assert parse_args([]).command == "upload"


@pytest.mark.parametrize("name", sorted(COMMANDS))
def test_every_command_parses(name):
    assert parse_args([name]).command == name


def test_unknown_command_is_rejected():
    with pytest.raises(SystemExit) as info:
        parse_args(["sync"])
    assert info.value.code == 2


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as info:
        parse_args(["--version"])
    assert info.value.code == 0
    assert "1.0.0" in capsys.readouterr().out


def test_about_runs_and_writes_log(store, output):
    assert entry.main(["about"], store=store) == 0

    assert "FILESHARE CLI" in output.getvalue()
    log = (store.config_dir / "fileshare.log").read_text()
    assert "[START] command=about" in log


def test_missing_key_exits_with_one(tmp_path, output):
    bare = ConfigStore(config_dir=tmp_path / "cfg", ssh_dir=tmp_path / "nokeys")

    assert entry.main(["delete"], store=bare) == 1
    assert "Please run: fileshare setup" in output.getvalue()


def test_unreadable_config_is_reported(tmp_path, output):
    cfg_dir = tmp_path / "cfg"
    cfg_dir.mkdir()
    (cfg_dir / ".env").write_bytes(b"SERVER_HOST=\xff\xfe\n")
    broken = ConfigStore(config_dir=cfg_dir, ssh_dir=tmp_path / "ssh")

    assert entry.main(["about"], store=broken) == 1
    assert "Error Type: UnicodeDecodeError" in output.getvalue()


def test_config_dir_that_cannot_be_created_is_reported(tmp_path, output):
    blocker = tmp_path / "cfg"
    blocker.write_text("not a directory")
    broken = ConfigStore(config_dir=blocker, ssh_dir=tmp_path / "ssh")

    assert entry.main(["about"], store=broken) == 1
    assert "Error Type: FileExistsError" in output.getvalue()


def test_unexpected_error_prints_full_report(store, output, monkeypatch):
    def explode(command, cfg):
        raise RuntimeError("boom")

    monkeypatch.setattr(entry, "dispatch", explode)

    assert entry.main(["upload"], store=store) == 1
    text = output.getvalue()
    assert "Error Type: RuntimeError" in text
    assert "Message: boom" in text
    assert "Stack Trace:" in text
    assert "explode" in text


def test_error_code_is_reported(store, output, monkeypatch):
    def explode(command, cfg):
        raise ConnectionRefusedError(111, "Connection refused")

    monkeypatch.setattr(entry, "dispatch", explode)

    assert entry.main(["upload"], store=store) == 1
    assert "Error Code: 111" in output.getvalue()


def test_interrupt_exits_with_130(store, output, monkeypatch):
    def interrupt(command, cfg):
        raise KeyboardInterrupt

    monkeypatch.setattr(entry, "dispatch", interrupt)

    assert entry.main(["setup"], store=store) == 130
