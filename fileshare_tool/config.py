"""Configuration loading and persistence for the fileshare tool."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional


SSH_KEY_NAME = "SSH_KEY_NAME"
SERVER_HOST = "SERVER_HOST"
SERVER_USER = "SERVER_USER"
SERVER_PORT = "SERVER_PORT"
SERVER_DIRECTORY = "SERVER_DIRECTORY"
PUBLIC_URL = "PUBLIC_URL"

# Update these in ~/.fileshare/.env or via `fileshare setup`.
DEFAULTS: Dict[str, str] = {
    SSH_KEY_NAME: "id_ed25519",
    SERVER_HOST: "your-server-host.com",
    SERVER_USER: "root",
    SERVER_PORT: "22",
    SERVER_DIRECTORY: "/root/fileshare",
    PUBLIC_URL: "https://fileshare.ct-42210.com",
}

DEFAULT_CONFIG_DIR = Path.home() / ".fileshare"
DEFAULT_SSH_DIR = Path.home() / ".ssh"
ENV_FILE_NAME = ".env"


@dataclass(frozen=True)
class Settings:
    """Connection parameters handed to the remote client."""

    key_name: str
    key_path: Path
    host: str
    user: str
    port: int
    directory: str
    public_url: str


def parse_env_text(text: str) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = value.strip().strip('"').strip("'")
    return data


def render_env_text(data: Dict[str, str]) -> str:
    return "".join(f"{key}={value}\n" for key, value in data.items())


class ConfigStore:
    """Flat KEY=value settings file under the user's home directory."""

    def __init__(self, config_dir: Optional[Path] = None, ssh_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self.ssh_dir = Path(ssh_dir) if ssh_dir else DEFAULT_SSH_DIR
        self.data: Dict[str, str] = {}

    @property
    def path(self) -> Path:
        return self.config_dir / ENV_FILE_NAME

    def _ensure_dir(self) -> None:
        self.config_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

    def _read_file(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        return parse_env_text(self.path.read_text(encoding="utf-8"))

    def load(self) -> "ConfigStore":
        self._ensure_dir()
        if self.path.exists():
            self.data = self._read_file()
        else:
            self.data = dict(DEFAULTS)
        # process environment wins over the file, like the shell-exported case
        for key in DEFAULTS:
            value = os.environ.get(key)
            if value:
                self.data[key] = value
        return self

    def get(self, key: str) -> str:
        value = self.data.get(key)
        if value:
            return value
        return DEFAULTS.get(key, "")

    def set(self, key: str, value: str) -> None:
        self._ensure_dir()
        merged = self._read_file()
        merged[key] = value
        self._write_atomic(render_env_text(merged))
        self.data[key] = value

    def _write_atomic(self, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=".env.", dir=str(self.config_dir))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def key_path(self) -> Path:
        return self.ssh_dir / self.get(SSH_KEY_NAME)

    def is_configured(self) -> bool:
        return self.key_path().is_file()

    def settings(self) -> Settings:
        raw_port = self.get(SERVER_PORT)
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ValueError(f"{SERVER_PORT} must be an integer, got {raw_port!r}") from exc
        return Settings(
            key_name=self.get(SSH_KEY_NAME),
            key_path=self.key_path(),
            host=self.get(SERVER_HOST),
            user=self.get(SERVER_USER),
            port=port,
            directory=self.get(SERVER_DIRECTORY),
            public_url=self.get(PUBLIC_URL),
        )

    def as_dict(self) -> Dict[str, str]:
        return {key: self.get(key) for key in DEFAULTS}


__all__ = [
    "DEFAULTS",
    "SSH_KEY_NAME",
    "SERVER_HOST",
    "SERVER_USER",
    "SERVER_PORT",
    "SERVER_DIRECTORY",
    "PUBLIC_URL",
    "Settings",
    "ConfigStore",
    "parse_env_text",
    "render_env_text",
]
