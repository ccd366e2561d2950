"""SFTP operations against the configured upload directory."""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import paramiko

from .config import Settings

logger = logging.getLogger("fileshare")

CONNECT_TIMEOUT = 30
FILE_MODE = 0o644
DIR_MODE = 0o755

ProgressCallback = Callable[[int, int, str], None]
Connector = Callable[[Settings], Tuple[paramiko.SSHClient, paramiko.SFTPClient]]


@dataclass
class RemoteEntry:
    name: str
    kind: str
    size: int
    modified: int

    @property
    def is_dir(self) -> bool:
        return self.kind == "directory"


@dataclass
class TransferResult:
    name: str
    url: str


@dataclass
class DeletionResult:
    name: str
    success: bool
    error: Optional[str] = None


def connect_sftp(settings: Settings) -> Tuple[paramiko.SSHClient, paramiko.SFTPClient]:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    logger.info(f"[CONNECT] {settings.user}@{settings.host}:{settings.port} key={settings.key_path}")
    try:
        client.connect(
            hostname=settings.host,
            port=settings.port,
            username=settings.user,
            key_filename=str(settings.key_path),
            timeout=CONNECT_TIMEOUT,
            allow_agent=False,
            look_for_keys=False,
        )
        sftp = client.open_sftp()
    except BaseException:
        client.close()
        raise
    return client, sftp


def public_url(base: str, name: str) -> str:
    return f"{base.rstrip('/')}/{name}"


def sftp_exists(sftp: paramiko.SFTPClient, path: str) -> bool:
    try:
        sftp.stat(path)
        return True
    except FileNotFoundError:
        return False


def sftp_mkdirs(sftp: paramiko.SFTPClient, remote_dir: str, mode: int = DIR_MODE) -> None:
    remote_dir = posixpath.normpath(remote_dir)
    if remote_dir in ("", "/", "."):
        return
    absolute = remote_dir.startswith("/")
    path = "/" if absolute else ""
    for part in remote_dir.strip("/").split("/"):
        path = posixpath.join(path, part) if path else part
        if not sftp_exists(sftp, path):
            logger.info(f"[MKDIR] {path}")
            sftp.mkdir(path, mode)


def remove_tree(sftp: paramiko.SFTPClient, remote_path: str) -> None:
    """Remove a remote directory and everything below it, children first."""
    for entry in sftp.listdir_attr(remote_path):
        if entry.filename in (".", ".."):
            continue
        child = posixpath.join(remote_path, entry.filename)
        if stat.S_ISDIR(entry.st_mode or 0):
            remove_tree(sftp, child)
        else:
            sftp.remove(child)
    sftp.rmdir(remote_path)


class RemoteClient:
    """One SFTP session per operation, always closed on the way out."""

    def __init__(self, settings: Settings, connector: Optional[Connector] = None):
        self.settings = settings
        self.connector = connector or connect_sftp

    @contextmanager
    def session(self) -> Iterator[paramiko.SFTPClient]:
        client, sftp = self.connector(self.settings)
        try:
            yield sftp
        finally:
            try:
                sftp.close()
            finally:
                client.close()

    def remote_path(self, name: str) -> str:
        return posixpath.join(self.settings.directory, name)

    def upload_file(self, local_path: os.PathLike, progress: Optional[ProgressCallback] = None) -> TransferResult:
        local = Path(local_path)
        name = local.name
        target = self.remote_path(name)

        def _callback(transferred: int, total: int) -> None:
            if progress is not None:
                progress(transferred, total, name)

        with self.session() as sftp:
            sftp_mkdirs(sftp, self.settings.directory)
            logger.info(f"[UPLOAD] {local} -> {target}")
            sftp.put(str(local), target, callback=_callback)
            sftp.chmod(target, FILE_MODE)
        return TransferResult(name=name, url=public_url(self.settings.public_url, name))

    def upload_folder(self, local_path: os.PathLike) -> TransferResult:
        local = Path(local_path)
        name = local.name
        target_root = self.remote_path(name)
        count = 0
        with self.session() as sftp:
            sftp_mkdirs(sftp, target_root)
            for root, dirs, files in os.walk(local):
                dirs.sort()
                rel = Path(root).relative_to(local).as_posix()
                remote_dir = target_root if rel == "." else posixpath.join(target_root, rel)
                if not sftp_exists(sftp, remote_dir):
                    logger.info(f"[MKDIR] {remote_dir}")
                    sftp.mkdir(remote_dir, DIR_MODE)
                for fname in sorted(files):
                    src = Path(root) / fname
                    dst = posixpath.join(remote_dir, fname)
                    logger.info(f"[UPLOAD] {src} -> {dst}")
                    sftp.put(str(src), dst)
                    sftp.chmod(dst, FILE_MODE)
                    count += 1
        logger.info(f"[UPLOAD] folder {name}: {count} file(s)")
        return TransferResult(name=name, url=public_url(self.settings.public_url, name))

    def list_files(self) -> List[RemoteEntry]:
        directory = self.settings.directory
        with self.session() as sftp:
            if not sftp_exists(sftp, directory):
                logger.info(f"[LIST] {directory} does not exist")
                return []
            attrs = sftp.listdir_attr(directory)
        entries = [
            RemoteEntry(
                name=attr.filename,
                kind="directory" if stat.S_ISDIR(attr.st_mode or 0) else "file",
                size=int(attr.st_size or 0),
                modified=int(attr.st_mtime or 0),
            )
            for attr in attrs
            if attr.filename not in (".", "..")
        ]
        entries.sort(key=lambda e: e.name.lower())
        logger.info(f"[LIST] {directory}: {len(entries)} entries")
        return entries

    def delete_file(self, name: str) -> None:
        target = self.remote_path(name)
        with self.session() as sftp:
            # lstat: a symlink is unlinked, never followed into its target
            attr = sftp.lstat(target)
            if stat.S_ISDIR(attr.st_mode or 0):
                logger.info(f"[DELETE] directory {target}")
                remove_tree(sftp, target)
            else:
                logger.info(f"[DELETE] file {target}")
                sftp.remove(target)

    def delete_multiple_files(self, names: Sequence[str]) -> List[DeletionResult]:
        results: List[DeletionResult] = []
        for name in names:
            try:
                self.delete_file(name)
            except Exception as exc:
                logger.warning(f"[DELETE] {name} failed: {exc!r}")
                results.append(DeletionResult(name=name, success=False, error=str(exc) or type(exc).__name__))
            else:
                results.append(DeletionResult(name=name, success=True))
        return results

    def set_permissions(self, name: str, mode: int) -> None:
        target = self.remote_path(name)
        with self.session() as sftp:
            logger.info(f"[CHMOD] {target} {mode:o}")
            sftp.chmod(target, mode)

    def test_connection(self) -> bool:
        with self.session():
            pass
        return True


__all__ = [
    "RemoteEntry",
    "TransferResult",
    "DeletionResult",
    "RemoteClient",
    "connect_sftp",
    "public_url",
    "sftp_exists",
    "sftp_mkdirs",
    "remove_tree",
]
