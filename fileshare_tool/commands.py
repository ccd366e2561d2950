"""User-facing commands: upload, delete, password, setup and about."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from . import display
from .config import (
    PUBLIC_URL,
    SERVER_DIRECTORY,
    SERVER_HOST,
    SERVER_PORT,
    SERVER_USER,
    SSH_KEY_NAME,
    ConfigStore,
    Settings,
)
from .errors import require_config
from .prompts import Check, Prompter, not_empty
from .remote import RemoteClient

logger = logging.getLogger("fileshare")

APP_NAME = "FILESHARE CLI"
VERSION = "1.0.0"
AUTHOR = "Negative Space Software"

ClientFactory = Callable[[Settings], RemoteClient]


@dataclass
class LocalEntry:
    name: str
    path: Path
    is_dir: bool
    size: int

    @property
    def label(self) -> str:
        return f"{self.name}/ (folder)" if self.is_dir else self.name


def local_entries(directory: Path) -> List[LocalEntry]:
    entries: List[LocalEntry] = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name.lower()):
        if path.name.startswith("."):
            continue
        st = path.stat()
        entries.append(LocalEntry(name=path.name, path=path, is_dir=path.is_dir(), size=st.st_size))
    return entries


# ---------------------------------------------------------------- upload

def upload_command(
    store: ConfigStore,
    prompter: Optional[Prompter] = None,
    make_client: ClientFactory = RemoteClient,
    cwd: Optional[Path] = None,
) -> int:
    require_config(store)
    prompter = prompter or Prompter()
    directory = Path(cwd) if cwd else Path.cwd()

    entries = local_entries(directory)
    if not entries:
        display.warning("No files or folders found in current directory")
        return 0

    picked = prompter.select("Select a file or folder to upload:", [(e.label, e) for e in entries])
    if picked.cancelled:
        display.warning("Upload cancelled")
        return 0
    item: LocalEntry = picked.value

    question = (
        f'Upload folder "{item.name}" and all its contents?'
        if item.is_dir
        else f'Upload file "{item.name}" ({display.format_bytes(item.size)})?'
    )
    if not prompter.confirm(question):
        display.warning("Upload cancelled")
        return 0

    client = make_client(store.settings())
    if item.is_dir:
        display.info(f"Uploading folder: {item.name}")
        result = client.upload_folder(item.path)
        display.success(f"Folder uploaded: {result.name}")
        display.access_url("Access your files at:", result.url)
    else:
        bar = display.ProgressBar(step=5)
        try:
            result = client.upload_file(item.path, bar.update)
        finally:
            bar.finish()
        display.upload_complete(result.name, result.url)
    logger.info(f"[UPLOAD] done: {result.name} -> {result.url}")
    return 0


# ---------------------------------------------------------------- delete

def delete_command(
    store: ConfigStore,
    prompter: Optional[Prompter] = None,
    make_client: ClientFactory = RemoteClient,
) -> int:
    require_config(store)
    prompter = prompter or Prompter()
    client = make_client(store.settings())

    display.info("Loading files from server...")
    entries = client.list_files()
    if not entries:
        display.warning("No files found on server")
        return 0

    display.remote_listing(entries)
    picked = prompter.checklist(
        "Select files to delete:",
        [(f"{e.name}/" if e.is_dir else e.name, e.name) for e in entries],
    )
    if picked.cancelled or not picked.value:
        display.warning("No files selected")
        return 0
    names: List[str] = picked.value

    question = f'Delete "{names[0]}"?' if len(names) == 1 else f"Delete {len(names)} items?"
    if not prompter.confirm(question):
        display.warning("Deletion cancelled")
        return 0

    display.info(f"Deleting {len(names)} item(s)...")
    results = client.delete_multiple_files(names)

    succeeded = [r for r in results if r.success]
    failed = [r for r in results if not r.success]
    if succeeded:
        display.success(f"Deleted {len(succeeded)} item(s)")
        display.result_list([r.name for r in succeeded], "bright_black")
    if failed:
        display.warning(f"Failed to delete {len(failed)} item(s)")
        display.result_list([f"{r.name} ({r.error})" for r in failed], "red")
    logger.info(f"[DELETE] done: ok={len(succeeded)} failed={len(failed)}")
    return 0


# ---------------------------------------------------------------- password

def password_command(store: ConfigStore) -> int:
    require_config(store)
    display.heading("Password Protection")
    display.warning("Password protection is not supported by this client")
    console = display.console
    console.print("Protecting downloads is a server-side setting of the web server that")
    console.print("serves the upload directory. To enable it:")
    console.print()
    console.print("[bright_black]1.[/] Configure NGINX with HTTP Basic Authentication")
    console.print("[bright_black]2.[/] Create an .htpasswd file on the server")
    console.print("[bright_black]3.[/] Reload NGINX with the updated site configuration")
    console.print()
    console.print("Contact your system administrator for details.")
    console.print()
    return 0


# ---------------------------------------------------------------- setup

PORT_ERROR = "Port must be a number between 1 and 65535"


def validate_port(text: str) -> Optional[str]:
    try:
        port = int(text.strip())
    except ValueError:
        return PORT_ERROR
    if port < 1 or port > 65535:
        return PORT_ERROR
    return None


def validate_directory(text: str) -> Optional[str]:
    value = text.strip()
    if not value:
        return "Directory path cannot be empty"
    if not value.startswith("/"):
        return "Path must be absolute (start with /)"
    return None


def key_name_check(ssh_dir: Path) -> Check:
    def _check(text: str) -> Optional[str]:
        name = text.strip()
        if not name:
            return "Key name cannot be empty"
        key_path = ssh_dir / name
        if not key_path.is_file():
            return f"Key file not found: {key_path}"
        return None
    return _check


def check_server_connection(store: ConfigStore, make_client: ClientFactory = RemoteClient) -> bool:
    display.info("Testing connection to server...")
    try:
        make_client(store.settings()).test_connection()
    except Exception as exc:
        logger.exception("[CONNECT] test failed")
        display.error("Connection failed")
        display.err_console.print(f"[red]Error:[/] {type(exc).__name__}: ", end="")
        display.err_console.print(str(exc), markup=False)
        display.warning("Please check your configuration and try again.")
        return False
    display.success("Connection successful!")
    return True


def _change_setting(
    store: ConfigStore,
    prompter: Prompter,
    key: str,
    title: str,
    question: str,
    check: Check,
    label: str,
) -> bool:
    display.heading(title)
    display.field("Current", store.get(key))
    display.console.print()
    answer = prompter.text(question, check)
    if answer.cancelled:
        display.warning("No changes made")
        return False
    store.set(key, answer.value)
    logger.info(f"[CONFIG] {key} updated")
    display.success(f"{label} updated to: {answer.value}")
    return True


def show_configuration(store: ConfigStore) -> None:
    key_path = store.key_path()
    display.details(
        "Fileshare Configuration",
        [
            (None, "Current Configuration"),
            ("SSH Key Name", store.get(SSH_KEY_NAME)),
            ("SSH Key Path", key_path),
            ("Key Exists", "Yes" if key_path.is_file() else "No"),
            ("Server Host", store.get(SERVER_HOST)),
            ("Server User", store.get(SERVER_USER)),
            ("Server Port", store.get(SERVER_PORT)),
            ("Server Directory", store.get(SERVER_DIRECTORY)),
            ("Public URL", store.get(PUBLIC_URL)),
            ("Config Location", store.path),
        ],
    )


SETUP_ACTIONS = [
    ("Change SSH key name", "ssh_key"),
    ("Change server directory", "server_dir"),
    ("Change server host", "server_host"),
    ("Change server port", "server_port"),
    ("Change server user", "server_user"),
    ("Test connection", "test"),
    ("Return to terminal", "exit"),
]


def setup_command(
    store: ConfigStore,
    prompter: Optional[Prompter] = None,
    make_client: ClientFactory = RemoteClient,
) -> int:
    prompter = prompter or Prompter()
    show_configuration(store)

    picked = prompter.select("Choose an action:", SETUP_ACTIONS)
    if picked.cancelled or picked.value == "exit":
        return 0
    action = picked.value

    if action == "ssh_key":
        display.field("SSH keys are typically located in", store.ssh_dir)
        changed = _change_setting(
            store, prompter, SSH_KEY_NAME, "Change SSH Key",
            "Enter SSH key name (without path):", key_name_check(store.ssh_dir), "SSH key",
        )
        if changed and prompter.confirm("Test connection with new key?"):
            check_server_connection(store, make_client)
    elif action == "server_dir":
        _change_setting(
            store, prompter, SERVER_DIRECTORY, "Change Server Directory",
            "Enter new server directory path:", validate_directory, "Server directory",
        )
    elif action == "server_host":
        changed = _change_setting(
            store, prompter, SERVER_HOST, "Change Server Host",
            "Enter new server host:", not_empty("Host cannot be empty"), "Server host",
        )
        if changed and prompter.confirm("Test connection with new host?"):
            check_server_connection(store, make_client)
    elif action == "server_port":
        _change_setting(
            store, prompter, SERVER_PORT, "Change Server Port",
            "Enter new server port:", validate_port, "Server port",
        )
    elif action == "server_user":
        _change_setting(
            store, prompter, SERVER_USER, "Change Server User",
            "Enter new server user:", not_empty("User cannot be empty"), "Server user",
        )
    elif action == "test":
        check_server_connection(store, make_client)
    return 0


# ---------------------------------------------------------------- about

def about_command(store: ConfigStore) -> int:
    console = display.console
    console.print()
    console.print(f"  [bold cyan]{APP_NAME}[/]")
    console.print()
    console.print(f"  [bold]Version:  [/][green]v{VERSION}[/]")
    console.print(f"  [bold]Author:   [/][yellow]{AUTHOR}[/]")
    console.print()
    console.print(f"  [bold]Server:   [/][blue]{store.get(PUBLIC_URL)}[/]")
    console.print()
    console.print("  [bright_black]Securely transfer large files and folders between computers[/]")
    console.print("  [bright_black]Built with Python, paramiko, prompt_toolkit and rich[/]")
    console.print()
    return 0


__all__ = [
    "APP_NAME",
    "VERSION",
    "LocalEntry",
    "local_entries",
    "upload_command",
    "delete_command",
    "password_command",
    "setup_command",
    "about_command",
    "validate_port",
    "validate_directory",
    "key_name_check",
    "check_server_connection",
    "show_configuration",
]
