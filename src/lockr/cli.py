"""CLI commands for lockr using cyclopts."""

import json
import os
import sys
from dataclasses import replace
from getpass import getpass
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import cyclopts
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .cipher import EncryptedRecord
from .config import Config, get_default_store_path
from .errors import (
    AccountExists,
    ConfigError,
    CryptoUnavailable,
    DecryptionFailed,
    InvalidSalt,
    SaltNotFound,
    SerializationError,
    StoreCorrupted,
)
from .generator import StrengthLabel, assess, generate as generate_password
from .kdf import generate_salt
from .session import Session, create_account, unlock
from .store import FileSaltStore

app = cyclopts.App(name="lockr", help="Client-side vault encryption and password tools")
console = Console()
err_console = Console(stderr=True)

LABEL_STYLES = {
    StrengthLabel.WEAK: "red",
    StrengthLabel.FAIR: "yellow",
    StrengthLabel.GOOD: "cyan",
    StrengthLabel.STRONG: "green",
}


def fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error: {escape(message)}[/red]", soft_wrap=True)
    sys.exit(1)


def get_password(prompt: str = "Enter password: ") -> str:
    """Get password from environment or prompt user.

    Args:
        prompt: The prompt to display to the user

    Returns:
        The password string
    """
    password = os.environ.get("LOCKR_PASSWD")
    if password:
        return password
    return getpass(prompt)


def read_json(file_path: Optional[Path]) -> Any:
    """Read JSON from a file, or stdin when no file is given."""
    if file_path is not None:
        if not file_path.exists():
            fail(f"Input file not found at {file_path}")
        text = file_path.read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        fail(f"Input is not valid JSON: {exc}")


def open_session(user: str, path: Optional[Path]) -> Session:
    """Unlock the session for user, exiting on failure."""
    store = FileSaltStore(get_default_store_path(path))
    if not store.exists():
        fail(f"Salt store not found at {store.path}; run 'lockr init {user}' first")

    password = get_password()
    try:
        return unlock(store, user, password)
    except SaltNotFound:
        fail(f"No account '{user}' in {store.path}")
    except InvalidSalt as exc:
        fail(f"Stored salt for '{user}' is corrupted: {exc}")
    except CryptoUnavailable as exc:
        fail(str(exc))
    except StoreCorrupted as exc:
        fail(str(exc))


def format_strength(password: str) -> str:
    strength = assess(password)
    style = LABEL_STYLES[strength.label]
    return f"[{style}]{strength.score}/100 {strength.label.value}[/{style}]"


@app.command
def generate(
    length: Annotated[Optional[int], cyclopts.Parameter(help="Password length")] = None,
    uppercase: Annotated[Optional[bool], cyclopts.Parameter(help="Include A-Z")] = None,
    lowercase: Annotated[Optional[bool], cyclopts.Parameter(help="Include a-z")] = None,
    numbers: Annotated[Optional[bool], cyclopts.Parameter(help="Include 0-9")] = None,
    symbols: Annotated[Optional[bool], cyclopts.Parameter(help="Include symbols")] = None,
    exclude_ambiguous: Annotated[
        Optional[bool], cyclopts.Parameter(help="Leave out l, 1, I, O and 0")
    ] = None,
    count: Annotated[int, cyclopts.Parameter(help="How many passwords")] = 1,
    plain: Annotated[bool, cyclopts.Parameter(help="Print passwords only")] = False,
) -> None:
    """Generate random passwords.

    Options not given on the command line come from the [generator] table
    of the config file.
    """
    overrides = {
        "length": length,
        "include_uppercase": uppercase,
        "include_lowercase": lowercase,
        "include_numbers": numbers,
        "include_symbols": symbols,
        "exclude_ambiguous": exclude_ambiguous,
    }
    try:
        policy = replace(
            Config.load().policy,
            **{name: value for name, value in overrides.items() if value is not None},
        )
    except (ConfigError, ValueError) as exc:
        fail(str(exc))
    if count < 1:
        fail(f"count must be at least 1, got {count}")

    passwords = [generate_password(policy) for _ in range(count)]

    if plain:
        for password in passwords:
            print(password)
        return

    table = Table(title=f"Alphabet: {len(policy.alphabet())} characters")
    table.add_column("Password", style="bold")
    table.add_column("Strength")
    for password in passwords:
        table.add_row(password, format_strength(password))
    console.print(table)


@app.command
def strength(
    password: Annotated[
        Optional[str], cyclopts.Parameter(help="Password to score, prompted when omitted")
    ] = None,
) -> None:
    """Score a password from 0 to 100."""
    if password is None:
        password = getpass("Password to score: ")
    console.print(format_strength(password))


@app.command
def salt() -> None:
    """Print a new random base64 salt."""
    print(generate_salt())


@app.command
def init(
    user: Annotated[str, cyclopts.Parameter(help="Account identifier")],
    path: Annotated[
        Optional[Path], cyclopts.Parameter(help="Path to salt store")
    ] = None,
) -> None:
    """Create the encryption salt for a new account."""
    store = FileSaltStore(get_default_store_path(path))

    password = os.environ.get("LOCKR_PASSWD")
    if not password:
        while True:
            password = getpass("Choose a password for the account: ")
            if not password:
                err_console.print("[red]Password cannot be empty[/red]")
                continue
            repeat = getpass("Repeat: ")
            if password != repeat:
                err_console.print("[red]Passwords do not match[/red]")
                continue
            break

    if assess(password).label is StrengthLabel.WEAK:
        err_console.print("[yellow]Warning: this password is weak[/yellow]")

    try:
        session = create_account(store, user, password)
    except AccountExists:
        fail(f"Account '{user}' already exists in {store.path}")
    except StoreCorrupted as exc:
        fail(str(exc))
    session.lock()

    console.print(f"[green]Created account '{user}' in {store.path}[/green]")


@app.command
def encrypt(
    user: Annotated[str, cyclopts.Parameter(help="Account identifier")],
    file_path: Annotated[
        Optional[Path], cyclopts.Parameter(help="JSON file to encrypt, stdin when omitted")
    ] = None,
    path: Annotated[
        Optional[Path], cyclopts.Parameter(help="Path to salt store")
    ] = None,
) -> None:
    """Encrypt a JSON document and print the record."""
    payload = read_json(file_path)
    with open_session(user, path) as session:
        try:
            record = session.encrypt(payload)
        except SerializationError as exc:
            fail(str(exc))
    print(json.dumps(record.to_dict()))


@app.command
def decrypt(
    user: Annotated[str, cyclopts.Parameter(help="Account identifier")],
    file_path: Annotated[
        Optional[Path], cyclopts.Parameter(help="Record file to decrypt, stdin when omitted")
    ] = None,
    path: Annotated[
        Optional[Path], cyclopts.Parameter(help="Path to salt store")
    ] = None,
) -> None:
    """Decrypt a record and print its JSON document."""
    data = read_json(file_path)
    try:
        record = EncryptedRecord.from_dict(data)
    except SerializationError as exc:
        fail(str(exc))

    with open_session(user, path) as session:
        try:
            payload = session.decrypt(record)
        except DecryptionFailed:
            fail("Wrong password or corrupted record")
        except SerializationError as exc:
            fail(str(exc))
    print(json.dumps(payload, ensure_ascii=False, indent=2))
