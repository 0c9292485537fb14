"""
Keystore commands - seal the local key into a password-protected file and
unseal it again.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from ..errors import KeystoreError, NomismaError
from ..sigil import eth
from ..wallet import Account


@click.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.password_option(help="Password protecting the keystore")
def seal(path: Path, password: str) -> None:
    """Write the local key to PATH as an encrypted keystore."""
    try:
        account = Account(eth.load_private_key())
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    record = account.encrypt(password)
    path.write_text(json.dumps(record, indent=2) + "\n", encoding="utf-8")
    click.echo(f"Sealed {account.address} -> {path}")


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--password", prompt=True, hide_input=True, help="Keystore password")
@click.option("--save", is_flag=True, help="Store the key in ~/.nomisma/.env")
def unseal(path: Path, password: str, save: bool) -> None:
    """Decrypt the keystore at PATH and show its address."""
    try:
        record = json.loads(path.read_text(encoding="utf-8"))
        account = Account.decrypt(record, password)
    except KeystoreError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)
    except (NomismaError, ValueError) as exc:
        click.secho(f"ERROR: invalid keystore file: {exc}", fg="red")
        sys.exit(1)

    click.echo(f"Address: {account.address}")
    if save:
        env_path = eth.save_private_key(account.private_key)
        click.echo(f"Saved to {env_path}")
