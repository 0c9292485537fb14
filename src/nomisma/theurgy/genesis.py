"""
Genesis - Create the local signing key.

The key is written to ~/.nomisma/.env as PRIVATE_KEY. An existing key is
kept unless --force is given.
"""

from __future__ import annotations

import click

from ..sigil import eth


@click.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def genesis(force: bool) -> None:
    """Create a new signing key."""
    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("Genesis", fg="bright_white", bold=True)
        + click.style(" ─── Create a signing key", fg="cyan")
    )
    click.echo()

    if not force:
        try:
            address = eth.get_address(eth.load_private_key())
        except ValueError:
            address = None
        if address is not None:
            click.echo(click.style("  Existing key kept: ", dim=True) + click.style(address, fg="bright_white"))
            click.secho("  Use --force to replace it.", dim=True)
            return

    private_key, address = eth.generate_eoa()
    env_path = eth.save_private_key(private_key)

    click.echo(click.style("  Address: ", dim=True) + click.style(address, fg="bright_white"))
    click.echo(click.style("  Config:  ", dim=True) + click.style(str(env_path), fg="bright_white"))
    click.echo()
    click.secho("  IMPORTANT: Back up ~/.nomisma/.env, loss is irreversible.", fg="yellow", bold=True)
    click.echo()
