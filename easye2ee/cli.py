"""
Command-line interface for the easye2ee engine.
"""

from __future__ import annotations

import logging
import os

import click

from easye2ee.common.config import MAX_KEY_BITS, MIN_KEY_BITS, Config
from easye2ee.common.exceptions import E2EEError
from easye2ee.common.logging_utils import setup_logger
from easye2ee.keystore import KeyStore
from easye2ee.session import E2EESession
from easye2ee.worker.service import KeyGenService
from easye2ee.worker.start_service import start_server


@click.group()
def cli() -> None:
    """easye2ee end-to-end encryption engine CLI"""
    setup_logger(logging.getLogger("easye2ee"), Config().LOG_LEVEL)


@cli.command()
@click.option(
    "--password",
    "-p",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password used to seal the private key",
)
@click.option(
    "--bits",
    default=None,
    type=click.IntRange(MIN_KEY_BITS, MAX_KEY_BITS),
    help="Modulus size in bits (default: from EASYE2EE_KEY_BITS or 1024)",
)
@click.option(
    "--out",
    "out_dir",
    default="keys",
    show_default=True,
    help="Directory to save the public key and sealed private key",
)
def keygen(password: str, bits: int | None, out_dir: str) -> None:
    """Generate an ElGamal key pair and seal the private key"""
    config = Config()
    try:
        with KeyGenService(bits=bits, config=config) as service:
            result = service.generate_keys(password)
    except E2EEError as err:
        raise click.ClickException(str(err)) from err

    KeyStore(out_dir).save(result.public_key, result.protected_private_key_blob)
    click.echo(f"Generated {result.public_key.bits}-bit key pair in {out_dir}")


@cli.command()
@click.option(
    "--key-dir",
    default="keys",
    show_default=True,
    help="Directory holding public_key.json and private_key.blob",
)
@click.option(
    "--password",
    "-p",
    prompt=True,
    hide_input=True,
    help="Password the private key was sealed with",
)
def unseal(key_dir: str, password: str) -> None:
    """Check that the sealed private key opens with a password"""
    store = KeyStore(key_dir)
    try:
        session = E2EESession.login(
            "local", store.load_public_key(), store.load_sealed_key(), password
        )
    except FileNotFoundError as err:
        msg = f"Key files not found in {key_dir}. Run 'easye2ee keygen' first."
        raise click.ClickException(msg) from err
    except E2EEError as err:
        raise click.ClickException(str(err)) from err

    click.echo(f"Private key unsealed ({session.public_key.bits}-bit modulus)")
    session.logout()


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind to (default: from EASYE2EE_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind to (default: from EASYE2EE_SERVER_PORT env or 8000)",
)
def serve(host: str | None, port: int | None) -> None:
    """Start the key generation host"""
    if host:
        os.environ["EASYE2EE_SERVER_HOST"] = host
    if port:
        os.environ["EASYE2EE_SERVER_PORT"] = str(port)

    start_server(Config())


if __name__ == "__main__":
    cli()
