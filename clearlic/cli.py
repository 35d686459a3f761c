"""
Command-line interface for clear-signed license validation.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import click

from clearlic.client.license import LicenseValidator
from clearlic.common.config import Config
from clearlic.common.exceptions import LicenseError
from clearlic.common.models import ClientConfig
from clearlic.server import start_server
from clearlic.server.keygen import KeyGenerator
from clearlic.server.license_generator import LicenseGenerator
from clearlic.server.persistence import DataPersistence


@click.group()
def cli() -> None:
    """Clear-signed license tools"""


@cli.command()
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to save keys (default: ~/.clearlic/keys)",
)
def keygen(keys_dir: str | None) -> None:
    """Generate license signing Ed25519 keys"""
    keygen = KeyGenerator(Path(keys_dir) if keys_dir else None)
    keygen.generate_keys()
    click.echo("Keys generated and saved")


@cli.command()
@click.option("--order", required=True, type=int, help="License ID")
@click.option(
    "--valid-until",
    required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Last valid day (YYYY-MM-DD, UTC)",
)
@click.option(
    "--property",
    "extra",
    multiple=True,
    help="Additional property as KEY=VALUE (repeatable)",
)
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to load keys from (default: ~/.clearlic/keys)",
)
@click.option("--output", "-o", default=None, help="Write license to this file")
def issue(
    order: int,
    valid_until: datetime,
    extra: tuple[str, ...],
    keys_dir: str | None,
    output: str | None,
) -> None:
    """Issue a signed license"""
    if keys_dir:
        os.environ["CLEARLIC_KEYS_DIR"] = keys_dir

    properties: dict[str, str] = {}
    for item in extra:
        key, sep, value = item.partition("=")
        if not sep:
            msg = f"Property must be KEY=VALUE: {item}"
            raise click.BadParameter(msg, param_hint="--property")
        properties[key] = value

    try:
        generator = LicenseGenerator(config=Config())
        raw = generator.generate_license(order, valid_until.date(), properties)
    except (OSError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if output:
        Path(output).write_bytes(raw)
        click.echo(f"License {order} written to {output}")
    else:
        click.echo(raw.decode("utf-8"), nl=False)


@cli.command()
@click.argument("license_file", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--verification-url", default=None, help="Base URL of the verification server"
)
def verify(
    license_file: str | None,
    verification_url: str | None,
) -> None:
    """Validate a license file"""
    validator = LicenseValidator.from_config(
        ClientConfig(license_file=license_file, verification_url=verification_url)
    )
    try:
        lic = validator.load_file()
        validator.check(lic)
    except LicenseError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"License OK: {lic}")


@cli.command("check-issued")
@click.argument("license_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to load keys from (default: ~/.clearlic/keys)",
)
def check_issued(license_file: str, keys_dir: str | None) -> None:
    """Check a license against the local issuer key (offline)"""
    if keys_dir:
        os.environ["CLEARLIC_KEYS_DIR"] = keys_dir

    try:
        generator = LicenseGenerator(config=Config())
        properties = generator.check_issued(Path(license_file).read_bytes())
    except (OSError, LicenseError) as e:
        raise click.ClickException(str(e)) from e
    for key, value in properties.items():
        click.echo(f"{key}: {value}")


@cli.command()
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to load the issuer public key from",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind server to (default: from CLEARLIC_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind server to (default: from CLEARLIC_SERVER_PORT env or 8000)",
)
def serve(keys_dir: str | None, host: str | None, port: int | None) -> None:
    """Start the license verification server"""
    if keys_dir:
        os.environ["CLEARLIC_KEYS_DIR"] = keys_dir
    if host:
        os.environ["CLEARLIC_SERVER_HOST"] = host
    if port:
        os.environ["CLEARLIC_SERVER_PORT"] = str(port)

    start_server(Config())


@cli.command()
@click.argument("license_id", type=int)
def revoke(license_id: int) -> None:
    """Revoke a license on the verification server"""
    config = Config()
    DataPersistence.add_revoked_license(config.REVOKED_LICENSES_FILE_PATH, license_id)
    click.echo(f"License {license_id} revoked")


if __name__ == "__main__":
    cli()
