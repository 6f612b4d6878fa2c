"""Main CLI entry point for the SAML SSO core.

This module provides the main Click command group for the saml-sso CLI.
"""

from pathlib import Path
from typing import Optional

import click

from saml_sso_core import __version__
from saml_sso_core.cli.saml_commands import (
    decode_command,
    encode_command,
    relay_state_command,
    sign_command,
    verify_command,
)
from saml_sso_core.config import get_logging_config, load_config
from saml_sso_core.logging_audit import configure_logging
from saml_sso_core.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="saml-sso")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-secrets/--no-redact-secrets",
    default=None,
    help="Mask SAML payloads, relay states and signatures in logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_secrets: Optional[bool],
) -> None:
    """SAML SSO core - HTTP-Redirect codec, XML signatures and relay state.

    Common usage:

        # Encode a SAML request for the HTTP-Redirect binding
        saml-sso encode authn-request.xml

        # Sign a response with a PKCS12 keystore
        saml-sso sign response.xml --keystore certs/sp.p12

        # Verify a response against the identity provider certificate
        saml-sso verify response.xml --cert certs/idp.b64

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose

    logging_config = get_logging_config(config_obj)

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else logging_config.level
    log_file_path = log_file if log_file else logging_config.log_file
    redact = redact_secrets if redact_secrets is not None else logging_config.redact_secrets

    configure_logging(level=log_level, log_file=log_file_path, redact_secrets=redact)


cli.add_command(encode_command)
cli.add_command(decode_command)
cli.add_command(sign_command)
cli.add_command(verify_command)
cli.add_command(relay_state_command)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        saml-sso config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)

        click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
        click.echo(f"\nConfiguration file: {config_file}")

        click.echo("\nSigning:")
        click.echo(f"  Keystore:    {config_obj.signing.keystore_path or 'Not configured'}")
        click.echo(f"  Key path:    {config_obj.signing.key_path or 'Not configured'}")
        click.echo(f"  Digest:      {config_obj.signing.digest_algorithm}")

        click.echo("\nVerification:")
        click.echo(f"  Require signature: {config_obj.verification.require_signature}")
        click.echo(f"  Allow SHA-1:       {config_obj.verification.allow_legacy_sha1}")
        click.echo(
            f"  IdP certificate:   "
            f"{'Configured' if config_obj.verification.idp_certificate else 'Not configured'}"
        )

        click.echo("\nRelay state:")
        click.echo(f"  Window:      {config_obj.relay_state.window_seconds}s")

        click.echo("\nLogging:")
        click.echo(f"  Level:       {config_obj.logging.level}")
        click.echo(f"  Log file:    {config_obj.logging.log_file}")

    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"saml-sso version {__version__}")


if __name__ == "__main__":
    cli()
