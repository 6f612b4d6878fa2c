"""SAML CLI commands for encoding, signing, verification and relay state.

This module provides CLI commands including:
- encode / decode: HTTP-Redirect binding transport strings
- sign: Enveloped XML signature with a keystore or PEM key pair
- verify: Signature validation against a trusted certificate
- relay-state: HMAC signing and checking of relay-state values
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import IO, Optional

import click

from saml_sso_core.config import (
    get_keystore_password,
    get_relay_state_config,
    get_verification_config,
)
from saml_sso_core.config.schema import Config
from saml_sso_core.models.saml import RelayRecord, SecretKey
from saml_sso_core.saml import relay_state
from saml_sso_core.saml.certificate_manager import load_key_material, parse_certificate
from saml_sso_core.saml.codec import decode, encode
from saml_sso_core.saml.signer import SAMLSigner
from saml_sso_core.saml.verifier import SAMLVerifier
from saml_sso_core.utils.exceptions import SAMLCoreError

logger = logging.getLogger(__name__)


def _config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


def _write_output(content: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(content, encoding="utf-8")
        click.echo(f"Written to {output}", err=True)
    else:
        click.echo(content)


@click.command(name="encode")
@click.argument("xml_file", type=click.File("r", encoding="utf-8"), default="-")
def encode_command(xml_file: IO[str]) -> None:
    """Encode XML for the HTTP-Redirect binding.

    Reads XML from XML_FILE (or stdin) and prints the deflated, base64,
    percent-encoded transport string.
    """
    click.echo(encode(xml_file.read()))


@click.command(name="decode")
@click.argument("transport_file", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def decode_command(ctx: click.Context, transport_file: IO[str]) -> None:
    """Decode an HTTP-Redirect transport string back into XML."""
    max_size = _config(ctx).codec.max_inflated_size
    try:
        click.echo(decode(transport_file.read().strip(), max_size=max_size))
    except SAMLCoreError as e:
        click.echo(click.style("✗", fg="red", bold=True) + f" Decoding failed: {e}", err=True)
        raise click.exceptions.Exit(1)


@click.command(name="sign")
@click.argument("xml_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--keystore",
    type=click.Path(exists=True, path_type=Path),
    help="PKCS12 keystore or PEM certificate (default: signing.keystore_path)",
)
@click.option(
    "--key",
    type=click.Path(exists=True, path_type=Path),
    help="PEM private key, for PEM certificates (default: signing.key_path)",
)
@click.option(
    "--password",
    type=str,
    help="Keystore password (default: read from the configured environment variable)",
)
@click.option(
    "--digest",
    type=click.Choice(["sha1", "sha256", "sha512"]),
    help="Digest algorithm (default: signing.digest_algorithm)",
)
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    help="Save signed XML to file",
)
@click.pass_context
def sign_command(
    ctx: click.Context,
    xml_file: Path,
    keystore: Optional[Path],
    key: Optional[Path],
    password: Optional[str],
    digest: Optional[str],
    output: Optional[Path],
) -> None:
    """Sign a SAML document with an enveloped XML signature.

    Examples:

        saml-sso sign response.xml --keystore certs/sp.p12 --password secret

        saml-sso sign response.xml --keystore certs/sp.pem --key certs/sp-key.pem
    """
    config = _config(ctx)
    keystore_path = keystore or config.signing.keystore_path
    if keystore_path is None:
        raise click.UsageError(
            "Signing requires --keystore or signing.keystore_path in the configuration."
        )

    key_password = password.encode("utf-8") if password else get_keystore_password(config)

    try:
        signing_key = load_key_material(
            keystore_path,
            password=key_password,
            key_path=key or config.signing.key_path,
        )
        signer = SAMLSigner(digest_algorithm=digest or config.signing.digest_algorithm)
        signed_xml = signer.sign(xml_file.read_text(encoding="utf-8"), signing_key)
    except SAMLCoreError as e:
        click.echo(click.style("✗", fg="red", bold=True) + f" Signing failed: {e}", err=True)
        raise click.exceptions.Exit(1)

    _write_output(signed_xml, output)


@click.command(name="verify")
@click.argument("xml_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--cert",
    type=click.Path(exists=True, path_type=Path),
    help="File with the trusted base64 or PEM certificate (default: verification.idp_certificate)",
)
@click.option(
    "--require-signature/--allow-unsigned",
    default=None,
    help="Reject unsigned documents (default: verification.require_signature)",
)
@click.pass_context
def verify_command(
    ctx: click.Context,
    xml_file: Path,
    cert: Optional[Path],
    require_signature: Optional[bool],
) -> None:
    """Verify the XML signature of a SAML document.

    Exits with status 1 when the document is rejected.
    """
    verification = get_verification_config(_config(ctx))
    certificate_string = cert.read_text(encoding="utf-8") if cert else verification.idp_certificate
    if not certificate_string:
        raise click.UsageError(
            "Verification requires --cert or verification.idp_certificate in the configuration."
        )

    if require_signature is None:
        require_signature = verification.require_signature

    try:
        verifier = SAMLVerifier(
            parse_certificate(certificate_string),
            require_signature=require_signature,
            allow_legacy_sha1=verification.allow_legacy_sha1,
        )
        is_valid = verifier.verify(xml_file.read_text(encoding="utf-8"))
    except SAMLCoreError as e:
        click.echo(click.style("✗", fg="red", bold=True) + f" Verification error: {e}", err=True)
        raise click.exceptions.Exit(1)

    if not is_valid:
        click.echo(click.style("✗", fg="red", bold=True) + " Signature rejected")
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Signature accepted")


@click.command(name="relay-state")
@click.argument("value")
@click.option(
    "--key-hex",
    type=str,
    help="Existing secret key as hex (default: generate a new key)",
)
@click.option(
    "--check",
    "digest",
    type=str,
    help="Check this digest instead of printing a new one",
)
@click.option(
    "--issued-at",
    type=click.DateTime(formats=["%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S"]),
    help="With --check, also require this issue time (UTC unless an offset is given) "
         "to be inside relay_state.window_seconds",
)
@click.pass_context
def relay_state_command(
    ctx: click.Context,
    value: str,
    key_hex: Optional[str],
    digest: Optional[str],
    issued_at: Optional[datetime],
) -> None:
    """Sign a relay-state VALUE with HMAC-SHA1, or check a digest for it."""
    relay_config = get_relay_state_config(_config(ctx))

    if issued_at and not digest:
        raise click.UsageError("--issued-at is only used together with --check.")

    if key_hex:
        try:
            secret_key = SecretKey(material=bytes.fromhex(key_hex))
        except ValueError:
            raise click.BadParameter("Key must be a hex string", param_hint="--key-hex")
    else:
        if digest:
            raise click.UsageError("--check needs the --key-hex that produced the digest.")
        secret_key = relay_state.new_secret_key(relay_config.key_size)
        click.echo(f"key: {secret_key.material.hex()}")

    if digest and issued_at:
        guard = relay_state.RelayStateGuard(secret_key, relay_config.window)
        if not guard.check(value, digest, RelayRecord(value=value, issued_at=issued_at)):
            click.echo(
                click.style("✗", fg="red", bold=True)
                + f" Relay state rejected (digest mismatch or older than "
                f"{relay_config.window_seconds}s)"
            )
            raise click.exceptions.Exit(1)
        click.echo(click.style("✓", fg="green", bold=True) + " Relay state digest matches and is fresh")
        return

    if digest:
        if not relay_state.verify(secret_key, value, digest):
            click.echo(click.style("✗", fg="red", bold=True) + " Relay state digest mismatch")
            raise click.exceptions.Exit(1)
        click.echo(click.style("✓", fg="green", bold=True) + " Relay state digest matches")
        return

    click.echo(f"digest: {relay_state.sign(secret_key, value)}")
