"""Entry point for running saml_sso_core as a module.

This allows the package to be executed as:
    python -m saml_sso_core
"""

from saml_sso_core.cli.main import cli

if __name__ == "__main__":
    cli()
