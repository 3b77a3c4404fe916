"""Shared CLI plumbing: Azure connection flags, transport setup, error exit."""

import functools
import logging
import sys

from azdock.errors import AzdockError
from azdock.provisioning.transport import AzureTransport
from azdock.redact import register_secret
from azdock.settings import load_settings

logger = logging.getLogger(__name__)


def add_azure_args(parser):
    """Add the connection flags shared by every remote command."""
    parser.add_argument("--config", default=None, help="YAML settings file (default: ~/.azdock/config.yaml if present)")
    parser.add_argument("--subscription-id", default=None, help="Subscription ID (fallback: AZURE_SUBSCRIPTION_ID env var)")
    parser.add_argument(
        "--management-cert",
        default=None,
        help="PEM file with management certificate and key (fallback: AZURE_MANAGEMENT_CERT env var)",
    )
    parser.add_argument("--api-url", default=None, help="Management API base URL")
    parser.add_argument("--dry-run", action="store_true", help="Print requests without executing")


def open_transport(args):
    """Build an AzureTransport from CLI flags, env vars and the config file."""
    settings = load_settings(
        config_path=args.config,
        dry_run=args.dry_run,
        subscription_id=args.subscription_id,
        management_cert=args.management_cert,
        api_url=args.api_url,
    )
    register_secret(settings.subscription_id)
    return AzureTransport(settings, dry_run=args.dry_run)


def exit_on_error(handler):
    """Log AzdockError failures as 'Error: ...' and exit with status 1."""

    @functools.wraps(handler)
    def wrapper(args):
        try:
            return handler(args)
        except AzdockError as e:
            logger.error(f"Error: {e}")
            sys.exit(1)

    return wrapper
