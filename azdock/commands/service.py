"""Hosted service commands: create, delete, upload certificate."""

import logging

from azdock.commands import add_azure_args, exit_on_error, open_transport
from azdock.provisioning.orchestrate import (
    create_hosted_service,
    delete_hosted_service,
    upload_service_cert,
)

logger = logging.getLogger(__name__)


@exit_on_error
def handle_create(args):
    with open_transport(args) as transport:
        logger.info("Creating hosted service...")
        request_id = create_hosted_service(transport, args.dns_name, args.location)
        transport.await_completion(request_id)
    logger.info(f"Hosted service '{args.dns_name}' created.")


@exit_on_error
def handle_delete(args):
    with open_transport(args) as transport:
        delete_hosted_service(transport, args.dns_name)


@exit_on_error
def handle_upload_cert(args):
    with open_transport(args) as transport:
        logger.info("Uploading cert...")
        upload_service_cert(transport, args.dns_name, args.cert)


def register_service_command(subparsers):
    """Register the 'service' command with create/delete/upload-cert actions."""
    service_parser = subparsers.add_parser("service", help="Manage hosted services")
    action_subparsers = service_parser.add_subparsers(dest="action", required=True)

    create = action_subparsers.add_parser("create", help="Create a hosted service")
    create.add_argument("--dns-name", required=True, help="Hosted service DNS name")
    create.add_argument("--location", required=True, help="Location, e.g. 'West US'")
    add_azure_args(create)
    create.set_defaults(func=handle_create)

    delete = action_subparsers.add_parser("delete", help="Delete a hosted service")
    delete.add_argument("--dns-name", required=True, help="Hosted service DNS name")
    add_azure_args(delete)
    delete.set_defaults(func=handle_delete)

    upload = action_subparsers.add_parser("upload-cert", help="Upload a service certificate")
    upload.add_argument("--dns-name", required=True, help="Hosted service DNS name")
    upload.add_argument("--cert", required=True, help="Certificate file")
    add_azure_args(upload)
    upload.set_defaults(func=handle_upload_cert)
