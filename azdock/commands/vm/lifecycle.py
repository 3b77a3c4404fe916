"""VM lifecycle handlers addressed by (service, deployment, role)."""

import logging

from azdock.commands import exit_on_error, open_transport
from azdock.provisioning.orchestrate import (
    delete_role,
    get_role,
    restart_role,
    shutdown_role,
    start_role,
)

logger = logging.getLogger(__name__)


def log_role(role):
    """Log a role's size, image, disk, endpoints and extensions."""
    logger.info(f"Role:     {role.role_name}")
    logger.info(f"Size:     {role.role_size}")
    logger.info(f"Image:    {role.os_virtual_hard_disk.source_image_name}")
    logger.info(f"Disk:     {role.os_virtual_hard_disk.media_link}")
    network = role.network_configuration
    if network is not None:
        for endpoint in network.input_endpoints:
            logger.info(f"  Endpoint {endpoint.name}: {endpoint.protocol} {endpoint.port} -> {endpoint.local_port}")
    for extension in role.resource_extension_references:
        logger.info(f"  Extension {extension.name} {extension.version} ({extension.state})")


@exit_on_error
def handle_show(args):
    with open_transport(args) as transport:
        role = get_role(transport, args.service, args.deployment, args.role)
    if role is not None:
        log_role(role)


@exit_on_error
def handle_start(args):
    with open_transport(args) as transport:
        start_role(transport, args.service, args.deployment, args.role)


@exit_on_error
def handle_shutdown(args):
    with open_transport(args) as transport:
        shutdown_role(transport, args.service, args.deployment, args.role, args.post_shutdown_action)


@exit_on_error
def handle_restart(args):
    with open_transport(args) as transport:
        restart_role(transport, args.service, args.deployment, args.role)


@exit_on_error
def handle_delete(args):
    with open_transport(args) as transport:
        delete_role(transport, args.service, args.deployment, args.role)
