"""Deployment commands: show and delete."""

import logging

from azdock.commands import add_azure_args, exit_on_error, open_transport
from azdock.commands.vm.lifecycle import log_role
from azdock.provisioning.orchestrate import delete_vm_deployment, get_vm_deployment

logger = logging.getLogger(__name__)


def log_deployment(deployment):
    logger.info(f"Deployment: {deployment.name} ({deployment.deployment_slot})")
    logger.info(f"Status:     {deployment.status}")
    if deployment.url:
        logger.info(f"URL:        {deployment.url}")
    for instance in deployment.role_instances:
        logger.info(f"  Instance {instance.instance_name}: {instance.instance_status} / {instance.power_state} {instance.ip_address}")
    for role in deployment.role_list:
        logger.info("")
        log_role(role)


@exit_on_error
def handle_show(args):
    with open_transport(args) as transport:
        deployment = get_vm_deployment(transport, args.service, args.deployment)
    if deployment is not None:
        log_deployment(deployment)


@exit_on_error
def handle_delete(args):
    with open_transport(args) as transport:
        delete_vm_deployment(transport, args.service, args.deployment)


def register_deployment_command(subparsers):
    """Register the 'deployment' command with show/delete actions."""
    deployment_parser = subparsers.add_parser("deployment", help="Inspect or delete VM deployments")
    action_subparsers = deployment_parser.add_subparsers(dest="action", required=True)

    for name, handler, help_text in (
        ("show", handle_show, "Show a deployment and its roles"),
        ("delete", handle_delete, "Delete a deployment"),
    ):
        parser = action_subparsers.add_parser(name, help=help_text)
        parser.add_argument("--service", required=True, help="Hosted service name")
        parser.add_argument("--deployment", required=True, help="Deployment name")
        add_azure_args(parser)
        parser.set_defaults(func=handler)
