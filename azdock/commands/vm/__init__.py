"""VM commands: create a VM, inspect it and drive its lifecycle."""

from azdock.commands import add_azure_args
from azdock.commands.vm.create import handle_create
from azdock.commands.vm.lifecycle import (
    handle_delete,
    handle_restart,
    handle_show,
    handle_shutdown,
    handle_start,
)
from azdock.provisioning.assembler import DOCKER_EXTENSION_VERSION


def _add_role_args(parser):
    parser.add_argument("--service", required=True, help="Hosted service (cloud service) name")
    parser.add_argument("--deployment", required=True, help="Deployment name")
    parser.add_argument("--role", required=True, help="Role (VM) name")
    add_azure_args(parser)


def register_vm_command(subparsers):
    """Register the 'vm' command with create/show/start/shutdown/restart/delete actions."""
    vm_parser = subparsers.add_parser("vm", help="Manage virtual machines")
    action_subparsers = vm_parser.add_subparsers(dest="action", required=True)

    create = action_subparsers.add_parser("create", help="Create a Linux VM in a new hosted service")
    create.add_argument("--name", required=True, help="VM (role) name")
    create.add_argument("--size", default="Small", help="Instance size (default: Small)")
    create.add_argument("--image", required=True, help="OS image name")
    create.add_argument("--location", required=True, help="Location, e.g. 'West US'")
    create.add_argument("--dns-name", required=True, help="Hosted service DNS name")
    create.add_argument("--user", required=True, help="Login user name")
    create.add_argument(
        "--password",
        default=None,
        help="Login password (fallback: AZURE_VM_PASSWORD env var; empty disables password login)",
    )
    create.add_argument("--ssh-cert", default="", help="PEM certificate for key-based SSH login")
    create.add_argument("--docker", action="store_true", help="Install the Docker VM extension")
    create.add_argument("--docker-cert-dir", default=".docker", help="Docker TLS cert dir, relative to home (default: .docker)")
    create.add_argument("--docker-port", type=int, default=2376, help="Docker daemon port (default: 2376)")
    create.add_argument(
        "--docker-extension-version",
        default=DOCKER_EXTENSION_VERSION,
        help=f"Docker extension version (default: {DOCKER_EXTENSION_VERSION})",
    )
    create.add_argument("--extension", default=None, help="Name of an additional VM extension")
    create.add_argument("--extension-publisher", default="", help="Extension publisher")
    create.add_argument("--extension-version", default="", help="Extension version")
    create.add_argument("--extension-reference", default=None, help="Extension reference name (default: extension name)")
    create.add_argument("--extension-state", default="enable", help="Extension state (default: enable)")
    create.add_argument("--public-config", default=None, help="File with the extension's public config")
    create.add_argument("--private-config", default=None, help="File with the extension's private config")
    add_azure_args(create)
    create.set_defaults(func=handle_create)

    show = action_subparsers.add_parser("show", help="Show a VM role")
    _add_role_args(show)
    show.set_defaults(func=handle_show)

    start = action_subparsers.add_parser("start", help="Start a VM role")
    _add_role_args(start)
    start.set_defaults(func=handle_start)

    shutdown = action_subparsers.add_parser("shutdown", help="Shut down a VM role")
    _add_role_args(shutdown)
    shutdown.add_argument(
        "--post-shutdown-action",
        choices=["Stopped", "StoppedDeallocated"],
        default=None,
        help="Keep compute allocated (Stopped) or release it (StoppedDeallocated)",
    )
    shutdown.set_defaults(func=handle_shutdown)

    restart = action_subparsers.add_parser("restart", help="Restart a VM role")
    _add_role_args(restart)
    restart.set_defaults(func=handle_restart)

    delete = action_subparsers.add_parser("delete", help="Delete a VM role")
    _add_role_args(delete)
    delete.set_defaults(func=handle_delete)
