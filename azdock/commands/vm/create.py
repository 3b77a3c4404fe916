"""'vm create' handler: assemble the role, attach provisioning and extensions, deploy."""

import logging
import os

from azdock.commands import exit_on_error, open_transport
from azdock.errors import ConfigError
from azdock.provisioning.assembler import (
    attach_docker_extension,
    attach_extension,
    attach_linux_provisioning,
)
from azdock.provisioning.orchestrate import create_azure_vm, create_azure_vm_configuration
from azdock.redact import register_secret

logger = logging.getLogger(__name__)


def _read_optional(path):
    if not path:
        return ""
    try:
        with open(os.path.expanduser(path)) as f:
            return f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read extension config {path}: {e}") from e


@exit_on_error
def handle_create(args):
    """CLI handler for 'vm create'."""
    password = args.password if args.password is not None else os.environ.get("AZURE_VM_PASSWORD", "")
    register_secret(password)

    with open_transport(args) as transport:
        role = create_azure_vm_configuration(transport, args.name, args.size, args.image, args.location)
        attach_linux_provisioning(role, args.user, password, args.ssh_cert)

        if args.docker:
            attach_docker_extension(role, args.docker_cert_dir, args.docker_port, args.docker_extension_version)

        if args.extension:
            attach_extension(
                role,
                args.extension,
                args.extension_publisher,
                args.extension_version,
                args.extension_reference or args.extension,
                args.extension_state,
                _read_optional(args.public_config),
                _read_optional(args.private_config),
            )

        create_azure_vm(transport, role, args.dns_name, args.location)
