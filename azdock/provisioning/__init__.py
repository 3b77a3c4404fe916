"""VM provisioning: configuration builders, deployment assembly, remote operations."""

from azdock.provisioning.assembler import (
    assemble_deployment,
    assemble_hosted_service,
    assemble_vm_role,
    attach_docker_extension,
    attach_extension,
    attach_linux_provisioning,
)
from azdock.provisioning.orchestrate import (
    create_azure_vm,
    create_azure_vm_configuration,
    create_hosted_service,
    delete_hosted_service,
    delete_role,
    delete_vm_deployment,
    get_role,
    get_vm_deployment,
    restart_role,
    shutdown_role,
    start_role,
    upload_service_cert,
)
from azdock.provisioning.transport import AzureTransport
from azdock.provisioning.types import (
    Endpoint,
    ExtensionReference,
    LinuxProvisioningConfiguration,
    NetworkConfiguration,
    Role,
    VMDeployment,
)

__all__ = [
    "AzureTransport",
    "Endpoint",
    "ExtensionReference",
    "LinuxProvisioningConfiguration",
    "NetworkConfiguration",
    "Role",
    "VMDeployment",
    "assemble_deployment",
    "assemble_hosted_service",
    "assemble_vm_role",
    "attach_docker_extension",
    "attach_extension",
    "attach_linux_provisioning",
    "create_azure_vm",
    "create_azure_vm_configuration",
    "create_hosted_service",
    "delete_hosted_service",
    "delete_role",
    "delete_vm_deployment",
    "get_role",
    "get_vm_deployment",
    "restart_role",
    "shutdown_role",
    "start_role",
    "upload_service_cert",
]
