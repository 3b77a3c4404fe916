"""Deployment assembly: roles, deployments, hosted services and role attachments."""

import base64
import logging
import uuid
from datetime import datetime, timezone

from azdock.errors import ProvisioningConfigMissing
from azdock.provisioning.builders import (
    OS_LINUX,
    build_docker_endpoint,
    build_docker_extension_config,
    build_extension_reference,
    build_network_config,
    build_provisioning_config,
)
from azdock.provisioning.certs import encode_file_base64
from azdock.provisioning.resolvers import (
    create_storage_service,
    find_storage_service_by_location,
    get_blob_endpoint,
    resolve_image,
    resolve_location,
)
from azdock.provisioning.types import (
    PRODUCTION_SLOT,
    HostedService,
    OSVirtualHardDisk,
    Role,
    RoleOperation,
    ServiceCertificate,
    VMDeployment,
)

logger = logging.getLogger(__name__)

STORAGE_SERVICE_PREFIX = "portalvhds"

DOCKER_EXTENSION_NAME = "DockerExtension"
DOCKER_EXTENSION_PUBLISHER = "MSOpenTech.Extensions"
DOCKER_EXTENSION_VERSION = "0.3"
DOCKER_EXTENSION_STATE = "enable"


def _utc_timestamp():
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")


def _new_storage_service_name():
    # Storage account names are capped at 24 lowercase alphanumerics.
    return STORAGE_SERVICE_PREFIX + uuid.uuid4().hex[-12:]


# ── Role and deployment assembly ──────────────────────────────────


def get_vhd_media_link(transport, name, location):
    """Return the media link for a new OS disk named after *name*.

    Uses the first storage service in *location*, creating one if none exists.
    """
    storage_service = find_storage_service_by_location(transport, location)
    if storage_service is None:
        storage_service = create_storage_service(transport, _new_storage_service_name(), location)

    blob_endpoint = get_blob_endpoint(storage_service).rstrip("/")
    return f"{blob_endpoint}/vhds/{name}-{_utc_timestamp()}.vhd"


def assemble_vm_role(transport, name, size, image_name, location):
    """Assemble a base role: size, source image and OS disk location.

    Resolver failures propagate unchanged.
    """
    resolve_location(transport, location)
    resolve_image(transport, image_name)

    disk = OSVirtualHardDisk(
        source_image_name=image_name,
        media_link=get_vhd_media_link(transport, name, location),
    )
    return Role(role_name=name, role_size=size, os_virtual_hard_disk=disk, use_cert_auth=False)


def assemble_deployment(role):
    """Wrap *role* in a production deployment named after it."""
    return VMDeployment(
        name=role.role_name,
        label=role.role_name,
        deployment_slot=PRODUCTION_SLOT,
        role_list=[role],
    )


def assemble_hosted_service(dns_name, location):
    # The API wants the label as base64, not plain text.
    label = base64.b64encode(dns_name.encode("utf-8")).decode("ascii")
    return HostedService(service_name=dns_name, label=label, location=location)


def assemble_service_certificate(cert_path):
    return ServiceCertificate(data=encode_file_base64(cert_path), certificate_format="pfx")


def assemble_role_operation(operation_type, post_shutdown_action=None):
    return RoleOperation(operation_type=operation_type, post_shutdown_action=post_shutdown_action)


# ── Role attachments ──────────────────────────────────────────────


def attach_linux_provisioning(role, user_name, password="", cert_path=""):
    """Replace *role*'s configuration sets with Linux provisioning + network config.

    A *cert_path* enables key-based login and schedules the certificate upload.
    """
    logger.info("Adding azure provisioning configuration...")

    provisioning_config = build_provisioning_config(role.role_name, user_name, password, cert_path)
    network_config = build_network_config(OS_LINUX)

    role.configuration_sets = []
    role.set_configuration_set(provisioning_config)
    role.set_configuration_set(network_config)

    if cert_path:
        role.use_cert_auth = True
        role.cert_path = cert_path
    return role


def attach_extension(role, name, publisher, version, reference_name, state, public_value="", private_value=""):
    """Add a resource extension to *role*."""
    logger.info(f"Setting azure VM extension: {name}...")
    extension = build_extension_reference(name, publisher, version, reference_name, state, public_value, private_value)
    role.resource_extension_references.append(extension)
    return role


def attach_docker_extension(role, cert_dir, port, version=""):
    """Open the docker port and add the docker extension with its TLS bundle.

    Provisioning must already be attached (ProvisioningConfigMissing otherwise).
    """
    version = version or DOCKER_EXTENSION_VERSION
    if role.network_configuration is None:
        raise ProvisioningConfigMissing()
    # Read the bundle before touching the role so a failure leaves it unchanged.
    public_config, private_config = build_docker_extension_config(cert_dir, port)
    build_docker_endpoint(role.configuration_sets, port)
    return attach_extension(
        role,
        DOCKER_EXTENSION_NAME,
        DOCKER_EXTENSION_PUBLISHER,
        version,
        DOCKER_EXTENSION_NAME,
        DOCKER_EXTENSION_STATE,
        public_config,
        private_config,
    )
