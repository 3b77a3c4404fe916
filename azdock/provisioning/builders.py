"""Configuration builders: network, provisioning, SSH, extension and docker configs."""

import json
import logging
import os

from azdock.errors import DockerCertsMissing, InvalidOSKind, ProvisioningConfigMissing
from azdock.provisioning.certs import (
    compute_fingerprint,
    encode_file_base64,
    encode_text_base64,
    validate_cert_extension,
)
from azdock.provisioning.types import (
    Endpoint,
    ExtensionParameter,
    ExtensionReference,
    LinuxProvisioningConfiguration,
    NetworkConfiguration,
    PublicKey,
    SSHConfig,
)

logger = logging.getLogger(__name__)

OS_LINUX = "Linux"
OS_WINDOWS = "Windows"

# The API rejects an empty UserPassword even when password login is disabled.
PLACEHOLDER_PASSWORD = "P@ssword1"

DOCKER_CERT_FILES = {
    "ca": "ca.pem",
    "server-cert": "server-cert.pem",
    "server-key": "server-key.pem",
}


def build_endpoint(name, protocol, port, local_port):
    """Build an input endpoint mapping external *port* to *local_port*."""
    return Endpoint(name=name, protocol=protocol, port=port, local_port=local_port)


def build_network_config(os_kind):
    """Build the network configuration set for *os_kind*.

    Linux gets an SSH endpoint (22 -> 22). Windows gets no endpoints: the RDP
    endpoint is not implemented yet.

    Raises:
        InvalidOSKind: *os_kind* is neither "Linux" nor "Windows".
    """
    network_config = NetworkConfiguration()
    if os_kind == OS_LINUX:
        network_config.add_endpoint(build_endpoint("ssh", "tcp", 22, 22))
    elif os_kind == OS_WINDOWS:
        # TODO: add the RDP endpoint (3389) once Windows provisioning is supported.
        logger.warning("Warning: no remote desktop endpoint is configured for Windows VMs.")
    else:
        raise InvalidOSKind(os_kind)
    return network_config


def build_ssh_config(cert_path, user_name):
    """Build an SSH config authorizing the key of the PEM certificate at *cert_path*."""
    validate_cert_extension(cert_path)
    fingerprint = compute_fingerprint(cert_path)
    public_key = PublicKey(
        fingerprint=fingerprint,
        path=f"/home/{user_name}/.ssh/authorized_keys",
    )
    return SSHConfig(public_keys=[public_key])


def build_provisioning_config(host_name, user_name, password, cert_path=""):
    """Build the Linux provisioning configuration set.

    An empty *password* disables SSH password authentication and stores a
    placeholder credential. A non-empty *cert_path* adds key-based login.
    """
    disable_password_auth = False
    if not password:
        disable_password_auth = True
        password = PLACEHOLDER_PASSWORD

    provisioning_config = LinuxProvisioningConfiguration(
        host_name=host_name,
        user_name=user_name,
        user_password=password,
        disable_ssh_password_authentication=disable_password_auth,
    )
    if cert_path:
        provisioning_config.ssh = build_ssh_config(cert_path, user_name)
    return provisioning_config


def build_docker_endpoint(configuration_sets, port):
    """Open *port* (tcp, same port inside and out) on the network configuration set.

    Raises:
        ProvisioningConfigMissing: no configuration sets have been built yet,
            or none of them is a network configuration.
        ValueError: *port* is outside 1-65535.
    """
    if not configuration_sets:
        raise ProvisioningConfigMissing()
    if not 1 <= port <= 65535:
        raise ValueError(f"Invalid docker port {port}: must be between 1 and 65535")

    for config_set in configuration_sets:
        if isinstance(config_set, NetworkConfiguration):
            config_set.add_endpoint(build_endpoint("docker", "tcp", port, port))
            return config_set

    raise ProvisioningConfigMissing("No network configuration found; set azure VM provisioning config first")


def build_extension_reference(name, publisher, version, reference_name, state, public_value="", private_value=""):
    """Build a resource extension reference.

    Each non-empty config value becomes a base64-encoded parameter tagged
    ``Private`` or ``Public``.
    """
    extension = ExtensionReference(
        name=name,
        publisher=publisher,
        version=version,
        reference_name=reference_name,
        state=state,
    )
    if private_value:
        extension.parameters.append(ExtensionParameter(key="ignored", value=encode_text_base64(private_value), type="Private"))
    if public_value:
        extension.parameters.append(ExtensionParameter(key="ignored", value=encode_text_base64(public_value), type="Public"))
    return extension


def build_docker_public_config(port):
    return json.dumps({"dockerport": str(port)})


def build_docker_private_config(cert_dir):
    """Read the docker TLS bundle from ``~/<cert_dir>`` into the extension's private config.

    Raises:
        DockerCertsMissing: the directory or one of the PEM files is missing.
    """
    cert_dir = os.path.join(os.path.expanduser("~"), cert_dir)
    if not os.path.isdir(cert_dir):
        raise DockerCertsMissing(cert_dir)
    logger.info(f"Using docker certificates from {cert_dir}")

    config = {}
    for key, filename in DOCKER_CERT_FILES.items():
        path = os.path.join(cert_dir, filename)
        if not os.path.isfile(path):
            raise DockerCertsMissing(cert_dir, missing=filename)
        config[key] = encode_file_base64(path)
    return json.dumps(config)


def build_docker_extension_config(cert_dir, port):
    """Return the docker extension's (public, private) JSON configs."""
    return build_docker_public_config(port), build_docker_private_config(cert_dir)
