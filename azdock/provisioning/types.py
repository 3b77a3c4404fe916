"""Data types for service-management documents."""

from dataclasses import dataclass, field

from azdock.errors import EndpointConflict

ROLE_TYPE = "PersistentVMRole"
PRODUCTION_SLOT = "Production"


@dataclass(frozen=True)
class Endpoint:
    """Input endpoint: external ``port`` forwarded to ``local_port`` on the VM."""

    name: str
    protocol: str
    port: int
    local_port: int


@dataclass
class ConfigurationSet:
    """Base of the configuration set variants.

    Each subclass carries its wire discriminator in ``configuration_set_type``.
    """

    configuration_set_type = ""


@dataclass
class NetworkConfiguration(ConfigurationSet):
    configuration_set_type = "NetworkConfiguration"

    input_endpoints: list[Endpoint] = field(default_factory=list)

    def add_endpoint(self, endpoint: Endpoint) -> None:
        """Append an endpoint, refusing a duplicate external port."""
        for existing in self.input_endpoints:
            if existing.port == endpoint.port:
                raise EndpointConflict(
                    f"External port {endpoint.port} is already used by endpoint '{existing.name}'"
                )
        self.input_endpoints.append(endpoint)


@dataclass
class PublicKey:
    fingerprint: str
    path: str


@dataclass
class SSHConfig:
    public_keys: list[PublicKey] = field(default_factory=list)


@dataclass
class LinuxProvisioningConfiguration(ConfigurationSet):
    configuration_set_type = "LinuxProvisioningConfiguration"

    host_name: str = ""
    user_name: str = ""
    user_password: str = ""
    disable_ssh_password_authentication: bool = False
    ssh: SSHConfig | None = None


CONFIGURATION_SET_TYPES = {
    cls.configuration_set_type: cls for cls in (NetworkConfiguration, LinuxProvisioningConfiguration)
}


@dataclass
class ExtensionParameter:
    key: str
    value: str  # base64 text
    type: str  # "Public" or "Private"


@dataclass
class ExtensionReference:
    name: str
    publisher: str
    version: str
    reference_name: str
    state: str
    parameters: list[ExtensionParameter] = field(default_factory=list)


@dataclass
class OSVirtualHardDisk:
    source_image_name: str = ""
    media_link: str = ""


@dataclass
class Role:
    """A single VM definition within a deployment."""

    role_name: str
    role_size: str = ""
    role_type: str = ROLE_TYPE
    provision_guest_agent: bool = True
    os_virtual_hard_disk: OSVirtualHardDisk = field(default_factory=OSVirtualHardDisk)
    configuration_sets: list[ConfigurationSet] = field(default_factory=list)
    resource_extension_references: list[ExtensionReference] = field(default_factory=list)
    # Local-only: drive the certificate upload step, never serialized.
    use_cert_auth: bool = False
    cert_path: str = ""

    def set_configuration_set(self, config_set: ConfigurationSet) -> None:
        """Add a configuration set, replacing any existing set of the same variant."""
        self.configuration_sets = [c for c in self.configuration_sets if type(c) is not type(config_set)]
        self.configuration_sets.append(config_set)

    def _find(self, cls):
        for config_set in self.configuration_sets:
            if isinstance(config_set, cls):
                return config_set
        return None

    @property
    def network_configuration(self) -> NetworkConfiguration | None:
        return self._find(NetworkConfiguration)

    @property
    def provisioning_configuration(self) -> LinuxProvisioningConfiguration | None:
        return self._find(LinuxProvisioningConfiguration)


@dataclass
class RoleInstance:
    """Runtime state of a role, as reported by a deployment GET."""

    role_name: str
    instance_name: str = ""
    instance_status: str = ""
    power_state: str = ""
    ip_address: str = ""


@dataclass
class VMDeployment:
    name: str
    label: str = ""
    deployment_slot: str = PRODUCTION_SLOT
    role_list: list[Role] = field(default_factory=list)
    # Populated from responses only.
    status: str = ""
    url: str = ""
    role_instances: list[RoleInstance] = field(default_factory=list)


@dataclass
class HostedService:
    service_name: str
    label: str  # base64 of the DNS name
    location: str


@dataclass
class ServiceCertificate:
    data: str  # base64 file content
    certificate_format: str = "pfx"
    password: str = ""


@dataclass
class RoleOperation:
    operation_type: str
    post_shutdown_action: str | None = None


@dataclass
class StorageService:
    service_name: str
    location: str = ""
    endpoints: list[str] = field(default_factory=list)


@dataclass
class OperationStatus:
    request_id: str
    status: str
    http_status_code: str = ""
    error_code: str = ""
    error_message: str = ""
