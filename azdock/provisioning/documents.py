"""XML codec for service-management documents.

Builders produce dataclasses; this module turns them into the request bodies
the API expects and parses deployment, role, storage and operation responses
back into dataclasses. Element order follows the API schema, which is
order-sensitive.
"""

import xml.etree.ElementTree as ET

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET

from azdock.errors import TransportError
from azdock.provisioning.types import (
    CONFIGURATION_SET_TYPES,
    Endpoint,
    ExtensionParameter,
    ExtensionReference,
    LinuxProvisioningConfiguration,
    NetworkConfiguration,
    OperationStatus,
    OSVirtualHardDisk,
    PublicKey,
    Role,
    RoleInstance,
    SSHConfig,
    StorageService,
    VMDeployment,
)

AZURE_XMLNS = "http://schemas.microsoft.com/windowsazure"
XMLNS_I = "http://www.w3.org/2001/XMLSchema-instance"

_NS = f"{{{AZURE_XMLNS}}}"


# ── Serialization ─────────────────────────────────────────────────


def _sub(parent, tag, text=None):
    el = ET.SubElement(parent, tag)
    if text is not None:
        el.text = str(text)
    return el


def _bool(value):
    return "true" if value else "false"


def _root(tag):
    return ET.Element(tag, {"xmlns": AZURE_XMLNS, "xmlns:i": XMLNS_I})


def _tostring(root):
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _endpoint_element(parent, endpoint: Endpoint):
    el = _sub(parent, "InputEndpoint")
    _sub(el, "LocalPort", endpoint.local_port)
    _sub(el, "Name", endpoint.name)
    _sub(el, "Port", endpoint.port)
    _sub(el, "Protocol", endpoint.protocol)


def _configuration_set_element(parent, config_set):
    el = _sub(parent, "ConfigurationSet")
    _sub(el, "ConfigurationSetType", config_set.configuration_set_type)

    if isinstance(config_set, LinuxProvisioningConfiguration):
        _sub(el, "HostName", config_set.host_name)
        _sub(el, "UserName", config_set.user_name)
        _sub(el, "UserPassword", config_set.user_password)
        _sub(el, "DisableSshPasswordAuthentication", _bool(config_set.disable_ssh_password_authentication))
        if config_set.ssh is not None:
            ssh = _sub(el, "SSH")
            keys = _sub(ssh, "PublicKeys")
            for key in config_set.ssh.public_keys:
                key_el = _sub(keys, "PublicKey")
                _sub(key_el, "Fingerprint", key.fingerprint)
                _sub(key_el, "Path", key.path)
    elif isinstance(config_set, NetworkConfiguration):
        endpoints = _sub(el, "InputEndpoints")
        for endpoint in config_set.input_endpoints:
            _endpoint_element(endpoints, endpoint)


def _extension_element(parent, extension: ExtensionReference):
    el = _sub(parent, "ResourceExtensionReference")
    _sub(el, "ReferenceName", extension.reference_name)
    _sub(el, "Publisher", extension.publisher)
    _sub(el, "Name", extension.name)
    _sub(el, "Version", extension.version)
    values = _sub(el, "ResourceExtensionParameterValues")
    for param in extension.parameters:
        param_el = _sub(values, "ResourceExtensionParameterValue")
        _sub(param_el, "Key", param.key)
        _sub(param_el, "Value", param.value)
        _sub(param_el, "Type", param.type)
    _sub(el, "State", extension.state)


def _role_element(parent, role: Role):
    el = _sub(parent, "Role")
    _sub(el, "RoleName", role.role_name)
    _sub(el, "RoleType", role.role_type)
    config_sets = _sub(el, "ConfigurationSets")
    for config_set in role.configuration_sets:
        _configuration_set_element(config_sets, config_set)
    if role.resource_extension_references:
        extensions = _sub(el, "ResourceExtensionReferences")
        for extension in role.resource_extension_references:
            _extension_element(extensions, extension)
    disk = _sub(el, "OSVirtualHardDisk")
    _sub(disk, "MediaLink", role.os_virtual_hard_disk.media_link)
    _sub(disk, "SourceImageName", role.os_virtual_hard_disk.source_image_name)
    _sub(el, "RoleSize", role.role_size)
    _sub(el, "ProvisionGuestAgent", _bool(role.provision_guest_agent))
    return el


def deployment_to_xml(deployment: VMDeployment) -> bytes:
    root = _root("Deployment")
    _sub(root, "Name", deployment.name)
    _sub(root, "DeploymentSlot", deployment.deployment_slot)
    _sub(root, "Label", deployment.label)
    role_list = _sub(root, "RoleList")
    for role in deployment.role_list:
        _role_element(role_list, role)
    return _tostring(root)


def hosted_service_to_xml(service) -> bytes:
    root = _root("CreateHostedService")
    _sub(root, "ServiceName", service.service_name)
    _sub(root, "Label", service.label)
    _sub(root, "Location", service.location)
    return _tostring(root)


def service_certificate_to_xml(cert) -> bytes:
    root = _root("CertificateFile")
    _sub(root, "Data", cert.data)
    _sub(root, "CertificateFormat", cert.certificate_format)
    _sub(root, "Password", cert.password)
    return _tostring(root)


def role_operation_to_xml(operation) -> bytes:
    root = _root(operation.operation_type)
    _sub(root, "OperationType", operation.operation_type)
    if operation.post_shutdown_action:
        _sub(root, "PostShutdownAction", operation.post_shutdown_action)
    return _tostring(root)


def storage_service_to_xml(service_name, label, location) -> bytes:
    root = _root("CreateStorageServiceInput")
    _sub(root, "ServiceName", service_name)
    _sub(root, "Label", label)
    _sub(root, "Location", location)
    return _tostring(root)


# ── Parsing ───────────────────────────────────────────────────────


def _parse(body, what):
    # Responses are parsed with entity and DTD expansion forbidden.
    try:
        return SafeET.fromstring(body)
    except (ET.ParseError, DefusedXmlException) as e:
        raise TransportError(f"Could not parse {what} response: {e}") from e


def _text(el, tag, default=""):
    child = el.find(f"{_NS}{tag}")
    if child is None or child.text is None:
        return default
    return child.text


def _int(el, tag, default=0):
    value = _text(el, tag)
    return int(value) if value else default


def _children(el, path):
    """Find all elements at a slash-separated *path* of unqualified tags."""
    return el.findall("/".join(f"{_NS}{part}" for part in path.split("/")))


def _parse_configuration_set(el):
    set_type = _text(el, "ConfigurationSetType")
    cls = CONFIGURATION_SET_TYPES.get(set_type)
    if cls is NetworkConfiguration:
        endpoints = [
            Endpoint(
                name=_text(ep, "Name"),
                protocol=_text(ep, "Protocol"),
                port=_int(ep, "Port"),
                local_port=_int(ep, "LocalPort"),
            )
            for ep in _children(el, "InputEndpoints/InputEndpoint")
        ]
        return NetworkConfiguration(input_endpoints=endpoints)
    if cls is LinuxProvisioningConfiguration:
        keys = [
            PublicKey(fingerprint=_text(key, "Fingerprint"), path=_text(key, "Path"))
            for key in _children(el, "SSH/PublicKeys/PublicKey")
        ]
        return LinuxProvisioningConfiguration(
            host_name=_text(el, "HostName"),
            user_name=_text(el, "UserName"),
            user_password=_text(el, "UserPassword"),
            disable_ssh_password_authentication=_text(el, "DisableSshPasswordAuthentication") == "true",
            ssh=SSHConfig(public_keys=keys) if keys else None,
        )
    # Windows provisioning and other variants are not modelled.
    return None


def _parse_role(el) -> Role:
    disk_el = el.find(f"{_NS}OSVirtualHardDisk")
    disk = OSVirtualHardDisk()
    if disk_el is not None:
        disk = OSVirtualHardDisk(
            source_image_name=_text(disk_el, "SourceImageName"),
            media_link=_text(disk_el, "MediaLink"),
        )

    config_sets = []
    for config_el in _children(el, "ConfigurationSets/ConfigurationSet"):
        config_set = _parse_configuration_set(config_el)
        if config_set is not None:
            config_sets.append(config_set)

    extensions = []
    for ext_el in _children(el, "ResourceExtensionReferences/ResourceExtensionReference"):
        params = [
            ExtensionParameter(key=_text(p, "Key"), value=_text(p, "Value"), type=_text(p, "Type"))
            for p in _children(ext_el, "ResourceExtensionParameterValues/ResourceExtensionParameterValue")
        ]
        extensions.append(
            ExtensionReference(
                name=_text(ext_el, "Name"),
                publisher=_text(ext_el, "Publisher"),
                version=_text(ext_el, "Version"),
                reference_name=_text(ext_el, "ReferenceName"),
                state=_text(ext_el, "State"),
                parameters=params,
            )
        )

    return Role(
        role_name=_text(el, "RoleName"),
        role_size=_text(el, "RoleSize"),
        role_type=_text(el, "RoleType"),
        provision_guest_agent=_text(el, "ProvisionGuestAgent", "true") == "true",
        os_virtual_hard_disk=disk,
        configuration_sets=config_sets,
        resource_extension_references=extensions,
    )


def parse_role(body: bytes) -> Role:
    return _parse_role(_parse(body, "role"))


def parse_deployment(body: bytes) -> VMDeployment:
    root = _parse(body, "deployment")
    instances = [
        RoleInstance(
            role_name=_text(inst, "RoleName"),
            instance_name=_text(inst, "InstanceName"),
            instance_status=_text(inst, "InstanceStatus"),
            power_state=_text(inst, "PowerState"),
            ip_address=_text(inst, "IpAddress"),
        )
        for inst in _children(root, "RoleInstanceList/RoleInstance")
    ]
    return VMDeployment(
        name=_text(root, "Name"),
        label=_text(root, "Label"),
        deployment_slot=_text(root, "DeploymentSlot"),
        role_list=[_parse_role(el) for el in _children(root, "RoleList/Role")],
        status=_text(root, "Status"),
        url=_text(root, "Url"),
        role_instances=instances,
    )


def parse_operation_status(body: bytes) -> OperationStatus:
    root = _parse(body, "operation status")
    error = root.find(f"{_NS}Error")
    return OperationStatus(
        request_id=_text(root, "ID"),
        status=_text(root, "Status"),
        http_status_code=_text(root, "HttpStatusCode"),
        error_code=_text(error, "Code") if error is not None else "",
        error_message=_text(error, "Message") if error is not None else "",
    )


def parse_error(body: bytes) -> tuple[str, str]:
    """Extract (code, message) from an API error body; empty strings if unparseable."""
    try:
        root = SafeET.fromstring(body)
    except (ET.ParseError, DefusedXmlException):
        return "", ""
    return _text(root, "Code"), _text(root, "Message")


def parse_location_names(body: bytes) -> list[str]:
    root = _parse(body, "locations")
    return [_text(el, "Name") for el in _children(root, "Location")]


def parse_image_names(body: bytes) -> list[str]:
    root = _parse(body, "images")
    return [_text(el, "Name") for el in _children(root, "OSImage")]


def _parse_storage_service(el) -> StorageService:
    props = el.find(f"{_NS}StorageServiceProperties")
    location = _text(props, "Location") if props is not None else ""
    endpoints = [ep.text for ep in _children(props, "Endpoints/Endpoint") if ep.text] if props is not None else []
    return StorageService(service_name=_text(el, "ServiceName"), location=location, endpoints=endpoints)


def parse_storage_services(body: bytes) -> list[StorageService]:
    root = _parse(body, "storage services")
    return [_parse_storage_service(el) for el in _children(root, "StorageService")]


def parse_storage_service(body: bytes) -> StorageService:
    return _parse_storage_service(_parse(body, "storage service"))
