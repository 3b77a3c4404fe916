"""Unit tests for the XML document codec."""

import xml.etree.ElementTree as ET

import pytest

from azdock.errors import TransportError
from azdock.provisioning.builders import (
    build_extension_reference,
    build_network_config,
    build_provisioning_config,
)
from azdock.provisioning.documents import (
    AZURE_XMLNS,
    deployment_to_xml,
    hosted_service_to_xml,
    parse_deployment,
    parse_error,
    parse_image_names,
    parse_location_names,
    parse_operation_status,
    parse_role,
    parse_storage_services,
    role_operation_to_xml,
    service_certificate_to_xml,
)
from azdock.provisioning.types import (
    HostedService,
    OSVirtualHardDisk,
    Role,
    RoleOperation,
    ServiceCertificate,
    VMDeployment,
)

NS = {"az": AZURE_XMLNS}


def _role():
    role = Role(
        role_name="myvm",
        role_size="Small",
        os_virtual_hard_disk=OSVirtualHardDisk(
            source_image_name="ImgA",
            media_link="https://store.blob.core.windows.net/vhds/myvm-20240101000000.vhd",
        ),
    )
    role.set_configuration_set(build_provisioning_config("myvm", "azureuser", ""))
    role.set_configuration_set(build_network_config("Linux"))
    role.resource_extension_references.append(
        build_extension_reference("DockerExtension", "MSOpenTech.Extensions", "0.3", "DockerExtension", "enable", "pub", "priv")
    )
    return role


# ── Serialization ─────────────────────────────────────────────────


def test_deployment_document_shape():
    deployment = VMDeployment(name="myvm", label="myvm", role_list=[_role()])
    root = ET.fromstring(deployment_to_xml(deployment))

    assert root.tag == f"{{{AZURE_XMLNS}}}Deployment"
    assert root.findtext("az:DeploymentSlot", namespaces=NS) == "Production"
    role = root.find("az:RoleList/az:Role", NS)
    assert role.findtext("az:RoleName", namespaces=NS) == "myvm"
    assert role.findtext("az:RoleType", namespaces=NS) == "PersistentVMRole"
    assert role.findtext("az:ProvisionGuestAgent", namespaces=NS) == "true"
    assert role.findtext("az:OSVirtualHardDisk/az:SourceImageName", namespaces=NS) == "ImgA"

    set_types = [el.text for el in role.findall("az:ConfigurationSets/az:ConfigurationSet/az:ConfigurationSetType", NS)]
    assert set_types == ["LinuxProvisioningConfiguration", "NetworkConfiguration"]

    params = role.findall(
        "az:ResourceExtensionReferences/az:ResourceExtensionReference/"
        "az:ResourceExtensionParameterValues/az:ResourceExtensionParameterValue",
        NS,
    )
    assert [p.findtext("az:Type", namespaces=NS) for p in params] == ["Private", "Public"]


def test_deployment_document_omits_local_fields():
    role = _role()
    role.use_cert_auth = True
    role.cert_path = "/tmp/cert.pem"
    body = deployment_to_xml(VMDeployment(name="myvm", role_list=[role]))
    assert b"cert.pem" not in body
    assert b"UseCertAuth" not in body


def test_provisioning_element_order():
    root = ET.fromstring(deployment_to_xml(VMDeployment(name="myvm", role_list=[_role()])))
    config_set = root.find("az:RoleList/az:Role/az:ConfigurationSets/az:ConfigurationSet", NS)
    tags = [child.tag.split("}")[1] for child in config_set]
    assert tags == [
        "ConfigurationSetType",
        "HostName",
        "UserName",
        "UserPassword",
        "DisableSshPasswordAuthentication",
    ]


def test_hosted_service_document():
    root = ET.fromstring(hosted_service_to_xml(HostedService("myvm", "bXl2bQ==", "West US")))
    assert root.tag == f"{{{AZURE_XMLNS}}}CreateHostedService"
    assert root.findtext("az:ServiceName", namespaces=NS) == "myvm"
    assert root.findtext("az:Label", namespaces=NS) == "bXl2bQ=="
    assert root.findtext("az:Location", namespaces=NS) == "West US"


def test_certificate_document():
    root = ET.fromstring(service_certificate_to_xml(ServiceCertificate(data="QUJD")))
    assert root.tag == f"{{{AZURE_XMLNS}}}CertificateFile"
    assert root.findtext("az:Data", namespaces=NS) == "QUJD"
    assert root.findtext("az:CertificateFormat", namespaces=NS) == "pfx"


@pytest.mark.parametrize("operation_type", ["StartRoleOperation", "RestartRoleOperation"])
def test_role_operation_document(operation_type):
    root = ET.fromstring(role_operation_to_xml(RoleOperation(operation_type)))
    assert root.tag == f"{{{AZURE_XMLNS}}}{operation_type}"
    assert root.findtext("az:OperationType", namespaces=NS) == operation_type
    assert root.find("az:PostShutdownAction", NS) is None


def test_shutdown_operation_with_post_action():
    root = ET.fromstring(role_operation_to_xml(RoleOperation("ShutdownRoleOperation", "StoppedDeallocated")))
    assert root.findtext("az:PostShutdownAction", namespaces=NS) == "StoppedDeallocated"


# ── Parsing ───────────────────────────────────────────────────────


DEPLOYMENT_RESPONSE = f"""<?xml version="1.0" encoding="utf-8"?>
<Deployment xmlns="{AZURE_XMLNS}" xmlns:i="http://www.w3.org/2001/XMLSchema-instance">
  <Name>myvm</Name>
  <DeploymentSlot>Production</DeploymentSlot>
  <PrivateID>a1b2c3</PrivateID>
  <Status>Running</Status>
  <Label>bXl2bQ==</Label>
  <Url>http://myvm.cloudapp.net/</Url>
  <RoleInstanceList>
    <RoleInstance>
      <RoleName>myvm</RoleName>
      <InstanceName>myvm</InstanceName>
      <InstanceStatus>ReadyRole</InstanceStatus>
      <IpAddress>10.0.0.4</IpAddress>
      <PowerState>Started</PowerState>
    </RoleInstance>
  </RoleInstanceList>
  <RoleList>
    <Role i:type="PersistentVMRole">
      <RoleName>myvm</RoleName>
      <RoleType>PersistentVMRole</RoleType>
      <ConfigurationSets>
        <ConfigurationSet>
          <ConfigurationSetType>NetworkConfiguration</ConfigurationSetType>
          <InputEndpoints>
            <InputEndpoint>
              <LocalPort>22</LocalPort>
              <Name>ssh</Name>
              <Port>22</Port>
              <Protocol>tcp</Protocol>
              <Vip>168.61.1.1</Vip>
            </InputEndpoint>
            <InputEndpoint>
              <LocalPort>2376</LocalPort>
              <Name>docker</Name>
              <Port>2376</Port>
              <Protocol>tcp</Protocol>
            </InputEndpoint>
          </InputEndpoints>
        </ConfigurationSet>
      </ConfigurationSets>
      <ResourceExtensionReferences>
        <ResourceExtensionReference>
          <ReferenceName>DockerExtension</ReferenceName>
          <Publisher>MSOpenTech.Extensions</Publisher>
          <Name>DockerExtension</Name>
          <Version>0.3</Version>
          <ResourceExtensionParameterValues />
          <State>Enable</State>
        </ResourceExtensionReference>
      </ResourceExtensionReferences>
      <OSVirtualHardDisk>
        <HostCaching>ReadWrite</HostCaching>
        <MediaLink>https://store.blob.core.windows.net/vhds/myvm.vhd</MediaLink>
        <SourceImageName>ImgA</SourceImageName>
        <OS>Linux</OS>
      </OSVirtualHardDisk>
      <RoleSize>Small</RoleSize>
      <ProvisionGuestAgent>true</ProvisionGuestAgent>
    </Role>
  </RoleList>
</Deployment>
""".encode()


def test_parse_deployment():
    deployment = parse_deployment(DEPLOYMENT_RESPONSE)

    assert deployment.name == "myvm"
    assert deployment.status == "Running"
    assert deployment.url == "http://myvm.cloudapp.net/"
    assert deployment.role_instances[0].power_state == "Started"
    assert deployment.role_instances[0].ip_address == "10.0.0.4"

    role = deployment.role_list[0]
    assert role.role_size == "Small"
    assert role.os_virtual_hard_disk.source_image_name == "ImgA"
    assert [e.name for e in role.network_configuration.input_endpoints] == ["ssh", "docker"]
    assert role.network_configuration.input_endpoints[1].port == 2376
    assert role.resource_extension_references[0].version == "0.3"
    assert role.provisioning_configuration is None


def test_parse_role_round_trip_of_serialized_role():
    body = deployment_to_xml(VMDeployment(name="myvm", role_list=[_role()]))
    role_el = ET.fromstring(body).find("az:RoleList/az:Role", NS)
    role = parse_role(ET.tostring(role_el))

    assert role.role_name == "myvm"
    assert role.provisioning_configuration.user_name == "azureuser"
    assert role.provisioning_configuration.disable_ssh_password_authentication is True
    assert role.resource_extension_references[0].parameters[1].type == "Public"


def test_parse_malformed_body_raises_transport_error():
    with pytest.raises(TransportError, match="Could not parse deployment"):
        parse_deployment(b"<Deployment>")


def test_parse_operation_status_failed():
    body = f"""<Operation xmlns="{AZURE_XMLNS}">
      <ID>req-1</ID><Status>Failed</Status><HttpStatusCode>409</HttpStatusCode>
      <Error><Code>ConflictError</Code><Message>DNS name already taken.</Message></Error>
    </Operation>""".encode()
    status = parse_operation_status(body)
    assert status.request_id == "req-1"
    assert status.status == "Failed"
    assert status.error_code == "ConflictError"
    assert status.error_message == "DNS name already taken."


def test_parse_error_body():
    body = f'<Error xmlns="{AZURE_XMLNS}"><Code>ResourceNotFound</Code><Message>No deployments.</Message></Error>'
    assert parse_error(body.encode()) == ("ResourceNotFound", "No deployments.")
    assert parse_error(b"not xml") == ("", "")


def test_parse_location_and_image_names():
    locations = f"""<Locations xmlns="{AZURE_XMLNS}">
      <Location><Name>West US</Name><DisplayName>West US</DisplayName></Location>
      <Location><Name>East US</Name><DisplayName>East US</DisplayName></Location>
    </Locations>""".encode()
    images = f"""<Images xmlns="{AZURE_XMLNS}">
      <OSImage><Category>Public</Category><Name>ImgA</Name><OS>Linux</OS></OSImage>
    </Images>""".encode()
    assert parse_location_names(locations) == ["West US", "East US"]
    assert parse_image_names(images) == ["ImgA"]


def test_parse_storage_services():
    body = f"""<StorageServices xmlns="{AZURE_XMLNS}">
      <StorageService>
        <Url>https://management.core.windows.net/sub/services/storageservices/portalvhdsabc</Url>
        <ServiceName>portalvhdsabc</ServiceName>
        <StorageServiceProperties>
          <Location>West US</Location>
          <Endpoints>
            <Endpoint>https://portalvhdsabc.blob.core.windows.net/</Endpoint>
            <Endpoint>https://portalvhdsabc.queue.core.windows.net/</Endpoint>
          </Endpoints>
        </StorageServiceProperties>
      </StorageService>
      <StorageService>
        <ServiceName>affinitystore</ServiceName>
        <StorageServiceProperties><AffinityGroup>ag1</AffinityGroup></StorageServiceProperties>
      </StorageService>
    </StorageServices>""".encode()
    services = parse_storage_services(body)
    assert [s.service_name for s in services] == ["portalvhdsabc", "affinitystore"]
    assert services[0].location == "West US"
    assert services[0].endpoints[0] == "https://portalvhdsabc.blob.core.windows.net/"
    assert services[1].location == ""
    assert services[1].endpoints == []


def test_parse_rejects_entity_declarations():
    body = f"""<?xml version="1.0"?>
<!DOCTYPE PersistentVMRole [
  <!ENTITY a "aaaaaaaaaa">
  <!ENTITY b "&a;&a;&a;&a;&a;&a;&a;&a;&a;&a;">
]>
<PersistentVMRole xmlns="{AZURE_XMLNS}"><RoleName>&b;</RoleName></PersistentVMRole>""".encode()
    with pytest.raises(TransportError, match="Could not parse role"):
        parse_role(body)
    assert parse_error(body) == ("", "")
