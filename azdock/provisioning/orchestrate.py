"""Remote operations on hosted services, deployments and roles.

Every mutating call submits a document, then blocks until the remote
operation is terminal. Multi-step workflows (create_azure_vm) do not roll back:
if a later step fails, resources created by earlier steps are left in place.
"""

import logging

from azdock.provisioning.assembler import (
    assemble_deployment,
    assemble_hosted_service,
    assemble_role_operation,
    assemble_service_certificate,
    assemble_vm_role,
)
from azdock.provisioning.documents import (
    deployment_to_xml,
    hosted_service_to_xml,
    parse_deployment,
    parse_role,
    role_operation_to_xml,
    service_certificate_to_xml,
)
from azdock.provisioning.resolvers import resolve_location

logger = logging.getLogger(__name__)

HOSTED_SERVICE_LIST_URL = "services/hostedservices"
HOSTED_SERVICE_URL = "services/hostedservices/{service}"
DEPLOYMENT_LIST_URL = "services/hostedservices/{service}/deployments"
DEPLOYMENT_URL = "services/hostedservices/{service}/deployments/{deployment}"
ROLE_URL = "services/hostedservices/{service}/deployments/{deployment}/roles/{role}"
ROLE_OPERATIONS_URL = "services/hostedservices/{service}/deployments/{deployment}/roleinstances/{role}/Operations"
CERTIFICATE_LIST_URL = "services/hostedservices/{service}/certificates"

START_ROLE_OPERATION = "StartRoleOperation"
SHUTDOWN_ROLE_OPERATION = "ShutdownRoleOperation"
RESTART_ROLE_OPERATION = "RestartRoleOperation"


def _submit(transport, path, body):
    request_id = transport.post(path, body)
    transport.await_completion(request_id)
    return request_id


def _delete(transport, path):
    request_id = transport.delete(path)
    transport.await_completion(request_id)
    return request_id


# ── VM creation ───────────────────────────────────────────────────


def create_azure_vm_configuration(transport, name, instance_size, image_name, location):
    """Build the base role for a new VM (no provisioning or extensions yet)."""
    logger.info("Creating azure VM configuration...")
    return assemble_vm_role(transport, name, instance_size, image_name, location)


def create_azure_vm(transport, role, dns_name, location):
    """Create the hosted service, upload the SSH certificate if needed, deploy *role*.

    Steps run strictly in order and each waits for its remote operation.
    Nothing is rolled back on failure. The location is checked once, by
    create_hosted_service.
    """
    logger.info("Creating hosted service...")
    request_id = create_hosted_service(transport, dns_name, location)
    transport.await_completion(request_id)

    if role.use_cert_auth:
        logger.info("Uploading cert...")
        upload_service_cert(transport, dns_name, role.cert_path)

    logger.info("Deploying azure VM configuration...")
    deployment = assemble_deployment(role)
    _submit(transport, DEPLOYMENT_LIST_URL.format(service=dns_name), deployment_to_xml(deployment))
    logger.info(f"VM '{role.role_name}' deployed to hosted service '{dns_name}'.")


# ── Hosted services and certificates ──────────────────────────────


def create_hosted_service(transport, dns_name, location):
    """Submit a hosted service creation and return its request id without waiting."""
    resolve_location(transport, location)
    service = assemble_hosted_service(dns_name, location)
    return transport.post(HOSTED_SERVICE_LIST_URL, hosted_service_to_xml(service))


def delete_hosted_service(transport, dns_name):
    logger.info(f"Deleting hosted service '{dns_name}'...")
    _delete(transport, HOSTED_SERVICE_URL.format(service=dns_name))


def upload_service_cert(transport, dns_name, cert_path):
    """Upload the certificate at *cert_path* to hosted service *dns_name*."""
    certificate = assemble_service_certificate(cert_path)
    _submit(transport, CERTIFICATE_LIST_URL.format(service=dns_name), service_certificate_to_xml(certificate))


# ── Deployments ───────────────────────────────────────────────────


def get_vm_deployment(transport, service_name, deployment_name):
    """Fetch a deployment. Returns None in dry-run mode."""
    body = transport.get(DEPLOYMENT_URL.format(service=service_name, deployment=deployment_name))
    if body is None:
        return None
    return parse_deployment(body)


def delete_vm_deployment(transport, service_name, deployment_name):
    logger.info(f"Deleting deployment '{deployment_name}'...")
    _delete(transport, DEPLOYMENT_URL.format(service=service_name, deployment=deployment_name))


# ── Roles ─────────────────────────────────────────────────────────


def get_role(transport, service_name, deployment_name, role_name):
    """Fetch a role. Returns None in dry-run mode."""
    body = transport.get(ROLE_URL.format(service=service_name, deployment=deployment_name, role=role_name))
    if body is None:
        return None
    return parse_role(body)


def _role_operation(transport, service_name, deployment_name, role_name, operation):
    path = ROLE_OPERATIONS_URL.format(service=service_name, deployment=deployment_name, role=role_name)
    _submit(transport, path, role_operation_to_xml(operation))


def start_role(transport, service_name, deployment_name, role_name):
    logger.info(f"Starting role '{role_name}'...")
    _role_operation(transport, service_name, deployment_name, role_name, assemble_role_operation(START_ROLE_OPERATION))


def shutdown_role(transport, service_name, deployment_name, role_name, post_shutdown_action=None):
    """Shut down a role.

    Args:
        post_shutdown_action: optional "Stopped" (keep compute allocated) or
            "StoppedDeallocated".
    """
    logger.info(f"Shutting down role '{role_name}'...")
    operation = assemble_role_operation(SHUTDOWN_ROLE_OPERATION, post_shutdown_action)
    _role_operation(transport, service_name, deployment_name, role_name, operation)


def restart_role(transport, service_name, deployment_name, role_name):
    logger.info(f"Restarting role '{role_name}'...")
    _role_operation(transport, service_name, deployment_name, role_name, assemble_role_operation(RESTART_ROLE_OPERATION))


def delete_role(transport, service_name, deployment_name, role_name):
    logger.info(f"Deleting role '{role_name}'...")
    _delete(transport, ROLE_URL.format(service=service_name, deployment=deployment_name, role=role_name))
