"""Name resolution for locations and images, and storage service lookup/creation."""

import logging

from azdock.errors import ResolutionError
from azdock.provisioning.certs import encode_text_base64
from azdock.provisioning.documents import (
    parse_image_names,
    parse_location_names,
    parse_storage_service,
    parse_storage_services,
    storage_service_to_xml,
)
from azdock.provisioning.types import StorageService

logger = logging.getLogger(__name__)

LOCATIONS_URL = "locations"
IMAGES_URL = "services/images"
STORAGE_SERVICES_URL = "services/storageservices"
STORAGE_SERVICE_URL = "services/storageservices/{}"


def resolve_location(transport, location):
    """Raise ResolutionError unless *location* is offered by the subscription."""
    body = transport.get(LOCATIONS_URL)
    if body is None:  # dry-run
        return
    available = parse_location_names(body)
    if location not in available:
        raise ResolutionError(f"Invalid location '{location}'. Available locations: {', '.join(available)}")


def resolve_image(transport, image_name):
    """Raise ResolutionError unless *image_name* is a known OS image."""
    body = transport.get(IMAGES_URL)
    if body is None:  # dry-run
        return
    if image_name not in parse_image_names(body):
        raise ResolutionError(f"Invalid image '{image_name}'. Run with a name listed by the images API.")


def find_storage_service_by_location(transport, location):
    """Return the first storage service in *location*, or None."""
    body = transport.get(STORAGE_SERVICES_URL)
    if body is None:  # dry-run
        return None
    for service in parse_storage_services(body):
        if service.location == location:
            return service
    return None


def create_storage_service(transport, name, location):
    """Create storage service *name* in *location* and return its properties."""
    logger.info(f"Creating storage service '{name}' in {location}...")
    body = storage_service_to_xml(name, encode_text_base64(name), location)
    request_id = transport.post(STORAGE_SERVICES_URL, body)
    transport.await_completion(request_id)

    response = transport.get(STORAGE_SERVICE_URL.format(name))
    if response is None:  # dry-run
        return StorageService(
            service_name=name,
            location=location,
            endpoints=[f"https://{name}.blob.core.windows.net/"],
        )
    return parse_storage_service(response)


def get_blob_endpoint(storage_service):
    """Return the blob endpoint URL of *storage_service*."""
    for endpoint in storage_service.endpoints:
        if ".blob." in endpoint:
            return endpoint
    raise ResolutionError(f"Storage service '{storage_service.service_name}' has no blob endpoint")
