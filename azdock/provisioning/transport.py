"""HTTP transport for the service management API.

Sends XML documents, returns the ``x-ms-request-id`` of mutating calls and
polls ``operations/<request-id>`` until the operation is terminal.
"""

import logging
import ssl
import time

import httpx

from azdock.errors import OperationFailed, TransportError
from azdock.provisioning.documents import parse_error, parse_operation_status
from azdock.settings import AzureSettings

logger = logging.getLogger(__name__)

DRY_RUN_REQUEST_ID = "dry-run-request-id"
OPERATION_IN_PROGRESS = "InProgress"
OPERATION_SUCCEEDED = "Succeeded"
OPERATION_FAILED = "Failed"


def _ssl_context(management_cert):
    context = ssl.create_default_context()
    context.load_cert_chain(management_cert)
    return context


class AzureTransport:
    """Synchronous management-API client.

    Use as a context manager so the underlying httpx client is closed. With
    ``dry_run=True`` nothing is sent: requests are logged, mutating calls
    return a placeholder request id and GETs return ``None``.
    """

    def __init__(self, settings: AzureSettings, dry_run=False, http_client=None, sleep=time.sleep):
        settings.validate_timing()
        self.settings = settings
        self.dry_run = dry_run
        self._sleep = sleep
        self._client = http_client
        if self._client is None and not dry_run:
            self._client = httpx.Client(verify=_ssl_context(settings.management_cert), timeout=60)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        if self._client is not None:
            self._client.close()

    def url(self, path):
        return f"{self.settings.api_url.rstrip('/')}/{self.settings.subscription_id}/{path}"

    @property
    def headers(self):
        return {"x-ms-version": self.settings.api_version, "Content-Type": "application/xml"}

    def _request(self, method, path, body=None):
        url = self.url(path)
        try:
            resp = self._client.request(method, url, content=body, headers=self.headers)
        except httpx.RequestError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if resp.is_error:
            code, message = parse_error(resp.content)
            detail = f"{code}: {message}" if code else resp.text.strip() or resp.reason_phrase
            raise TransportError(
                f"{method} {path} returned HTTP {resp.status_code}: {detail}",
                status_code=resp.status_code,
                error_code=code or None,
            )
        return resp

    def _send_async(self, method, path, body=None):
        if self.dry_run:
            logger.info(f"[dry-run] {method} {self.url(path)}")
            if body:
                logger.info(f"[dry-run] payload: {body.decode('utf-8')}")
            return DRY_RUN_REQUEST_ID

        resp = self._request(method, path, body)
        request_id = resp.headers.get("x-ms-request-id")
        if not request_id:
            raise TransportError(f"{method} {path} returned HTTP {resp.status_code} without an x-ms-request-id header")
        logger.debug(f"{method} {path} accepted (request id {request_id})")
        return request_id

    def post(self, path, body):
        """POST an XML document; returns the async operation's request id."""
        return self._send_async("POST", path, body)

    def delete(self, path):
        """DELETE a resource; returns the async operation's request id."""
        return self._send_async("DELETE", path)

    def get(self, path):
        """GET a resource document; returns the raw body (``None`` in dry-run)."""
        if self.dry_run:
            logger.info(f"[dry-run] GET {self.url(path)}")
            return None
        return self._request("GET", path).content

    def get_operation_status(self, request_id):
        return parse_operation_status(self.get(f"operations/{request_id}"))

    def await_completion(self, request_id):
        """Block until the operation *request_id* succeeds.

        Raises:
            OperationFailed: the operation reported ``Failed`` or did not finish
                within ``settings.operation_timeout`` seconds.
            TransportError: a status poll failed.
        """
        interval = self.settings.poll_interval
        timeout = self.settings.operation_timeout
        if self.dry_run:
            logger.info(f"[dry-run] Poll operation {request_id} every {interval}s (up to {timeout}s)")
            return

        elapsed = 0
        status = None
        while elapsed < timeout:
            operation = self.get_operation_status(request_id)
            status = operation.status
            if status == OPERATION_SUCCEEDED:
                return
            if status == OPERATION_FAILED:
                message = operation.error_message or f"HTTP {operation.http_status_code}"
                raise OperationFailed(request_id, message, error_code=operation.error_code or None)
            self._sleep(interval)
            elapsed += interval

        raise OperationFailed(request_id, f"timeout after {timeout}s (last status: '{status}')")
