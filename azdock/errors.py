"""Exception types raised by the provisioning layer."""


class AzdockError(Exception):
    """Base class for all azdock failures."""


class ConfigError(AzdockError):
    """Missing or unreadable client settings."""


class ResolutionError(AzdockError):
    """Unknown location or image name."""


class ProvisioningConfigMissing(AzdockError):
    """An extension was attached before the provisioning config was set."""

    def __init__(self, message="You should set azure VM provisioning config first"):
        super().__init__(message)


class DockerCertsMissing(AzdockError):
    """The docker TLS certificate bundle is absent."""

    def __init__(self, cert_dir, missing=None):
        self.cert_dir = cert_dir
        self.missing = missing
        detail = f"'{missing}' not found in {cert_dir}" if missing else f"directory {cert_dir} does not exist"
        super().__init__(
            f"You should generate docker certificates first ({detail}). "
            "Info can be found here: https://docs.docker.com/articles/https/"
        )


class InvalidCertificateExtension(AzdockError):
    def __init__(self, cert_path, accepted="pem"):
        self.cert_path = cert_path
        super().__init__(f"Certificate {cert_path} is invalid. Please specify {accepted} certificate.")


class MalformedCertificate(AzdockError):
    def __init__(self, cert_path, detail=""):
        self.cert_path = cert_path
        self.detail = detail
        message = f"Certificate {cert_path} is not a valid PEM certificate"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CertificateNotReadable(AzdockError):
    """A certificate file is missing or cannot be read."""

    def __init__(self, cert_path, detail=""):
        self.cert_path = cert_path
        super().__init__(f"Cannot read certificate {cert_path}: {detail}")


class InvalidOSKind(AzdockError):
    def __init__(self, os_kind):
        self.os_kind = os_kind
        super().__init__(f"You must specify correct OS param (got '{os_kind}'). Valid values are 'Linux' and 'Windows'")


class EndpointConflict(AzdockError):
    """A network configuration already exposes the requested external port."""


class TransportError(AzdockError):
    """A remote call failed: HTTP error, connection error or bad document."""

    def __init__(self, message, status_code=None, error_code=None):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class OperationFailed(AzdockError):
    """An asynchronous remote operation ended in a failure state."""

    def __init__(self, request_id, message, error_code=None):
        self.request_id = request_id
        self.error_code = error_code
        super().__init__(f"Operation {request_id} failed: {message}")
