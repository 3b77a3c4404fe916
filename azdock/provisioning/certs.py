"""Certificate helpers: extension check, SHA-1 fingerprint, base64 payloads."""

import base64

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from azdock.errors import CertificateNotReadable, InvalidCertificateExtension, MalformedCertificate

ACCEPTED_CERT_EXTENSION = "pem"


def _read_bytes(path):
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise CertificateNotReadable(path, e.strerror or str(e)) from e


def validate_cert_extension(cert_path):
    """Raise InvalidCertificateExtension unless *cert_path* ends in ``.pem``."""
    extension = cert_path.split(".")[-1]
    if extension != ACCEPTED_CERT_EXTENSION:
        raise InvalidCertificateExtension(cert_path, ACCEPTED_CERT_EXTENSION)


def compute_fingerprint(cert_path):
    """Return the SHA-1 fingerprint of a PEM certificate.

    The service management API identifies SSH keys by the uppercase hex SHA-1
    of the certificate's DER payload (40 characters, no separators). SHA-1 is
    what the API expects; it is not used for anything security relevant here.

    Raises:
        CertificateNotReadable: the file cannot be opened or read.
        MalformedCertificate: the file holds no decodable PEM certificate.
    """
    cert_data = _read_bytes(cert_path)

    try:
        cert = x509.load_pem_x509_certificate(cert_data)
    except ValueError as e:
        raise MalformedCertificate(cert_path, str(e)) from e

    return cert.fingerprint(hashes.SHA1()).hex().upper()


def encode_file_base64(path):
    """Read *path* and return its raw bytes as standard base64 text."""
    return base64.b64encode(_read_bytes(path)).decode("ascii")


def encode_text_base64(text):
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
