from pathlib import Path
from typing import Optional

import certifi

from barehttp.errors import ErrorKind, HttpError


def default_ca_certs() -> str:
    """
    The bundled root CA certificates (Mozilla's set, shipped by certifi) as one PEM string.
    """
    return certifi.contents()


def load_ca_certs(custom: Optional[str] = None, bundle_path: Optional[str] = None) -> str:
    """
    Pick the trust store for a client.

    :param custom: PEM text that replaces the bundled certificates
    :param bundle_path: file holding PEM certificates, used when custom is not given
    :return: PEM text of all trusted CA certificates
    """
    if custom is not None:
        if "-----BEGIN CERTIFICATE-----" not in custom:
            raise HttpError(ErrorKind.INVALID_ARG, "Custom CA certificates contain no PEM certificate")
        return custom

    if bundle_path is not None:
        try:
            pem = Path(bundle_path).read_text(encoding="ascii")
        except (OSError, UnicodeDecodeError) as e:
            raise HttpError(ErrorKind.INVALID_ARG, f"Could not read CA bundle {bundle_path}: {e}") from e
        return load_ca_certs(custom=pem)

    return default_ca_certs()
