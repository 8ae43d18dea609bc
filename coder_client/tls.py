"""TLS context construction for the Coder transport."""

from __future__ import annotations

import logging
import ssl

from .errors import TLSConfigurationError
from .settings import TLSSettings

_LOGGER = logging.getLogger(__name__)


def coder_ssl_context(tls: TLSSettings) -> ssl.SSLContext:
    """Build the SSL context used for every connection.

    Trust starts from the system roots; a configured CA bundle is added on
    top. A client certificate is loaded only when both the certificate and
    key paths are set.

    Raises:
        TLSConfigurationError: If any configured file is missing or malformed.
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

    if tls.ca_path:
        try:
            context.load_verify_locations(cafile=tls.ca_path)
        except (OSError, ssl.SSLError) as err:
            raise TLSConfigurationError(
                f"Unable to load CA bundle from {tls.ca_path}: {err}"
            ) from err
        _LOGGER.debug("Trusting CA bundle %s", tls.ca_path)

    if tls.cert_path and tls.key_path:
        try:
            context.load_cert_chain(certfile=tls.cert_path, keyfile=tls.key_path)
        except (OSError, ssl.SSLError) as err:
            raise TLSConfigurationError(
                f"Unable to load client certificate {tls.cert_path}: {err}"
            ) from err
        _LOGGER.debug("Using client certificate %s", tls.cert_path)

    return context


def server_hostname(tls: TLSSettings) -> str | None:
    """Name the server certificate must match, when it differs from the URL host."""
    return tls.alt_hostname or None
