"""Transport configuration supplied by the host application.

The host owns where settings live; this module only defines their shape
and offers a YAML loader for hosts that keep them in a file.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

# Maps a target URL to the proxy URL to use for it, or None for a direct connection.
ProxySelector = Callable[[str], str | None]

_TLS_ENV_OVERRIDES: dict[str, str] = {
    "CODER_TLS_CERT_PATH": "cert_path",
    "CODER_TLS_KEY_PATH": "key_path",
    "CODER_TLS_CA_PATH": "ca_path",
    "CODER_TLS_ALT_HOSTNAME": "alt_hostname",
}


class SettingsLoadError(Exception):
    """Error loading settings from disk."""

    pass


@dataclass(frozen=True)
class TLSSettings:
    """TLS overrides.

    Attributes:
        cert_path: PEM client certificate for mutual TLS.
        key_path: PEM private key matching ``cert_path``.
        ca_path: PEM bundle trusted in addition to the system roots.
        alt_hostname: Name to match the server certificate against instead
            of the URL host. It is also sent as the TLS SNI name, so the
            server sees this name rather than the URL host during the
            handshake.
    """

    cert_path: str | None = None
    key_path: str | None = None
    ca_path: str | None = None
    alt_hostname: str | None = None


@dataclass(frozen=True)
class CoderSettings:
    tls: TLSSettings = field(default_factory=TLSSettings)
    header_command: str | None = None


@dataclass(frozen=True)
class ProxyValues:
    """Proxy selection and optional Basic credentials."""

    username: str | None
    password: str | None
    use_auth: bool
    selector: ProxySelector

    def has_credentials(self) -> bool:
        """Return True when credentials should be offered to the proxy."""
        return self.use_auth and self.username is not None and self.password is not None


@dataclass(frozen=True)
class TransportConfig:
    """Everything a transport needs besides the URL and token."""

    settings: CoderSettings = field(default_factory=CoderSettings)
    proxy: ProxyValues | None = None


def static_proxy_selector(proxy_url: str, no_proxy: Iterable[str] = ()) -> ProxySelector:
    """Build a selector that routes everything through one proxy.

    Hosts matching an entry of ``no_proxy`` (exactly or as a domain
    suffix) connect directly.
    """
    bypass = tuple(h.lower().lstrip(".") for h in no_proxy if h)

    def select(url: str) -> str | None:
        host = (urlsplit(url).hostname or "").lower()
        for entry in bypass:
            if host == entry or host.endswith("." + entry):
                return None
        return proxy_url

    return select


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise SettingsLoadError(f"File not found: {path}")
    with path.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise SettingsLoadError(f"Invalid YAML in {path}: {err}") from err
    if not isinstance(data, dict):
        raise SettingsLoadError(f"Expected a mapping in {path}")
    return data


def apply_env_overrides(
    settings: CoderSettings, environ: Mapping[str, str] | None = None
) -> CoderSettings:
    """Return ``settings`` with ``CODER_*`` environment overrides applied."""
    env = os.environ if environ is None else environ

    tls_changes = {
        attr: env[var] for var, attr in _TLS_ENV_OVERRIDES.items() if env.get(var)
    }
    tls = replace(settings.tls, **tls_changes) if tls_changes else settings.tls
    header_command = env.get("CODER_HEADER_COMMAND") or settings.header_command
    return CoderSettings(tls=tls, header_command=header_command)


def load_settings(
    path: Path, environ: Mapping[str, str] | None = None
) -> CoderSettings:
    """Load settings from a YAML file.

    Args:
        path: YAML file with optional ``header_command`` and ``tls`` keys.
        environ: Environment used for overrides (defaults to ``os.environ``).

    Returns:
        Parsed settings with environment overrides applied.

    Raises:
        SettingsLoadError: If the file is missing or malformed.
    """
    data = _load_yaml(path)

    tls_data = data.get("tls") or {}
    if not isinstance(tls_data, dict):
        raise SettingsLoadError(f"'tls' must be a mapping in {path}")

    settings = CoderSettings(
        tls=TLSSettings(
            cert_path=tls_data.get("cert_path") or None,
            key_path=tls_data.get("key_path") or None,
            ca_path=tls_data.get("ca_path") or None,
            alt_hostname=tls_data.get("alt_hostname") or None,
        ),
        header_command=data.get("header_command") or None,
    )
    return apply_env_overrides(settings, environ)
