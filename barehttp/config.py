"""
Client settings, with overrides from BAREHTTP_* environment variables.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

DEFAULT_BUFFER_SIZE = 8192


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings shared by every request of a Client.

    Timeouts are in seconds; None blocks forever like a plain socket does.
    max_response_size caps the number of bytes read for one response (None = no cap).
    ca_certs (PEM text) or ca_bundle_path (PEM file) replace the bundled CA certificates.
    """
    connect_timeout: Optional[float] = None
    read_timeout: Optional[float] = None
    default_buffer_size: int = DEFAULT_BUFFER_SIZE
    max_response_size: Optional[int] = None
    ca_certs: Optional[str] = None
    ca_bundle_path: Optional[str] = None

    def __post_init__(self):
        if self.default_buffer_size <= 0:
            raise ValueError(f"default_buffer_size must be positive, got {self.default_buffer_size}")
        if self.max_response_size is not None and self.max_response_size <= 0:
            raise ValueError(f"max_response_size must be positive, got {self.max_response_size}")
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "ClientConfig":
        """
        Build a config from environment variables, keyword arguments win over the environment.

        :param environ: mapping to read instead of os.environ
        """
        environ = os.environ if environ is None else environ
        return replace(cls(), **{**_apply_env_overrides(environ), **overrides})


# Environment variable mapping
ENV_MAPPINGS = {
    "BAREHTTP_CONNECT_TIMEOUT": ("connect_timeout", float),
    "BAREHTTP_READ_TIMEOUT": ("read_timeout", float),
    "BAREHTTP_BUFFER_SIZE": ("default_buffer_size", int),
    "BAREHTTP_MAX_RESPONSE_SIZE": ("max_response_size", int),
    "BAREHTTP_CA_BUNDLE": ("ca_bundle_path", str),
}


def _apply_env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    values = {}
    for env_var, (field_name, convert) in ENV_MAPPINGS.items():
        raw = environ.get(env_var)
        if raw is None or raw == "":
            continue
        try:
            values[field_name] = convert(raw)
        except ValueError:
            raise ValueError(f"Invalid value for {env_var}: {raw!r}") from None
    return values
