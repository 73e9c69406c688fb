"""Per-call metadata and the origin built from it.

A call context is whatever describes one remote invocation: the target
service, the calling application and free-form parameters. ``CallMetadata``
is the bundled implementation, parsed from a service URL such as
``grpc://10.0.0.5:50051/demo.Greeter?application=shop&version=1.0.0``.
"""

from typing import Any, Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from rpcenv.sources.base import AbstractSource

APPLICATION_KEY = "application"
INTERFACE_KEY = "interface"
GROUP_KEY = "group"
VERSION_KEY = "version"


@runtime_checkable
class CallContext(Protocol):
    """What the runtime composite needs to know about a call."""

    @property
    def application_name(self) -> str | None:
        """Name of the application making or serving the call."""
        ...

    @property
    def service_identity(self) -> str:
        """Stable identity of the target service."""
        ...

    def parameter(self, key: str) -> str | None:
        """Read a call parameter, None when absent."""
        ...


class CallMetadata(BaseModel):
    """Immutable description of a service endpoint plus call parameters."""

    model_config = ConfigDict(frozen=True)

    protocol: str = Field(default="grpc", description="Transport protocol")
    host: str | None = Field(default=None, description="Target host")
    port: int | None = Field(default=None, description="Target port")
    path: str = Field(default="", description="Service path, usually the interface")
    parameters: dict[str, str] = Field(
        default_factory=dict, description="Call parameters"
    )

    @classmethod
    def from_url(cls, url: str) -> "CallMetadata":
        """Parse ``protocol://host:port/path?key=value&...``."""
        parts = urlsplit(url)
        return cls(
            protocol=parts.scheme or "grpc",
            host=parts.hostname,
            port=parts.port,
            path=parts.path.lstrip("/"),
            parameters=dict(parse_qsl(parts.query, keep_blank_values=True)),
        )

    def parameter(self, key: str) -> str | None:
        return self.parameters.get(key) or None

    def method_parameter(self, method: str, key: str) -> str | None:
        """Read a parameter overridden for one method (``<method>.<key>``)."""
        return self.parameter(f"{method}.{key}")

    @property
    def application_name(self) -> str | None:
        return self.parameter(APPLICATION_KEY)

    @property
    def interface(self) -> str:
        return self.parameter(INTERFACE_KEY) or self.path

    @property
    def service_identity(self) -> str:
        """``[group/]interface[:version]``."""
        identity = self.interface
        group = self.parameter(GROUP_KEY)
        if group:
            identity = f"{group}/{identity}"
        version = self.parameter(VERSION_KEY)
        if version:
            identity = f"{identity}:{version}"
        return identity


class CallMetadataSource(AbstractSource):
    """Origin answering from a call context's parameters.

    When a method is given and the context supports method overrides,
    ``<method>.<key>`` is consulted before the plain key.
    """

    def __init__(self, context: CallContext, method: str | None = None) -> None:
        self.context = context
        self.method = method or None

    def lookup(self, key: str) -> Any | None:
        value = None
        if self.method is not None and hasattr(self.context, "method_parameter"):
            value = self.context.method_parameter(self.method, key)
        if value is None:
            value = self.context.parameter(key)
        return value
