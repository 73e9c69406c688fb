"""Error types raised by rpcenv.

Lookup misses are never errors: sources return None for absent keys.
"""


class RpcEnvError(Exception):
    """Base exception for rpcenv errors."""

    pass


class ExtensionNotFoundError(RpcEnvError):
    """No extension registered under the requested capability or name."""

    def __init__(self, capability: str, name: str | None = None) -> None:
        self.capability = capability
        self.name = name
        if name is None:
            message = f"No extensions registered for capability: {capability}"
        else:
            message = f"Unknown extension '{name}' for capability: {capability}"
        super().__init__(message)


class ConfigCenterError(RpcEnvError):
    """Config center could not be initialized."""

    pass
