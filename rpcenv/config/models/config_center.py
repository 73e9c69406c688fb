"""Config center configuration model."""

from pydantic import BaseModel, Field


class ConfigCenterConfig(BaseModel):
    """Where and how to read externally managed configuration.

    Without an address no remote content is read; the config center then
    only carries the precedence flag.
    """

    address: str | None = Field(
        default=None, description="Config center address; None disables remote reads"
    )
    protocol: str = Field(
        default="memory",
        description="Name of the dynamic configuration extension to activate",
    )
    group: str = Field(default="rpcenv", description="Group holding global content")
    config_file: str = Field(
        default="rpcenv.toml", description="Key of the configuration document"
    )
    app_name: str | None = Field(
        default=None, description="Group holding application-scoped content"
    )
    priority: bool = Field(
        default=True,
        description="Whether config center values take precedence over local ones",
    )
