from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STATIC_SERVERS = ("caddy", "nginx")


class Settings(BaseSettings):
    """Detection overrides loaded from environment variables.

    Only this fixed whitelist of variables can influence detection. Every
    field defaults to an empty string, which means "not overridden".

    Names
    ─────
    • BUILDPLAN_INSTALL_CMD / BUILDPLAN_BUILD_CMD / BUILDPLAN_START_CMD
    • BUILDPLAN_BASE_IMAGE
    • BUILDPLAN_NODE_VERSION (NODE_VERSION is honoured as a legacy fallback)
    • BUILDPLAN_SPA_OUTPUT_DIR
    • BUILDPLAN_STATIC_SERVER ("caddy" or "nginx")

    No ``.env`` file is read: the directory being analysed is never a
    source of configuration for the analyser itself.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUILDPLAN_",
        case_sensitive=False,
    )

    # Command overrides
    install_cmd: str = ""
    build_cmd: str = ""
    start_cmd: str = ""

    # Image and version overrides
    base_image: str = ""
    node_version: str = ""
    spa_output_dir: str = ""

    # Static file server used for static output
    static_server: str = ""

    # Legacy name, read without the prefix.
    legacy_node_version: str = Field(default="", validation_alias="NODE_VERSION")

    @field_validator("static_server")
    @classmethod
    def check_static_server(cls, v: str) -> str:
        v = v.strip().lower()
        if v and v not in STATIC_SERVERS:
            raise ValueError(
                f"static_server must be one of {', '.join(STATIC_SERVERS)} (got '{v}')"
            )
        return v

    def to_env(self) -> dict[str, str]:
        """Return the non-empty overrides keyed by environment variable name."""
        values = {
            "BUILDPLAN_INSTALL_CMD": self.install_cmd,
            "BUILDPLAN_BUILD_CMD": self.build_cmd,
            "BUILDPLAN_START_CMD": self.start_cmd,
            "BUILDPLAN_BASE_IMAGE": self.base_image,
            "BUILDPLAN_NODE_VERSION": self.node_version,
            "BUILDPLAN_SPA_OUTPUT_DIR": self.spa_output_dir,
            "BUILDPLAN_STATIC_SERVER": self.static_server,
            "NODE_VERSION": self.legacy_node_version,
        }
        return {key: value for key, value in values.items() if value}


def get_settings() -> Settings:
    return Settings()
