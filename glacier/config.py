"""Node manager configuration."""

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings

_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


class Settings(BaseSettings):
    """Node manager settings loaded from GLACIER_* environment variables."""

    # Development mode: human-readable logs instead of JSON lines
    dev_mode: bool = True

    # Verifier
    verifier_container: str = "glacier-verifier"
    verifier_image: str = "docker.io/glaciernetwork/glacier-verifier:v0.0.3"
    private_key: SecretStr | None = None  # skips the interactive prompt when set

    # Watchtower sidecar
    watchtower_container: str = "glacier-watchtower"
    watchtower_image: str = "containrrr/watchtower:latest"
    watchtower_interval: int = 3600  # seconds between update polls
    docker_socket: str = "/var/run/docker.sock"

    # Docker engine installation (Debian/Ubuntu apt repository)
    docker_repo_url: str = "https://download.docker.com/linux"
    docker_keyring_dir: str = "/etc/apt/keyrings"
    docker_keyring: str = "/etc/apt/keyrings/docker.gpg"
    docker_sources_list: str = "/etc/apt/sources.list.d/docker.list"
    docker_prerequisites: list[str] = ["ca-certificates", "curl", "gnupg", "lsb-release"]
    docker_packages: list[str] = [
        "docker-ce",
        "docker-ce-cli",
        "containerd.io",
        "docker-buildx-plugin",
        "docker-compose-plugin",
    ]

    # Per-container state left behind by the runtime
    containers_dir: str = "/var/lib/docker/containers"

    # Commands
    command_timeout: int | None = None  # seconds; None waits as long as the tool does
    log_tail: str = "all"

    # Logging
    log_level: str = "warning"
    log_file: str | None = None

    @model_validator(mode="after")
    def _validate(self) -> "Settings":
        if self.watchtower_interval <= 0:
            raise ValueError("WATCHTOWER_INTERVAL must be a positive number of seconds")
        if self.log_level.lower() not in _LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}"
            )
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ValueError("COMMAND_TIMEOUT must be positive when set")
        return self

    class Config:
        env_prefix = "GLACIER_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
