"""Driver configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Driver settings loaded from environment variables."""

    # Driver options (HYPERV_VIRTUAL_SWITCH, HYPERV_MEMORY, ...)
    bundlepath_url: str = ""
    virtual_switch: str = ""  # Empty means no network adapter
    memory: int = 8192  # MB
    cpu_count: int = 4
    static_macaddress: str = ""
    disable_dynamic_memory: bool = False

    # Machine identity and storage
    machine_name: str = "crc"
    store_path: str = "."
    image_source_path: str = ""
    image_format: str = "vhdx"
    disk_capacity: int = 0  # bytes

    # Command backend
    powershell_path: str = ""  # Auto-detected if empty
    command_timeout: float = 300.0  # seconds

    # Polling (seconds)
    poll_interval: float = 1.0
    ip_wait_timeout: float = 600.0
    stop_wait_timeout: float = 300.0

    # Logging
    log_level: str = "INFO"

    # HTTP surface
    agent_host: str = "127.0.0.1"
    agent_port: int = 8011

    model_config = SettingsConfigDict(env_prefix="HYPERV_")


settings = Settings()
