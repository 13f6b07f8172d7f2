from .config import Config, ConfigError, parse_duration, read_config
from .credentials import Credentials, read_credentials

__all__ = ["Config", "ConfigError", "Credentials", "parse_duration", "read_config", "read_credentials"]
