"""
Configuration for the idler.
"""

import os
import re
from datetime import timedelta

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

# Gateway
GATEWAY_URL = ""

# Prometheus
PROMETHEUS_HOST = "prometheus"
PROMETHEUS_PORT = 9090

# Scaling parameters
INACTIVITY_DURATION = "5m"   # window a function must be silent for
RECONCILE_INTERVAL = "1m"    # sleep between passes
HTTP_TIMEOUT = "3s"          # per outbound request

# Secrets
SECRET_MOUNT_PATH = "/var/secrets/"

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}


class ConfigError(ValueError):
    """Raised when an environment value cannot be used."""


def parse_duration(text):
    """Parse a Go-style duration such as ``30s``, ``5m`` or ``1h30m``."""
    text = text.strip()
    if text == "0":
        return timedelta(0)

    pos = 0
    seconds = 0.0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if not match:
            raise ValueError(f"invalid duration: {text!r}")
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise ValueError(f"invalid duration: {text!r}")
    return timedelta(seconds=seconds)


def env_flag(value):
    return value in ("1", "true")


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    gateway_url: str = GATEWAY_URL
    prometheus_host: str = PROMETHEUS_HOST
    prometheus_port: int = PROMETHEUS_PORT
    inactivity_duration: timedelta = parse_duration(INACTIVITY_DURATION)
    reconcile_interval: timedelta = parse_duration(RECONCILE_INTERVAL)
    http_timeout: timedelta = parse_duration(HTTP_TIMEOUT)
    dry_run: bool = False
    read_only: bool = False
    write_debug: bool = False
    secret_mount_path: str = SECRET_MOUNT_PATH

    @field_validator("prometheus_port")
    @classmethod
    def _check_port(cls, value):
        if not 0 < value < 65536:
            raise ValueError(f"port out of range: {value}")
        return value

    @field_validator("inactivity_duration", "reconcile_interval", "http_timeout")
    @classmethod
    def _check_positive(cls, value):
        if value <= timedelta(0):
            raise ValueError("duration must be positive")
        return value

    @property
    def inactivity_window(self):
        """Range selector for the rate query, in whole minutes."""
        minutes = int(self.inactivity_duration.total_seconds() // 60)
        return f"{max(minutes, 1)}m"

    @property
    def scaling_suppressed(self):
        return self.dry_run or self.read_only

    @property
    def prometheus_url(self):
        return f"http://{self.prometheus_host}:{self.prometheus_port}"

    def gateway_endpoint(self, path):
        return f"{self.gateway_url.rstrip('/')}/{path.lstrip('/')}"


def read_config(environ=None, dry_run=False, read_only=None, debug=None,
                secret_mount_path=None):
    """Build a Config from the environment; CLI switches win over env values."""
    if environ is None:
        environ = os.environ

    values = {}
    for key in ("gateway_url", "prometheus_host"):
        if environ.get(key):
            values[key] = environ[key].strip()

    if environ.get("prometheus_port"):
        try:
            values["prometheus_port"] = int(environ["prometheus_port"])
        except ValueError:
            raise ConfigError(f"prometheus_port: not a number: {environ['prometheus_port']!r}")

    for key in ("inactivity_duration", "reconcile_interval", "http_timeout"):
        if environ.get(key):
            try:
                values[key] = parse_duration(environ[key])
            except ValueError as e:
                raise ConfigError(f"{key}: {e}")

    values["dry_run"] = dry_run
    values["read_only"] = env_flag(environ.get("read_only")) if read_only is None else read_only
    values["write_debug"] = env_flag(environ.get("write_debug")) if debug is None else debug

    mount = secret_mount_path or environ.get("secret_mount_path")
    if mount:
        values["secret_mount_path"] = mount

    try:
        return Config(**values)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise ConfigError(errors)
