import logging
import os

from pydantic import BaseModel

logger = logging.getLogger(__name__)

USER_FILE = "basic-auth-user"
PASSWORD_FILE = "basic-auth-password"


class Credentials(BaseModel):
    username: str = ""
    password: str = ""

    def as_auth(self):
        """Tuple accepted by requests for HTTP basic auth."""
        return (self.username, self.password)


def read_secret(path):
    if not os.path.exists(path):
        return ""
    with open(path) as f:
        return f.read().strip()


def read_credentials(secret_mount_path):
    """Load the gateway basic-auth pair from the mounted secret files."""
    values = {}
    for field, filename in (("username", USER_FILE), ("password", PASSWORD_FILE)):
        path = os.path.join(secret_mount_path, filename)
        try:
            values[field] = read_secret(path)
        except OSError as e:
            logger.warning(f"Unable to read {field}: {e}")
            values[field] = ""
            continue
        if not values[field]:
            logger.warning(f"Unable to read {field}: {path} is missing or empty")
    return Credentials(**values)
