import json
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_path

from . import log
from .errors import CommandError


def default_config_dir() -> Path:
    return user_config_path("crunchy-cli", "crunchy-labs")


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


class CredentialStore:
    def __init__(self, config_dir: Path | None = None):
        self.config_dir = config_dir or default_config_dir()
        self.credentials_file_path = self.config_dir / "credentials.json"

    def load(self) -> Credentials | None:
        """Returns the stored credentials or None when nobody is logged in."""
        try:
            with self.credentials_file_path.open("r", encoding="utf-8") as f:
                creds = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, OSError) as e:
            raise CommandError(
                f"Could not read {self.credentials_file_path}. Ensure it is valid JSON or log in again. Error: {e}"
            ) from e

        username = creds.get("username") if isinstance(creds, dict) else None
        password = creds.get("password") if isinstance(creds, dict) else None
        if not username or not password:
            raise CommandError(f"'username' and/or 'password' not found in {self.credentials_file_path}")
        return Credentials(username=username, password=password)

    def save(self, credentials: Credentials) -> Path:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        # created with owner-only permissions, the file holds a plain password
        fd = os.open(self.credentials_file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"username": credentials.username, "password": credentials.password}, f, indent=2)
        log.LOGIN.debug(f"Credentials written to {self.credentials_file_path}")
        return self.credentials_file_path

    def remove(self) -> bool:
        try:
            self.credentials_file_path.unlink()
        except FileNotFoundError:
            return False
        log.LOGIN.debug(f"Removed {self.credentials_file_path}")
        return True
