"""Credential providers for Bamboo basic auth."""

import json
from pathlib import Path
from typing import Protocol, Tuple, Union

from .errors import CredentialError


class CredentialProvider(Protocol):
    def get_credentials(self) -> Tuple[str, str]:
        """Return a (username, password) pair or raise CredentialError."""
        ...


class JsonFileCredentials:
    """Reads ``bamboo_username`` / ``bamboo_password`` from a JSON file.

    The file is re-read on every call so rotated credentials are picked up
    without a restart.
    """

    def __init__(self, path: Union[str, Path] = "config.json"):
        self.path = Path(path)

    def get_credentials(self) -> Tuple[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise CredentialError(str(self.path), f"error reading config file: {e}") from e
        except json.JSONDecodeError as e:
            raise CredentialError(
                str(self.path), f"error unmarshaling config file: {e}"
            ) from e

        if not isinstance(data, dict):
            raise CredentialError(str(self.path), "config file must contain an object")

        return (
            str(data.get("bamboo_username") or ""),
            str(data.get("bamboo_password") or ""),
        )


class StaticCredentials:
    """Fixed credentials, usually taken from the environment."""

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def get_credentials(self) -> Tuple[str, str]:
        if not self.username:
            raise CredentialError("environment", "BAMBOO_USERNAME is empty")
        return self.username, self.password
