"""Secret stores and the saved-credentials preference."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import keyring
from keyring.errors import PasswordDeleteError

from ..models.credentials import Credentials

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "com.dial9.callhistory"
AUTH_TOKEN_KEY = "authToken"
AUTH_SECRET_KEY = "apiSecret"


class SecretStore(ABC):
    """Key/value store for secret strings."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; removing a missing key is not an error."""
        pass


class KeyringSecretStore(SecretStore):
    """Secret store backed by the operating system keyring."""

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME):
        self.service_name = service_name

    def get(self, key: str) -> Optional[str]:
        return keyring.get_password(self.service_name, key)

    def set(self, key: str, value: str) -> None:
        keyring.set_password(self.service_name, key, value)

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service_name, key)
        except PasswordDeleteError:
            logger.debug(f"No '{key}' entry in keyring service {self.service_name}")


class MemorySecretStore(SecretStore):
    """Process-local secret store."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class CredentialManager:
    """Loads and saves the API credentials when the user opted in."""

    def __init__(self, store: SecretStore, save_details: bool = False):
        """Initialize credential manager.

        Args:
            store: Where saved credentials live
            save_details: Whether credentials should be remembered
        """
        self.store = store
        self.save_details = save_details

    def load(self) -> Optional[Credentials]:
        """Return saved credentials, or None if saving is off or nothing is saved."""
        if not self.save_details:
            return None

        token = self.store.get(AUTH_TOKEN_KEY)
        secret = self.store.get(AUTH_SECRET_KEY)
        if not token or not secret:
            logger.debug("No saved credentials found")
            return None
        return Credentials(auth_token=token, auth_secret=secret)

    def credentials_changed(self, credentials: Credentials) -> None:
        """Persist edited credentials when saving is enabled."""
        if self.save_details:
            self._save(credentials)

    def set_save_details(self, enabled: bool, credentials: Optional[Credentials] = None) -> None:
        """Toggle the preference; turning it off wipes the stored secrets."""
        self.save_details = enabled
        if enabled:
            if credentials is not None:
                self._save(credentials)
        else:
            self.store.delete(AUTH_TOKEN_KEY)
            self.store.delete(AUTH_SECRET_KEY)
            logger.info("Saved credentials removed")

    def _save(self, credentials: Credentials) -> None:
        self.store.set(AUTH_TOKEN_KEY, credentials.auth_token)
        self.store.set(AUTH_SECRET_KEY, credentials.auth_secret)
        logger.info("Credentials saved")
