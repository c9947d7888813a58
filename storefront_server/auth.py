"""Bearer token source for the payment API."""

import logging
from typing import Optional

from .interfaces import KeyValueStore
from .storage import TOKEN_KEY

logger = logging.getLogger(__name__)


class AuthManager:
    """Reads the bearer token the login flow left in local storage."""

    def __init__(self, store: KeyValueStore, env_token: Optional[str] = None) -> None:
        """
        Initialize the authentication manager.

        Args:
            store: Key-value store holding the token under the "token" key
            env_token: Token from STOREFRONT_TOKEN; kept in memory and
                preferred over the stored one
        """
        self.store = store
        self.env_token = env_token or None
        if self.env_token:
            logger.info("Using bearer token from environment")

    def get_token(self) -> Optional[str]:
        """Get the bearer token, if any."""
        if self.env_token:
            return self.env_token
        return self.store.get(TOKEN_KEY) or None

    def is_authenticated(self) -> bool:
        return self.get_token() is not None
