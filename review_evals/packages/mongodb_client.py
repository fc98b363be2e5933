"""
MongoDB client factory for the review store.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote_plus, urlsplit, urlunsplit

from pymongo import MongoClient

logger = logging.getLogger(__name__)


class MongoDBClient:
    """Factory for creating MongoDB client connections with bounded operation timeouts."""

    def __init__(
        self,
        username: str,
        password: str,
        uri: str,
        timeout_ms: Optional[int] = None,
        **client_options: Any
    ):
        """Initialize MongoDB client configuration.

        `timeout_ms` caps server selection, socket reads and whole operations so a hung
        cluster cannot pin a search thread forever. `client_options` go straight to
        MongoClient and win over the derived timeouts.
        """
        self.username = username
        self.password = password
        self.uri = uri
        self.timeout_ms = timeout_ms
        self.client_options = client_options

    def build_connection_string(self, base_uri: str, username: str, password: str) -> str:
        """Return `base_uri` with its credentials replaced by the URL-encoded ones given.

        Expected format: mongodb+srv://cluster.mongodb.net/?retryWrites=true&w=majority
        """
        parts = urlsplit(base_uri)
        if not parts.scheme.startswith("mongodb") or not parts.netloc:
            raise ValueError(
                "Invalid MongoDB URI format. Expected format: mongodb+srv://cluster.mongodb.net/?retryWrites=true&w=majority")

        hosts = parts.netloc.rpartition("@")[2]
        netloc = f"{quote_plus(username)}:{quote_plus(password)}@{hosts}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))

    def build_client_options(self) -> Dict[str, Any]:
        """Timeout options derived from `timeout_ms`, overridden by explicit client options."""
        options: Dict[str, Any] = {}
        if self.timeout_ms is not None:
            options.update(
                timeoutMS=self.timeout_ms,
                socketTimeoutMS=self.timeout_ms,
                serverSelectionTimeoutMS=self.timeout_ms,
                connectTimeoutMS=self.timeout_ms,
            )
        options.update(self.client_options)
        return options

    def get_client(self) -> MongoClient:
        """Create and return a new MongoDB client instance."""
        connection_string = self.build_connection_string(self.uri, self.username, self.password)
        options = self.build_client_options()
        logger.info(f"Creating MongoDB client with options: {sorted(options)}")
        return MongoClient(connection_string, **options)
