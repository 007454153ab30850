import re
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

import clickhouse_connect
from clickhouse_connect.driver.exceptions import ClickHouseError

from flatbridge.exceptions import RemoteError, ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import TabularStoreConfig

logger = get_logger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

DEFAULT_PORTS = {"http": 8123, "https": 8443}


def validate_identifier(name: Any, what: str = "identifier") -> str:
    """Allow only letters, digits and underscores in table and column names.

    Raises:
        ValidationError: If ``name`` is empty or contains any other character
    """
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise ValidationError(
            f"Invalid {what} {name!r}: only letters, digits and underscores are allowed"
        )
    return name


def quote_identifier(name: str) -> str:
    return f"`{validate_identifier(name)}`"


def column_list(columns: Iterable[str]) -> str:
    return ", ".join(quote_identifier(name) for name in columns)


def parse_endpoint(endpoint: str, database: Optional[str] = None) -> Dict[str, Any]:
    """Split an HTTP(S) endpoint URL into clickhouse-connect parameters.

    A path segment such as ``https://host:8443/analytics`` selects the
    database unless one is given explicitly.

    Raises:
        RemoteError: If the URL is malformed
    """
    try:
        parts = urlsplit(endpoint.strip())
        port = parts.port
    except ValueError as e:
        raise RemoteError(f"Malformed endpoint URL {endpoint!r}: {e}") from e

    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parts.hostname:
        raise RemoteError(
            f"Malformed endpoint URL {endpoint!r}: expected http(s)://host[:port][/database]"
        )

    params: Dict[str, Any] = {
        "host": parts.hostname,
        "port": port or DEFAULT_PORTS[scheme],
        "interface": scheme,
        "secure": scheme == "https",
    }
    path_database = parts.path.strip("/")
    if database or path_database:
        params["database"] = database or path_database
    return params


def create_client(config: TabularStoreConfig):
    """Open a clickhouse-connect client for ``config``.

    Raises:
        RemoteError: If the endpoint is malformed or the server rejects the session
    """
    params = parse_endpoint(config.endpoint, config.database)
    logger.debug(
        f"Opening ClickHouse session {params['interface']}://{config.key_id}:***@"
        f"{params['host']}:{params['port']}"
    )
    try:
        return clickhouse_connect.get_client(
            username=config.key_id, password=config.key_secret, **params
        )
    except (ClickHouseError, OSError) as e:
        raise RemoteError(f"Connection error: {e}") from e


class ClickHouseClientMixin:
    """Lazily opened client shared by the ClickHouse source and destination."""

    config: TabularStoreConfig
    _client = None

    @property
    def client(self):
        if self._client is None:
            self._client = create_client(self.config)
        return self._client

    def _query(self, sql: str):
        logger.debug(f"ClickHouse query: {sql}")
        try:
            return self.client.query(sql)
        except ClickHouseError as e:
            raise RemoteError(f"Query failed: {e}") from e

    def _command(self, sql: str) -> None:
        logger.debug(f"ClickHouse command: {sql}")
        try:
            self.client.command(sql)
        except ClickHouseError as e:
            raise RemoteError(f"Command failed: {e}") from e

    def _insert(self, table: str, data: List[List[Any]], columns: List[str]) -> None:
        try:
            self.client.insert(table, data, column_names=columns)
        except ClickHouseError as e:
            raise RemoteError(f"Insert into {table} failed: {e}") from e

    def _close_client(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None
