"""
Registry of database facades sharing one connection.

`ArangoConnection` holds one ArangoClient and one set of credentials, and
hands out an `ArangoDB` facade per database name, creating it the first time
that name is requested.

Sample input:
    conn = ArangoConnection(hosts="http://localhost:8529", username="root",
                            password="", databases=["cycling"])
    conn.db("cycling").fetch_all("cyclists")
    conn.db("running")   # added to the registry on first use

Expected output:
    conn.list_connections() == ["cycling", "running"]
"""

from typing import Dict, List, Optional, Union

from loguru import logger

from arango import ArangoClient
from arango.database import StandardDatabase

from aqlkit.config import CONFIG
from aqlkit.core.db.facade import ArangoDB
from aqlkit.core.types import LogOptions
from aqlkit.core.utils.connection import connect_arango, open_database


class ArangoConnection:
    """Lazily populated mapping of database name to ArangoDB facade."""

    def __init__(
        self,
        hosts: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        databases: Union[str, List[str], None] = None,
        options: Optional[LogOptions] = None,
        client: Optional[ArangoClient] = None,
    ):
        self.username = username if username is not None else CONFIG["arango"]["user"]
        self.password = password if password is not None else CONFIG["arango"]["password"]
        self.options = options or LogOptions()
        self.client = client or connect_arango(hosts)
        self.system = open_database(self.client, "_system", self.username, self.password)
        self._pool: Dict[str, ArangoDB] = {}

        if isinstance(databases, str):
            databases = [databases]

        for name in databases or []:
            self.db(name)

    def db(self, name: str) -> ArangoDB:
        """Return the facade for `name`, creating it on first access."""
        if name not in self._pool:
            logger.info(f"Adding '{name}' to pool")
            driver = open_database(self.client, name, self.username, self.password)
            self._pool[name] = ArangoDB(driver, self.system, self.options)

        return self._pool[name]

    def driver(self, name: str) -> StandardDatabase:
        return self.db(name).driver

    def collection(self, db: str, collection: str):
        return self.db(db).collection(collection)

    def list_connections(self) -> List[str]:
        return list(self._pool)
