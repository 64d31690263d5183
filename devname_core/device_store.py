"""
device_store.py - Registry Database Access

Reads stored device names and performs conditional name updates inside a
single transaction. The table layout belongs to the registry application;
only the key and name columns are declared here.
"""

from collections import Counter
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from sqlalchemy import Column, Engine, MetaData, String, Table, create_engine, func, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from ._logging import get_logger
from .errors import StorageError

logger = get_logger("store")


class StoreBatch:
    """Updates issued inside one open transaction"""

    def __init__(self, store: "DeviceStore", connection: Connection):
        self.store = store
        self.connection = connection

    def update_name(self, entry_key: str, new_name: str) -> int:
        """
        Set the name of entry_key unless it already holds new_name

        Returns:
            Number of rows changed

        Raises:
            StorageError: The statement failed, or entry_key names more than one row
        """
        table = self.store.table
        key_col = self.store.key_col
        name_col = self.store.name_col
        count_stmt = select(func.count()).select_from(table).where(key_col == entry_key)
        stmt = (
            update(table)
            .where(key_col == entry_key)
            .where(name_col.is_distinct_from(new_name))
            .values({name_col.name: new_name})
        )
        try:
            matches = self.connection.execute(count_stmt).scalar_one()
            if matches <= 1:
                return self.connection.execute(stmt).rowcount
        except SQLAlchemyError as e:
            raise StorageError(f"Update of {entry_key} failed: {e}", entry_key=entry_key) from e
        raise StorageError(f"Update of {entry_key} refused: key matches {matches} rows", entry_key=entry_key)


class DeviceStore:
    """Registry database (SQLite)"""

    def __init__(
        self,
        db_path: Union[str, Path],
        table: str = "DeviceStatus",
        key_column: str = "DeviceID",
        name_column: str = "Name",
        engine: Optional[Engine] = None,
    ):
        self.db_path = Path(db_path)
        self.engine: Engine = engine or create_engine(f"sqlite:///{self.db_path}", future=True)
        self.table = Table(
            table,
            MetaData(),
            Column(key_column, String),
            Column(name_column, String),
        )
        self.key_col = self.table.c[key_column]
        self.name_col = self.table.c[name_column]
        # Keys held by more than one row at the last load_snapshot()
        self.duplicate_keys: List[str] = []

    def load_snapshot(self) -> Dict[str, str]:
        """
        Read every stored name

        A key held by several rows cannot be renamed without touching rows
        the snapshot does not describe, so it is left out and listed in
        duplicate_keys instead.

        Returns:
            Names by entry key (NULL reads as "")

        Raises:
            StorageError: The table cannot be read
        """
        rows = []
        try:
            with self.engine.connect() as conn:
                for key, name in conn.execute(select(self.key_col, self.name_col)):
                    if key is not None:
                        rows.append((str(key), name if name is not None else ""))
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot read {self.table.name} from {self.db_path}: {e}") from e

        counts = Counter(key for key, _ in rows)
        self.duplicate_keys = [key for key, n in counts.items() if n > 1]
        snapshot = {key: name for key, name in rows if counts[key] == 1}

        for key in self.duplicate_keys:
            logger.warning("%s is held by %d rows in %s; leaving it out", key, counts[key], self.table.name)
        logger.info("Loaded %d stored name(s) from %s", len(snapshot), self.db_path)
        return snapshot

    @contextmanager
    def transaction(self) -> Iterator[StoreBatch]:
        """
        Provide a transactional scope around name updates

        Commits when the block completes, rolls back when it raises.

        Raises:
            StorageError: Begin or commit failed
        """
        try:
            with self.engine.begin() as conn:
                yield StoreBatch(self, conn)
        except SQLAlchemyError as e:
            raise StorageError(f"Transaction on {self.db_path} failed: {e}") from e

    def dispose(self) -> None:
        self.engine.dispose()
