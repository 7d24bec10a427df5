"""
Persistent volume registry.

A single SQLite table is the source of truth for which volumes exist. SQLite
serializes writers, and every write is a single-row insert committed before
``create`` returns, so readers on other threads see either the state before or
after an insert, never a partial row.

The existence check in ``create`` runs inside the insert's transaction. That
is sufficient while this process is the only writer; concurrent writers would
need an insert-if-absent at the database level instead.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Union

from sqlalchemy import create_engine, func, inspect, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..errors import DuplicateNameError, StoreUnavailableError
from ..types import VolumeRecord
from .models import Base, VolumeRow

logger = logging.getLogger(__name__)


class VolumeStore:
    """
    Durable table of volume records.

    Operations:
    - exists(): whether a name is registered
    - create(): register a new name
    - list_all(): every registered volume
    """

    def __init__(self, db_path: Union[str, Path], echo: bool = False):
        """
        Open (and if needed create or migrate) the registry database.

        Args:
            db_path: Path of the SQLite database file
            echo: Log emitted SQL

        Raises:
            StoreUnavailableError: If the database cannot be opened or migrated
        """
        self.db_path = Path(db_path)
        try:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                connect_args={"check_same_thread": False},
                echo=echo,
            )
            Base.metadata.create_all(bind=self.engine)
            self._migrate()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e), path=str(self.db_path)) from e

        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info(f"Volume registry opened at {self.db_path}")

    def _migrate(self) -> None:
        """Add columns missing from an older registry file."""
        table = VolumeRow.__table__
        existing = {col["name"] for col in inspect(self.engine).get_columns(table.name)}
        missing = [col for col in table.columns if col.name not in existing]
        if not missing:
            return

        for col in missing:
            if not col.nullable:
                raise StoreUnavailableError(
                    f"schema mismatch: required column '{col.name}' is missing",
                    path=str(self.db_path)
                )

        with self.engine.begin() as conn:
            for col in missing:
                col_type = col.type.compile(dialect=self.engine.dialect)
                conn.execute(text(f'ALTER TABLE {table.name} ADD COLUMN "{col.name}" {col_type}'))
                logger.info(f"Added column {table.name}.{col.name}")

    @staticmethod
    def _to_record(row: VolumeRow) -> VolumeRecord:
        created_at = row.created_at
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return VolumeRecord(
            name=row.name,
            provider_type=row.obs_type,
            created_at=created_at or datetime.fromtimestamp(0, timezone.utc),
        )

    def exists(self, name: str) -> bool:
        """
        Check whether a volume name is registered.

        Raises:
            StoreUnavailableError: If the registry cannot be read
        """
        try:
            with self._session_factory() as session:
                count = session.scalar(
                    select(func.count()).select_from(VolumeRow).where(VolumeRow.name == name)
                )
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e), path=str(self.db_path)) from e
        return bool(count)

    def create(self, name: str, provider_type: str) -> VolumeRecord:
        """
        Register a new volume.

        Args:
            name: Unique volume name
            provider_type: Storage driver code

        Returns:
            The committed VolumeRecord

        Raises:
            DuplicateNameError: If the name is already registered
            StoreUnavailableError: If the registry cannot be written
        """
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        try:
            with self._session_factory() as session:
                with session.begin():
                    count = session.scalar(
                        select(func.count()).select_from(VolumeRow).where(VolumeRow.name == name)
                    )
                    if count:
                        raise DuplicateNameError(name)
                    row = VolumeRow(
                        name=name,
                        obs_type=provider_type,
                        created_at=now,
                        updated_at=now,
                    )
                    session.add(row)
        except IntegrityError as e:
            raise DuplicateNameError(name) from e
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e), path=str(self.db_path)) from e

        logger.info(f"Registered volume {name} ({provider_type})")
        return self._to_record(row)

    def list_all(self) -> List[VolumeRecord]:
        """
        List every registered volume.

        Order is insertion order in practice but callers must not rely on it.

        Raises:
            StoreUnavailableError: If the registry cannot be read
        """
        try:
            with self._session_factory() as session:
                rows = session.scalars(select(VolumeRow).order_by(VolumeRow.id)).all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(str(e), path=str(self.db_path)) from e
        return [self._to_record(row) for row in rows]

    def close(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
