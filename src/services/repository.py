"""Repository facade, unit of work and store backends."""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from src.utils.errors import RepositoryError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class WriteOp(str, Enum):
    """Kinds of staged writes."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class PendingWrite:
    """A write staged on a unit of work, applied on commit."""
    op: WriteOp
    table: str
    row_id: str
    row: dict = field(default_factory=dict)


def _normalize_value(value: Any) -> Any:
    """Enums become their stored value. Decimals stay numeric so stores compare them by value."""
    if isinstance(value, Enum):
        return value.value
    return value


def _column_matches(stored: Any, wanted: Any) -> bool:
    if isinstance(wanted, Decimal):
        try:
            return Decimal(str(stored)) == wanted
        except InvalidOperation:
            return False
    return stored == wanted


class Store(ABC):
    """Durable row storage addressed by table name."""

    @abstractmethod
    async def get_all(self, table: str) -> list[dict]:
        ...

    @abstractmethod
    async def get_by_id(self, table: str, id: str) -> Optional[dict]:
        ...

    @abstractmethod
    async def find(self, table: str, criteria: Mapping[str, Any]) -> list[dict]:
        """Rows whose columns equal every value in criteria."""
        ...

    @abstractmethod
    async def apply(self, writes: Sequence[PendingWrite]) -> int:
        """Apply a batch of writes, returning the number applied."""
        ...


class MemoryStore(Store):
    """Process-local store; batches apply atomically."""

    def __init__(self, tables: Optional[Mapping[str, Sequence[dict]]] = None):
        self._lock = threading.Lock()
        self._tables: dict[str, dict[str, dict]] = {}
        for table, rows in (tables or {}).items():
            self._tables[table] = {row["id"]: dict(row) for row in rows}

    async def get_all(self, table: str) -> list[dict]:
        with self._lock:
            return [dict(row) for row in self._tables.get(table, {}).values()]

    async def get_by_id(self, table: str, id: str) -> Optional[dict]:
        with self._lock:
            row = self._tables.get(table, {}).get(id)
            return dict(row) if row is not None else None

    async def find(self, table: str, criteria: Mapping[str, Any]) -> list[dict]:
        with self._lock:
            return [
                dict(row)
                for row in self._tables.get(table, {}).values()
                if all(_column_matches(row.get(column), value) for column, value in criteria.items())
            ]

    async def apply(self, writes: Sequence[PendingWrite]) -> int:
        with self._lock:
            staged = {table: dict(rows) for table, rows in self._tables.items()}
            for write in writes:
                rows = staged.setdefault(write.table, {})
                if write.op is WriteOp.INSERT:
                    if write.row_id in rows:
                        raise RepositoryError(f"Duplicate id {write.row_id} in {write.table}")
                    rows[write.row_id] = dict(write.row)
                elif write.op is WriteOp.UPDATE:
                    if write.row_id not in rows:
                        raise RepositoryError(f"Cannot update missing {write.table} row {write.row_id}")
                    rows[write.row_id] = dict(write.row)
                else:
                    if rows.pop(write.row_id, None) is None:
                        raise RepositoryError(f"Cannot delete missing {write.table} row {write.row_id}")
            self._tables = staged
            return len(writes)


class Repository(Generic[T]):
    """
    Facade over one entity kind.

    Reads go straight to the store. Writes are staged on the owning unit of
    work and reach the store only on commit.
    """

    def __init__(self, model: Type[T], store: Store, unit_of_work: "UnitOfWork"):
        self.model = model
        self.table = model.table_name
        self._store = store
        self._unit_of_work = unit_of_work

    async def get_all(self) -> list[T]:
        rows = await self._store.get_all(self.table)
        return [self.model.model_validate(row) for row in rows]

    async def get_by_id(self, id: str) -> Optional[T]:
        row = await self._store.get_by_id(self.table, id)
        return self.model.model_validate(row) if row is not None else None

    async def find(self, **criteria: Any) -> list[T]:
        """Entities matching every column=value pair; criteria compose by merging."""
        normalized = {column: _normalize_value(value) for column, value in criteria.items()}
        rows = await self._store.find(self.table, normalized)
        return [self.model.model_validate(row) for row in rows]

    def add(self, entity: T) -> None:
        self._unit_of_work.stage(
            PendingWrite(WriteOp.INSERT, self.table, entity.id, entity.model_dump(mode="json"))
        )

    def update(self, entity: T) -> None:
        self._unit_of_work.stage(
            PendingWrite(WriteOp.UPDATE, self.table, entity.id, entity.model_dump(mode="json"))
        )

    def delete(self, entity: T) -> None:
        self._unit_of_work.stage(PendingWrite(WriteOp.DELETE, self.table, entity.id))


class UnitOfWork:
    """Scope that shares repositories and finalizes staged writes with one commit."""

    def __init__(self, store: Store):
        self.store = store
        self._repositories: dict[type, Repository] = {}
        self._pending: list[PendingWrite] = []

    def repository(self, model: Type[T]) -> Repository[T]:
        """Repository for model, created on first use and reused afterwards."""
        if model not in self._repositories:
            self._repositories[model] = Repository(model, self.store, self)
        return self._repositories[model]

    def stage(self, write: PendingWrite) -> None:
        self._pending.append(write)

    @property
    def pending(self) -> tuple[PendingWrite, ...]:
        return tuple(self._pending)

    async def commit(self) -> int:
        """Apply every staged write; returns the number applied."""
        if not self._pending:
            return 0

        # Writes staged while apply is suspended belong to the next commit
        writes, self._pending = self._pending, []
        applied = await self.store.apply(writes)

        logger.debug("Unit of work committed", writes_applied=applied)
        return applied
