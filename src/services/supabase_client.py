"""Supabase client wrapper and the Supabase-backed listing store."""

from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence
from supabase import create_client, Client
from supabase.client import ClientOptions

from src.services.repository import PendingWrite, Store, WriteOp
from src.utils.config import EngineConfig
from src.utils.errors import ConfigurationError, RepositoryError
from src.utils.logging import get_structured_logger, log_timing, mask_sensitive_data

logger = get_structured_logger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = EngineConfig.SUPABASE_URL
        key = EngineConfig.SUPABASE_SERVICE_ROLE_KEY

        if not url or not key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", url=url)

    return _client


async def close_supabase_client() -> None:
    """Drop the cached Supabase client."""
    global _client
    if _client:
        # supabase-py has no explicit close; clearing the reference is enough
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=mask_sensitive_data(str(exc_val)),
                error_type=exc_type.__name__
            )
        return False


class SupabaseStore(Store):
    """Store backed by Supabase tables, one table per entity kind."""

    async def get_all(self, table: str) -> list[dict]:
        async with SupabaseClient() as client:
            try:
                with log_timing("supabase_select_all", logger=logger, table=table):
                    result = client.table(table).select("*").execute()
                return result.data if result.data else []
            except Exception as e:
                raise RepositoryError(f"Failed to read {table}: {mask_sensitive_data(str(e))}") from e

    async def get_by_id(self, table: str, id: str) -> Optional[dict]:
        async with SupabaseClient() as client:
            try:
                result = client.table(table).select("*").eq("id", id).execute()
                return result.data[0] if result.data and len(result.data) > 0 else None
            except Exception as e:
                raise RepositoryError(
                    f"Failed to read {table} row {id}: {mask_sensitive_data(str(e))}"
                ) from e

    async def find(self, table: str, criteria: Mapping[str, Any]) -> list[dict]:
        async with SupabaseClient() as client:
            try:
                query = client.table(table).select("*")
                for column, value in criteria.items():
                    # numeric columns compare by value in Postgres
                    query = query.eq(column, str(value) if isinstance(value, Decimal) else value)
                with log_timing("supabase_find", logger=logger, table=table, criteria=list(criteria)):
                    result = query.execute()
                return result.data if result.data else []
            except Exception as e:
                raise RepositoryError(f"Failed to query {table}: {mask_sensitive_data(str(e))}") from e

    async def apply(self, writes: Sequence[PendingWrite]) -> int:
        """Apply writes in order; the first failure stops the batch."""
        applied = 0
        async with SupabaseClient() as client:
            for write in writes:
                try:
                    table = client.table(write.table)
                    if write.op is WriteOp.INSERT:
                        table.insert(write.row).execute()
                    elif write.op is WriteOp.UPDATE:
                        table.update(write.row).eq("id", write.row_id).execute()
                    else:
                        table.delete().eq("id", write.row_id).execute()
                    applied += 1
                except Exception as e:
                    logger.error(
                        "Supabase write failed",
                        table=write.table,
                        op=write.op.value,
                        row_id=write.row_id,
                        applied_before_failure=applied,
                        error=mask_sensitive_data(str(e))
                    )
                    raise RepositoryError(
                        f"Failed to {write.op.value} {write.table} row {write.row_id}: "
                        f"{mask_sensitive_data(str(e))}"
                    ) from e
        return applied
