"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
    TransactionsRepository,
)
from backend.services.seed_feed import SeedFeedClient
from backend.services.transaction_service import TransactionService
from shared import config


logger = logging.getLogger(__name__)


def build_transactions_repository() -> TransactionsRepository:
    """Build the Supabase repository, or the in-memory one when Supabase is not configured."""

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if supabase_url and supabase_key:
        supabase_client = SupabaseClient(
            settings=SupabaseSettings(url=supabase_url, service_role_key=supabase_key)
        )
        return SupabaseTransactionsRepository(client=supabase_client, table=config.transactions_table())

    logger.warning("supabase_not_configured; using in-memory transactions repository")
    return InMemoryTransactionsRepository()


def build_transaction_service() -> TransactionService:
    return TransactionService(
        repository=build_transactions_repository(),
        seed_feed=SeedFeedClient(
            url=config.seed_source_url(),
            timeout_seconds=config.seed_fetch_timeout_seconds(),
        ),
    )
