"""
Price table and pricing config providers for Inkquote.

The engine never caches anything itself. Providers hand out read-only
snapshots; when the TTL expires or the snapshot is invalidated, a new
snapshot is loaded and swapped in as a whole.
"""
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from inkquote.db import connect, ensure_schema
from inkquote.db import load_price_tables as load_stored_price_tables
from inkquote.domain import PriceTable, PricingConfig, Technique
from inkquote.price_tables import DEFAULT_PRICE_TABLES, load_price_tables
from inkquote.pricing_config import load_pricing_config_or_default
from inkquote.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingSnapshot:
    """Price tables and pricing config captured together at load time."""

    tables: Dict[Technique, PriceTable]
    config: PricingConfig
    loaded_at: float


class SnapshotProvider:
    """
    TTL cache around a snapshot loader.

    Args:
        loader: Callable returning a fresh PricingSnapshot
        ttl: Seconds before a snapshot is reloaded
        clock: Time source (monotonic seconds)
    """

    def __init__(
        self,
        loader: Callable[[], PricingSnapshot],
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[PricingSnapshot] = None
        self._expires_at = 0.0

    def get(self) -> PricingSnapshot:
        """Current snapshot, reloading it first if it expired."""
        with self._lock:
            now = self._clock()
            if self._snapshot is None or now >= self._expires_at:
                # Load fully before publishing; readers never see a partial snapshot
                snapshot = self._loader()
                self._snapshot = snapshot
                self._expires_at = now + self._ttl
                logger.info("Pricing snapshot refreshed")
            return self._snapshot

    def invalidate(self) -> None:
        """Force the next get() to reload, e.g. after an admin edit."""
        with self._lock:
            self._expires_at = 0.0


def load_snapshot_from_files(
    price_tables_path: Optional[str] = None,
    pricing_config_path: Optional[str] = None,
    db_path: Optional[str] = None,
) -> PricingSnapshot:
    """
    Load price tables and pricing config from the configured sources.

    Tables come from the JSON file, then any table stored in the database
    replaces the file's table for its technique. A missing price tables
    file means the default tables; a missing pricing config file means the
    default knobs; a missing database is skipped. Invalid data raises.
    """
    settings = get_settings()
    price_tables_path = price_tables_path or settings.PRICE_TABLES_PATH
    pricing_config_path = pricing_config_path or settings.PRICING_CONFIG_PATH
    db_path = db_path or settings.DATABASE_PATH

    try:
        tables = load_price_tables(price_tables_path)
    except FileNotFoundError:
        logger.info(f"Price tables {price_tables_path} not found, using default tables")
        tables = dict(DEFAULT_PRICE_TABLES)

    if os.path.exists(db_path):
        conn = connect(db_path)
        try:
            ensure_schema(conn)
            stored = load_stored_price_tables(conn)
        finally:
            conn.close()
        if stored:
            logger.info(f"Using stored price tables for: {', '.join(t.value for t in stored)}")
            tables.update(stored)

    config = load_pricing_config_or_default(pricing_config_path)
    return PricingSnapshot(tables=tables, config=config, loaded_at=time.time())


# Global provider instance
_provider_cache: Optional[SnapshotProvider] = None


def get_snapshot_provider() -> SnapshotProvider:
    """Shared file-backed provider using the settings' paths and TTL."""
    global _provider_cache

    if _provider_cache is None:
        _provider_cache = SnapshotProvider(load_snapshot_from_files, get_settings().CONFIG_CACHE_TTL)

    return _provider_cache
