# src/storage/price_observation_db.py

"""SQLite-backed store registry and append-only price observations."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, cast

from src.config.settings import Settings
from src.models.price_observation import PriceObservation, TrackingTarget
from src.models.product_variant import ProductVariant
from src.models.store import Store, normalize_hostname

logger = logging.getLogger("price_observer.db")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS stores (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    name       TEXT    NOT NULL,
    url        TEXT    NOT NULL,
    hostname   TEXT    NOT NULL UNIQUE,
    currency   TEXT    NOT NULL DEFAULT 'CLP',
    rating     REAL,
    logo_url   TEXT    NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS product_variants (
    id           TEXT PRIMARY KEY,
    product_name TEXT NOT NULL DEFAULT '',
    label        TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS item_price_in_store (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    variant_id        TEXT    NOT NULL
                      REFERENCES product_variants(id) ON DELETE CASCADE,
    store_id          INTEGER NOT NULL
                      REFERENCES stores(id) ON DELETE CASCADE,
    url_path_in_store TEXT    NOT NULL,
    observed_price    REAL    NOT NULL,
    currency          TEXT    NOT NULL DEFAULT 'CLP',
    observed_at       TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_observations_pair_date
    ON item_price_in_store(variant_id, store_id, observed_at);
"""

_OBSERVATION_COLUMNS = (
    "o.id, o.variant_id, o.store_id, o.url_path_in_store, "
    "o.observed_price, o.currency, o.observed_at"
)

_STORE_COLUMNS = "id, name, url, currency, rating, logo_url"

# Latest row per (variant, store); ties on observed_at go to the newer id
_LATEST_PER_PAIR = """\
SELECT {columns}
FROM item_price_in_store o
WHERE o.id = (
    SELECT i.id FROM item_price_in_store i
    WHERE i.variant_id = o.variant_id AND i.store_id = o.store_id
    ORDER BY i.observed_at DESC, i.id DESC LIMIT 1
)
"""


def _row_to_observation(row: tuple[Any, ...]) -> PriceObservation:
    return PriceObservation(
        id=row[0],
        variant_id=row[1],
        store_id=row[2],
        url_path_in_store=row[3],
        observed_price=row[4],
        currency=row[5],
        observed_at=datetime.fromisoformat(row[6]),
    )


def _row_to_store(row: tuple[Any, ...]) -> Store:
    return Store(
        id=row[0],
        name=row[1],
        url=row[2],
        currency=row[3],
        rating=row[4],
        logo_url=row[5],
    )


class PriceObservationDB:
    """SQLite store for the store registry and price observations.

    Observation rows are only ever inserted; "current price" is the
    latest row for a (variant, store) pair.
    """

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.PRICE_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)
        logger.debug(
            "PriceObservationDB opened at %s", path,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Catalog (written by catalog administration) ──────

    def register_store(
        self,
        name: str,
        url: str,
        currency: str = Settings.DEFAULT_CURRENCY,
        rating: float | None = None,
        logo_url: str = "",
    ) -> Store:
        """Register a storefront; its hostname must be unique.

        Raises ``ValueError`` when the URL has no hostname or another
        store already owns it.
        """
        hostname = normalize_hostname(url)
        if not hostname:
            raise ValueError(f"Store URL has no hostname: {url!r}")
        base_url = url.rstrip("/")
        try:
            cur = self._conn.execute(
                "INSERT INTO stores "
                "(name, url, hostname, currency, rating, logo_url) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (name, base_url, hostname, currency, rating, logo_url),
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError(
                f"A store is already registered for {hostname}"
            ) from exc
        self._conn.commit()
        store_id = cast(int, cur.lastrowid)
        logger.info(
            "Registered store %s (%s) as id %d", name, hostname, store_id,
        )
        return Store(
            id=store_id,
            name=name,
            url=base_url,
            currency=currency,
            rating=rating,
            logo_url=logo_url,
        )

    def register_variant(
        self,
        variant_id: str,
        product_name: str = "",
        label: str = "",
    ) -> ProductVariant:
        """Insert or refresh a variant reference."""
        self._conn.execute(
            "INSERT INTO product_variants (id, product_name, label) "
            "VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET "
            "product_name=excluded.product_name, label=excluded.label",
            (variant_id, product_name, label),
        )
        self._conn.commit()
        return ProductVariant(
            id=variant_id, product_name=product_name, label=label,
        )

    def variant_exists(self, variant_id: str) -> bool:
        """Check if a variant is known to the catalog."""
        row = self._conn.execute(
            "SELECT 1 FROM product_variants WHERE id = ?",
            (variant_id,),
        ).fetchone()
        return row is not None

    def get_store(self, store_id: int) -> Store | None:
        """Fetch a store by id."""
        row = self._conn.execute(
            f"SELECT {_STORE_COLUMNS} FROM stores WHERE id = ?",
            (store_id,),
        ).fetchone()
        return _row_to_store(row) if row else None

    def list_stores(self) -> list[Store]:
        """Return all registered stores ordered by name."""
        rows = self._conn.execute(
            f"SELECT {_STORE_COLUMNS} FROM stores ORDER BY name",
        ).fetchall()
        return [_row_to_store(r) for r in rows]

    def find_store_by_hostname(
        self, url_or_hostname: str,
    ) -> Store | None:
        """Exact lookup on the normalized hostname key."""
        hostname = normalize_hostname(url_or_hostname)
        if not hostname:
            return None
        row = self._conn.execute(
            f"SELECT {_STORE_COLUMNS} FROM stores WHERE hostname = ?",
            (hostname,),
        ).fetchone()
        return _row_to_store(row) if row else None

    # ── Observations ─────────────────────────────────────

    def insert_observation(
        self, observation: PriceObservation,
    ) -> PriceObservation:
        """Append one observation row and return it with its id."""
        cur = self._conn.execute(
            "INSERT INTO item_price_in_store "
            "(variant_id, store_id, url_path_in_store, "
            " observed_price, currency, observed_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                observation.variant_id,
                observation.store_id,
                observation.url_path_in_store,
                observation.observed_price,
                observation.currency,
                observation.observed_at.isoformat(),
            ),
        )
        self._conn.commit()
        observation.id = cast(int, cur.lastrowid)
        logger.debug(
            "Inserted observation %d: variant=%s store=%d price=%s %s",
            observation.id,
            observation.variant_id,
            observation.store_id,
            observation.observed_price,
            observation.currency,
        )
        return observation

    def count_observations(self) -> int:
        """Total number of observation rows."""
        row = self._conn.execute(
            "SELECT COUNT(*) FROM item_price_in_store",
        ).fetchone()
        return int(row[0])

    def get_observation_history(
        self,
        variant_id: str,
        store_id: int | None = None,
    ) -> list[PriceObservation]:
        """Return a variant's observations, oldest first."""
        sql = (
            f"SELECT {_OBSERVATION_COLUMNS} "
            "FROM item_price_in_store o WHERE o.variant_id = ?"
        )
        params: list[object] = [variant_id]
        if store_id is not None:
            sql += " AND o.store_id = ?"
            params.append(store_id)
        sql += " ORDER BY o.observed_at ASC, o.id ASC"
        rows = self._conn.execute(sql, params).fetchall()
        return [_row_to_observation(r) for r in rows]

    def get_current_prices(
        self, variant_id: str,
    ) -> list[PriceObservation]:
        """Latest observation per store for a variant.

        Sentinel rows are returned as-is so stale or failing stores
        stay visible.
        """
        sql = _LATEST_PER_PAIR.format(columns=_OBSERVATION_COLUMNS)
        sql += " AND o.variant_id = ? ORDER BY o.store_id"
        rows = self._conn.execute(sql, (variant_id,)).fetchall()
        return [_row_to_observation(r) for r in rows]

    def list_tracking_targets(self) -> list[TrackingTarget]:
        """Every tracked (variant, store) pair with its latest path."""
        sql = _LATEST_PER_PAIR.format(columns=_OBSERVATION_COLUMNS)
        sql += " ORDER BY o.store_id, o.variant_id"
        rows = self._conn.execute(sql).fetchall()

        stores = {s.id: s for s in self.list_stores()}
        targets: list[TrackingTarget] = []
        for r in rows:
            obs = _row_to_observation(r)
            store = stores.get(obs.store_id)
            if store is None:
                continue
            targets.append(TrackingTarget(
                variant_id=obs.variant_id,
                store=store,
                url_path_in_store=obs.url_path_in_store,
            ))
        return targets

    def get_failure_stats(
        self, since: datetime | None = None,
    ) -> list[dict[str, object]]:
        """Attempts, failures and last attempt per store."""
        sql = (
            "SELECT s.id, s.name, COUNT(o.id), "
            "       SUM(CASE WHEN o.observed_price = ? "
            "                THEN 1 ELSE 0 END), "
            "       MAX(o.observed_at) "
            "FROM stores s "
            "JOIN item_price_in_store o ON o.store_id = s.id "
        )
        params: list[object] = [Settings.FAILED_PRICE_SENTINEL]
        if since is not None:
            sql += "WHERE o.observed_at >= ? "
            params.append(since.isoformat())
        sql += "GROUP BY s.id ORDER BY s.name"
        rows = self._conn.execute(sql, params).fetchall()
        return [
            {
                "store_id": r[0],
                "store": r[1],
                "attempts": r[2],
                "failures": r[3] or 0,
                "failure_rate": (
                    round((r[3] or 0) / r[2], 3) if r[2] else 0.0
                ),
                "last_attempt": r[4] or "",
            }
            for r in rows
        ]

    # ── Catalog import ───────────────────────────────────

    def import_catalog(self, filepath: Path) -> dict[str, int]:
        """Load stores and variants exported by the catalog.

        Expects ``{"stores": [{name, url, currency?, rating?,
        logo_url?}], "variants": [{id, product_name?, label?}]}``.
        Stores whose hostname is already registered are skipped.
        Returns counts of inserted stores and upserted variants.
        """
        counts = {"stores": 0, "variants": 0}
        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read catalog %s: %s", filepath.name, exc,
            )
            return counts

        if not isinstance(data, dict):
            logger.warning(
                "Catalog %s is not a JSON object", filepath.name,
            )
            return counts

        for entry in data.get("stores", []):
            if not isinstance(entry, dict) or not entry.get("url"):
                continue
            if self.find_store_by_hostname(str(entry["url"])):
                logger.debug(
                    "Skipping already registered store %s",
                    entry["url"],
                )
                continue
            rating = entry.get("rating")
            self.register_store(
                name=str(entry.get("name") or entry["url"]),
                url=str(entry["url"]),
                currency=str(
                    entry.get("currency") or Settings.DEFAULT_CURRENCY
                ),
                rating=float(rating) if rating is not None else None,
                logo_url=str(entry.get("logo_url", "")),
            )
            counts["stores"] += 1

        for entry in data.get("variants", []):
            if not isinstance(entry, dict) or not entry.get("id"):
                continue
            self.register_variant(
                str(entry["id"]),
                product_name=str(entry.get("product_name", "")),
                label=str(entry.get("label", "")),
            )
            counts["variants"] += 1

        logger.info(
            "Catalog import from %s: %d stores, %d variants",
            filepath.name,
            counts["stores"],
            counts["variants"],
        )
        return counts
