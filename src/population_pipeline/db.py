"""MongoDB helpers and bulk upsert utility.

Centralizes creation of Mongo clients and the batched upsert used to cache
Clean-layer records.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

import certifi
from pymongo import MongoClient, UpdateOne
from pymongo.collection import Collection
from pymongo.database import Database

log = logging.getLogger(__name__)


def get_client(uri: str, tls: bool = False) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    Args:
        uri: MongoDB connection URI.
        tls: Connect over TLS, verifying against certifi's CA bundle.

    Returns:
        Configured MongoClient instance.
    """
    options: dict[str, Any] = {
        "serverSelectionTimeoutMS": 30000,
        "socketTimeoutMS": 30000,
        "connectTimeoutMS": 30000,
    }
    if tls:
        options.update(tls=True, tlsCAFile=certifi.where())
    return MongoClient(uri, **options)


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient."""
    return client[db_name]


def bulk_upsert(
    collection: Collection[dict[str, Any]],
    docs: Iterable[dict[str, Any]],
    key_fields: Sequence[str],
    batch_size: int = 1000,
) -> int:
    """Bulk upsert documents using `key_fields` as the selector.

    Documents missing any key field are skipped. Write errors propagate to the
    caller.

    Args:
        collection: Target PyMongo collection.
        docs: Iterable of document dictionaries to upsert.
        key_fields: Document keys that together identify a document.
        batch_size: Number of ops per bulk_write call.

    Returns:
        Integer number of documents written.
    """
    ops: list[UpdateOne] = []
    written = 0
    skipped = 0

    for d in docs:
        if any(k not in d for k in key_fields):
            skipped += 1
            continue

        ops.append(
            UpdateOne(
                {k: d[k] for k in key_fields},
                {"$set": d},
                upsert=True,
            )
        )

        if len(ops) >= batch_size:
            collection.bulk_write(ops, ordered=False)
            written += len(ops)
            ops.clear()

    if ops:
        collection.bulk_write(ops, ordered=False)
        written += len(ops)

    if skipped:
        log.warning("bulk_upsert skipped %d docs missing %s", skipped, list(key_fields))
    return written
