from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from .catalog import challenge_progress
from .config import get_settings
from .data_generator import (
    STATUSES,
    Book,
    Chapter,
    RewardTransaction,
    generate_book_batch,
    generate_transaction_batch,
    sort_transactions,
    to_record_dict,
)


logger = logging.getLogger(__name__)

BOOKSHELF_KEY = "bookshelfBooks"
TRANSACTIONS_KEY = "mockRewardTransactions"
CHALLENGES_KEY = "mockChallenges"
SHELF_SEED = "bookshelf-initial"

T = TypeVar("T")


def _resolve(db_path: Optional[Path]) -> Path:
    return Path(db_path) if db_path is not None else get_settings().db_path


def _get_conn(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Optional[Path] = None) -> Path:
    db_path = _resolve(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with _get_conn(db_path) as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
              key TEXT PRIMARY KEY,
              value TEXT NOT NULL,
              updated_at TEXT NOT NULL
            );
            """
        )
    return db_path


def get_item(key: str, db_path: Optional[Path] = None) -> Optional[str]:
    db_path = init_db(db_path)
    with _get_conn(db_path) as conn:
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return None if row is None else str(row["value"])


def set_item(key: str, value: str, db_path: Optional[Path] = None) -> None:
    db_path = init_db(db_path)
    now = datetime.now(timezone.utc).isoformat()
    with _get_conn(db_path) as conn:
        conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, now),
        )


def remove_item(key: str, db_path: Optional[Path] = None) -> None:
    db_path = init_db(db_path)
    with _get_conn(db_path) as conn:
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


def list_keys(db_path: Optional[Path] = None) -> List[str]:
    db_path = init_db(db_path)
    with _get_conn(db_path) as conn:
        rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
    return [str(r["key"]) for r in rows]


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def book_from_dict(data: Dict[str, Any]) -> Book:
    fields = dict(data)
    fields["added_date"] = _parse_ts(fields["added_date"])
    book = Book(**fields)
    if book.status not in STATUSES:
        raise ValueError(f"unknown status {book.status!r} for {book.id}")
    if book.rating is not None:
        if book.status != "finished":
            raise ValueError(f"rating set on unfinished book {book.id}")
        if not isinstance(book.rating, int) or not 1 <= book.rating <= 5:
            raise ValueError(f"rating {book.rating!r} out of range for {book.id}")
    return book


def transaction_from_dict(data: Dict[str, Any]) -> RewardTransaction:
    fields = dict(data)
    fields["timestamp"] = _parse_ts(fields["timestamp"])
    return RewardTransaction(**fields)


def _dump(records: Sequence[Any]) -> str:
    return json.dumps([to_record_dict(r) for r in records])


def _load_or_seed(
    key: str,
    hydrate: Callable[[Dict[str, Any]], T],
    seed: Callable[[], List[T]],
    db_path: Optional[Path],
) -> List[T]:
    raw = get_item(key, db_path)
    if raw is not None:
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a JSON list, got {type(data).__name__}")
            return [hydrate(item) for item in data]
        except (ValueError, TypeError, KeyError, AttributeError):
            logger.exception("Failed to parse stored %r; falling back to generated data", key)
    else:
        logger.info("No stored %r; seeding generated data", key)

    records = seed()
    set_item(key, _dump(records), db_path)
    return records


def load_bookshelf(db_path: Optional[Path] = None) -> List[Book]:
    count = get_settings().shelf_seed_count
    return _load_or_seed(BOOKSHELF_KEY, book_from_dict, lambda: generate_book_batch(count, SHELF_SEED), db_path)


def save_bookshelf(books: Sequence[Book], db_path: Optional[Path] = None) -> None:
    set_item(BOOKSHELF_KEY, _dump(books), db_path)


def load_transactions(db_path: Optional[Path] = None) -> List[RewardTransaction]:
    count = get_settings().transaction_seed_count
    txns = _load_or_seed(
        TRANSACTIONS_KEY, transaction_from_dict, lambda: generate_transaction_batch(count), db_path
    )
    return sort_transactions(txns)


def save_transactions(transactions: Sequence[RewardTransaction], db_path: Optional[Path] = None) -> None:
    set_item(TRANSACTIONS_KEY, _dump(transactions), db_path)


def _progress_key(challenge_id: str) -> str:
    return f"challengeProgress_{challenge_id}"


def load_challenge_progress(challenge_id: str, db_path: Optional[Path] = None) -> Dict[str, bool]:
    """Checked chapter ids for a challenge; empty when missing or unreadable."""
    raw = get_item(_progress_key(challenge_id), db_path)
    if raw is None:
        return {}
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    except (ValueError, TypeError):
        logger.exception("Failed to parse progress for challenge %r", challenge_id)
        return {}
    return {str(k): bool(v) for k, v in data.items()}


def save_challenge_progress(
    challenge_id: str,
    checked: Mapping[str, bool],
    chapters: Sequence[Chapter],
    db_path: Optional[Path] = None,
) -> int:
    """Persist ``checked`` and write the new percentage onto the stored challenge.

    Returns the progress percentage.
    """
    set_item(_progress_key(challenge_id), json.dumps(dict(checked)), db_path)
    progress = challenge_progress(chapters, checked)

    raw = get_item(CHALLENGES_KEY, db_path)
    if raw is None:
        return progress
    try:
        challenges = json.loads(raw)
        for challenge in challenges:
            if challenge["id"] == challenge_id:
                challenge["progress"] = progress
                set_item(CHALLENGES_KEY, json.dumps(challenges), db_path)
                break
    except (ValueError, TypeError, KeyError):
        logger.exception("Failed to update stored progress for challenge %r", challenge_id)
    return progress
