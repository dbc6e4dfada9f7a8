from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence

import pandas as pd

from .random_utils import SeededDraws


ReadingStatus = Literal["reading", "finished", "want-to-read"]
TransactionType = Literal["earn", "spend"]

STATUSES: Sequence[str] = ("reading", "finished", "want-to-read")

# Fixed window for generated timestamps; never derived from the real clock.
BASE_DATE = datetime(2023, 1, 1, tzinfo=timezone.utc)
FUTURE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)

BLANK_PDF_URL = "https://www.w3.org/WAI/ER/tests/xhtml/testfiles/resources/pdf/dummy.pdf"
COVER_URL = "https://picsum.photos/seed/{id}/300/400"
AVATAR_URL = "https://i.pravatar.cc/150?u={key}"

# Draw offsets per book field. Changing any of these changes every generated book.
OFFSET_DATE = 0
OFFSET_ISBN = 1
OFFSET_PAGES = 2
OFFSET_STATUS = 3
OFFSET_AUTHOR = 4
OFFSET_HAS_RATING = 5
OFFSET_RATING = 6
OFFSET_HAS_NOTES = 7
OFFSET_HAS_COVER = 9

TRANSACTION_SEED = "rewards"
EARN_AMOUNTS: Sequence[int] = (10, 25, 50, 100)
SPEND_AMOUNTS: Sequence[int] = (20, 50, 75)
EARN_DESCRIPTIONS: Sequence[str] = (
    "Completed 'Read 5 Books' Challenge",
    "Finished a book",
    "Wrote a review",
    "Daily reading streak bonus",
    "Recommended a book to a friend",
)
SPEND_DESCRIPTIONS: Sequence[str] = (
    "Entered 'Sci-Fi Quiz'",
    "Redeemed profile badge",
    "Unlocked premium theme",
    "Entered monthly book raffle",
)

FIRST_NAMES: Sequence[str] = (
    "Alice", "Bob", "Charlie", "Diana", "Evan", "Fiona", "George", "Hannah", "Ian", "Julia",
    "Kevin", "Laura", "Mike", "Nora", "Oscar", "Penny", "Quinn", "Rachel", "Steve", "Tina",
)
LAST_NAMES: Sequence[str] = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez",
    "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas", "Taylor",
    "Moore", "Martin", "Jackson",
)
READER_TYPES: Sequence[str] = ("Passionate reader", "Book enthusiast", "Casual browser", "Genre explorer")
USER_GENRES: Sequence[str] = ("sci-fi", "fantasy", "mystery", "history", "romance", "thrillers")
PROFILE_GENRES: Sequence[str] = ("fiction", "non-fiction", "fantasy")


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author: str
    status: ReadingStatus
    added_date: datetime
    rating: Optional[int] = None
    notes: Optional[str] = None
    cover_url: Optional[str] = None
    isbn: Optional[str] = None
    page_count: Optional[int] = None
    author_bio: Optional[str] = None
    blank_pdf_url: Optional[str] = None


@dataclass(frozen=True)
class RewardTransaction:
    id: str
    timestamp: datetime
    description: str
    type: TransactionType
    amount: int


@dataclass(frozen=True)
class UserProfile:
    id: str
    name: str
    username: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    reading_count: Optional[int] = None
    finished_count: Optional[int] = None
    want_to_read_count: Optional[int] = None


@dataclass(frozen=True)
class Chapter:
    id: str
    title: str


def _check_count(count: int) -> None:
    if count < 0:
        raise ValueError("count must be >= 0")


def _window_timestamp(value: float) -> datetime:
    # truncated to whole milliseconds, like a JS Date
    span_ms = (FUTURE_DATE - BASE_DATE) // timedelta(milliseconds=1)
    return BASE_DATE + timedelta(milliseconds=int(value * span_ms))


def _title_case(prefix: str) -> str:
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), prefix.replace("-", " "), flags=re.ASCII)


def _generate_book(seed_prefix: str, index: int) -> Book:
    rng = SeededDraws.for_record(seed_prefix, index)
    book_id = f"{seed_prefix}-{index}"

    status = rng.pick(STATUSES, OFFSET_STATUS)
    author = f"Author {int(rng.draw(OFFSET_AUTHOR) * 50) + 1}"

    rating = None
    if status == "finished" and rng.draw(OFFSET_HAS_RATING) > 0.3:
        rating = int(rng.draw(OFFSET_RATING) * 5) + 1

    notes = None
    if rng.draw(OFFSET_HAS_NOTES) > 0.5:
        notes = (
            f"This is a sample note for book {index} in the '{seed_prefix}' category. "
            "It reflects some deterministically generated thoughts."
        )

    genre = seed_prefix.split("-")[0] or "various"
    isbn_digits = str(int(rng.draw(OFFSET_ISBN) * 100_000_000)).zfill(8)

    return Book(
        id=book_id,
        title=f"{_title_case(seed_prefix)} Book {index}",
        author=author,
        status=status,
        added_date=_window_timestamp(rng.draw(OFFSET_DATE)),
        rating=rating,
        notes=notes,
        cover_url=COVER_URL.format(id=book_id) if rng.draw(OFFSET_HAS_COVER) > 0.1 else None,
        isbn=f"978-0-{isbn_digits}-{index % 10}",
        page_count=int(rng.draw(OFFSET_PAGES) * 400) + 150,
        author_bio=(
            f"{author} is a renowned author known for their captivating stories in the {genre} genre. "
            "Born on a deterministically generated date, they enjoy predictable hobbies like reading code."
        ),
        blank_pdf_url=BLANK_PDF_URL,
    )


def book_sort_key(book: Book):
    """(prefix, numeric suffix, newest first) ordering key for book ids."""
    prefix, sep, suffix = book.id.rpartition("-")
    if not sep or not suffix.isdigit():
        prefix, suffix = book.id, "0"
    return (prefix, int(suffix), -book.added_date.timestamp())


def sort_books(books: Iterable[Book]) -> List[Book]:
    return sorted(books, key=book_sort_key)


def generate_book_batch(count: int, seed_prefix: str) -> List[Book]:
    """Generate ``count`` deterministic books for ``seed_prefix``.

    - Book ``i`` (1-based) has id ``"<seed_prefix>-<i>"``.
    - Every field comes from ``pseudo_random(base_seed(seed_prefix) + i + offset)``.
    - ``added_date`` lies in [BASE_DATE, FUTURE_DATE).

    Raises ValueError for a negative count.
    """
    _check_count(count)
    return sort_books(_generate_book(seed_prefix, i) for i in range(1, count + 1))


def _generate_transaction(index: int) -> RewardTransaction:
    rng = SeededDraws.for_record(TRANSACTION_SEED, index)
    kind: TransactionType = "earn" if rng.draw(0) > 0.4 else "spend"
    amounts = EARN_AMOUNTS if kind == "earn" else SPEND_AMOUNTS
    descriptions = EARN_DESCRIPTIONS if kind == "earn" else SPEND_DESCRIPTIONS
    return RewardTransaction(
        id=f"txn-{index}",
        timestamp=_window_timestamp(rng.draw(3)),
        description=rng.pick(descriptions, 2),
        type=kind,
        amount=rng.pick(amounts, 1),
    )


def sort_transactions(transactions: Iterable[RewardTransaction]) -> List[RewardTransaction]:
    """Newest first; equal timestamps keep their incoming order."""
    return sorted(transactions, key=lambda t: t.timestamp, reverse=True)


def generate_transaction_batch(count: int) -> List[RewardTransaction]:
    """Reward-point history from the fixed ``TRANSACTION_SEED``, newest first."""
    _check_count(count)
    return sort_transactions(_generate_transaction(i) for i in range(1, count + 1))


def points_balance(transactions: Iterable[RewardTransaction]) -> int:
    return sum(t.amount if t.type == "earn" else -t.amount for t in transactions)


def generate_user_batch(count: int, search_term: str) -> List[UserProfile]:
    """Mock reader profiles whose name or username contains ``search_term``.

    Candidates are drawn from a pool of ``max(count * 5, 50)``; the result is
    capped at ``count`` and sorted by display name.
    """
    _check_count(count)
    term = search_term.lower()
    if not term:
        return []

    users: List[UserProfile] = []
    for i in range(1, max(count * 5, 50) + 1):
        if len(users) >= count:
            break
        rng = SeededDraws(i + len(term))
        first = rng.pick(FIRST_NAMES, 0)
        last = rng.pick(LAST_NAMES, 1)
        name = f"{first} {last}"
        username = f"{first.lower()}_{last.lower()[:3]}{i}"
        if term not in name.lower() and term not in username:
            continue

        user_id = f"user-{username}"
        users.append(
            UserProfile(
                id=user_id,
                name=name,
                username=username,
                avatar_url=AVATAR_URL.format(key=user_id),
                bio=(
                    f"Mock bio for {name}. {rng.pick(READER_TYPES, 2)} on BookBurst. "
                    f"Currently into {rng.pick(USER_GENRES, 3)}."
                ),
                reading_count=int(rng.draw(4) * 10),
                finished_count=int(rng.draw(5) * 50) + 5,
                want_to_read_count=int(rng.draw(6) * 30) + 10,
            )
        )
    return sorted(users, key=lambda u: u.name)


def find_user_by_username(username: str) -> Optional[UserProfile]:
    if not username:
        return None
    lowered = username.lower()
    parts = lowered.split("_")
    first = parts[0].capitalize() if parts[0] else "User"
    initial = parts[1][0].upper() if len(parts) > 1 and parts[1] else "X"
    rng = SeededDraws(len(lowered))
    return UserProfile(
        id=f"user-{lowered}",
        name=f"{first} {initial}.",
        username=username,
        avatar_url=AVATAR_URL.format(key=lowered),
        bio=(
            f"Mock bio for {first}. A dedicated reader on BookBurst. "
            f"Currently exploring the world of {rng.pick(PROFILE_GENRES, 2)}."
        ),
    )


def to_record_dict(record: Any) -> Dict[str, Any]:
    """Dataclass -> JSON-ready dict; unset optionals are dropped, datetimes become ISO-8601."""
    out: Dict[str, Any] = {}
    for key, value in asdict(record).items():
        if value is None:
            continue
        if isinstance(value, datetime):
            value = value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        out[key] = value
    return out


def books_to_frame(books: Sequence[Book]) -> pd.DataFrame:
    columns = list(Book.__dataclass_fields__)
    if not books:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([asdict(b) for b in books], columns=columns)
    df["added_date"] = pd.to_datetime(df["added_date"], utc=True)
    df["rating"] = df["rating"].astype("Int64")
    return df


def transactions_to_frame(transactions: Sequence[RewardTransaction]) -> pd.DataFrame:
    columns = list(RewardTransaction.__dataclass_fields__)
    if not transactions:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([asdict(t) for t in transactions], columns=columns)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


def export_to_csv(df: pd.DataFrame) -> str:
    """Export a book or transaction frame to CSV text with ISO timestamps."""
    out = df.copy()
    for col in ("added_date", "timestamp"):
        if col in out.columns and len(out):
            ts = pd.to_datetime(out[col], utc=True)
            millis = (ts.dt.microsecond // 1000).astype(str).str.zfill(3)
            out[col] = ts.dt.strftime("%Y-%m-%dT%H:%M:%S.") + millis + "Z"
    return out.to_csv(index=False)
