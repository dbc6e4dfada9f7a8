from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .data_generator import Book, Chapter, generate_book_batch


# Seeds whose books the app pages show without any user action.
KNOWN_SEEDS: Sequence[str] = ("trending", "popular", "top-100", "bookshelf-initial")
SEARCH_SEEDS: Sequence[str] = (*KNOWN_SEEDS, "readers-club-reading")
BOOKS_PER_SEED = 100


def _pool(seeds: Iterable[str], per_seed: int = BOOKS_PER_SEED) -> Dict[str, Book]:
    books: Dict[str, Book] = {}
    for seed in seeds:
        for book in generate_book_batch(per_seed, seed):
            books.setdefault(book.id, book)
    return books


def find_book_by_id(book_id: str, shelf: Optional[Sequence[Book]] = None) -> Optional[Book]:
    """Resolve a book id the way the detail page does.

    Lookup order: the user's shelf, the known seeds, then the seed deduced
    from the id itself (everything before the last ``-``, so ``sci-fi-3``
    resolves against ``sci-fi``).
    """
    for book in shelf or ():
        if book.id == book_id:
            return book

    books = _pool(KNOWN_SEEDS)
    if book_id in books:
        return books[book_id]

    seed, sep, _ = book_id.rpartition("-")
    if sep and seed and seed not in KNOWN_SEEDS:
        books = _pool([seed])
        return books.get(book_id)
    return None


def search_books(query: str, shelf: Optional[Sequence[Book]] = None) -> List[Book]:
    """Case-insensitive title/author match over the search pool, sorted by title."""
    if not query:
        return []
    books = _pool(SEARCH_SEEDS)
    for book in shelf or ():
        books[book.id] = book

    needle = query.lower()
    results = [b for b in books.values() if needle in b.title.lower() or needle in b.author.lower()]
    return sorted(results, key=lambda b: b.title.lower())


def generate_chapters(book: Optional[Book]) -> List[Chapter]:
    """One chapter per 25 pages, clamped to 5..50; 250 pages when unknown."""
    if book is None:
        return []
    pages = book.page_count or 250
    count = max(5, min(50, math.ceil(pages / 25)))
    return [Chapter(id=f"{book.id}-chap-{n}", title=f"Chapter {n}") for n in range(1, count + 1)]


def challenge_progress(chapters: Sequence[Chapter], checked: Mapping[str, bool]) -> int:
    """Percent of ``chapters`` ticked in ``checked``, rounded half up; 0 with no chapters."""
    if not chapters:
        return 0
    done = sum(1 for c in chapters if checked.get(c.id))
    return math.floor(done * 100 / len(chapters) + 0.5)
