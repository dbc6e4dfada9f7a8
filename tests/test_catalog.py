import dataclasses

from bookshelf.catalog import challenge_progress, find_book_by_id, generate_chapters, search_books
from bookshelf.data_generator import Chapter, generate_book_batch


def test_find_book_in_known_seed():
    expected = generate_book_batch(100, "trending")[4]
    assert find_book_by_id("trending-5") == expected


def test_find_book_deduces_hyphenated_seed():
    book = find_book_by_id("sci-fi-7")
    assert book is not None
    assert book.title == "Sci Fi Book 7"


def test_find_book_prefers_shelf_copy():
    shelf_copy = dataclasses.replace(generate_book_batch(3, "popular")[1], notes="my notes")
    assert find_book_by_id("popular-2", shelf=[shelf_copy]).notes == "my notes"


def test_find_book_misses():
    assert find_book_by_id("nohyphen") is None
    assert find_book_by_id("sci-fi-500") is None
    assert find_book_by_id("trending-101") is None


def test_search_matches_title_or_author_sorted_by_title():
    results = search_books("popular book 1")
    assert results
    assert all("popular book 1" in b.title.lower() for b in results)
    assert [b.title.lower() for b in results] == sorted(b.title.lower() for b in results)

    by_author = search_books("AUTHOR 7")
    assert by_author
    assert all("author 7" in b.author.lower() or "author 7" in b.title.lower() for b in by_author)


def test_search_includes_shelf_books_and_empty_query():
    mine = dataclasses.replace(generate_book_batch(1, "mine")[0], title="Dune Messiah")
    assert search_books("dune", shelf=[mine]) == [mine]
    assert search_books("") == []


def test_generate_chapters():
    book = generate_book_batch(1, "chapters")[0]
    assert len(generate_chapters(dataclasses.replace(book, page_count=549))) == 22
    assert len(generate_chapters(dataclasses.replace(book, page_count=60))) == 5
    assert len(generate_chapters(dataclasses.replace(book, page_count=5000))) == 50

    chapters = generate_chapters(dataclasses.replace(book, page_count=None))
    assert len(chapters) == 10
    assert chapters[0].id == f"{book.id}-chap-1"
    assert chapters[-1].title == "Chapter 10"
    assert generate_chapters(None) == []


def test_challenge_progress_percentages():
    chapters = [Chapter(id=f"b-chap-{n}", title=f"Chapter {n}") for n in range(1, 9)]
    assert challenge_progress([], {"x": True}) == 0
    assert challenge_progress(chapters, {}) == 0
    assert challenge_progress(chapters, {"b-chap-1": True}) == 13
    assert challenge_progress(chapters[:3], {"b-chap-1": True}) == 33
    assert challenge_progress(chapters[:3], {"b-chap-1": True, "b-chap-2": True}) == 67
    assert challenge_progress(chapters, {c.id: True for c in chapters}) == 100


def test_challenge_progress_ignores_unchecked_and_foreign_ids():
    chapters = [Chapter(id=f"b-chap-{n}", title=f"Chapter {n}") for n in range(1, 5)]
    checked = {"b-chap-1": True, "b-chap-2": False, "other-chap-1": True}
    assert challenge_progress(chapters, checked) == 25
