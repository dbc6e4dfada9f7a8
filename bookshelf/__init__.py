"""Deterministic mock data for the Bookshelf reading tracker."""

from .random_utils import SeededDraws, base_seed, pseudo_random
from .data_generator import (
    Book,
    Chapter,
    RewardTransaction,
    UserProfile,
    books_to_frame,
    export_to_csv,
    find_user_by_username,
    generate_book_batch,
    generate_transaction_batch,
    generate_user_batch,
    points_balance,
    transactions_to_frame,
)
from .catalog import challenge_progress, find_book_by_id, generate_chapters, search_books
