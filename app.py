from __future__ import annotations

import dataclasses

import pandas as pd
import plotly.express as px
import streamlit as st

from bookshelf import (
    books_to_frame,
    challenge_progress,
    export_to_csv,
    find_user_by_username,
    generate_book_batch,
    generate_chapters,
    generate_user_batch,
    points_balance,
    search_books,
    transactions_to_frame,
)
from bookshelf.config import get_settings
from bookshelf.data_generator import STATUSES
from bookshelf.logging_config import configure_logging
from bookshelf.storage import (
    load_bookshelf,
    load_challenge_progress,
    load_transactions,
    save_bookshelf,
    save_challenge_progress,
)

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)

# (label, seed suffix, count) for the shelves on a reader profile
PROFILE_SHELVES = (
    ("Currently reading", "reading", 8),
    ("Finished", "finished", 15),
    ("Want to read", "want", 20),
)

st.set_page_config(page_title="BookBurst", layout="wide")

st.title("BookBurst")
st.caption("Browse deterministic mock books, manage a shelf and review reward points.")


def _status_chart(df: pd.DataFrame):
    counts = df["status"].value_counts().reindex(list(STATUSES), fill_value=0).reset_index()
    counts.columns = ["status", "books"]
    fig = px.bar(counts, x="status", y="books", text="books")
    fig.update_layout(height=320)
    return fig


def render_books(books, key: str, title_prefix: str = ""):
    if not books:
        st.warning("No books found.")
        return

    df = books_to_frame(books)

    left, right = st.columns([2, 1])
    with left:
        st.markdown(f"#### {title_prefix}Books")
        show = df[["id", "title", "author", "status", "rating", "page_count", "added_date"]].copy()
        show["added_date"] = show["added_date"].dt.strftime("%Y-%m-%d")
        st.dataframe(show, use_container_width=True, hide_index=True)
    with right:
        st.markdown("#### Reading status")
        st.plotly_chart(_status_chart(df), use_container_width=True, key=f"chart-{key}")

    st.download_button(
        label="Download CSV",
        data=export_to_csv(df).encode("utf-8"),
        file_name=f"{key}.csv",
        mime="text/csv",
        key=f"download-{key}",
    )


with st.sidebar:
    st.header("Navigate")
    mode = st.radio(
        "Page",
        ["Browse category", "My bookshelf", "Search books", "Find readers", "Rewards history"],
        index=0,
    )


if mode == "Browse category":
    slug = st.text_input("Category slug", value="trending")
    count = st.slider("Books", min_value=1, max_value=100, value=50)
    books = generate_book_batch(int(count), slug.strip())
    render_books(books, key=slug.strip() or "category", title_prefix=f"{slug} · ")

    if books:
        st.markdown("#### Challenge progress")
        picked = st.selectbox("Book", [b.id for b in books])
        book = next(b for b in books if b.id == picked)
        chapters = generate_chapters(book)
        checked = load_challenge_progress(picked, settings.db_path)
        titles = {c.title: c.id for c in chapters}
        done = st.multiselect(
            "Chapters read",
            list(titles),
            default=[c.title for c in chapters if checked.get(c.id)],
        )
        st.progress(challenge_progress(chapters, {titles[t]: True for t in done}) / 100)
        if st.button("Save progress"):
            progress = save_challenge_progress(
                picked, {c.id: c.title in done for c in chapters}, chapters, settings.db_path
            )
            st.success(f"Progress saved ({progress}% complete).")

elif mode == "My bookshelf":
    books = load_bookshelf(settings.db_path)
    st.info(f"Shelf is stored locally in {settings.db_path} (SQLite).")

    ids = [b.id for b in books]
    if ids:
        picked = st.selectbox("Update book", ids)
        book = next(b for b in books if b.id == picked)
        c1, c2 = st.columns(2)
        status = c1.selectbox("Status", list(STATUSES), index=list(STATUSES).index(book.status))
        rating = c2.number_input("Rating", min_value=0, max_value=5, value=book.rating or 0)
        c3, c4 = st.columns(2)
        if c3.button("Save", type="primary"):
            updated = dataclasses.replace(
                book,
                status=status,
                rating=int(rating) if status == "finished" and rating else None,
            )
            save_bookshelf([updated if b.id == picked else b for b in books], settings.db_path)
            st.rerun()
        if c4.button("Remove"):
            save_bookshelf([b for b in books if b.id != picked], settings.db_path)
            st.rerun()

    render_books(books, key="bookshelf", title_prefix="My ")

elif mode == "Search books":
    query = st.text_input("Title or author", value="")
    shelf = load_bookshelf(settings.db_path)
    results = search_books(query.strip(), shelf=shelf)
    if query.strip():
        st.write(f"{len(results)} result(s)")
        render_books(results, key="search")

elif mode == "Find readers":
    term = st.text_input("Name or username", value="")
    users = generate_user_batch(20, term.strip())
    if users:
        st.dataframe(
            pd.DataFrame([dataclasses.asdict(u) for u in users]),
            use_container_width=True,
            hide_index=True,
        )
        picked = st.selectbox("Profile", [u.username for u in users])
        profile = find_user_by_username(picked)
        if profile:
            st.json(dataclasses.asdict(profile))
            for label, suffix, count in PROFILE_SHELVES:
                st.markdown(f"#### {label}")
                render_books(generate_book_batch(count, f"{picked}-{suffix}"), key=f"{picked}-{suffix}")
    elif term.strip():
        st.warning("No readers match that search.")

else:
    txns = load_transactions(settings.db_path)
    st.metric("Points balance", points_balance(txns))

    df = transactions_to_frame(txns)
    if len(df):
        df["signed"] = df["amount"].where(df["type"] == "earn", -df["amount"])
        trend = df.sort_values("timestamp").copy()
        trend["balance"] = trend["signed"].cumsum()

        fig = px.line(trend, x="timestamp", y="balance", markers=True)
        fig.update_layout(height=340)
        st.plotly_chart(fig, use_container_width=True)

        st.markdown("#### Transaction log")
        st.dataframe(df.drop(columns=["signed"]), use_container_width=True, hide_index=True)
        st.download_button(
            label="Download CSV",
            data=export_to_csv(df.drop(columns=["signed"])).encode("utf-8"),
            file_name="reward_history.csv",
            mime="text/csv",
        )
