from __future__ import annotations

import json
import threading

import pytest

from media_diet.config import Config
from media_diet.errors import ConfigurationError, FetchError, StoreError
from media_diet.models import FilmRecord, RawBookItem, RawFilmItem
from media_diet.normalizers import normalize_books
from media_diet.pipeline import Pipeline, RunOutcome, in_parallel
from media_diet.store import MediaStore


class FakeSource:
    def __init__(self, items=None, error=None):
        self.items = items or []
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.items)


class FakeNotifier:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    def notify(self):
        self.calls += 1
        if self.error:
            raise self.error
        return True


def _config(tmp_path, **overrides):
    fields = {
        "letterboxd_username": "someone",
        "goodreads_rss_url": "https://www.goodreads.com/review/list_rss/1",
        "data_dir": tmp_path / "data",
    }
    fields.update(overrides)
    return Config(**fields)


def _film_item(slug="abc", pub_date="2024-06-01T00:00:00Z", rating="4.5"):
    return RawFilmItem(
        title=f"{slug.title()} - ★★★★",
        link=f"https://letterboxd.com/someone/film/{slug}/",
        pub_date=pub_date,
        member_rating=rating,
    )


def _book_item(book_id, read_at):
    return RawBookItem(
        title=f"Book {book_id}",
        link=f"https://www.goodreads.com/review/show/{book_id}",
        book_id=book_id,
        user_read_at=read_at,
        user_rating="3",
    )


def _pipeline(config, films=None, books=None, notifier=None, film_error=None, book_error=None):
    return Pipeline(
        config,
        store=MediaStore(config.data_dir),
        film_source=FakeSource(films, error=film_error),
        book_source=FakeSource(books, error=book_error),
        notifier=notifier or FakeNotifier(),
    )


def _snapshot(store):
    return {key: store.path_for(key).read_bytes() for key in ("movies", "books", "media") if store.path_for(key).exists()}


@pytest.mark.parametrize(
    "overrides",
    [{"letterboxd_username": ""}, {"goodreads_rss_url": ""}],
)
def test_missing_configuration_aborts_before_io(tmp_path, overrides):
    config = _config(tmp_path, **overrides)
    pipeline = _pipeline(config, films=[_film_item()])

    with pytest.raises(ConfigurationError):
        pipeline.run()

    assert pipeline.film_source.calls == 0
    assert pipeline.book_source.calls == 0
    assert not config.data_dir.exists()


def test_fresh_fetch_replaces_stored_record_and_notifies(tmp_path):
    config = _config(tmp_path)
    store = MediaStore(config.data_dir)
    store.save_movies(
        [
            FilmRecord(
                identity="abc",
                title="Abc",
                canonical_url="https://letterboxd.com/film/abc/",
                rating=2.0,
                consumed_at="2024-01-01T00:00:00Z",
            )
        ]
    )
    notifier = FakeNotifier()

    result = _pipeline(config, films=[_film_item()], notifier=notifier).run()

    assert result.outcome is RunOutcome.PERSISTED
    assert result.movies_changed is True
    assert result.books_changed is False
    assert notifier.calls == 1
    assert result.notified is True
    [movie] = store.load_movies()
    assert movie.identity == "abc"
    assert movie.rating == 4.5
    assert movie.consumed_at == "2024-06-01T00:00:00.000Z"
    media = json.loads(store.path_for("media").read_text())
    assert set(media) == {"generatedAt", "movies", "books"}
    assert media["movies"][0]["rating"] == 4.5
    assert store.load_books() == []


def test_second_identical_run_is_unchanged_and_leaves_bytes_alone(tmp_path):
    config = _config(tmp_path)
    films = [_film_item("abc"), _film_item("heat", pub_date="2024-05-01T00:00:00Z")]
    books = [_book_item("1", "2024-02-01"), _book_item("2", "2024-03-01")]
    store = MediaStore(config.data_dir)

    first = _pipeline(config, films=films, books=books).run()
    before = _snapshot(store)
    notifier = FakeNotifier()
    second = _pipeline(config, films=films, books=books, notifier=notifier).run()

    assert first.outcome is RunOutcome.PERSISTED
    assert second.outcome is RunOutcome.UNCHANGED
    assert notifier.calls == 0
    assert _snapshot(store) == before


def test_no_new_films_and_reordered_books_is_unchanged(tmp_path):
    config = _config(tmp_path)
    store = MediaStore(config.data_dir)
    book_items = [_book_item("1", "2024-02-01"), _book_item("2", "2024-03-01"), _book_item("3", "2024-01-01")]
    store.save_books(list(reversed(normalize_books(book_items))))
    before = _snapshot(store)
    notifier = FakeNotifier()

    result = _pipeline(config, films=[], books=book_items, notifier=notifier).run()

    assert result.outcome is RunOutcome.UNCHANGED
    assert notifier.calls == 0
    assert _snapshot(store) == before
    assert not store.path_for("movies").exists()
    assert not store.path_for("media").exists()


def test_fetch_failure_aborts_without_writes(tmp_path):
    config = _config(tmp_path)
    store = MediaStore(config.data_dir)
    store.save_books(normalize_books([_book_item("1", "2024-02-01")]))
    before = _snapshot(store)
    notifier = FakeNotifier()
    pipeline = _pipeline(
        config,
        books=[_book_item("9", "2024-09-01")],
        notifier=notifier,
        film_error=FetchError("letterboxd", "503 Server Error", status_code=503),
    )

    with pytest.raises(FetchError):
        pipeline.run()

    assert pipeline.book_source.calls == 1
    assert notifier.calls == 0
    assert _snapshot(store) == before


def test_notifier_failure_does_not_change_outcome(tmp_path):
    config = _config(tmp_path)
    notifier = FakeNotifier(error=RuntimeError("hook down"))

    result = _pipeline(config, films=[_film_item()], notifier=notifier).run()

    assert result.outcome is RunOutcome.PERSISTED
    assert result.notified is False
    assert MediaStore(config.data_dir).path_for("media").exists()


def test_corrupt_store_aborts_run(tmp_path):
    config = _config(tmp_path)
    config.data_dir.mkdir(parents=True)
    (config.data_dir / "books.json").write_text("[{", encoding="utf-8")

    with pytest.raises(StoreError):
        _pipeline(config, films=[_film_item()]).run()


def test_media_types_merge_independently(tmp_path):
    config = _config(tmp_path)
    result = _pipeline(
        config,
        films=[_film_item("1")],
        books=[_book_item("1", "2024-02-01")],
    ).run()

    assert [movie.identity for movie in result.movies] == ["1"]
    assert [book.identity for book in result.books] == ["1"]


def test_in_parallel_waits_for_both_before_raising():
    finished = threading.Event()

    def fail():
        raise ValueError("first")

    def slow():
        finished.wait(0.05)
        finished.set()
        return "done"

    with pytest.raises(ValueError):
        in_parallel(fail, slow)

    assert finished.is_set()


def test_failed_books_write_changes_no_file(tmp_path):
    config = _config(tmp_path)
    store = MediaStore(config.data_dir)
    store.save_movies([])
    store.save_books(normalize_books([_book_item("1", "2024-02-01")]))
    store.save_media({"generatedAt": "2024-02-01T00:00:00.000Z", "movies": [], "books": []})
    before = _snapshot(store)

    def disk_full(records):
        raise StoreError("disk full")

    store.stage_books = disk_full
    notifier = FakeNotifier()
    pipeline = Pipeline(
        config,
        store=store,
        film_source=FakeSource([_film_item()]),
        book_source=FakeSource([_book_item("2", "2024-03-01")]),
        notifier=notifier,
    )

    with pytest.raises(StoreError):
        pipeline.run()

    assert _snapshot(store) == before
    assert sorted(path.name for path in config.data_dir.iterdir()) == ["books.json", "media.json", "movies.json"]
    assert notifier.calls == 0
