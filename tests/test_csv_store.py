# tests/test_csv_store.py
from __future__ import annotations

import fcntl
import os
import threading

import pytest

from calstore import CSV_FIELDS, StorageError, parse_csv
from calstore.csv_store import CsvEventStore

HEADER = ",".join(CSV_FIELDS) + "\r\n"


def test_init_schema_writes_header_only(csv_store):
    with open(csv_store.path, encoding="utf-8", newline="") as fh:
        assert fh.read() == HEADER


def test_init_schema_creates_missing_directory(tmp_path):
    store = CsvEventStore(str(tmp_path / "data" / "nested" / "events.csv"))
    store.init_schema()
    assert (tmp_path / "data" / "nested" / "events.csv").read_text(encoding="utf-8") == HEADER


def test_init_schema_keeps_existing_rows(csv_store, make_draft):
    event_id = csv_store.create(make_draft(title="keep me"))
    csv_store.init_schema()
    assert csv_store.get_by_id(event_id).title == "keep me"


def test_new_id_is_max_plus_one(csv_store, make_draft):
    first = csv_store.create(make_draft(title="a"))
    second = csv_store.create(make_draft(title="b"))
    third = csv_store.create(make_draft(title="c"))
    assert (first, second, third) == (1, 2, 3)

    # удалили не максимальный — следующий всё равно max+1
    csv_store.delete(second)
    assert csv_store.create(make_draft(title="d")) == 4


def test_deleting_max_id_lets_it_be_reused(csv_store, make_draft):
    csv_store.create(make_draft(title="a"))
    last = csv_store.create(make_draft(title="b"))
    assert csv_store.delete(last) is True
    assert csv_store.create(make_draft(title="c")) == last
    assert csv_store.get_by_id(last).title == "c"


def test_failed_update_leaves_file_untouched(csv_store, make_draft):
    csv_store.create(make_draft())
    with open(csv_store.path, encoding="utf-8", newline="") as fh:
        before = fh.read()

    assert csv_store.update(77, make_draft(title="ghost")) is False
    assert csv_store.delete(77) is False

    with open(csv_store.path, encoding="utf-8", newline="") as fh:
        assert fh.read() == before


def test_missing_file_reads_as_empty(tmp_path):
    store = CsvEventStore(str(tmp_path / "never-created.csv"))
    assert store.get_by_id(1) is None
    assert store.all_for_month(2025, 1) == []
    assert store.export_csv() == HEADER
    assert not (tmp_path / "never-created.csv").exists()


def test_unopenable_path_raises_storage_error(tmp_path, make_draft):
    store = CsvEventStore(str(tmp_path / "no-such-dir" / "events.csv"))
    with pytest.raises(StorageError):
        store.create(make_draft())


def test_concurrent_creates_get_distinct_ids(csv_store, make_draft):
    per_thread = 5
    threads_count = 4
    results = []
    errors = []
    lock = threading.Lock()

    def worker(n):
        try:
            for i in range(per_thread):
                new_id = csv_store.create(make_draft(title=f"t{n}-{i}"))
                with lock:
                    results.append(new_id)
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    total = per_thread * threads_count
    assert sorted(results) == list(range(1, total + 1))
    assert len(csv_store.all_for_month(2025, 3)) == total


def test_writer_waits_for_exclusive_lock(csv_store, make_draft):
    done = threading.Event()

    def writer():
        csv_store.create(make_draft(title="late"))
        done.set()

    with open(csv_store.path, "r+", encoding="utf-8") as holder:
        fcntl.flock(holder.fileno(), fcntl.LOCK_EX)
        t = threading.Thread(target=writer)
        t.start()
        # пока блокировка удерживается, запись не проходит
        assert not done.wait(0.3)
        fcntl.flock(holder.fileno(), fcntl.LOCK_UN)

    t.join(timeout=10)
    assert done.is_set()
    assert [e.title for e in csv_store.all_for_month(2025, 3)] == ["late"]


def test_reads_open_file_read_only(csv_store, make_draft, monkeypatch):
    event_id = csv_store.create(make_draft())
    real_open = os.open
    opened = []

    def spy(path, flags, *args):
        opened.append(flags)
        return real_open(path, flags, *args)

    monkeypatch.setattr("calstore.csv_store.os.open", spy)
    assert csv_store.get_by_id(event_id) is not None
    assert csv_store.all_for_month(2025, 3)
    csv_store.export_csv()

    assert len(opened) == 3
    assert all(flags & os.O_ACCMODE == os.O_RDONLY for flags in opened)
    assert not any(flags & os.O_CREAT for flags in opened)


def test_incomplete_rows_are_logged(csv_store, make_draft, caplog):
    csv_store.create(make_draft(title="ok"))
    with open(csv_store.path, "a", encoding="utf-8", newline="") as fh:
        fh.write("2,broken\r\n")

    with caplog.at_level("WARNING", logger="calstore.base"):
        events = csv_store.export_csv()

    assert [e.title for e in parse_csv(events)] == ["ok"]
    assert "line=3" in caplog.text
