"""Tests for SeriesStore -- load-or-create, overwrite, decode failures."""

import json

import pytest

from borrowwatch.exceptions import StorageError
from borrowwatch.models import AssetSeries
from borrowwatch.storage.series_store import SeriesStore


class TestLoad:
    def test_missing_record_is_created_empty(self, store: SeriesStore) -> None:
        series = store.load("BTC")

        assert series == AssetSeries()
        assert store.exists("BTC")
        raw = json.loads(store.path_for("BTC").read_text())
        assert raw == {"totalBorrow": [], "totalRepay": [], "totalTime": []}

    def test_existing_record_is_decoded(self, store: SeriesStore) -> None:
        store.path_for("ETH").write_text(json.dumps({
            "totalBorrow": [1.5, 2],
            "totalRepay": [0.5, 1],
            "totalTime": [100, 160],
        }))

        series = store.load("ETH")

        assert series.borrow == [1.5, 2.0]
        assert series.repay == [0.5, 1.0]
        assert series.time == [100, 160]

    def test_null_arrays_decode_as_empty(self, store: SeriesStore) -> None:
        store.path_for("DOGE").write_text(
            '{"totalBorrow": null, "totalRepay": null, "totalTime": null}'
        )
        assert len(store.load("DOGE")) == 0

    def test_corrupt_record_raises_and_is_kept(self, store: SeriesStore) -> None:
        path = store.path_for("BTC")
        path.write_text("{not json")

        with pytest.raises(StorageError):
            store.load("BTC")

        assert path.read_text() == "{not json"

    def test_unequal_lengths_raise(self, store: SeriesStore) -> None:
        store.path_for("BTC").write_text(json.dumps({
            "totalBorrow": [1.0, 2.0],
            "totalRepay": [1.0],
            "totalTime": [100, 160],
        }))

        with pytest.raises(StorageError, match="length mismatch"):
            store.load("BTC")

    def test_missing_directory_raises(self, tmp_path) -> None:
        store = SeriesStore(tmp_path / "never-created")
        with pytest.raises(StorageError):
            store.load("BTC")


class TestSave:
    def test_round_trip(self, store: SeriesStore) -> None:
        store.load("BTC")
        series = AssetSeries(borrow=[5.0, 7.25], repay=[3.0, 4.0], time=[100, 150])

        store.save("BTC", series)

        assert store.load("BTC") == series

    def test_save_without_record_raises(self, store: SeriesStore) -> None:
        with pytest.raises(StorageError, match="no record"):
            store.save("BTC", AssetSeries())
        assert not store.exists("BTC")

    def test_save_replaces_whole_record(self, store: SeriesStore) -> None:
        store.load("BTC")
        store.save("BTC", AssetSeries(borrow=[1.0, 2.0], repay=[1.0, 2.0], time=[1, 2]))
        store.save("BTC", AssetSeries(borrow=[9.0], repay=[8.0], time=[3]))

        assert store.load("BTC") == AssetSeries(borrow=[9.0], repay=[8.0], time=[3])

    def test_save_leaves_no_temp_file(self, store: SeriesStore) -> None:
        store.load("BTC")
        store.save("BTC", AssetSeries(borrow=[1.0], repay=[2.0], time=[3]))

        assert sorted(p.name for p in store.data_dir.iterdir()) == ["BTC.json"]

    def test_failed_replace_removes_temp_file(self, store: SeriesStore, monkeypatch) -> None:
        store.load("BTC")
        before = store.path_for("BTC").read_bytes()

        def _fail(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr("borrowwatch.storage.series_store.os.replace", _fail)

        with pytest.raises(StorageError, match="cannot write"):
            store.save("BTC", AssetSeries(borrow=[1.0], repay=[2.0], time=[3]))

        assert sorted(p.name for p in store.data_dir.iterdir()) == ["BTC.json"]
        assert store.path_for("BTC").read_bytes() == before

    def test_inconsistent_series_is_rejected(self, store: SeriesStore) -> None:
        store.load("BTC")
        bad = AssetSeries(borrow=[1.0], repay=[], time=[1])

        with pytest.raises(StorageError):
            store.save("BTC", bad)
        assert len(store.load("BTC")) == 0


def test_initialize_creates_nested_directory(tmp_path) -> None:
    store = SeriesStore(tmp_path / "a" / "b")
    store.initialize()
    assert store.data_dir.is_dir()


def test_asset_series_append_keeps_lengths_equal() -> None:
    series = AssetSeries()
    series.append(5, 3, 100.9)

    assert series.borrow == [5.0]
    assert series.repay == [3.0]
    assert series.time == [100]
    assert series.is_consistent()
    assert len(series) == 1
