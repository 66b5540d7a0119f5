"""Flat-file store for per-asset borrow/repay series.

One JSON record per asset at ``<data_dir>/<ASSET>.json``::

    {
        "totalBorrow": [5.0, 7.0],
        "totalRepay": [3.0, 4.0],
        "totalTime": [1700000000, 1700000060]
    }

Records are rewritten whole on every save. Writes go to a temp file that
is then renamed over the record, so a concurrent reader sees either the
old or the new series. There is no locking: the ingestion loop is the
only writer.
"""

import json
import os
import tempfile
from pathlib import Path

from borrowwatch.exceptions import StorageError
from borrowwatch.logging import get_logger
from borrowwatch.models import AssetSeries

logger = get_logger(__name__)


def _encode(series: AssetSeries) -> str:
    return json.dumps(
        {
            "totalBorrow": series.borrow,
            "totalRepay": series.repay,
            "totalTime": series.time,
        },
        indent="\t",
    )


def _decode(text: str) -> AssetSeries:
    raw = json.loads(text)
    # Records written by older collectors may hold null instead of []
    series = AssetSeries(
        borrow=[float(v) for v in raw.get("totalBorrow") or []],
        repay=[float(v) for v in raw.get("totalRepay") or []],
        time=[int(v) for v in raw.get("totalTime") or []],
    )
    if not series.is_consistent():
        raise ValueError(
            f"length mismatch: borrow={len(series.borrow)} "
            f"repay={len(series.repay)} time={len(series.time)}"
        )
    return series


class SeriesStore:
    """Load-or-create and overwrite access to asset series records.

    Usage:
        store = SeriesStore("coinsJson")
        store.initialize()
        series = store.load("BTC")
        series.append(5.0, 3.0, 1700000000)
        store.save("BTC", series)
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, asset: str) -> Path:
        return self._data_dir / f"{asset}.json"

    def initialize(self) -> None:
        """Create the data directory if it does not exist."""
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create data dir {self._data_dir}: {e}") from e
        logger.info("series_store_ready", data_dir=str(self._data_dir))

    def exists(self, asset: str) -> bool:
        return self.path_for(asset).is_file()

    def load(self, asset: str) -> AssetSeries:
        """Return the stored series, creating an empty record if there is none.

        Raises:
            StorageError: the record cannot be read or decoded, or a missing
                record cannot be created. An unreadable record is never
                replaced.
        """
        path = self.path_for(asset)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            series = AssetSeries()
            self._write(path, series)
            logger.info("series_created", asset=asset, path=str(path))
            return series
        except OSError as e:
            raise StorageError(f"cannot read {path}: {e}") from e

        try:
            return _decode(text)
        except (ValueError, TypeError, AttributeError) as e:
            raise StorageError(f"cannot decode {path}: {e}") from e

    def save(self, asset: str, series: AssetSeries) -> None:
        """Replace the stored record for ``asset`` with ``series``.

        Raises:
            StorageError: the record does not exist yet (load it first) or
                the write fails.
        """
        path = self.path_for(asset)
        if not path.is_file():
            raise StorageError(f"no record for {asset} at {path}")
        if not series.is_consistent():
            raise StorageError(f"refusing to save inconsistent series for {asset}")
        self._write(path, series)

    def _write(self, path: Path, series: AssetSeries) -> None:
        # Unique temp name per writer; a render and the loop may create the same record
        tmp: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp = Path(fh.name)
                fh.write(_encode(series))
            os.replace(tmp, path)
        except OSError as e:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise StorageError(f"cannot write {path}: {e}") from e
