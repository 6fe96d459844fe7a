"""
Path recorders: sinks for the paths of rays that reached the receiver.

CsvPathRecorder writes the ray_data.csv layout:

    origin_x,...,totalDistance,rayDistance,hitTag
    --- Ray Trace 1 ---
    <one row per segment>
    <blank line>
    --- Ray Trace 2 ---
    ...

Rendered blocks are buffered in memory by record() and appended to disk in
batches by maybe_flush()/flush(), so recording a ray never touches the file.
"""

import csv
import io
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Protocol, Sequence, Union

from sigtrace.tracing.types import RaySegment

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "origin_x,origin_y,origin_z,direction_x,direction_y,direction_z,"
    "hitPoint_x,hitPoint_y,hitPoint_z,hitNormal_x,hitNormal_y,hitNormal_z,"
    "totalDistance,rayDistance,hitTag"
)
CSV_COLUMNS = tuple(CSV_HEADER.split(","))
RUN_DIR_FORMAT = "Run_%Y%m%d_%H%M%S"


class RecorderError(Exception):
    """Error creating or writing recorder output."""

    pass


class PathRecorder(Protocol):
    """Sink for committed ray paths."""

    def record(self, index: int, segments: Sequence[RaySegment]) -> None:
        """Buffer the segments of successful ray number `index`. No I/O."""
        ...

    def maybe_flush(self) -> None:
        """Persist the buffer if a full batch is pending."""
        ...

    def flush(self) -> None:
        """Persist anything buffered."""
        ...


def create_run_directory(base_dir: Union[str, Path], now: datetime | None = None) -> Path:
    """
    Create a timestamped run directory under `base_dir`.

    Args:
        base_dir: Parent directory (created if missing)
        now: Timestamp to use (defaults to the current local time)

    Returns:
        Path of the new Run_YYYYmmdd_HHMMSS directory

    Raises:
        RecorderError: If the directory cannot be created
    """
    stamp = (now or datetime.now()).strftime(RUN_DIR_FORMAT)
    run_dir = Path(base_dir) / stamp
    try:
        run_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RecorderError(f"Failed to create output directory {run_dir}: {e}") from e
    logger.info("Created run directory %s", run_dir)
    return run_dir


def _segment_row(segment: RaySegment) -> list[str]:
    values = [
        *segment.origin,
        *segment.direction,
        *segment.hit_point,
        *segment.hit_normal,
        segment.total_distance,
        segment.ray_distance,
    ]
    return [repr(float(v)) for v in values] + [segment.hit_tag]


class CsvPathRecorder:
    """Append committed paths to a CSV file in batches."""

    def __init__(self, csv_path: Union[str, Path], flush_every: int = 64):
        """
        Create the CSV file and write the header row.

        Args:
            csv_path: Output file (overwritten)
            flush_every: Number of recorded rays buffered before writing

        Raises:
            RecorderError: If the file cannot be written
        """
        self.csv_path = Path(csv_path)
        self.flush_every = flush_every
        self._buffer: list[str] = []
        self._lock = threading.Lock()
        # Held for the whole file write; batches reach disk in buffer order
        self._write_lock = threading.Lock()
        self.recorded = 0

        try:
            self.csv_path.write_text(CSV_HEADER + "\n")
        except OSError as e:
            raise RecorderError(f"Failed to initialize CSV file {self.csv_path}: {e}") from e

    def record(self, index: int, segments: Sequence[RaySegment]) -> None:
        out = io.StringIO()
        out.write(f"--- Ray Trace {index} ---\n")
        writer = csv.writer(out, lineterminator="\n")
        for segment in segments:
            writer.writerow(_segment_row(segment))
        out.write("\n")

        with self._lock:
            self._buffer.append(out.getvalue())
            self.recorded += 1

    def maybe_flush(self) -> None:
        with self._lock:
            pending = len(self._buffer)
        if pending >= self.flush_every:
            self.flush()

    def flush(self) -> None:
        with self._write_lock:
            # Swap the buffer out so record() never waits on the disk
            with self._lock:
                if not self._buffer:
                    return
                blocks, self._buffer = self._buffer, []
            try:
                with open(self.csv_path, "a") as f:
                    f.write("".join(blocks))
            except OSError as e:
                raise RecorderError(f"Failed to save ray data to {self.csv_path}: {e}") from e
        logger.debug("Flushed %d ray paths to %s", len(blocks), self.csv_path)

    def close(self) -> None:
        self.flush()

    def __enter__(self) -> "CsvPathRecorder":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class MemoryPathRecorder:
    """Keep committed paths in memory, in recording order."""

    def __init__(self) -> None:
        self.paths: list[tuple[int, tuple[RaySegment, ...]]] = []

    def record(self, index: int, segments: Sequence[RaySegment]) -> None:
        self.paths.append((index, tuple(segments)))

    def maybe_flush(self) -> None:
        pass

    def flush(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self.paths)


def _parse_row(row: Iterable[str], where: str) -> dict:
    record = dict(zip(CSV_COLUMNS, row))
    for column in CSV_COLUMNS[:-1]:
        try:
            record[column] = float(record[column])
        except ValueError as e:
            raise RecorderError(f"{where}: {column} is not a number: {record[column]!r}") from e
    return record


def read_recorded_paths(csv_path: Union[str, Path]) -> dict[int, list[dict]]:
    """
    Parse a file written by CsvPathRecorder.

    Args:
        csv_path: Path to ray_data.csv

    Returns:
        Mapping of ray index to its segment rows (numeric columns as float)

    Raises:
        RecorderError: If the file is missing or malformed
    """
    path = Path(csv_path)
    try:
        lines = path.read_text().splitlines()
    except OSError as e:
        raise RecorderError(f"Failed to read {path}: {e}") from e

    if not lines or lines[0] != CSV_HEADER:
        raise RecorderError(f"{path} is missing the ray data header row")

    paths: dict[int, list[dict]] = {}
    current: list[dict] | None = None
    for lineno, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        if line.startswith("--- Ray Trace ") and line.endswith(" ---"):
            label = line[len("--- Ray Trace "):-len(" ---")]
            try:
                index = int(label)
            except ValueError as e:
                raise RecorderError(f"{path}:{lineno}: invalid ray index {label!r}") from e
            current = paths.setdefault(index, [])
            continue
        row = next(csv.reader([line]))
        if current is None or len(row) != len(CSV_COLUMNS):
            raise RecorderError(f"{path}:{lineno}: unexpected line {line!r}")
        current.append(_parse_row(row, f"{path}:{lineno}"))
    return paths
