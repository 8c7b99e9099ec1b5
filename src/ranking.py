from operator import attrgetter

from src.common.config import BUCKET_SECONDS
from src.common.errors import InsufficientData, NoEligibleWindow
from src.dataset import Dataset, Entry, Window


def top_k(dataset: Dataset, k: int) -> list[Entry]:
    """
    Returns the k entries with the highest counts, highest first.
    Matches a stable ascending sort by count followed by taking the last k in
    reverse, so among equal counts the LATER entry in the dataset comes first.
    Ties are therefore NOT kept in original relative order: a stable
    descending sort would put the earlier entry first, and this function
    deliberately does not, so that it always equals
    `sort_by_count()` followed by `entries[-k:][::-1]`.
    The dataset itself is not reordered.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    if k > len(dataset):
        raise InsufficientData(k, len(dataset))
    if k == 0:
        return []
    ranked = sorted(dataset, key=attrgetter("count"))
    return ranked[-k:][::-1]


def contiguous_runs(dataset: Dataset) -> list[list[Entry]]:
    """Splits the time-sorted entries into maximal runs spaced exactly one bucket apart."""
    runs = []
    for entry in sorted(dataset, key=attrgetter("timestamp")):
        if runs and entry.timestamp - runs[-1][-1].timestamp == BUCKET_SECONDS:
            runs[-1].append(entry)
        else:
            runs.append([entry])
    return runs


def window_size(window_seconds: int) -> int:
    if window_seconds <= 0 or window_seconds % BUCKET_SECONDS:
        raise ValueError(
            f"Window must be a positive multiple of {BUCKET_SECONDS} seconds, got {window_seconds}"
        )
    return window_seconds // BUCKET_SECONDS


def window_totals(dataset: Dataset, window_seconds: int) -> list[Window]:
    """Every window of the requested span that fits entirely inside one contiguous run."""
    size = window_size(window_seconds)
    return [
        Window(
            start=run[i].timestamp,
            end=run[i].timestamp + window_seconds,
            total=sum(e.count for e in run[i : i + size]),
        )
        for run in contiguous_runs(dataset)
        for i in range(len(run) - size + 1)
    ]


def lowest_windows(dataset: Dataset, window_seconds: int, n: int = 1) -> list[Window]:
    """The n windows with the lowest totals, ties resolved by earliest start."""
    windows = sorted(
        window_totals(dataset, window_seconds), key=lambda w: (w.total, w.start)
    )
    if not windows:
        raise NoEligibleWindow(window_seconds)
    return windows[:n]


def lowest_contiguous_window(dataset: Dataset, window_seconds: int) -> Window:
    return lowest_windows(dataset, window_seconds, 1)[0]


def validate_options(k: int, window_seconds: int) -> int:
    """Checks report options before any record is read; returns the window size in buckets."""
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    return window_size(window_seconds)
