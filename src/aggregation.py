from collections import Counter
from collections.abc import Iterable
from functools import reduce

from src.common.timestamps import day_of
from src.dataset import DailyTotal, Dataset


# Modular Functional Blocks (KISS)


def unique_days(dataset: Dataset) -> list[str]:
    """Distinct UTC days in first-occurrence order of the current dataset ordering."""
    return list(dict.fromkeys(map(lambda e: day_of(e.timestamp), dataset)))


def day_counter(dataset: Dataset) -> Counter:
    """Sums counts per UTC day with a single pass over the entries."""
    return reduce(
        lambda acc, e: (acc.update({day_of(e.timestamp): e.count}), acc)[1],
        dataset,
        Counter(),
    )


def daily_totals(dataset: Dataset, days: Iterable[str]) -> list[DailyTotal]:
    """One DailyTotal per requested day, in the requested order. Days without entries total 0."""
    counts = day_counter(dataset)
    return [DailyTotal(day=d, total=counts.get(d, 0)) for d in days]
