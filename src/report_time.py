import time
import polars as pl
from src.common.config import (
    BUCKET_SECONDS,
    COUNT_PATTERN,
    DAY_FORMAT,
    DEFAULT_LOWEST_WINDOWS,
    DEFAULT_TOP_K,
    DEFAULT_WINDOW_SECONDS,
    RECORD_PATTERN,
    TIMESTAMP_FORMAT,
    TIMESTAMP_PATTERN,
)
from src.common.errors import InsufficientData, MalformedRecord, NoEligibleWindow
from src.common.logger import canonical_logger, elapsed_ms
from src.common.utils import read_polars as extractor
from src.dataset import DailyTotal, Entry, TrafficReport, Window, report_metrics
from src.ranking import validate_options

# Modular Functional Blocks returning LazyFrames (Optimized for Time)
record_parser = lambda lf: (
    lf.with_columns(
        pl.col("line").str.extract(RECORD_PATTERN, 1).alias("count_token"),
        pl.col("line").str.extract(RECORD_PATTERN, 2).alias("timestamp_token"),
    )
    .with_columns(
        pl.when(pl.col("count_token").str.contains(COUNT_PATTERN))
        .then(pl.col("count_token").cast(pl.Int64, strict=False))
        .alias("count"),
        pl.when(pl.col("timestamp_token").str.contains(TIMESTAMP_PATTERN))
        .then(
            pl.col("timestamp_token").str.to_datetime(
                format=TIMESTAMP_FORMAT, strict=False, time_zone="UTC"
            )
        )
        .alias("datetime"),
    )
    # str.to_datetime rolls second 60 into the next minute and accepts year 0;
    # only values that render back to the same token are kept
    .with_columns(
        pl.when(
            (pl.col("datetime").dt.strftime(TIMESTAMP_FORMAT) == pl.col("timestamp_token"))
            & (pl.col("datetime").dt.year() >= 1)
        )
        .then(pl.col("datetime"))
        .alias("datetime")
    )
    .with_columns(
        pl.col("datetime").dt.epoch(time_unit="s").alias("timestamp"),
        pl.col("datetime").dt.strftime(DAY_FORMAT).alias("day"),
    )
)

day_counter = lambda lf: lf.group_by("day", maintain_order=True).agg(
    pl.col("count").sum().alias("total")
)

# Descending on the row position reproduces "stable ascending sort, last k reversed"
get_top_k = lambda lf, k: (
    lf.with_row_index("position")
    .sort(["count", "position"], descending=[True, True])
    .head(k)
    .select("count", "timestamp")
)

run_labeler = lambda lf: (
    lf.sort("timestamp", maintain_order=True).with_columns(
        (pl.col("timestamp").diff() != BUCKET_SECONDS)
        .fill_null(True)
        .cast(pl.UInt32)
        .cum_sum()
        .alias("run")
    )
)

window_ranker = lambda lf, size: (
    run_labeler(lf)
    .with_columns(pl.col("count").rolling_sum(window_size=size).over("run").alias("total"))
    .filter(pl.col("total").is_not_null())
    .select(
        (pl.col("timestamp") - (size - 1) * BUCKET_SECONDS).alias("start"),
        (pl.col("timestamp") + BUCKET_SECONDS).alias("end"),
        pl.col("total"),
    )
    .sort(["total", "start"], maintain_order=True)
)


def validate_records(df: pl.DataFrame) -> pl.DataFrame:
    """Raises MalformedRecord for the first line that failed to parse; keeps the parsed columns."""
    invalid = df.filter(pl.col("count").is_null() | pl.col("timestamp").is_null())
    if invalid.height:
        raise MalformedRecord(invalid["line"][0])
    return df.select("count", "timestamp", "day")


@canonical_logger(event_name="report_time_execution", summarize=report_metrics)
def report_time(
    file_path: str,
    k: int = DEFAULT_TOP_K,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ctx=None,
) -> TrafficReport:
    """
    Builds the traffic report with a vectorised Polars pipeline.
    Record validation is the only eager step; every query after it runs on the
    validated frame, so a malformed line aborts before any total is computed.
    """
    if ctx:
        ctx.add_context(file_path=file_path, k=k, window_seconds=window_seconds)

    size = validate_options(k, window_seconds)

    # 1. Parse and validate (SINGLE EAGER EXECUTION)
    t0 = time.perf_counter()
    entries = validate_records(extractor(file_path).pipe(record_parser).collect())
    if ctx:
        ctx.add_step("parse_records", elapsed_ms(t0))
        ctx.add_metric("entries", entries.height)

    if k > entries.height:
        raise InsufficientData(k, entries.height)

    # 2. Totals
    t0 = time.perf_counter()
    total = int(entries.get_column("count").sum())
    daily = day_counter(entries.lazy()).collect()
    if ctx:
        ctx.add_step("aggregate_totals", elapsed_ms(t0))

    # 3. Busiest half hours
    t0 = time.perf_counter()
    top = get_top_k(entries.lazy(), k).collect()
    if ctx:
        ctx.add_step("get_top_k", elapsed_ms(t0))

    # 4. Quietest contiguous windows
    t0 = time.perf_counter()
    ranked = window_ranker(entries.lazy(), size).head(DEFAULT_LOWEST_WINDOWS).collect()
    windows = [Window(start=s, end=e, total=t) for s, e, t in ranked.iter_rows()]
    if not windows and ctx:
        error = NoEligibleWindow(window_seconds)
        ctx.register_error("NoEligibleWindow", str(error), window_seconds=window_seconds)
    if ctx:
        ctx.add_step("lowest_windows", elapsed_ms(t0))

    return TrafficReport(
        total=total,
        daily_totals=[DailyTotal(day=d, total=t) for d, t in daily.iter_rows()],
        top_entries=[Entry(count=c, timestamp=ts) for c, ts in top.iter_rows()],
        lowest_window=windows[0] if windows else None,
        lowest_windows=windows,
    )
