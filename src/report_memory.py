import time
from src.common.config import DEFAULT_LOWEST_WINDOWS, DEFAULT_TOP_K, DEFAULT_WINDOW_SECONDS
from src.common.errors import NoEligibleWindow
from src.common.logger import canonical_logger
from src.common.utils import read_lines
from src.aggregation import daily_totals, unique_days
from src.dataset import Dataset, TrafficReport, report_metrics
from src.ranking import lowest_windows, top_k, validate_options


@canonical_logger(event_name="report_memory_execution", summarize=report_metrics)
def report_memory(
    file_path: str,
    k: int = DEFAULT_TOP_K,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ctx=None,
) -> TrafficReport:
    """
    Builds the traffic report with the in-memory Dataset model.
    A malformed line aborts the run; a missing contiguous window does not.
    """
    if ctx:
        ctx.add_context(file_path=file_path, k=k, window_seconds=window_seconds)

    validate_options(k, window_seconds)

    # 1. Ingest and parse every record
    t0 = time.perf_counter()
    dataset = Dataset.from_lines(read_lines(file_path))
    if ctx:
        ctx.add_step("build_dataset", round((time.perf_counter() - t0) * 1000, 4))
        ctx.add_metric("entries", len(dataset))

    # 2. Totals
    t0 = time.perf_counter()
    total = dataset.total_count()
    totals = daily_totals(dataset, unique_days(dataset))
    if ctx:
        ctx.add_step("aggregate_totals", round((time.perf_counter() - t0) * 1000, 4))

    # 3. Busiest half hours
    t0 = time.perf_counter()
    top_entries = top_k(dataset, k)
    if ctx:
        ctx.add_step("get_top_k", round((time.perf_counter() - t0) * 1000, 4))

    # 4. Quietest contiguous windows
    t0 = time.perf_counter()
    try:
        windows = lowest_windows(dataset, window_seconds, DEFAULT_LOWEST_WINDOWS)
    except NoEligibleWindow as e:
        windows = []
        if ctx:
            ctx.register_error("NoEligibleWindow", str(e), window_seconds=window_seconds)
    if ctx:
        ctx.add_step("lowest_windows", round((time.perf_counter() - t0) * 1000, 4))

    return TrafficReport(
        total=total,
        daily_totals=totals,
        top_entries=top_entries,
        lowest_window=windows[0] if windows else None,
        lowest_windows=windows,
    )
