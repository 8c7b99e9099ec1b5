import msgspec

from src.common.timestamps import format_timestamp
from src.dataset import TrafficReport, Window


def _window_payload(w: Window) -> dict:
    return {"start": format_timestamp(w.start), "end": format_timestamp(w.end), "total": w.total}


def to_payload(report: TrafficReport) -> dict:
    """Converts a report into JSON-ready builtins, rendering every instant in the record grammar."""
    payload = msgspec.to_builtins(report)
    payload["top_entries"] = [
        {"timestamp": format_timestamp(e.timestamp), "count": e.count}
        for e in report.top_entries
    ]
    if report.lowest_window is not None:
        payload["lowest_window"] = _window_payload(report.lowest_window)
    payload["lowest_windows"] = [_window_payload(w) for w in report.lowest_windows]
    return payload


def render_lines(report: TrafficReport) -> list[str]:
    lines = [f"Total cars counted: {report.total}", "", "Totals by day:"]
    lines += [f"{d.day} {d.total}" for d in report.daily_totals]

    lines += ["", "Top half hours with the most cars:"]
    lines += [f"{format_timestamp(e.timestamp)} {e.count}" for e in report.top_entries]

    lines += ["", "Contiguous periods with the fewest cars:"]
    if not report.lowest_windows:
        lines.append("No contiguous period long enough was found")
    lines += [
        f"{format_timestamp(w.start)} to {format_timestamp(w.end)} {w.total}"
        for w in report.lowest_windows
    ]
    return lines
