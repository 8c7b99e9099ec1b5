from src.benchmark import measure_time, profile_detailed, run_benchmark
from conftest import TRAFFIC_LINES


def test_measure_time():
    duration, result = measure_time(sum, [1, 2, 3])
    assert result == 6
    assert duration >= 0


def test_profile_detailed():
    result, stats = profile_detailed(sorted)([3, 1, 2])
    assert result == [1, 2, 3]
    assert "function calls" in stats


def test_run_benchmark(lines_factory, tmp_path):
    output_file = tmp_path / "results.txt"
    run_benchmark(lines_factory("data.txt", TRAFFIC_LINES), str(output_file))
    content = output_file.read_text(encoding="utf-8")
    assert "--- Running Time ---" in content
    assert "--- Running Memory ---" in content
    assert "report_time_execution" in content
    assert "Total cars counted: 398" in content
