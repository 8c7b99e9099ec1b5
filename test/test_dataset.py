import pytest
from src.common.errors import MalformedRecord, MalformedTimestamp
from src.common.timestamps import parse_timestamp
from src.dataset import Dataset, Entry, parse_record


def test_parse_record():
    assert parse_record("46 2021-12-01T07:30:00") == Entry(
        count=46, timestamp=parse_timestamp("2021-12-01T07:30:00")
    )


def test_parse_record_tolerates_surrounding_whitespace():
    assert parse_record("  5\t2021-12-01T05:00:00\r") == Entry(
        count=5, timestamp=parse_timestamp("2021-12-01T05:00:00")
    )


@pytest.mark.parametrize(
    "line",
    [
        "abc 2021-12-01T00:00:00",
        "-5 2021-12-01T00:00:00",
        "+5 2021-12-01T00:00:00",
        "5.0 2021-12-01T00:00:00",
        "5",
        "5 2021-12-01T00:00:00 extra",
        "2021-12-01T00:00:00 5",
        "99999999999999999999 2021-12-01T00:00:00",
        "5 2021-12-01T00:00:60",
        "",
    ],
)
def test_parse_record_rejects_malformed(line):
    with pytest.raises(MalformedRecord) as exc:
        parse_record(line)
    assert exc.value.line == line


def test_parse_record_chains_timestamp_error():
    with pytest.raises(MalformedRecord) as exc:
        parse_record("5 2021-12-01T05:00:00Z")
    assert isinstance(exc.value.__cause__, MalformedTimestamp)


def test_parse_record_accepts_largest_int64_count():
    assert parse_record(f"{2**63 - 1} 2021-12-01T00:00:00").count == 2**63 - 1


def test_from_lines(traffic_lines):
    dataset = Dataset.from_lines(traffic_lines + [""])
    assert len(dataset) == 24
    assert dataset.total_count() == 398
    assert dataset.entries[0] == Entry(count=5, timestamp=parse_timestamp("2021-12-01T05:00:00"))


def test_from_lines_aborts_on_first_malformed_line(traffic_lines):
    lines = traffic_lines[:3] + ["abc 2021-12-01T00:00:00"] + traffic_lines[3:]
    with pytest.raises(MalformedRecord) as exc:
        Dataset.from_lines(lines)
    assert exc.value.line == "abc 2021-12-01T00:00:00"


def test_from_lines_rejects_empty_line_in_the_middle(traffic_lines):
    with pytest.raises(MalformedRecord):
        Dataset.from_lines(traffic_lines[:2] + [""] + traffic_lines[2:])


def test_empty_dataset():
    dataset = Dataset.from_lines([""])
    assert len(dataset) == 0
    assert dataset.total_count() == 0


def test_duplicates_are_kept():
    dataset = Dataset.from_lines(["3 2021-12-01T05:00:00", "3 2021-12-01T05:00:00"])
    assert len(dataset) == 2
    assert dataset.total_count() == 6


def test_sort_by_count_is_stable():
    dataset = Dataset.from_lines(
        [
            "7 2021-12-01T06:00:00",
            "5 2021-12-01T05:00:00",
            "7 2021-12-01T05:30:00",
            "1 2021-12-01T06:30:00",
        ]
    )
    dataset.sort_by_count()
    assert [(e.count, e.timestamp) for e in dataset] == [
        (1, parse_timestamp("2021-12-01T06:30:00")),
        (5, parse_timestamp("2021-12-01T05:00:00")),
        (7, parse_timestamp("2021-12-01T06:00:00")),
        (7, parse_timestamp("2021-12-01T05:30:00")),
    ]


def test_sort_by_timestamp_is_stable():
    dataset = Dataset.from_lines(
        [
            "2 2021-12-01T06:00:00",
            "9 2021-12-01T05:00:00",
            "4 2021-12-01T06:00:00",
        ]
    )
    dataset.sort_by_timestamp()
    assert [e.count for e in dataset] == [9, 2, 4]


def test_entries_are_immutable():
    entry = Entry(count=1, timestamp=0)
    with pytest.raises(AttributeError):
        entry.count = 2
