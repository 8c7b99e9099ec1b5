import pytest

TRAFFIC_LINES = [
    "5 2021-12-01T05:00:00",
    "12 2021-12-01T05:30:00",
    "14 2021-12-01T06:00:00",
    "15 2021-12-01T06:30:00",
    "25 2021-12-01T07:00:00",
    "46 2021-12-01T07:30:00",
    "42 2021-12-01T08:00:00",
    "9 2021-12-01T15:00:00",
    "11 2021-12-01T15:30:00",
    "0 2021-12-01T23:30:00",
    "18 2021-12-05T09:30:00",
    "15 2021-12-05T10:30:00",
    "7 2021-12-05T11:30:00",
    "6 2021-12-05T12:30:00",
    "9 2021-12-05T13:30:00",
    "11 2021-12-05T14:30:00",
    "15 2021-12-05T15:30:00",
    "33 2021-12-08T18:00:00",
    "28 2021-12-08T19:00:00",
    "25 2021-12-08T20:00:00",
    "21 2021-12-08T21:00:00",
    "16 2021-12-08T22:00:00",
    "11 2021-12-08T23:00:00",
    "4 2021-12-09T00:00:00",
]


@pytest.fixture
def traffic_lines():
    return list(TRAFFIC_LINES)


@pytest.fixture
def lines_factory(tmp_path):
    def _create(filename, lines, trailing_newline=True):
        p = tmp_path / filename
        content = "\n".join(lines)
        if lines and trailing_newline:
            content += "\n"
        p.write_text(content, encoding="utf-8")
        return str(p)

    return _create
