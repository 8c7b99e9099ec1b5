import re
from datetime import datetime, timezone
from src.common.config import DAY_FORMAT, TIMESTAMP_FORMAT, TIMESTAMP_PATTERN
from src.common.errors import MalformedTimestamp

timestamp_regex = re.compile(TIMESTAMP_PATTERN)


def parse_timestamp(text: str) -> int:
    """
    Parses a 'YYYY-MM-DDTHH:MM:SS' wall-clock string (implicitly UTC) into epoch seconds.
    strptime alone tolerates single-digit fields, so the grammar is checked first.
    """
    if not timestamp_regex.fullmatch(text):
        raise MalformedTimestamp(text)
    try:
        parsed = datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as e:
        raise MalformedTimestamp(text) from e
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def _utc(epoch_seconds: int) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)


def format_timestamp(epoch_seconds: int) -> str:
    """Renders epoch seconds back into the record grammar, without an offset suffix."""
    return _utc(epoch_seconds).strftime(TIMESTAMP_FORMAT)


def day_of(epoch_seconds: int) -> str:
    return _utc(epoch_seconds).strftime(DAY_FORMAT)
