class TrafficCountError(Exception):
    """Base class for every failure raised while building or querying a dataset."""


class MalformedTimestamp(TrafficCountError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Malformed timestamp: {text!r}")


class MalformedRecord(TrafficCountError):
    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Malformed record: {line!r}")


class InsufficientData(TrafficCountError):
    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Requested {requested} entries but the dataset only has {available}"
        )


class NoEligibleWindow(TrafficCountError):
    def __init__(self, window_seconds: int):
        self.window_seconds = window_seconds
        super().__init__(
            f"No contiguous run spans a window of {window_seconds} seconds"
        )
