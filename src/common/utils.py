import polars as pl


def _get_gcs_blob(file_path: str):
    """Auxiliary lookup of the GCS blob behind a gs:// URI."""
    from google.cloud import storage

    path_parts = file_path.replace("gs://", "").split("/")
    bucket_name = path_parts[0]
    blob_name = "/".join(path_parts[1:])
    client = storage.Client()
    bucket = client.bucket(bucket_name)
    return bucket.blob(blob_name)


def read_text(file_path: str) -> str:
    """
    Reads the raw count records from a local path or GCS (gs://).
    Missing or unreadable sources raise here, before any record is parsed.
    """
    if file_path.startswith("gs://"):
        return _get_gcs_blob(file_path).download_as_text(encoding="utf-8")

    with open(file_path, "r", encoding="utf-8") as f:
        return f.read()


def read_lines(file_path: str) -> list[str]:
    return read_text(file_path).split("\n")


def drop_trailing_empty(lines: list[str]) -> list[str]:
    """A final line break leaves one empty line behind; it is not a record."""
    if lines and not lines[-1].strip():
        return lines[:-1]
    return lines


def read_polars(file_path: str) -> pl.LazyFrame:
    """
    Loads the record lines into a one-column LazyFrame ('line').
    Parsing and validation happen in the expression tree of the time strategy.
    """
    lines = drop_trailing_empty(read_lines(file_path))
    return pl.LazyFrame({"line": lines}, schema={"line": pl.String})
