import sys
import json
import base64

import functions_framework
import orjson
from google.cloud import storage

from src.common.config import DEFAULT_TOP_K, DEFAULT_WINDOW_SECONDS
from src.common.errors import TrafficCountError
from src.presentation import render_lines, to_payload
from src.report_memory import report_memory
from src.report_time import report_time

STRATEGIES = {
    "time": report_time,
    "memory": report_memory,
}


def _write_to_gcs(bucket_name, blob_name, data):
    """Writes the JSON report to a GCS bucket. Upload failures propagate to the entrypoint."""
    blob = storage.Client().bucket(bucket_name).blob(blob_name)
    blob.upload_from_string(data, content_type="application/json")
    print(f"[GCS] Uploaded: gs://{bucket_name}/{blob_name}")
    return f"gs://{bucket_name}/{blob_name}"


def _output_name(name):
    output_name = name.replace("input/", "output/")
    if output_name == name:
        output_name = f"output/{name.split('/')[-1]}"
    return output_name


def _error(message, status):
    return json.dumps({"status": "error", "message": message}), status


def _handle_pubsub(pubsub_message):
    """Runs the time strategy on the object named by a GCS notification and persists the result."""
    if "data" not in pubsub_message:
        return None

    data = json.loads(base64.b64decode(pubsub_message["data"]).decode("utf-8"))
    bucket = data.get("bucket")
    name = data.get("name")
    if not (bucket and name):
        return None

    file_path = f"gs://{bucket}/{name}"
    print(f"[BATCH] Processing file: {file_path}")
    report = report_time(file_path)
    output_path = _write_to_gcs(bucket, _output_name(name), orjson.dumps(to_payload(report)))

    return json.dumps(
        {
            "status": "success",
            "trigger": "pubsub",
            "input": file_path,
            "output": output_path,
        }
    ), 200


@functions_framework.http
def entrypoint(request):
    """Universal Cloud Function entrypoint (HTTP and Pub/Sub)."""
    request_json = request.get_json(silent=True)

    # Case 1: Pub/Sub event (GCS notification via Eventarc)
    if request_json and "message" in request_json:
        print("[TRIGGER] Pub/Sub event detected")
        try:
            response = _handle_pubsub(request_json["message"])
        except Exception as e:
            print(f"[FATAL ERROR] {str(e)}")
            return _error(str(e), 500)
        if response is None:
            print("[ERROR] Invalid Pub/Sub payload")
            return _error("Invalid Pub/Sub payload", 400)
        return response

    # Case 2: On-demand HTTP request
    strategy = request.args.get("strategy", "time")
    file_path = request.args.get("file")

    if not file_path:
        return _error("Missing required parameter: file", 400)

    func = STRATEGIES.get(strategy)
    if not func:
        return _error(f"Invalid strategy: {strategy}", 400)

    try:
        k = int(request.args.get("k", DEFAULT_TOP_K))
        window_seconds = int(request.args.get("window", DEFAULT_WINDOW_SECONDS))
    except ValueError:
        return _error("Parameters k and window must be integers", 400)

    try:
        report = func(file_path, k=k, window_seconds=window_seconds)
    except TrafficCountError as e:
        print(f"[HTTP ERROR] {str(e)}")
        return _error(str(e), 422)
    except ValueError as e:
        return _error(str(e), 400)
    except FileNotFoundError as e:
        return _error(str(e), 404)
    except Exception as e:
        print(f"[HTTP ERROR] {str(e)}")
        return _error(str(e), 500)

    return json.dumps(
        {
            "strategy": strategy,
            "file": file_path,
            "result": to_payload(report),
        }
    ), 200


def main(argv):
    if len(argv) < 2:
        print("Usage: python main.py <file> [time|memory]", file=sys.stderr)
        return 2

    func = STRATEGIES.get(argv[2] if len(argv) > 2 else "time")
    if not func:
        print(f"Invalid strategy: {argv[2]}", file=sys.stderr)
        return 2

    try:
        report = func(argv[1])
    except (OSError, TrafficCountError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\n".join(render_lines(report)))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
