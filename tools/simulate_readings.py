import argparse
import json

import requests

from vitalflow.logger import get_logger

logger = get_logger(__name__)


def run_simulation(file_path: str, base_url: str, with_extras: bool = False):
    """
    Reads sample blood pressure readings from a file and posts them to the
    analysis endpoint. Optionally also hits the exercise and tip endpoints.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            readings = json.load(f)
    except FileNotFoundError:
        logger.error(f"Error: The file '{file_path}' was not found.")
        return
    except json.JSONDecodeError:
        logger.error(f"Error: Could not decode JSON from '{file_path}'.")
        return

    logger.info("--- Starting simulation ---")
    logger.info(f"Target server: {base_url}")

    calls = [("POST", "/api/bp-analysis", {"readings": readings})]
    if with_extras:
        calls.append(("POST", "/api/exercise", {"context": "程序员"}))
        calls.append(("GET", "/api/health-tip", None))

    for method, path, body in calls:
        try:
            logger.info(f"{method} {path}")
            response = requests.request(method, f"{base_url}{path}", json=body, timeout=60)
            response.raise_for_status()
            logger.info(f"-> Server response: {response.status_code} - {response.json()}")
        except requests.exceptions.RequestException as e:
            logger.error(f"!! Request to {path} failed: {e}")

    logger.info("--- Simulation finished ---")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Send sample readings to a running VitalFlow backend.")
    parser.add_argument("--file", default="tools/sample_bp_readings.json", help="JSON list of readings.")
    parser.add_argument("--url", default="http://127.0.0.1:4000", help="Base URL of the backend.")
    parser.add_argument("--all", action="store_true", help="Also request an exercise and a health tip.")
    args = parser.parse_args()

    run_simulation(args.file, args.url, with_extras=args.all)
