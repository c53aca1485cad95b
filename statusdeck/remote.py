"""
remote.py — Client for a remote slide-rendering service.

POSTs a RecordSet as {"tableData": [...]} (camelCase rows) to a service
such as this project's own server.py (/api/generate-ppt) and saves the
returned deck. Transport failures are retried with exponential backoff;
a non-2xx reply after the last attempt raises RemoteRenderError.
"""

import logging
import time
from pathlib import Path

import requests

from statusdeck.errors import RemoteRenderError
from statusdeck.records import RecordSet, records_to_dicts

logger = logging.getLogger(__name__)


def request_remote_deck(
    records: RecordSet,
    url: str,
    output_path: Path,
    timeout: float = 60,
    max_attempts: int = 3,
) -> Path:
    """Have a remote service render the deck and write it to disk.

    Args:
        records: Non-empty RecordSet.
        url: Full endpoint URL.
        output_path: Where to save the returned file.
        timeout: Per-request timeout in seconds.
        max_attempts: Attempts before giving up.

    Returns:
        output_path, once written.

    Raises:
        ValueError: If records is empty.
        RemoteRenderError: If the service never returns a 2xx response.
    """
    if not records:
        raise ValueError("No data to send to the slide service")

    payload = {"tableData": records_to_dicts(records)}
    last_error = "no attempt made"

    for attempt in range(1, max_attempts + 1):
        try:
            resp = requests.post(url, json=payload, timeout=timeout)
            if resp.ok:
                output_path = Path(output_path)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_bytes(resp.content)
                logger.info("Remote deck saved to %s (%d bytes)", output_path, len(resp.content))
                return output_path
            last_error = f"HTTP {resp.status_code}: {resp.text[:200]}"
            logger.warning("Slide service returned %s (attempt %d)", resp.status_code, attempt)
            if 400 <= resp.status_code < 500:
                break
        except requests.RequestException as exc:
            last_error = str(exc)
            logger.warning("Slide service request failed (attempt %d): %s", attempt, exc)
        if attempt < max_attempts:
            time.sleep(2 ** attempt)

    raise RemoteRenderError(f"Slide service at {url} failed: {last_error}")
