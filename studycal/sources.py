"""
Loading raw source documents (files or URLs).

This module only downloads / reads bytes. Turning them into events is the
job of ics_parser and adapters.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import requests

from studycal.errors import FetchError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://", "webcal://"))


def _get(url: str, timeout: int) -> requests.Response:
    # webcal:// is just https with a calendar hint
    if url.startswith("webcal://"):
        url = "https://" + url[len("webcal://"):]
    logger.info("Fetching %s", url)
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch {url}: {exc}") from exc
    return resp


def fetch_feed_text(source: str, timeout: int = DEFAULT_TIMEOUT) -> str:
    """
    Return the text of an ICS feed given as URL or local path.
    """
    if _is_url(source):
        return _get(source, timeout).text
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise FetchError(f"Failed to read {source}: {exc}") from exc


def fetch_json_records(source: str, timeout: int = DEFAULT_TIMEOUT) -> List[Dict[str, Any]]:
    """
    Load a JSON list of records (proxy events, calendar API items, forms).

    A Calendar API response object {"items": [...]} is accepted as well.
    """
    try:
        if _is_url(source):
            data = _get(source, timeout).json()
        else:
            data = json.loads(Path(source).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise FetchError(f"Failed to load JSON from {source}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise FetchError(f"Expected a list of records in {source}")
    return [r for r in data if isinstance(r, dict)]
