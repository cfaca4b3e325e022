"""
Response envelope adapter.

The backend wraps collections inconsistently: a bare list, {key: [...]},
{data: [...]}, {data: {key: [...]}}, or items/results. extract_items and
extract_record are the one place those shapes are unwrapped.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

FALLBACK_KEYS = ('items', 'results')


def extract_items(payload: Any, keys: Iterable[str] = ()) -> List[Any]:
    """
    Unwrap a list from a response body.

    Args:
        payload: Decoded JSON body
        keys: Resource-specific envelope keys, tried in order

    Returns:
        The list found, or [] (with a warning) when none is found
    """
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        logger.warning(f"No list found in response of type {type(payload).__name__}")
        return []

    data = payload.get('data')
    for key in keys:
        if isinstance(payload.get(key), list):
            return payload[key]
        if isinstance(data, dict) and isinstance(data.get(key), list):
            return data[key]

    if isinstance(data, list):
        return data

    for key in FALLBACK_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key]
        if isinstance(data, dict) and isinstance(data.get(key), list):
            return data[key]

    logger.warning(f"No list found in response with keys {sorted(payload)}")
    return []


def extract_record(payload: Any, key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Unwrap a single object from a response body.

    Accepts the object itself, {key: {...}}, {data: {...}} and
    {data: {key: {...}}}. Returns None when nothing object-shaped is found.
    """
    if not isinstance(payload, dict):
        return None

    data = payload.get('data')
    if key:
        if isinstance(payload.get(key), dict):
            return payload[key]
        if isinstance(data, dict) and isinstance(data.get(key), dict):
            return data[key]
    if isinstance(data, dict):
        return data
    if data is None and 'message' in payload and len(payload) <= 2:
        # bare acknowledgement such as {"success": true, "message": "..."}
        return None
    return payload
