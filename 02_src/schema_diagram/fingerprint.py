"""Stable content fingerprints used for change detection."""

import json
import logging
from dataclasses import asdict, is_dataclass
from hashlib import sha1
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


def fingerprint(value: Any, sort_keys: bool = True) -> Optional[str]:
    """SHA-1 of the canonical JSON form, or ``None`` when it cannot be serialized.

    With ``sort_keys=False`` mapping order is part of the fingerprint.
    ``None`` must be read as "changed" by callers.
    """
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    elif isinstance(value, Mapping) and not isinstance(value, dict):
        value = dict(value)
    try:
        encoded = json.dumps(value, sort_keys=sort_keys, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as error:
        logger.warning("Could not fingerprint %s: %s", type(value).__name__, error)
        return None
    return sha1(encoded.encode("utf-8")).hexdigest()


def fingerprints_match(left: Optional[str], right: Optional[str]) -> bool:
    return left is not None and right is not None and left == right
