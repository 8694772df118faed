"""Best-effort extraction of structured data from free-form model replies."""

import json
from typing import Any, Dict, Optional

_decoder = json.JSONDecoder()


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Return the first JSON object embedded in ``text``.

    Model replies often wrap the payload in prose or markdown fences, so each
    ``{`` is tried as a starting point until one decodes to a dict. Returns
    None when no object can be decoded.
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None
