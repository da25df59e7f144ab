# wms_grading/services/extraction.py
import math
import re
from typing import Any, Mapping, Optional, Union

from ..schemas.sampling import ExtractionRules

# first signed decimal in a string, e.g. "45 mg/m3" -> "45"; a lone comma
# between digits is a decimal comma ("1,5" -> 1.5)
_NUMBER_RE = re.compile(r"[-+]?(?:\d+,\d+(?![\d.,])|\d*\.?\d+)(?:[eE][-+]?\d+)?")

Value = Union[float, int, str]


def parse_numeric_value(value: Any) -> Optional[Union[float, int]]:
    """Number from a raw attribute, ignoring units and symbols around it; None if there is none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else value
    if isinstance(value, str):
        m = _NUMBER_RE.search(value)
        if m:
            parsed = float(m.group(0).replace(",", "."))
            if not math.isnan(parsed):
                return parsed
    return None


def _key_has(key: str, fragments) -> bool:
    k = key.lower()
    return any(f in k for f in fragments)


def extract_value(attributes: Optional[Mapping[str, Any]], rules: Optional[ExtractionRules] = None) -> Optional[Value]:
    """
    Pick the one value that best represents a GetFeatureInfo attribute map.

    1. known value-like field names, in priority order (substring match on the key);
    2. any other numeric attribute, skipping id/name-like keys;
    3. the first non-empty string that is not under an identifier key;
    4. None.
    """
    if not attributes:
        return None
    rules = rules or ExtractionRules()

    for field in rules.numeric_field_priority:
        for key, raw in attributes.items():
            if field in key.lower():
                num = parse_numeric_value(raw)
                if num is not None:
                    return num

    for key, raw in attributes.items():
        if _key_has(key, rules.excluded_key_fragments):
            continue
        num = parse_numeric_value(raw)
        if num is not None:
            return num

    for key, raw in attributes.items():
        if _key_has(key, rules.identifier_key_fragments):
            continue
        if isinstance(raw, str) and raw.strip():
            return raw

    return None
