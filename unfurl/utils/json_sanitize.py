import math
from typing import Any, Mapping


def json_sanitize(x: Any) -> Any:
    """
    Make an unfurl result strictly JSON-serializable.
    - NaN (unparseable numeric fields) -> None
    - tuples -> lists
    - mappings/sequences -> recursively sanitized
    """
    if isinstance(x, float) and math.isnan(x):
        return None

    if isinstance(x, (list, tuple)):
        return [json_sanitize(v) for v in x]

    if isinstance(x, Mapping):
        return {str(k): json_sanitize(v) for k, v in x.items()}

    return x
