import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

# Largest integer a JSON client can hold in a double without losing precision
MAX_SAFE_INTEGER = 2 ** 53 - 1


def make_json_serializable(obj: Any) -> Any:
    """
    Convert row values into transport-safe JSON values.

    Integers outside the safe range become decimal strings, Decimals keep
    their exact digits as strings, dates and times become ISO-8601.
    """
    if isinstance(obj, bool) or obj is None:
        return obj
    if isinstance(obj, int):
        if abs(obj) > MAX_SAFE_INTEGER:
            return str(obj)
        return obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, dict):
        return {str(k): make_json_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [make_json_serializable(i) for i in obj]
    return obj


def safe_stringify(obj: Any) -> str:
    """JSON-encode query results without losing large-integer precision"""
    return json.dumps(make_json_serializable(obj))
