from __future__ import annotations
import json
from typing import Any


def to_json(data: Any) -> str:
    """Serialise report data; objects exposing ``to_dict`` are expanded."""

    def default(obj: Any) -> Any:
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        return str(obj)

    return json.dumps(data, indent=2, default=default)
