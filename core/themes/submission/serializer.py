"""JSON serialization for submission core."""

import json
from datetime import datetime, date
from enum import Enum
from typing import Any

from dataclasses import asdict, is_dataclass


class DomainJSONEncoder(json.JSONEncoder):
    """Encodes domain objects in this package for serialization."""

    def default(self, obj: object) -> Any:
        """Look for domain objects, and use their dict-coercion methods."""
        if is_dataclass(obj) and not isinstance(obj, type):
            data = asdict(obj)
            data.pop('before', None)
            data.pop('after', None)
        elif isinstance(obj, Enum):
            data = obj.value
        elif isinstance(obj, (datetime, date)):
            data = obj.isoformat()
        elif isinstance(obj, (set, frozenset)):
            data = sorted(obj)
        else:
            data = super(DomainJSONEncoder, self).default(obj)
        return data


def dumps(obj: Any) -> str:
    """Generate JSON from a Python object."""
    return json.dumps(obj, cls=DomainJSONEncoder)


def loads(data: str) -> Any:
    """
    Load a Python object from JSON.

    Dates remain ISO 8601 strings; the domain classes parse them on
    construction.
    """
    return json.loads(data)
