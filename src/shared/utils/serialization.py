"""
Compact JSON helpers for queue envelopes.

Decimals are written as strings so amounts keep their exact value.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class SafeEncoder(json.JSONEncoder):
    def default(self, o: Any):
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


def dumps(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), cls=SafeEncoder)


def loads(s: str | bytes) -> Any:
    return json.loads(s)
