from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class ResultKind(str, Enum):
    STRUCTURED = "structured"
    FALLBACK = "fallback"


class ModelResult(BaseModel):
    """
    Outcome of interpreting a model reply.

    `structured` means the reply had the expected shape and `value` holds the
    parsed content. `fallback` means it did not, and `value` holds whatever
    stand-in the caller chose (usually the raw text).
    """
    kind: ResultKind
    value: Any = None
    raw: str = ""

    @classmethod
    def structured(cls, value: Any, raw: str = "") -> "ModelResult":
        return cls(kind=ResultKind.STRUCTURED, value=value, raw=raw)

    @classmethod
    def fallback(cls, value: Any, raw: str = "") -> "ModelResult":
        return cls(kind=ResultKind.FALLBACK, value=value, raw=raw)

    @property
    def is_structured(self) -> bool:
        return self.kind == ResultKind.STRUCTURED

    @property
    def is_fallback(self) -> bool:
        return self.kind == ResultKind.FALLBACK


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_SPANS = {list: re.compile(r"\[[\s\S]*\]"), dict: re.compile(r"\{[\s\S]*\}")}


def parse_json_reply(text: Optional[str], expected: type) -> Optional[Any]:
    """
    Parse a model reply that should contain a JSON `expected` (list or dict).

    Tries the whole reply first (minus a markdown code fence), then the widest
    bracketed span. Returns None when neither yields a value of that type.
    """
    if not text:
        return None
    candidates = [_FENCE_RE.sub("", text.strip())]
    match = _SPANS[expected].search(text)
    if match:
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(value, expected):
            return value
    return None
