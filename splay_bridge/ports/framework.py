from __future__ import annotations
from typing import Any, Mapping, Protocol


class CreateElement(Protocol):
    def __call__(self, type: Any, props: Mapping[str, Any], *children: Any) -> Any: ...
