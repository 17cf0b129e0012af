from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from splay_bridge.runtime.errors import ERROR_RATE_LIMIT, ERROR_TIMEOUT, ERROR_TRANSIENT, ERROR_UPSTREAM

DEFAULT_BUFFER_SIZE = 16


@dataclass(frozen=True)
class RegistryConfig:
    namespace: Optional[str] = None
    buffer_size: int = DEFAULT_BUFFER_SIZE
    names: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if int(self.buffer_size) < 1:
            raise ValueError(f"buffer_size must be >= 1, got {self.buffer_size}")
        if self.names is not None:
            object.__setattr__(self, "names", tuple(self.names))

    @classmethod
    def coerce(cls, config: Union["RegistryConfig", Mapping[str, Any], None] = None, **overrides: Any) -> "RegistryConfig":
        if config is None:
            base = cls()
        elif isinstance(config, RegistryConfig):
            base = config
        else:
            raw = dict(config)
            # accept the camelCase key used on the wire side
            if "bufferSize" in raw:
                raw["buffer_size"] = raw.pop("bufferSize")
            base = cls(**raw)
        return replace(base, **overrides) if overrides else base

    def path_for(self, name: str) -> List[str]:
        return [self.namespace, name] if self.namespace else [name]


def _parse_backoff(raw: str) -> List[int]:
    return [int(x) for x in raw.split(",") if x.strip()]


@dataclass(frozen=True)
class BridgeSettings:
    namespace: Optional[str] = None
    buffer_size: int = DEFAULT_BUFFER_SIZE
    rpc_url: str = "http://localhost:8000"
    rpc_timeout_s: float = 15.0
    rpc_max_attempts: int = 3
    rpc_backoff_ms: List[int] = field(default_factory=lambda: [100, 250, 500])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "BridgeSettings":
        return cls(
            namespace=os.getenv("SPLAY_NAMESPACE") or None,
            buffer_size=int(os.getenv("SPLAY_BUFFER_SIZE", str(DEFAULT_BUFFER_SIZE))),
            rpc_url=os.getenv("SPLAY_RPC_URL", "http://localhost:8000"),
            rpc_timeout_s=float(os.getenv("SPLAY_RPC_TIMEOUT_S", "15")),
            rpc_max_attempts=int(os.getenv("SPLAY_RPC_MAX_ATTEMPTS", "3")),
            rpc_backoff_ms=_parse_backoff(os.getenv("SPLAY_RPC_BACKOFF_MS", "100,250,500")),
            log_level=os.getenv("SPLAY_LOG_LEVEL", "INFO"),
        )

    def registry_config(self) -> RegistryConfig:
        return RegistryConfig(namespace=self.namespace, buffer_size=self.buffer_size)

    def retry_config(self) -> Dict[str, Any]:
        return {
            "max_attempts": self.rpc_max_attempts,
            "backoff_ms": list(self.rpc_backoff_ms),
            "retry_on": [ERROR_TRANSIENT, ERROR_TIMEOUT, ERROR_RATE_LIMIT, ERROR_UPSTREAM],
        }
