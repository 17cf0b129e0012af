"""Remote component descriptors: resolve over RPC, inspect, hydrate locally."""
from splay_bridge._version import __version__
from splay_bridge.adapters.hydrator_framework import FrameworkHydrator, create_framework_hydrator
from splay_bridge.adapters.hydrator_generic import Hydrator, NodeKind, create_hydrator
from splay_bridge.adapters.registry_rpc import (
    ClientRegistry,
    DualRegistry,
    StreamingRegistry,
    create_client_registry,
    create_dual_registry,
    create_streaming_registry,
)
from splay_bridge.descriptor import FRAGMENT_TYPE, NULL_TYPE, Descriptor, element, fragment, is_sentinel, null
from splay_bridge.flow import Bridge
from splay_bridge.runtime.codec import from_wire, parse, serialize, to_wire
from splay_bridge.runtime.config import BridgeSettings, RegistryConfig
from splay_bridge.runtime.errors import (
    BridgeError,
    ComponentNotRegistered,
    FormatError,
    ProcedureNotFound,
    ResourceInvariantViolation,
    TransportError,
    UnknownComponentError,
)
from splay_bridge.runtime.streams import debounce_stream, merge_streams, throttle_stream
from splay_bridge.runtime.tree import ValidationResult, compact, find, get_used_types, transform, validate, walk

__all__ = [
    "__version__",
    "Bridge",
    "BridgeError",
    "BridgeSettings",
    "ClientRegistry",
    "ComponentNotRegistered",
    "Descriptor",
    "DualRegistry",
    "FRAGMENT_TYPE",
    "FormatError",
    "FrameworkHydrator",
    "Hydrator",
    "NULL_TYPE",
    "NodeKind",
    "ProcedureNotFound",
    "RegistryConfig",
    "ResourceInvariantViolation",
    "StreamingRegistry",
    "TransportError",
    "UnknownComponentError",
    "ValidationResult",
    "compact",
    "create_client_registry",
    "create_dual_registry",
    "create_framework_hydrator",
    "create_hydrator",
    "create_streaming_registry",
    "debounce_stream",
    "element",
    "find",
    "fragment",
    "from_wire",
    "get_used_types",
    "is_sentinel",
    "merge_streams",
    "null",
    "parse",
    "serialize",
    "throttle_stream",
    "to_wire",
    "transform",
    "validate",
    "walk",
]
