"""Core data models shared by the graph engine, crawler and presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

NODE_TYPES = ("module", "service", "repository", "class", "provider")
SCOPES = ("singleton", "prototype", "module")
EDGE_TYPES = ("extends", "depends", "provides", "injects")

# Older exports spell the injection relationship without the trailing "s".
EDGE_TYPE_ALIASES = {"inject": "injects"}

EdgeKey = Tuple[str, str, str]


def normalize_name(name: str) -> str:
    """Convert an external dotted class name into the internal slash form.

    Examples:
        >>> normalize_name("com.example.Foo")
        'com/example/Foo'
    """
    return name.replace(".", "/")


def to_external_name(node_id: str) -> str:
    """Convert an internal slash-normalized id back into the dotted form."""
    return node_id.replace("/", ".")


def resolve_node_ref(ref: Any) -> str:
    """Resolve an edge endpoint given as an id string or a mapping with ``id``."""
    if isinstance(ref, str):
        return ref
    if isinstance(ref, dict) and isinstance(ref.get("id"), str):
        return ref["id"]
    node_id = getattr(ref, "node_id", None)
    if isinstance(node_id, str):
        return node_id
    raise ValueError(f"Unresolvable node reference: {ref!r}")


@dataclass
class Node:
    node_id: str
    node_type: str = "class"
    scope: str = "module"
    is_provider: bool = False
    full_name: str = ""

    def __post_init__(self) -> None:
        if not self.full_name:
            self.full_name = self.node_id
        if self.node_type not in NODE_TYPES:
            self.node_type = "provider" if self.is_provider else "class"
        if self.scope not in SCOPES:
            self.scope = "module"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.node_id,
            "type": self.node_type,
            "scope": self.scope,
            "isProvider": self.is_provider,
            "fullName": self.full_name,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Node":
        is_provider = bool(payload.get("isProvider", payload.get("is_provider", False)))
        return cls(
            node_id=payload["id"],
            node_type=payload.get("type") or ("provider" if is_provider else "class"),
            scope=payload.get("scope") or "module",
            is_provider=is_provider,
            full_name=payload.get("fullName") or payload.get("full_name") or "",
        )


@dataclass(frozen=True)
class Edge:
    src: str
    dst: str
    edge_type: str

    def __post_init__(self) -> None:
        edge_type = EDGE_TYPE_ALIASES.get(self.edge_type, self.edge_type)
        if edge_type not in EDGE_TYPES:
            raise ValueError(f"Unknown edge type: {self.edge_type!r}")
        object.__setattr__(self, "edge_type", edge_type)

    @property
    def key(self) -> EdgeKey:
        return (self.src, self.edge_type, self.dst)

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.src, "target": self.dst, "type": self.edge_type}


@dataclass
class ClassRef:
    name: str
    is_provider: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ClassRef"]:
        if not isinstance(payload, dict):
            return None
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            return None
        return cls(name=normalize_name(name), is_provider=bool(payload.get("is_provider", False)))


@dataclass
class ClassRecord:
    """Class metadata as reported by a :class:`ClassInfoProvider`.

    Names are already slash-normalized; providers convert at the boundary.
    """

    name: str
    is_provider: bool = False
    parent_class: Optional[str] = None
    parameters: List[ClassRef] = field(default_factory=list)
    components: List[ClassRef] = field(default_factory=list)
    injections: List[ClassRef] = field(default_factory=list)
    scope: str = "module"
    provider_class: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ClassRecord"]:
        """Build a record from a snake_case JSON object; ``None`` if unusable."""
        if not isinstance(payload, dict):
            return None
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            return None

        def _refs(key: str) -> List[ClassRef]:
            items = payload.get(key) or []
            if not isinstance(items, list):
                return []
            refs = [ClassRef.from_payload(item) for item in items]
            return [r for r in refs if r is not None]

        parent = payload.get("parent_class")
        provider = payload.get("provider_class")
        return cls(
            name=normalize_name(name),
            is_provider=bool(payload.get("is_provider", False)),
            parent_class=normalize_name(parent) if isinstance(parent, str) and parent else None,
            parameters=_refs("parameters"),
            components=_refs("components"),
            injections=_refs("injections"),
            scope=payload.get("scope") or "module",
            provider_class=normalize_name(provider) if isinstance(provider, str) and provider else None,
        )

    def to_node(self) -> Node:
        return Node(
            node_id=self.name,
            node_type="provider" if self.is_provider else "class",
            scope=self.scope,
            is_provider=self.is_provider,
        )


@dataclass
class BaseClassesResponse:
    records: List[ClassRecord]
    parent_class: str = "java/lang/Object"


@dataclass
class Statistics:
    total_modules: int = 0
    total_dependencies: int = 0
    circular_deps: int = 0
    max_depth: int = 0
    avg_deps: float = 0.0


@dataclass
class Issue:
    severity: str
    title: str
    description: str
    node_ids: List[str] = field(default_factory=list)
