"""Class-metadata providers: HTTP service and static in-memory catalog.

Providers speak dotted class names to the outside world and hand back
:class:`ClassRecord` objects whose names are already slash-normalized.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests

from .errors import ProviderError
from .models import BaseClassesResponse, ClassRecord, normalize_name, to_external_name

logger = logging.getLogger(__name__)

DEFAULT_ROOT_OBJECT = "java.lang.Object"


def parse_base_classes(payload: Any, default_parent: str = DEFAULT_ROOT_OBJECT) -> BaseClassesResponse:
    """Parse a base-classes payload.

    Accepts a bare list of class objects or ``{"base_classes": [...],
    "parent_class": "..."}``.  Unusable entries are skipped with a warning.
    """
    items: Any = payload
    parent = default_parent
    if isinstance(payload, dict) and isinstance(payload.get("base_classes"), list):
        items = payload["base_classes"]
        if isinstance(payload.get("parent_class"), str) and payload["parent_class"]:
            parent = payload["parent_class"]

    if not isinstance(items, list):
        logger.warning("Invalid base classes data: %r", payload)
        return BaseClassesResponse(records=[], parent_class=normalize_name(parent))

    records: List[ClassRecord] = []
    for item in items:
        record = ClassRecord.from_payload(item)
        if record is None:
            logger.warning("Invalid class data: %r", item)
            continue
        records.append(record)
    return BaseClassesResponse(records=records, parent_class=normalize_name(parent))


def _parse_children(payload: Any) -> List[ClassRecord]:
    if isinstance(payload, dict):
        payload = payload.get("child_classes", [])
    if not isinstance(payload, list):
        return []
    children = [ClassRecord.from_payload(item) for item in payload]
    return [c for c in children if c is not None]


class ClassInfoProvider:
    """Base class for class-metadata sources."""

    def fetch_base_classes(self) -> BaseClassesResponse:
        raise NotImplementedError

    def fetch_class_info(self, name: str) -> Optional[ClassRecord]:
        """Return the record for *name* (internal form), or None if unknown.

        Raises:
            ProviderError: when the source cannot be reached or answers badly.
        """
        raise NotImplementedError

    def fetch_child_classes(self, name: str) -> List[ClassRecord]:
        raise NotImplementedError

    def close(self) -> None:
        pass


class HttpClassInfoProvider(ClassInfoProvider):
    """JSON-over-HTTP class-metadata service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        base_classes_path: str = "/base-classes",
        class_info_path: str = "/class-info",
        child_classes_path: str = "/child-classes",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.base_classes_path = base_classes_path
        self.class_info_path = class_info_path
        self.child_classes_path = child_classes_path
        self.session = session or requests.Session()

    def _get(self, path: str, name: str = "", allow_missing: bool = False) -> Any:
        url = f"{self.base_url}{path}"
        params = {"name": to_external_name(name)} if name else None
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            raise ProviderError(f"Timed out after {self.timeout}s fetching {url}", name) from exc
        except requests.RequestException as exc:
            raise ProviderError(f"Request to {url} failed: {exc}", name) from exc

        if allow_missing and response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise ProviderError(f"HTTP {response.status_code} from {url}", name) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"Invalid JSON from {url}", name) from exc

    def fetch_base_classes(self) -> BaseClassesResponse:
        return parse_base_classes(self._get(self.base_classes_path))

    def fetch_class_info(self, name: str) -> Optional[ClassRecord]:
        payload = self._get(self.class_info_path, name, allow_missing=True)
        if payload is None:
            return None
        record = ClassRecord.from_payload(payload)
        if record is None:
            raise ProviderError(f"Malformed class info for {to_external_name(name)}", name)
        return record

    def fetch_child_classes(self, name: str) -> List[ClassRecord]:
        return _parse_children(self._get(self.child_classes_path, name))

    def close(self) -> None:
        self.session.close()


class StaticClassInfoProvider(ClassInfoProvider):
    """Serve class metadata from an in-memory catalog.

    The catalog maps class names (dotted or slashed) to class objects in the
    same shape the HTTP service returns.  Child classes are every catalog
    entry whose ``parent_class`` names the queried class, plus anything
    listed under an explicit ``child_classes`` key.
    """

    def __init__(
        self,
        classes: Iterable[Dict[str, Any]] | Dict[str, Dict[str, Any]],
        parent_class: str = DEFAULT_ROOT_OBJECT,
    ):
        entries = classes.values() if isinstance(classes, dict) else classes
        self._payloads: Dict[str, Dict[str, Any]] = {}
        for payload in entries:
            record = ClassRecord.from_payload(payload)
            if record is not None:
                self._payloads[record.name] = payload
        self.parent_class = parent_class
        self.calls: List[tuple] = []

    @classmethod
    def from_file(cls, path: Path) -> "StaticClassInfoProvider":
        """Load a catalog JSON file: a list of classes or ``{"classes": [...]}``."""
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ProviderError(f"Cannot read class catalog {path}: {exc}") from exc
        if isinstance(payload, dict):
            return cls(payload.get("classes", []), payload.get("parent_class", DEFAULT_ROOT_OBJECT))
        return cls(payload)

    def fetch_base_classes(self) -> BaseClassesResponse:
        self.calls.append(("base_classes", ""))
        return parse_base_classes(
            {"base_classes": list(self._payloads.values()), "parent_class": self.parent_class}
        )

    def fetch_class_info(self, name: str) -> Optional[ClassRecord]:
        self.calls.append(("class_info", normalize_name(name)))
        payload = self._payloads.get(normalize_name(name))
        return ClassRecord.from_payload(payload) if payload else None

    def fetch_child_classes(self, name: str) -> List[ClassRecord]:
        self.calls.append(("child_classes", normalize_name(name)))
        target = normalize_name(name)
        children: List[ClassRecord] = []
        explicit = self._payloads.get(target, {}).get("child_classes", [])
        children.extend(_parse_children(explicit))
        for payload in self._payloads.values():
            record = ClassRecord.from_payload(payload)
            if record is not None and record.parent_class == target and record.name != target:
                children.append(record)
        return children

    def fetch_count(self, kind: str, name: str) -> int:
        """How many times ``fetch_<kind>`` was called for *name*."""
        return sum(1 for call in self.calls if call == (kind, normalize_name(name)))


def build_provider(
    url: Optional[str] = None,
    catalog: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> ClassInfoProvider:
    """Pick a provider from CLI options, falling back to the configured URL."""
    from . import config

    if catalog is not None:
        return StaticClassInfoProvider.from_file(catalog)
    from .config_manager import load_provider_config

    settings = load_provider_config()
    return HttpClassInfoProvider(
        url or config.PROVIDER_URL,
        timeout=timeout if timeout is not None else config.PROVIDER_TIMEOUT,
        base_classes_path=settings["base_classes_path"],
        class_info_path=settings["class_info_path"],
        child_classes_path=settings["child_classes_path"],
    )
