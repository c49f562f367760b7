"""
Identity index and path matching for function instances
"""

import logging
import threading
from typing import Dict, List, Optional, Iterable

from ..ir.paths import has_generic_delimiter, strip_generic_args
from .models import FunctionInstance

logger = logging.getLogger(__name__)


class PathMatcher:
    """Matches path queries against instance display paths.

    A query without angle brackets matches any instantiation: generic
    segments are stripped from the candidate before the substring test, so
    `Container::get` matches `Container::<T>::get` for every `T`. A query
    that spells out generic arguments is compared against the instantiated
    path and the bare definition path, so it only hits the instantiation it
    names.
    """

    def __init__(self, query: str):
        self.query = query
        self.generic_aware = has_generic_delimiter(query)

    def matches(self, instance: FunctionInstance) -> bool:
        full_path = instance.display_path
        base_path = instance.base_path

        if self.generic_aware:
            return self.query in full_path or self.query in base_path

        return (self.query in strip_generic_args(full_path) or
                self.query in strip_generic_args(base_path))


class InstanceIndex:
    """Bidirectional identity/path index over collected instances"""

    def __init__(self):
        self._by_identity: Dict[str, FunctionInstance] = {}
        self._by_base_path: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._by_identity)

    def __contains__(self, identity: str) -> bool:
        return identity in self._by_identity

    def register(self, instance: FunctionInstance) -> FunctionInstance:
        """Register an instance, returning the already known one on repeat"""
        with self._lock:
            existing = self._by_identity.get(instance.identity)
            if existing is not None:
                return existing

            self._by_identity[instance.identity] = instance
            self._by_base_path.setdefault(instance.base_path, []).append(instance.identity)
            return instance

    def get(self, identity: str) -> Optional[FunctionInstance]:
        """Exact lookup by structural identity"""
        return self._by_identity.get(identity)

    def instances(self) -> List[FunctionInstance]:
        """All instances in registration order"""
        return list(self._by_identity.values())

    def by_base_path(self, base_path: str) -> List[FunctionInstance]:
        """Every instantiation of one definition"""
        return [self._by_identity[identity] for identity in self._by_base_path.get(base_path, [])]

    def lookup_hash(self, identity: str) -> List[FunctionInstance]:
        """Exact identity lookup, returned as a (possibly empty) match list"""
        instance = self.get(identity.strip().lower())
        return [instance] if instance else []

    def match_path(self, query: str, candidates: Optional[Iterable[str]] = None) -> List[FunctionInstance]:
        """Find instances whose path matches a query, in stable order"""
        matcher = PathMatcher(query)
        pool = self._by_identity.values() if candidates is None else (
            self._by_identity[identity] for identity in candidates if identity in self._by_identity
        )

        matched = [instance for instance in pool if matcher.matches(instance)]
        matched.sort(key=lambda instance: (instance.display_path, instance.identity))

        if len(matched) > 1:
            logger.info("Query '%s' matched %d functions", query, len(matched))
        for instance in matched:
            logger.debug("Matched function: %s [%s]", instance.display_path, instance.identity)

        return matched
