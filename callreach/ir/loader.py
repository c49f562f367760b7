"""
IR provider interface and the document-backed implementation
"""

import hashlib
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..errors import IRLoadError
from .models import EntryPoint, FunctionDef, ImplDef, IRProgram

logger = logging.getLogger(__name__)


class IRProvider(ABC):
    """Read-only access to the front-end's view of a compilation unit"""

    @property
    @abstractmethod
    def crate_name(self) -> str:
        """Crate under analysis"""

    @abstractmethod
    def entry_points(self) -> List[EntryPoint]:
        """Entry points declared by the front-end"""

    @abstractmethod
    def functions(self) -> List[FunctionDef]:
        """All function definitions, in declaration order"""

    @abstractmethod
    def function(self, path: str) -> Optional[FunctionDef]:
        """Definition for an exact definition path"""

    @abstractmethod
    def implementations(self, interface: str, method: str) -> List[ImplDef]:
        """Every known implementation of an interface method"""

    @abstractmethod
    def crate_version(self, crate: str) -> str:
        """Version string for a crate"""

    def crate_of(self, function: FunctionDef) -> str:
        """Owning crate of a definition"""
        return function.crate or self.crate_name


class DocumentIRProvider(IRProvider):
    """IR provider backed by an in-memory IR document"""

    def __init__(self, program: IRProgram, source: str = "<memory>"):
        self.program = program
        self.source = source
        self._functions: Dict[str, FunctionDef] = {}
        self._impls: Dict[Tuple[str, str], List[ImplDef]] = {}

        for function in program.functions:
            if function.path in self._functions:
                logger.warning("Duplicate definition of %s in %s, keeping the first", function.path, source)
                continue
            self._functions[function.path] = function

        for impl in program.implementations:
            self._impls.setdefault((impl.interface, impl.method), []).append(impl)

    @property
    def crate_name(self) -> str:
        return self.program.crate

    def entry_points(self) -> List[EntryPoint]:
        return list(self.program.entry_points)

    def functions(self) -> List[FunctionDef]:
        return list(self._functions.values())

    def function(self, path: str) -> Optional[FunctionDef]:
        return self._functions.get(path)

    def implementations(self, interface: str, method: str) -> List[ImplDef]:
        return list(self._impls.get((interface, method), []))

    def crate_version(self, crate: str) -> str:
        """Resolve a crate version.

        Uses the document's crate table first, then a `name-x.y.z` suffix in
        the crate name, and finally a pseudo version derived from the crate
        name so that unknown crates still get a stable label.
        """
        if crate in self.program.crates:
            return self.program.crates[crate]

        if '-' in crate:
            candidate = crate.rsplit('-', 1)[1]
            if candidate[:1].isdigit():
                return candidate

        crate_hash = hashlib.blake2b(crate.encode('utf-8'), digest_size=8).hexdigest()
        return f"0.0.0-{crate_hash[:8]}"


class IRLoader:
    """Loads IR documents from YAML or JSON with a per-file cache"""

    def __init__(self):
        self._cache: Dict[str, DocumentIRProvider] = {}

    def load_file(self, file_path: str) -> DocumentIRProvider:
        """Load an IR document from disk"""
        path = Path(file_path)
        if not path.exists():
            raise IRLoadError(file_path, "file not found")

        # Check cache first
        cache_key = f"{file_path}:{path.stat().st_mtime}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise IRLoadError(file_path, str(e)) from e

        provider = self.load_data(data, source=file_path)
        self._cache[cache_key] = provider
        return provider

    def load_string(self, text: str, source: str = "<string>") -> DocumentIRProvider:
        """Load an IR document from YAML (or JSON) text"""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise IRLoadError(source, str(e)) from e
        return self.load_data(data, source=source)

    def load_data(self, data: Any, source: str = "<data>") -> DocumentIRProvider:
        """Validate already-parsed IR data"""
        if not isinstance(data, dict):
            raise IRLoadError(source, "top-level document must be a mapping")

        try:
            program = IRProgram(**data)
        except ValidationError as e:
            raise IRLoadError(source, str(e)) from e

        logger.debug(
            "Loaded IR for crate %s from %s: %d functions, %d implementations",
            program.crate, source, len(program.functions), len(program.implementations)
        )
        return DocumentIRProvider(program, source=source)
