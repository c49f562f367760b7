"""
Helpers for definition paths with inline generic arguments
"""

import re
from typing import Dict, Iterable, List

# Identifiers, the "->" arrow (so its '>' is not read as a closing bracket),
# or any single character
_TOKEN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*|->|.", re.DOTALL)

INFER_PLACEHOLDER = "_"


def strip_generic_args(path: str) -> str:
    """Remove every `::<...>` segment from a path.

    `DataStore::<Electronics>::total_value` becomes `DataStore::total_value`.
    Qualified-self prefixes such as `<Electronics as Product>::price` are kept.
    """
    result: List[str] = []
    depth = 0
    i = 0
    while i < len(path):
        if depth == 0 and path.startswith("::<", i):
            depth = 1
            i += 3
            continue

        if depth:
            if path.startswith("->", i):
                i += 2
                continue
            if path[i] == "<":
                depth += 1
            elif path[i] == ">":
                depth -= 1
        else:
            result.append(path[i])
        i += 1

    return "".join(result)


def substitute_type_params(text: str, mapping: Dict[str, str], generic_only: bool = False) -> str:
    """Replace generic parameter names with their bindings.

    With `generic_only`, names are only replaced inside angle brackets, which
    is what display paths need (`DataStore::<T>::new` must not rewrite a
    path segment that happens to be called `T`).
    """
    if not mapping:
        return text

    out: List[str] = []
    depth = 0
    for match in _TOKEN.finditer(text):
        token = match.group(0)
        if token == "<":
            depth += 1
        elif token == ">":
            depth = max(depth - 1, 0)
        elif token in mapping and (depth > 0 or not generic_only):
            token = mapping[token]
        out.append(token)

    return "".join(out)


def is_concrete_type(type_arg: str, params: Iterable[str] = ()) -> bool:
    """A type argument is concrete when it has no inference holes.

    Names listed in `params` are type parameters that are still unbound, so
    an argument mentioning one of them (`T`, `Wrapper<T>`) is not concrete.
    """
    if not type_arg.strip():
        return False
    unbound = {INFER_PLACEHOLDER, *params}
    return all(match.group(0) not in unbound for match in _TOKEN.finditer(type_arg))


def has_generic_delimiter(query: str) -> bool:
    """Whether a query string spells out generic arguments"""
    return "<" in query
