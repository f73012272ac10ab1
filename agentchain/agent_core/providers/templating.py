"""Request templating and response-path extraction for custom providers.

Placeholders use exactly ``{{identifier}}``: double curly braces with no inner
whitespace. Substitution walks strings, lists, tuples and dicts and returns a
new structure of the same shape; any other value is returned unchanged.

Response paths use dotted field access and bracketed numeric indexes, e.g.
``choices[0].message.content`` or ``candidates[0].content.parts[0].text``.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping, Union

from .errors import ResponsePathError

PathToken = Union[str, int]

_PATH_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")
_PLACEHOLDER = re.compile(r"\{\{([^{}\s]+)\}\}")


def substitution_map(*, prompt: str, model: str, api_key: str) -> dict[str, str]:
    """Values available to ``{{...}}`` placeholders."""
    return {"prompt": prompt, "model": model, "api_key": api_key}


def substitute(template: Any, variables: Mapping[str, str]) -> Any:
    """Replace every ``{{key}}`` occurrence in ``template`` with ``variables[key]``.

    The input is never mutated. Placeholders with no matching variable are
    left as-is. Substitution is a single pass, so placeholder text inside a
    substituted value stays literal.
    """
    if isinstance(template, str):
        return _PLACEHOLDER.sub(lambda m: variables.get(m.group(1), m.group(0)), template)
    if isinstance(template, list):
        return [substitute(item, variables) for item in template]
    if isinstance(template, tuple):
        return tuple(substitute(item, variables) for item in template)
    if isinstance(template, Mapping):
        return {key: substitute(value, variables) for key, value in template.items()}
    return template


def parse_response_path(path: str) -> List[PathToken]:
    """Split a response path into field names and list indexes.

    >>> parse_response_path("choices[0].message.content")
    ['choices', 0, 'message', 'content']
    """
    tokens: List[PathToken] = []
    pos = 0
    while pos < len(path):
        if path[pos] == ".":
            pos += 1
            continue
        match = _PATH_TOKEN.match(path, pos)
        if match is None:
            raise ValueError(f"Invalid response path: {path!r}")
        name, index = match.groups()
        tokens.append(int(index) if index is not None else name)
        pos = match.end()
    if not tokens:
        raise ValueError(f"Invalid response path: {path!r}")
    return tokens


def resolve_path(data: Any, path: str) -> Any:
    """Walk ``path`` against parsed JSON ``data``.

    Raises:
        ResponsePathError: If any segment is missing, indexes out of range,
            or the final value is JSON ``null``.
    """
    try:
        tokens = parse_response_path(path)
    except ValueError as e:
        raise ResponsePathError(path, details=str(e)) from e

    current = data
    for token in tokens:
        if isinstance(current, Mapping):
            key = str(token)
            if key not in current:
                raise ResponsePathError(path)
            current = current[key]
        elif isinstance(current, list):
            if isinstance(token, str):
                if not token.isdigit():
                    raise ResponsePathError(path)
                token = int(token)
            if token >= len(current):
                raise ResponsePathError(path)
            current = current[token]
        else:
            raise ResponsePathError(path)
    if current is None:
        raise ResponsePathError(path)
    return current


def extract_text(data: Any, path: str) -> str:
    """Resolve ``path`` and return the value as text.

    Non-string values are serialised as JSON.
    """
    value = resolve_path(data, path)
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
