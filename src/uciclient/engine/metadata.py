from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional

from uciclient.protocol.constants import Response

UNKNOWN_AUTHOR = "Unknown"

_OPTION_KEYWORDS = ("name", "type", "default", "min", "max", "var")


@dataclass(frozen=True)
class UciOption:
    name: str
    type: str  # "check", "spin", "combo", "button", "string"
    default: str | None = None
    min_value: int | None = None
    max_value: int | None = None
    choices: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EngineInfo:
    """Identity and option inventory reported during the handshake."""

    name: str
    author: str = UNKNOWN_AUTHOR
    options: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def option(self, name: str) -> UciOption:
        """Parse the raw declaration recorded for ``name``."""
        try:
            raw = self.options[name]
        except KeyError as exc:
            raise ValueError(f"Engine '{self.name}' declares no option '{name}'") from exc
        return parse_option_line(raw)

    def __str__(self) -> str:
        options = ", ".join(self.options) if self.options else "None"
        return f"Engine: {self.name} by {self.author}\nOptions: {options}"


def _to_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def parse_option_line(line: str) -> UciOption:
    """Turn ``option name <id> type <t> [default ..] [min ..] [max ..] [var ..]*``
    into a :class:`UciOption`. Multi-word names and values are kept intact."""
    tokens = line.split()
    if len(tokens) < 3 or tokens[0] != Response.OPTION or tokens[1] != "name":
        raise ValueError(f"Not an option declaration: {line!r}")

    parts: dict[str, List[str]] = {}
    choices: List[List[str]] = []
    current: Optional[List[str]] = None
    for token in tokens[1:]:
        if token in _OPTION_KEYWORDS:
            current = []
            if token == "var":
                choices.append(current)
            else:
                parts[token] = current
        elif current is not None:
            current.append(token)

    name = " ".join(parts.get("name", []))
    if not name:
        raise ValueError(f"Option declaration without a name: {line!r}")

    default = parts.get("default")
    min_tokens = parts.get("min")
    max_tokens = parts.get("max")
    return UciOption(
        name=name,
        type=" ".join(parts.get("type", [])),
        default=" ".join(default) if default is not None else None,
        min_value=_to_int(" ".join(min_tokens)) if min_tokens else None,
        max_value=_to_int(" ".join(max_tokens)) if max_tokens else None,
        choices=[" ".join(choice) for choice in choices],
    )
