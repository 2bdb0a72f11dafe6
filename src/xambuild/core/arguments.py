"""Command-line argument assembly.

An :class:`ArgumentSequence` keeps each token's raw value together with how
it must be rendered (quoted, secret). ``render()`` produces the exact command
line that is logged and compared in tests; ``argv()`` produces the unquoted
values handed to ``subprocess`` so no shell is involved.

    builder = ArgumentBuilder()
    builder.append("build")
    builder.append_switch("-t", "Build")
    builder.append_switch_quoted("-c", "Debug|iPhoneSimulator")
    builder.append_quoted("/src/My App/App.csproj")
    builder.build().render()
    # build -t:Build -c:"Debug|iPhoneSimulator" "/src/My App/App.csproj"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

REDACTED = "[REDACTED]"


def quote(value: str) -> str:
    """Wrap ``value`` in double quotes, escaping embedded quotes."""
    if value.startswith('"') and value.endswith('"') and len(value) > 1:
        return value
    return '"' + value.replace('"', '\\"') + '"'


@dataclass(frozen=True)
class Argument:
    value: str
    prefix: str = ""
    quoted: bool = False
    secret: bool = False

    def render(self) -> str:
        return self.prefix + (quote(self.value) if self.quoted else self.value)

    def render_safe(self) -> str:
        if self.secret:
            return self.prefix + REDACTED
        return self.render()

    def raw(self) -> str:
        return self.prefix + self.value


@dataclass(frozen=True)
class ArgumentSequence:
    arguments: Tuple[Argument, ...] = ()

    def tokens(self) -> List[str]:
        return [a.render() for a in self.arguments]

    def argv(self) -> List[str]:
        return [a.raw() for a in self.arguments]

    def render(self) -> str:
        return " ".join(self.tokens())

    def render_safe(self) -> str:
        return " ".join(a.render_safe() for a in self.arguments)

    def __len__(self) -> int:
        return len(self.arguments)

    def __iter__(self):
        return iter(self.tokens())

    def __str__(self) -> str:
        return self.render_safe()


class ArgumentBuilder:
    """Mutable collector; call :meth:`build` to freeze the result."""

    def __init__(self) -> None:
        self._items: List[Argument] = []

    def append(self, value: str) -> "ArgumentBuilder":
        self._items.append(Argument(str(value)))
        return self

    def append_quoted(self, value: str) -> "ArgumentBuilder":
        self._items.append(Argument(str(value), quoted=True))
        return self

    def append_secret(self, value: str, quoted: bool = False) -> "ArgumentBuilder":
        self._items.append(Argument(str(value), quoted=quoted, secret=True))
        return self

    def append_switch(self, switch: str, value: str, separator: str = ":") -> "ArgumentBuilder":
        self._items.append(Argument(str(value), prefix=switch + separator))
        return self

    def append_switch_quoted(self, switch: str, value: str, separator: str = ":") -> "ArgumentBuilder":
        self._items.append(Argument(str(value), prefix=switch + separator, quoted=True))
        return self

    def append_switch_secret(self, switch: str, value: str, separator: str = ":") -> "ArgumentBuilder":
        self._items.append(Argument(str(value), prefix=switch + separator, secret=True))
        return self

    def build(self) -> ArgumentSequence:
        return ArgumentSequence(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)
