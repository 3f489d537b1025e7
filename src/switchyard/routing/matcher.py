"""Path templates compiled to regular expressions.

Templates use express-style placeholders::

    "/posts"                 -> no keys
    "/:username"             -> one key, "username"
    "/posts/:id?"            -> optional key
    "/posts/:id(\\d+)"        -> custom capture
    "/files/:path*"          -> key plus a positional splat group
    "/assets/*"              -> positional group only
    "/feed.:format"          -> "." separated key

Every named placeholder becomes a ``Key``; every other capture group is
positional and lands in ``context.wildcards`` on match.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import unquote

# slash, format separator, name, custom capture, splat, optional
_TOKEN_RE = re.compile(r"(\\/)?(\\\.)?:(\w+)(\(.*?\))?(\*)?(\?)?")
_KEY_GROUP_RE = re.compile(r"^_k(\d+)$")


@dataclass(frozen=True, slots=True)
class Key:
    """A named capture in a path template."""

    name: str
    optional: bool = False


def _escape_separators(source: str) -> str:
    """Escape ``/`` everywhere and ``.`` outside of capture groups."""
    out: list[str] = []
    depth = 0
    for ch in source:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch == "/" or (ch == "." and depth == 0):
            out.append("\\" + ch)
        else:
            out.append(ch)
    return "".join(out)


def _expand_stars(source: str) -> str:
    """Turn each bare ``*`` outside a group into a positional capture."""
    out: list[str] = []
    depth = 0
    for ch in source:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        out.append("(.*)" if ch == "*" and depth == 0 else ch)
    return "".join(out)


def compile_path(
    template: str, *, sensitive: bool = False, strict: bool = False
) -> tuple[re.Pattern[str], tuple[Key, ...]]:
    """Compile *template* into an anchored pattern and its ordered keys.

    Non-strict templates accept one optional trailing slash. Matching is
    case-insensitive unless *sensitive* is set.
    """
    keys: list[Key] = []

    def replace(m: re.Match[str]) -> str:
        slash, fmt, name, capture, star, optional = m.groups()
        slash = slash or ""
        fmt = fmt or ""
        optional = optional or ""
        inner = capture[1:-1] if capture else rf"[^\/{fmt}]+?"
        group = f"(?P<_k{len(keys)}>{inner})"
        keys.append(Key(name, optional=bool(optional)))
        splat = rf"((?:[\/{fmt}].+?)?)" if star else ""
        lead = "" if optional else slash
        return f"{lead}(?:{fmt}{slash if optional else ''}{group}{splat}){optional}"

    source = template + ("" if strict else "/?")
    source = source.replace("/(", "(?:/")
    source = _escape_separators(source)
    source = _TOKEN_RE.sub(replace, source)
    source = _expand_stars(source)

    flags = 0 if sensitive else re.IGNORECASE
    return re.compile(f"^{source}$", flags), tuple(keys)


@dataclass(slots=True)
class PathMatcher:
    """A compiled template that tests paths and extracts captures.

    Usage::

        matcher = PathMatcher.compile("/users/:id")
        params = {}
        matcher.match("/users/42?tab=posts", params)   # True
        params                                         # {"id": "42"}
    """

    template: str
    pattern: re.Pattern[str]
    keys: tuple[Key, ...]
    decode: bool = True
    # 1-based group index -> key
    _slots: dict[int, Key] = field(default_factory=dict, repr=False)

    @classmethod
    def compile(
        cls,
        template: str,
        *,
        sensitive: bool = False,
        strict: bool = False,
        decode: bool = True,
    ) -> "PathMatcher":
        pattern, keys = compile_path(template, sensitive=sensitive, strict=strict)
        slots: dict[int, Key] = {}
        for group_name, index in pattern.groupindex.items():
            m = _KEY_GROUP_RE.match(group_name)
            if m is not None:
                slots[index] = keys[int(m.group(1))]
        return cls(template, pattern, keys, decode, slots)

    def match(
        self,
        path: str,
        params: dict[str, object],
        wildcards: list[str | None] | None = None,
    ) -> bool:
        """Match *path* and copy its captures into *params*.

        The query string is ignored. Values already present in *params*
        are kept (first write wins). Unnamed groups are appended to
        *wildcards* when given. Nothing is written if the path doesn't
        match.
        """
        pathname = path.split("?", 1)[0]
        m = self.pattern.fullmatch(pathname)
        if m is None:
            return False

        for index, value in enumerate(m.groups(), start=1):
            if isinstance(value, str) and self.decode:
                value = unquote(value)
            key = self._slots.get(index)
            if key is None:
                if wildcards is not None:
                    wildcards.append(value)
            elif value is not None and key.name not in params:
                params[key.name] = value

        return True
