"""Ignore rules for MyHub.

One predicate decides whether a path is ignored. Staging, push and pull
all consult it, so a path rejected at stage time is also never pulled
over the working tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..paths import IGNORE_FILE


@dataclass(frozen=True)
class IgnoreRules:
    """An immutable set of ignore patterns."""
    directory_rules: tuple[str, ...] = ()
    plain_rules: tuple[str, ...] = ()

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> IgnoreRules:
        """Split raw patterns into directory and plain rules.

        Blank lines and `#` comments are dropped.
        """
        directory: list[str] = []
        plain: list[str] = []
        for raw in patterns:
            pattern = raw.strip()
            if not pattern or pattern.startswith("#"):
                continue
            if pattern.endswith("/"):
                name = pattern.rstrip("/")
                if name and name not in directory:
                    directory.append(name)
            elif pattern not in plain:
                plain.append(pattern)
        return cls(directory_rules=tuple(directory), plain_rules=tuple(plain))

    def __bool__(self) -> bool:
        return bool(self.directory_rules or self.plain_rules)


def load_rules(root: Path, extra: Iterable[str] = ()) -> IgnoreRules:
    """Read `.myhubignore` at root, plus any extra patterns.

    A missing rule file yields an empty rule set (nothing ignored).
    """
    patterns: list[str] = []
    rule_file = root / IGNORE_FILE
    if rule_file.is_file():
        patterns.extend(rule_file.read_text(encoding="utf-8").splitlines())
    patterns.extend(extra)
    return IgnoreRules.from_patterns(patterns)


def is_ignored(path: str, rules: IgnoreRules | None) -> bool:
    """Check whether a relative path matches any ignore rule.

    A directory rule ``dir/`` matches any path starting with ``dir``.
    A plain rule matches on equality or substring containment.
    """
    if not rules:
        return False
    path = path.replace("\\", "/")
    if any(path.startswith(name) for name in rules.directory_rules):
        return True
    return any(path == p or p in path for p in rules.plain_rules)
