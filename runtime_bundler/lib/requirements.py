from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from ..errors import ConfigError

_REQ_RE = re.compile(r"^(?P<package>[A-Za-z0-9][A-Za-z0-9._-]*(\[[A-Za-z0-9,._-]+\])?)\s*(?P<constraint>.*)$")


@dataclass(frozen=True)
class Requirement:
    package: str
    constraint: str = ""

    def __str__(self) -> str:
        return f"{self.package}{self.constraint}"


def parse_requirement(line: str) -> Requirement:
    m = _REQ_RE.match(line.strip())
    if m is None:
        raise ConfigError(f"Invalid requirement: {line!r}")
    return Requirement(package=m.group("package"), constraint=m.group("constraint").replace(" ", ""))


def parse_requirements(lines: Iterable[str]) -> List[Requirement]:
    """Parse requirement lines in order, skipping blanks and comments."""

    out: List[Requirement] = []
    for line in lines:
        line = line.split("#", 1)[0].strip()
        if line:
            out.append(parse_requirement(line))
    return out


def render_requirements(reqs: Iterable[Requirement]) -> str:
    return "".join(f"{r}\n" for r in reqs)


def write_requirements(path: Path, reqs: Iterable[Requirement]) -> Path:
    path.write_text(render_requirements(reqs), encoding="utf-8")
    return path
