"""Output sinks the builder writes generated lines into."""
from __future__ import annotations

import io
import re
from dataclasses import dataclass
from typing import Dict, List, Protocol, Set

from google.protobuf.compiler import plugin_pb2


@dataclass(frozen=True)
class GoIdent:
    go_name: str
    go_import_path: str


class GeneratedFile(Protocol):
    """What a CodeBuilder needs from the file it flushes into."""

    def P(self, *values) -> None:
        ...

    def qualified_go_ident(self, ident: GoIdent) -> str:
        ...


def _join(values) -> str:
    return " ".join(str(v) for v in values)


def _clean_package_name(import_path: str) -> str:
    base = import_path.rstrip("/").rsplit("/", 1)[-1]
    name = re.sub(r"[^A-Za-z0-9_]", "_", base)
    if not name or name[0].isdigit():
        name = "_" + name
    return name


class OutputFile:
    """A generated Go file that tracks the imports its identifiers need."""

    def __init__(self, filename: str, go_import_path: str):
        self.filename = filename
        self.go_import_path = go_import_path
        self._lines: List[str] = []
        self._package_names: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def P(self, *values) -> None:
        parts = [self.qualified_go_ident(v) if isinstance(v, GoIdent) else v for v in values]
        self._lines.append(_join(parts))

    def qualified_go_ident(self, ident: GoIdent) -> str:
        if ident.go_import_path == self.go_import_path:
            return ident.go_name
        name = self._package_names.get(ident.go_import_path)
        if name is None:
            base = name = _clean_package_name(ident.go_import_path)
            suffix = 1
            while name in self._used_names:
                name = f"{base}{suffix}"
                suffix += 1
            self._package_names[ident.go_import_path] = name
            self._used_names.add(name)
        return f"{name}.{ident.go_name}"

    @property
    def imports(self) -> Dict[str, str]:
        return dict(self._package_names)

    def _import_lines(self) -> List[str]:
        lines = ["", "import ("]
        for path in sorted(self._package_names):
            name = self._package_names[path]
            if name == _clean_package_name(path):
                lines.append(f'\t"{path}"')
            else:
                lines.append(f'\t{name} "{path}"')
        lines.append(")")
        return lines

    def content(self) -> str:
        lines = list(self._lines)
        if self._package_names:
            at = 0
            for i, text in enumerate(lines):
                if text.startswith("package "):
                    at = i + 1
                    break
            lines[at:at] = self._import_lines()
        return "".join(text + "\n" for text in lines)

    def to_proto(self) -> plugin_pb2.CodeGeneratorResponse.File:
        return plugin_pb2.CodeGeneratorResponse.File(name=self.filename, content=self.content())


class BufferedFile:
    """In-memory sink; identifiers are written unqualified."""

    def __init__(self):
        self._buffer = io.StringIO()

    def P(self, *values) -> None:
        if values:
            self._buffer.write(_join(values))
        self._buffer.write("\n")

    def qualified_go_ident(self, ident: GoIdent) -> str:
        return ident.go_name

    def getvalue(self) -> str:
        return self._buffer.getvalue()
