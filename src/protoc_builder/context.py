from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from protoc_builder.builder import CodeBuilder
from protoc_builder.output import GeneratedFile, GoIdent
from protoc_builder.schema import File

if TYPE_CHECKING:
    from protoc_builder.plugin import Plugin


class Context:
    """Everything a generator needs while producing output for one .proto file."""

    def __init__(
        self,
        plugin: Plugin,
        file: File,
        files: Sequence[File] = (),
        output: Optional[GeneratedFile] = None,
        parameters: Optional[Dict[str, str]] = None,
    ):
        self._plugin = plugin
        self.file = file
        self._files = list(files)
        self._output = output
        self._parameters = dict(parameters or {})

    def code(self) -> CodeBuilder:
        """Return a new CodeBuilder that generates into this context's output."""
        return CodeBuilder(self)

    @property
    def output(self) -> GeneratedFile:
        """The current output file, created on first use as ``<name>.pb.go``."""
        if self._output is None:
            self._create_output_file()
        return self._output

    def new_output_file(self, filename: str) -> GeneratedFile:
        if not filename.endswith(".go"):
            filename += ".go"
        self._output = self._plugin.new_output_file(filename, self.file.go_import_path())
        return self._output

    def _create_output_file(self) -> None:
        base = os.path.basename(self.file.name)
        if base.endswith(".proto"):
            base = base[: -len(".proto")]
        self._output = self._plugin.new_output_file(base + ".pb.go", self.file.go_import_path())

    def import_(self, import_path: str) -> str:
        """Import a Go package and return its qualifier, e.g. ``"fmt."``."""
        return self.output.qualified_go_ident(GoIdent("", import_path))

    def files(self) -> List[File]:
        return list(self._files)

    def debugf(self, fmt: str, *args) -> None:
        if self._plugin.options.debug:
            message = fmt % args if args else fmt
            print(f"[DEBUG] {message}", file=sys.stderr)

    def parameters(self) -> Dict[str, str]:
        return dict(self._parameters)

    def get_parameter(self, key: str) -> Optional[str]:
        return self._parameters.get(key)

    def get_parameter_with_default(self, key: str, default: str) -> str:
        return self._parameters.get(key, default)
