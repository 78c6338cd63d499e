"""protoc plugin driver: parameters, pattern dispatch, and the request/response loop."""
from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, List, Optional

from google.protobuf.compiler import plugin_pb2

from protoc_builder.context import Context
from protoc_builder.errors import GeneratorError
from protoc_builder.output import OutputFile
from protoc_builder.schema import File, TypeRegistry

GeneratorFunc = Callable[[Context, File], None]


@dataclass
class Options:
    debug: bool = False
    package_mapping: Dict[str, str] = field(default_factory=dict)


ParameterHandler = Callable[[Dict[str, str], Options], None]


def parse_parameters(parameter: str) -> Dict[str, str]:
    """Parse ``key1=value1,key2=value2,flag`` into a dict; bare flags map to ``"true"``."""
    params: Dict[str, str] = {}
    if not parameter:
        return params
    for pair in parameter.split(","):
        if not pair.strip():
            continue
        key, sep, value = pair.partition("=")
        if sep:
            params[key.strip()] = value.strip()
        else:
            params[pair.strip()] = "true"
    return params


class PatternError(ValueError):
    """Raised for a glob pattern that is not well formed."""


def _class_char(pattern: str, i: int):
    if i >= len(pattern) or pattern[i] in "-]":
        raise PatternError(pattern)
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise PatternError(pattern)
    return pattern[i], i + 1


def glob_to_regex(pattern: str) -> str:
    """Translate a slash-separated glob into a regex, like Go's ``path.Match``.

    ``*`` and ``?`` never match ``/``. Raises PatternError for an unterminated
    or empty character class, a bad range, or a trailing backslash.
    """
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "\\":
            if i + 1 >= n:
                raise PatternError(pattern)
            out.append(re.escape(pattern[i + 1]))
            i += 2
        elif c == "[":
            i += 1
            negate = i < n and pattern[i] == "^"
            if negate:
                i += 1
            items: List[str] = []
            while True:
                if i >= n:
                    raise PatternError(pattern)
                if pattern[i] == "]" and items:
                    i += 1
                    break
                lo, i = _class_char(pattern, i)
                if i < n and pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                    if hi < lo:
                        raise PatternError(pattern)
                    items.append(f"{re.escape(lo)}-{re.escape(hi)}")
                else:
                    items.append(re.escape(lo))
            out.append(("[^" if negate else "[") + "".join(items) + "]")
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


def matches_pattern(path: str, pattern: str) -> bool:
    if pattern in ("*", "*.proto"):
        return True
    try:
        regex = glob_to_regex(pattern)
    except PatternError:
        # Malformed patterns fall back to a substring check.
        if pattern.endswith("*"):
            pattern = pattern[:-1]
        return pattern in path
    return re.fullmatch(regex, path) is not None


def _debug(message: str) -> None:
    print(f"[DEBUG] {message}", file=sys.stderr)


class Plugin:
    """Dispatches the files of a CodeGeneratorRequest to registered generators.

    Generators are registered per filename pattern and run in registration
    order for every file protoc asked to generate.
    """

    def __init__(self):
        self.options = Options()
        self._generators: Dict[str, GeneratorFunc] = {}
        self._parameter_handler: Optional[ParameterHandler] = None
        self._outputs: List[OutputFile] = []

    def with_options(self, options: Options) -> Plugin:
        if options.package_mapping is None:
            options.package_mapping = {}
        self.options = options
        return self

    def generate_for(self, pattern: str, generator: GeneratorFunc) -> Plugin:
        self._generators[pattern] = generator
        return self

    def with_parameter_handler(self, handler: ParameterHandler) -> Plugin:
        self._parameter_handler = handler
        return self

    def new_output_file(self, filename: str, go_import_path: str) -> OutputFile:
        output = OutputFile(filename, go_import_path)
        self._outputs.append(output)
        return output

    def _update_options_from_params(self, params: Dict[str, str]) -> None:
        for key, value in params.items():
            if key == "debug":
                self.options.debug = value in ("true", "1")
            elif key == "package_mapping":
                source, sep, target = value.partition(":")
                if sep:
                    self.options.package_mapping[source] = target

    def generate(self, request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
        """Run every matching generator and collect the produced files.

        Raises GeneratorError, naming the file, as soon as a generator fails.
        """
        params = parse_parameters(request.parameter)
        self._update_options_from_params(params)
        if self._parameter_handler is not None:
            self._parameter_handler(params, self.options)

        registry = TypeRegistry(request.proto_file)
        by_name = {proto.name: proto for proto in request.proto_file}
        files = [
            File(by_name[name], registry, self.options.package_mapping)
            for name in request.file_to_generate
            if name in by_name
        ]

        self._outputs = []
        for file in files:
            ctx = Context(self, file, files, parameters=params)
            for pattern, generator in self._generators.items():
                if not matches_pattern(file.name, pattern):
                    continue
                if self.options.debug:
                    _debug(f"Generating for {file.name} with pattern {pattern}")
                try:
                    generator(ctx, file)
                except Exception as e:
                    raise GeneratorError(file.name, e) from e

        response = plugin_pb2.CodeGeneratorResponse(
            supported_features=plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL,
        )
        response.file.extend(output.to_proto() for output in self._outputs)
        return response

    def run(self, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None) -> int:
        """Read a request from protoc, write the response back, return the exit status."""
        if stdin is None:
            stdin = sys.stdin.buffer
        if stdout is None:
            stdout = sys.stdout.buffer
        request = plugin_pb2.CodeGeneratorRequest.FromString(stdin.read())
        try:
            response = self.generate(request)
            status = 0
        except GeneratorError as e:
            print(f"FATAL: {e}", file=sys.stderr)
            response = plugin_pb2.CodeGeneratorResponse(error=str(e))
            status = 1
        stdout.write(response.SerializeToString())
        stdout.flush()
        return status
