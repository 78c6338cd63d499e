"""Helpers for exercising generators in-process, without protoc."""
from __future__ import annotations

from typing import Iterable, Optional

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from protoc_builder.context import Context
from protoc_builder.output import BufferedFile
from protoc_builder.plugin import GeneratorFunc, Plugin, parse_parameters
from protoc_builder.schema import File, TypeRegistry


def make_request(
    files: Iterable[descriptor_pb2.FileDescriptorProto],
    generate: Optional[Iterable[str]] = None,
    parameter: str = "",
) -> plugin_pb2.CodeGeneratorRequest:
    """Build a CodeGeneratorRequest; by default every file is marked for generation."""
    files = list(files)
    names = list(generate) if generate is not None else [f.name for f in files]
    request = plugin_pb2.CodeGeneratorRequest(file_to_generate=names, parameter=parameter)
    request.proto_file.extend(files)
    return request


def generate_to_string(
    generator: GeneratorFunc,
    request: plugin_pb2.CodeGeneratorRequest,
    file_name: str,
    plugin: Optional[Plugin] = None,
) -> str:
    """Run ``generator`` for one file of ``request`` and return what it wrote.

    The output goes to a BufferedFile, so identifiers are written unqualified.
    """
    target = None
    for proto in request.proto_file:
        if proto.name == file_name:
            target = proto
            break
    if target is None:
        names = ", ".join(p.name for p in request.proto_file)
        raise LookupError(f"file '{file_name}' not found in request. Found: {names}")

    plugin = plugin or Plugin()
    output = BufferedFile()
    file = File(target, TypeRegistry(request.proto_file), plugin.options.package_mapping)
    ctx = Context(plugin, file, [file], output=output, parameters=parse_parameters(request.parameter))
    generator(ctx, file)
    return output.getvalue()
