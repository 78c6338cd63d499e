"""Read-only facade over compiled protobuf descriptors.

The facade types wrap ``descriptor_pb2`` messages as handed to a protoc plugin
in a ``CodeGeneratorRequest``. They never mutate the descriptors; listing
accessors rebuild their wrappers on every call, in declaration order.
"""
from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from google.protobuf import descriptor_pb2 as d2

from protoc_builder.errors import ResolutionError

FDP = d2.FieldDescriptorProto

# Go type for each scalar kind, as protoc-gen-go maps them.
GO_SCALAR_TYPES: Dict[str, str] = {
    "double": "float64",
    "float": "float32",
    "int32": "int32",
    "sint32": "int32",
    "sfixed32": "int32",
    "int64": "int64",
    "sint64": "int64",
    "sfixed64": "int64",
    "uint32": "uint32",
    "fixed32": "uint32",
    "uint64": "uint64",
    "fixed64": "uint64",
    "bool": "bool",
    "string": "string",
    "bytes": "[]byte",
}


def kind_name(field_type: int) -> str:
    """Canonical kind name of a field type, e.g. ``TYPE_SINT64`` -> ``sint64``."""
    return FDP.Type.Name(field_type)[len("TYPE_"):].lower()


def go_camel_case(name: str) -> str:
    """Convert a protobuf name into a Go identifier the way protoc-gen-go does.

    ``foo_bar`` becomes ``FooBar``, ``Outer.Inner`` becomes ``Outer_Inner`` and
    a leading underscore becomes ``X``.
    """
    out: List[str] = []
    i = 0
    n = len(name)
    while i < n:
        c = name[i]
        nxt = name[i + 1] if i + 1 < n else ""
        if c == "." and _is_lower(nxt):
            pass
        elif c == ".":
            out.append("_")
        elif c == "_" and (i == 0 or name[i - 1] == "."):
            out.append("X")
        elif c == "_" and _is_lower(nxt):
            pass
        elif c.isdigit():
            out.append(c)
        else:
            out.append(c.upper() if _is_lower(c) else c)
            while i + 1 < n and _is_lower(name[i + 1]):
                i += 1
                out.append(name[i])
        i += 1
    return "".join(out)


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _go_sanitize(name: str) -> str:
    name = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if not name or name[0].isdigit():
        name = "_" + name
    return name


def _ident_name(full_name: str, package: str) -> str:
    if package and full_name.startswith(package + "."):
        full_name = full_name[len(package) + 1:]
    return go_camel_case(full_name)


def _json_name(name: str) -> str:
    parts = name.split("_")
    return parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


@dataclass
class _Registered:
    proto: object
    file: d2.FileDescriptorProto


class TypeRegistry:
    """Index of every message and enum of a request, keyed by full name."""

    def __init__(self, files: Iterable[d2.FileDescriptorProto] = ()):
        self._messages: Dict[str, _Registered] = {}
        self._enums: Dict[str, _Registered] = {}
        self._files: Dict[str, d2.FileDescriptorProto] = {}
        for f in files:
            self.register_file(f)

    def register_file(self, proto: d2.FileDescriptorProto) -> None:
        if proto.name in self._files:
            return
        self._files[proto.name] = proto
        prefix = proto.package + "." if proto.package else ""
        for e in proto.enum_type:
            self._enums[prefix + e.name] = _Registered(e, proto)
        for m in proto.message_type:
            self._register_message(m, prefix + m.name, proto)

    def _register_message(self, desc: d2.DescriptorProto, full_name: str, file: d2.FileDescriptorProto) -> None:
        self._messages[full_name] = _Registered(desc, file)
        for e in desc.enum_type:
            self._enums[f"{full_name}.{e.name}"] = _Registered(e, file)
        for nested in desc.nested_type:
            self._register_message(nested, f"{full_name}.{nested.name}", file)

    def find_message(self, ref: str) -> Optional[Tuple[d2.DescriptorProto, d2.FileDescriptorProto]]:
        entry = self._messages.get(ref.lstrip("."))
        return (entry.proto, entry.file) if entry else None

    def find_enum(self, ref: str) -> Optional[Tuple[d2.EnumDescriptorProto, d2.FileDescriptorProto]]:
        entry = self._enums.get(ref.lstrip("."))
        return (entry.proto, entry.file) if entry else None

    def message(self, ref: str, referrer: str = "") -> Tuple[d2.DescriptorProto, d2.FileDescriptorProto]:
        found = self.find_message(ref)
        if found is None:
            raise ResolutionError(ref.lstrip("."), referrer)
        return found

    def enum(self, ref: str, referrer: str = "") -> Tuple[d2.EnumDescriptorProto, d2.FileDescriptorProto]:
        found = self.find_enum(ref)
        if found is None:
            raise ResolutionError(ref.lstrip("."), referrer)
        return found

    def file_of(self, ref: str, referrer: str = "") -> d2.FileDescriptorProto:
        """File that declares the message or enum named by ``ref``."""
        full_name = ref.lstrip(".")
        entry = self._messages.get(full_name) or self._enums.get(full_name)
        if entry is None:
            raise ResolutionError(full_name, referrer)
        return entry.file

    def go_name(self, ref: str, referrer: str = "") -> str:
        """Go identifier of the message or enum a type reference points at."""
        full_name = ref.lstrip(".")
        found = self.find_message(full_name) or self.find_enum(full_name)
        if found is None:
            raise ResolutionError(full_name, referrer)
        return _ident_name(full_name, found[1].package)


class _Facade:
    """Wrappers compare equal when they wrap equal descriptors."""

    proto: object
    name: str

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.name == other.name and self.proto == other.proto

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def _split_go_package(value: str) -> Tuple[str, str]:
    """Split a ``go_package``-style value into (import path, package name)."""
    if ";" in value:
        path, _, name = value.partition(";")
        return path, _go_sanitize(name)
    return value, _go_sanitize(value.rstrip("/").rsplit("/", 1)[-1])


class File(_Facade):
    """A .proto file marked for generation."""

    def __init__(
        self,
        proto: d2.FileDescriptorProto,
        registry: Optional[TypeRegistry] = None,
        package_mapping: Optional[Dict[str, str]] = None,
    ):
        self.proto = proto
        self.name = proto.name
        if registry is None:
            registry = TypeRegistry([proto])
        self.registry = registry
        self._package_mapping = package_mapping or {}

    @property
    def proto_package(self) -> str:
        return self.proto.package

    @property
    def syntax(self) -> str:
        return self.proto.syntax or "proto2"

    def _go_package(self) -> Optional[Tuple[str, str]]:
        mapped = self._package_mapping.get(self.proto.package)
        if mapped:
            return _split_go_package(mapped)
        if self.proto.options.go_package:
            return _split_go_package(self.proto.options.go_package)
        return None

    def package(self) -> str:
        """Go package name for code generated from this file."""
        go_pkg = self._go_package()
        if go_pkg is not None:
            return go_pkg[1]
        if self.proto.package:
            return _go_sanitize(self.proto.package.replace(".", "_"))
        base = os.path.splitext(os.path.basename(self.name))[0]
        return _go_sanitize(base)

    def go_import_path(self) -> str:
        go_pkg = self._go_package()
        if go_pkg is not None:
            return go_pkg[0]
        return os.path.dirname(self.name) or "."

    def _full_name(self, name: str) -> str:
        return f"{self.proto.package}.{name}" if self.proto.package else name

    def messages(self) -> List[Message]:
        return [
            Message(m, self, self._full_name(m.name))
            for m in self.proto.message_type
            if not m.options.map_entry
        ]

    def services(self) -> List[Service]:
        return [Service(s, self) for s in self.proto.service]

    def enums(self) -> List[Enum]:
        return [Enum(e, self, self._full_name(e.name)) for e in self.proto.enum_type]


class Message(_Facade):
    def __init__(self, proto: d2.DescriptorProto, file: File, full_name: str, parent: Optional[Message] = None):
        self.proto = proto
        self.name = proto.name
        self.file = file
        self.full_name = full_name
        self.parent = parent

    @property
    def is_map_entry(self) -> bool:
        return self.proto.options.map_entry

    def go_name(self) -> str:
        return _ident_name(self.full_name, self.file.proto_package)

    def fields(self) -> List[Field]:
        return [Field(f, self) for f in self.proto.field]

    def oneofs(self) -> List[Oneof]:
        return [Oneof(o, self, i) for i, o in enumerate(self.proto.oneof_decl)]

    def messages(self) -> List[Message]:
        """Nested message types, map entries excluded."""
        return [
            Message(m, self.file, f"{self.full_name}.{m.name}", self)
            for m in self.proto.nested_type
            if not m.options.map_entry
        ]

    def enums(self) -> List[Enum]:
        return [Enum(e, self.file, f"{self.full_name}.{e.name}", self) for e in self.proto.enum_type]


class FieldKind(enum.Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    MESSAGE = "message"
    MAP = "map"


class Field(_Facade):
    def __init__(self, proto: d2.FieldDescriptorProto, message: Message):
        self.proto = proto
        self.name = proto.name
        self.message = message
        self.kind = self._classify()

    def _classify(self) -> FieldKind:
        if self.proto.type == FDP.TYPE_ENUM:
            return FieldKind.ENUM
        if self.proto.type in (FDP.TYPE_MESSAGE, FDP.TYPE_GROUP):
            if self.proto.label == FDP.LABEL_REPEATED:
                found = self.message.file.registry.find_message(self.proto.type_name)
                if found is not None and found[0].options.map_entry:
                    return FieldKind.MAP
            return FieldKind.MESSAGE
        return FieldKind.SCALAR

    @property
    def number(self) -> int:
        return self.proto.number

    @property
    def json_name(self) -> str:
        return self.proto.json_name or _json_name(self.proto.name)

    def go_name(self) -> str:
        return go_camel_case(self.name)

    def is_repeated(self) -> bool:
        return self.proto.label == FDP.LABEL_REPEATED

    def is_optional(self) -> bool:
        """True when the field was declared with the ``optional`` keyword."""
        if self.proto.proto3_optional:
            return True
        return (
            self.message.file.syntax == "proto2"
            and self.proto.label == FDP.LABEL_OPTIONAL
            and not self.proto.HasField("oneof_index")
        )

    def is_map(self) -> bool:
        return self.kind is FieldKind.MAP

    def is_enum(self) -> bool:
        return self.kind is FieldKind.ENUM

    def is_message(self) -> bool:
        return self.kind is FieldKind.MESSAGE

    def is_scalar(self) -> bool:
        return self.kind is FieldKind.SCALAR

    def type(self) -> str:
        """Protobuf type name: full name for enums, messages and map entries, kind name otherwise."""
        if self.kind is FieldKind.SCALAR:
            return kind_name(self.proto.type)
        return self.proto.type_name.lstrip(".")

    def _entry_field(self, index: int) -> Optional[Field]:
        if self.kind is not FieldKind.MAP:
            return None
        entry, _ = self.message.file.registry.message(self.proto.type_name, self.message.file.name)
        entry_msg = Message(entry, self.message.file, self.type(), self.message)
        return Field(entry.field[index], entry_msg)

    def map_key(self) -> Optional[Field]:
        return self._entry_field(0)

    def map_value(self) -> Optional[Field]:
        return self._entry_field(1)

    def oneof(self) -> Optional[Oneof]:
        if not self.proto.HasField("oneof_index"):
            return None
        index = self.proto.oneof_index
        return Oneof(self.message.proto.oneof_decl[index], self.message, index)

    def _go_base_type(self) -> str:
        registry = self.message.file.registry
        if self.kind is FieldKind.ENUM:
            return registry.go_name(self.proto.type_name, self.message.file.name)
        if self.kind is FieldKind.MESSAGE:
            return "*" + registry.go_name(self.proto.type_name, self.message.file.name)
        return GO_SCALAR_TYPES.get(kind_name(self.proto.type), "any")

    def go_type(self) -> str:
        """Go type expression of the field as protoc-gen-go declares it."""
        if self.kind is FieldKind.MAP:
            return f"map[{self.map_key().go_type()}]{self.map_value().go_type()}"
        base = self._go_base_type()
        if self.is_repeated():
            return "[]" + base
        if self.kind is FieldKind.MESSAGE or base == "[]byte":
            return base
        # proto2 required scalars and enums are pointers, like optional ones.
        required = self.message.file.syntax == "proto2" and self.proto.label == FDP.LABEL_REQUIRED
        if self.is_optional() or required:
            return "*" + base
        return base


class Oneof(_Facade):
    def __init__(self, proto: d2.OneofDescriptorProto, message: Message, index: int):
        self.proto = proto
        self.name = proto.name
        self.message = message
        self.index = index

    def go_name(self) -> str:
        return go_camel_case(self.name)

    def fields(self) -> List[Field]:
        return [
            Field(f, self.message)
            for f in self.message.proto.field
            if f.HasField("oneof_index") and f.oneof_index == self.index
        ]

    @property
    def is_synthetic(self) -> bool:
        """True for the implicit oneof protoc wraps around a proto3 ``optional`` field."""
        members = self.fields()
        return len(members) == 1 and members[0].proto.proto3_optional


class Service(_Facade):
    def __init__(self, proto: d2.ServiceDescriptorProto, file: File):
        self.proto = proto
        self.name = proto.name
        self.file = file
        self.full_name = file._full_name(proto.name)

    def go_name(self) -> str:
        return go_camel_case(self.name)

    def methods(self) -> List[Method]:
        return [Method(m, self) for m in self.proto.method]


class Method(_Facade):
    def __init__(self, proto: d2.MethodDescriptorProto, service: Service):
        self.proto = proto
        self.name = proto.name
        self.service = service

    def go_name(self) -> str:
        return go_camel_case(self.name)

    def input_full_name(self) -> str:
        return self.proto.input_type.lstrip(".")

    def output_full_name(self) -> str:
        return self.proto.output_type.lstrip(".")

    def input_type(self) -> str:
        """Go name of the request message."""
        return self.service.file.registry.go_name(self.proto.input_type, self.service.file.name)

    def output_type(self) -> str:
        """Go name of the response message."""
        return self.service.file.registry.go_name(self.proto.output_type, self.service.file.name)

    def is_client_streaming(self) -> bool:
        return self.proto.client_streaming

    def is_server_streaming(self) -> bool:
        return self.proto.server_streaming

    def is_streaming(self) -> bool:
        return self.proto.client_streaming or self.proto.server_streaming


class Enum(_Facade):
    def __init__(self, proto: d2.EnumDescriptorProto, file: File, full_name: str, parent: Optional[Message] = None):
        self.proto = proto
        self.name = proto.name
        self.file = file
        self._full_name = full_name
        self.parent = parent

    def full_name(self) -> str:
        return self._full_name

    def go_name(self) -> str:
        return _ident_name(self._full_name, self.file.proto_package)

    def values(self) -> List[EnumValue]:
        return [EnumValue(v, self) for v in self.proto.value]


class EnumValue(_Facade):
    def __init__(self, proto: d2.EnumValueDescriptorProto, enum_: Enum):
        self.proto = proto
        self.name = proto.name
        self.enum = enum_

    def number(self) -> int:
        return self.proto.number

    def go_name(self) -> str:
        # Values of nested enums are prefixed by the enclosing message, not the enum.
        parent = self.enum.parent.go_name() if self.enum.parent is not None else self.enum.go_name()
        return f"{parent}_{self.name}"
