from protoc_builder.builder import (
    CodeBuilder,
    ConstBuilder,
    InterfaceBuilder,
    StructBuilder,
    SwitchBuilder,
    VarBuilder,
)
from protoc_builder.context import Context
from protoc_builder.errors import BuilderError, GeneratorError, ProtocBuilderError, ResolutionError
from protoc_builder.output import BufferedFile, GeneratedFile, GoIdent, OutputFile
from protoc_builder.plugin import GeneratorFunc, Options, Plugin, matches_pattern, parse_parameters
from protoc_builder.schema import (
    Enum,
    EnumValue,
    Field,
    FieldKind,
    File,
    Message,
    Method,
    Oneof,
    Service,
    TypeRegistry,
    go_camel_case,
)
