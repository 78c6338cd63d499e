"""protoc-gen-go-helper: a small plugin that wraps every message in a helper struct.

It doubles as a worked example of the builder and schema APIs.
"""
from __future__ import annotations

import sys
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from protoc_builder.builder import CodeBuilder, StructBuilder
from protoc_builder.context import Context
from protoc_builder.plugin import Options, Plugin
from protoc_builder.schema import Field, File


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
    )


def describe_field(field: Field) -> str:
    if field.is_map():
        return "map field"
    if field.is_enum():
        return "enum field: " + field.type()
    if field.is_message():
        return "message field: " + field.type()
    return "scalar field: " + field.type()


def helper_generator(ctx: Context, file: File) -> None:
    ctx.debugf("Processing file: %s", file.name)

    header = _get_template_env().get_template("header.go.j2")
    code = ctx.code().template(
        header,
        file_name=file.name,
        source_package=file.proto_package,
    ).package(file.package()).empty_line()

    enums = file.enums()
    for enum in enums:
        code.comment(f"Enum: {enum.go_name()} ({enum.full_name()})")
    if enums:
        code.empty_line()

    for msg in file.messages():
        name = msg.go_name()

        def helper_fields(sb: StructBuilder, name=name):
            sb.field("msg", "*" + name)

        def constructor(cb: CodeBuilder, name=name):
            cb.return_(f"&{name}Helper{{msg: msg}}")

        (
            code.comment("Message: " + name)
            .struct(name + "Helper", helper_fields)
            .empty_line()
            .function(f"New{name}Helper(msg *{name}) *{name}Helper", constructor)
            .empty_line()
        )

        for field in msg.fields():
            code.comment(f"Field {field.go_name()}: {describe_field(field)}")
        for oneof in msg.oneofs():
            code.comment("Oneof: " + oneof.go_name())
        code.empty_line()

    for svc in file.services():
        code.comment("Service: " + svc.go_name())
        for method in svc.methods():
            streaming = " (streaming)" if method.is_streaming() else ""
            code.comment(f"Method: {method.input_type()} -> {method.output_type()}{streaming}")
        code.empty_line()

    code.generate()


def new_helper_plugin() -> Plugin:
    return Plugin().with_options(Options(debug=True)).generate_for("*.proto", helper_generator)


def main() -> None:
    sys.exit(new_helper_plugin().run())


if __name__ == "__main__":
    main()
