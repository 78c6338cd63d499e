"""Fluent, indentation-aware builder for emitting Go source text.

A single :class:`CodeBuilder` owns the line buffer for one output file. Every
nested construct (function bodies, struct bodies, ``if`` blocks, ``switch``
statements, grouped declarations) goes through :meth:`CodeBuilder.indented`,
so the depth is restored however the body callback exits.

The typed sub-builders (:class:`StructBuilder`, :class:`InterfaceBuilder`,
:class:`ConstBuilder`, :class:`VarBuilder`, :class:`SwitchBuilder`) hold no
lines of their own; they only narrow the vocabulary offered inside a block
and write back through the parent builder.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional, Sequence, Union

from jinja2 import Environment, StrictUndefined, Template

from protoc_builder.errors import BuilderError

if TYPE_CHECKING:
    from protoc_builder.context import Context
    from protoc_builder.output import GeneratedFile

INDENT = "\t"

_template_env = Environment(keep_trailing_newline=False, undefined=StrictUndefined)


class CodeBuilder:
    """Accumulates Go source lines at a tracked indentation depth."""

    def __init__(self, ctx: Optional[Context] = None):
        self._ctx = ctx
        self._lines: List[str] = []
        self._indent = 0

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def depth(self) -> int:
        return self._indent

    def __str__(self) -> str:
        return "\n".join(self._lines)

    # -- primitives -------------------------------------------------------

    def line(self, fmt: str, *args) -> CodeBuilder:
        """Append a line indented to the current depth.

        ``fmt`` is %-formatted with ``args`` when any are given, otherwise it
        is used verbatim.
        """
        text = fmt % args if args else fmt
        self._lines.append(INDENT * self._indent + text)
        return self

    def empty_line(self) -> CodeBuilder:
        self._lines.append("")
        return self

    @contextmanager
    def indented(self) -> Iterator[CodeBuilder]:
        """Raise the depth by one for the duration of the ``with`` block."""
        self._indent += 1
        try:
            yield self
        finally:
            self._indent -= 1

    def block(self, header: str, fn: Callable[[CodeBuilder], None]) -> CodeBuilder:
        """Emit ``header {``, run ``fn`` one level deeper, then ``}``."""
        self.line("%s {", header)
        with self.indented():
            fn(self)
        return self.line("}")

    def _delimited(self, opening: str, closing: str, body: Callable[[], None]) -> CodeBuilder:
        self.line(opening)
        with self.indented():
            body()
        return self.line(closing)

    # -- declarations -----------------------------------------------------

    def comment(self, text: str) -> CodeBuilder:
        return self.line("// %s", text)

    def package(self, name: str) -> CodeBuilder:
        return self.line("package %s", name)

    def import_(self, path: str) -> CodeBuilder:
        return self.line('import "%s"', path)

    def import_block(self, imports: Sequence[str]) -> CodeBuilder:
        if not imports:
            return self
        if len(imports) == 1:
            return self.import_(imports[0])

        def body():
            for imp in imports:
                self.line('"%s"', imp)

        return self._delimited("import (", ")", body)

    def struct(self, name: str, fn: Callable[[StructBuilder], None]) -> CodeBuilder:
        sb = StructBuilder(self)
        return self._delimited(f"type {name} struct {{", "}", lambda: fn(sb))

    def interface(self, name: str, fn: Callable[[InterfaceBuilder], None]) -> CodeBuilder:
        ib = InterfaceBuilder(self)
        return self._delimited(f"type {name} interface {{", "}", lambda: fn(ib))

    def function(self, signature: str, fn: Callable[[CodeBuilder], None]) -> CodeBuilder:
        return self.block("func " + signature, fn)

    def method(
        self,
        receiver: str,
        name: str,
        params: str,
        returns: str,
        fn: Callable[[CodeBuilder], None],
    ) -> CodeBuilder:
        signature = f"({receiver}) {name}({params})"
        if returns:
            signature += " " + returns
        return self.function(signature, fn)

    def const(self, name: str, value: str) -> CodeBuilder:
        return self.line("const %s = %s", name, value)

    def const_block(self, fn: Callable[[ConstBuilder], None]) -> CodeBuilder:
        cb = ConstBuilder(self)
        return self._delimited("const (", ")", lambda: fn(cb))

    def var(self, name: str, typ: str, value: Optional[str] = None) -> CodeBuilder:
        if value is not None:
            return self.line("var %s %s = %s", name, typ, value)
        return self.line("var %s %s", name, typ)

    def var_block(self, fn: Callable[[VarBuilder], None]) -> CodeBuilder:
        vb = VarBuilder(self)
        return self._delimited("var (", ")", lambda: fn(vb))

    def type_alias(self, name: str, typ: str) -> CodeBuilder:
        return self.line("type %s = %s", name, typ)

    # -- statements -------------------------------------------------------

    def return_(self, *values: str) -> CodeBuilder:
        if not values:
            return self.line("return")
        return self.line("return %s", ", ".join(values))

    def assign(self, left: str, right: str) -> CodeBuilder:
        return self.line("%s = %s", left, right)

    def declare_assign(self, left: str, right: str) -> CodeBuilder:
        return self.line("%s := %s", left, right)

    def if_(self, condition: str, fn: Callable[[CodeBuilder], None]) -> CodeBuilder:
        return self.block("if " + condition, fn)

    def if_err(self, fn: Callable[[CodeBuilder], None]) -> CodeBuilder:
        return self.if_("err != nil", fn)

    def for_(self, init: str, condition: str, post: str, fn: Callable[[CodeBuilder], None]) -> CodeBuilder:
        stmt = "for"
        if init or condition or post:
            stmt += f" {init}; {condition}; {post}"
        return self.block(stmt, fn)

    def for_range(self, variable: str, iterable: str, fn: Callable[[CodeBuilder], None]) -> CodeBuilder:
        return self.block(f"for {variable} := range {iterable}", fn)

    def switch(self, expr: str, fn: Callable[[SwitchBuilder], None]) -> CodeBuilder:
        """Emit a ``switch`` statement.

        Case labels share the depth of the ``switch`` line (gofmt layout);
        only their bodies are indented.
        """
        sb = SwitchBuilder(self)
        if expr:
            self.line("switch %s {", expr)
        else:
            self.line("switch {")
        fn(sb)
        return self.line("}")

    # -- misc -------------------------------------------------------------

    def raw_string(self, content: str) -> CodeBuilder:
        return self.line("`%s`", content)

    def build_tag(self, tag: str) -> CodeBuilder:
        return self.line("//go:build %s", tag)

    def go_generate(self, command: str) -> CodeBuilder:
        return self.line("//go:generate %s", command)

    def template(self, tmpl: Union[Template, str], **values) -> CodeBuilder:
        """Render a jinja2 template and append its lines at the current depth."""
        if isinstance(tmpl, str):
            tmpl = _template_env.from_string(tmpl)
        for text in tmpl.render(**values).splitlines():
            if text.strip():
                self.line(text)
            else:
                self.empty_line()
        return self

    # -- output -----------------------------------------------------------

    def flush(self, sink: GeneratedFile) -> None:
        for text in self._lines:
            sink.P(text)

    def generate(self) -> None:
        """Write every accumulated line to the context's output file."""
        if self._ctx is None:
            raise BuilderError("CodeBuilder.generate() needs a builder created from a Context")
        self.flush(self._ctx.output)


class StructBuilder:
    def __init__(self, cb: CodeBuilder):
        self._cb = cb

    def field(self, name: str, typ: str, *tags: str) -> StructBuilder:
        text = f"{name} {typ}"
        if tags:
            text += " `" + " ".join(tags) + "`"
        self._cb.line(text)
        return self

    def embedded_field(self, typ: str) -> StructBuilder:
        self._cb.line(typ)
        return self


class InterfaceBuilder:
    def __init__(self, cb: CodeBuilder):
        self._cb = cb

    def method(self, name: str, params: str, returns: str = "") -> InterfaceBuilder:
        signature = f"{name}({params})"
        if returns:
            signature += " " + returns
        self._cb.line(signature)
        return self

    def embedded_interface(self, typ: str) -> InterfaceBuilder:
        self._cb.line(typ)
        return self


class ConstBuilder:
    def __init__(self, cb: CodeBuilder):
        self._cb = cb

    def const(self, name: str, value: str) -> ConstBuilder:
        self._cb.line("%s = %s", name, value)
        return self

    def const_with_type(self, name: str, typ: str, value: str) -> ConstBuilder:
        self._cb.line("%s %s = %s", name, typ, value)
        return self


class VarBuilder:
    def __init__(self, cb: CodeBuilder):
        self._cb = cb

    def var(self, name: str, typ: str, value: Optional[str] = None) -> VarBuilder:
        if value is not None:
            self._cb.line("%s %s = %s", name, typ, value)
        else:
            self._cb.line("%s %s", name, typ)
        return self


class SwitchBuilder:
    """Emits ``case``/``default`` clauses; bodies are indented, never braced."""

    def __init__(self, cb: CodeBuilder):
        self._cb = cb

    def case(self, value: str, fn: Callable[[CodeBuilder], None]) -> SwitchBuilder:
        self._cb.line("case %s:", value)
        with self._cb.indented():
            fn(self._cb)
        return self

    def default(self, fn: Callable[[CodeBuilder], None]) -> SwitchBuilder:
        self._cb.line("default:")
        with self._cb.indented():
            fn(self._cb)
        return self
