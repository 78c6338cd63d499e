from __future__ import annotations


class ProtocBuilderError(Exception):
    """Base class for errors raised by protoc_builder."""


class ResolutionError(ProtocBuilderError):
    """Raised when a type reference cannot be resolved to a descriptor."""

    def __init__(self, ref: str, file: str = ""):
        self.ref = ref
        self.file = file
        where = f" (referenced from '{file}')" if file else ""
        super().__init__(f"unable to resolve type '{ref}'{where}")


class BuilderError(ProtocBuilderError):
    """Raised when a CodeBuilder is asked to do something its setup cannot support."""


class GeneratorError(ProtocBuilderError):
    """Raised when a registered generator fails for a file."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"generator failed for {path}: {cause}")
