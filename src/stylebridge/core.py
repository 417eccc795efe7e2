"""
Core classes and types for the stylebridge compilation boundary.
"""
from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from .engine import PreprocessorEngine, StyleTree


class StyleBridgeException(Exception):
    """
    Base class for all exceptions raised by stylebridge.
    """


class ParseError(StyleBridgeException):
    """
    Exception carrying a diagnostic reported by a preprocessing engine. The
    engine's @message is kept unmodified; @filename, @line and @column give
    context for display.
    """
    def __init__(self,
                 message: str,
                 filename: str = '',
                 line: int | None = None,
                 column: int | None = None):
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(message)

    def __str__(self):
        location = self.filename
        if self.line is not None:
            location += f'@({self.line},{self.column if self.column is not None else 0})'
        return f'{location}: {self.message}' if location else self.message

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return (
            (self.message, self.filename, self.line, self.column)
            == (other.message, other.filename, other.line, other.column)
        )

    __hash__ = Exception.__hash__


class EngineContractError(StyleBridgeException):
    """
    Exception raised when a PreprocessorEngine does not report exactly one
    outcome before its parse call returns.
    """


class EngineUnavailableException(StyleBridgeException):
    """
    Exception raised when an engine to be used is unavailable due to missing
    dependencies.
    """
    def __init__(self, engine: PreprocessorEngine | type[PreprocessorEngine], *args: t.Any):
        self.engine = engine
        super().__init__(*args)


class CompilationRequest(t.NamedTuple):
    """
    The inputs of a single compilation.
    """
    filename: str
    source: str
    compress: bool = False


class Output:
    """
    Successful CompilationOutcome holding the serialized stylesheet.
    """
    ok = True

    def __init__(self, text: str):
        self.text = text

    def __repr__(self):
        return f'Output({self.text!r})'

    def __eq__(self, other):
        if not isinstance(other, Output):
            return NotImplemented
        return self.text == other.text

    def unwrap(self) -> str:
        return self.text


class Failure:
    """
    Failed CompilationOutcome holding the engine's diagnostic.
    """
    ok = False

    def __init__(self, diagnostic: ParseError):
        self.diagnostic = diagnostic

    def __repr__(self):
        return f'Failure({self.diagnostic!r})'

    def __eq__(self, other):
        if not isinstance(other, Failure):
            return NotImplemented
        return self.diagnostic == other.diagnostic

    def unwrap(self) -> t.NoReturn:
        raise self.diagnostic


CompilationOutcome = t.Union[Output, Failure]


class ParseContext(t.NamedTuple):
    """
    Per-call configuration scoping one parse.
    """
    filename: str


class _Completion:
    # Receives the engine's callback. One instance per call.
    def __init__(self):
        self.calls = 0
        self.diagnostic: ParseError | None = None
        self.tree: StyleTree | None = None

    def __call__(self, diagnostic: ParseError | None, tree: StyleTree | None):
        self.calls += 1
        self.diagnostic = diagnostic
        self.tree = tree


class CompileBridge:
    """
    Synchronous facade over a PreprocessorEngine: one call, one outcome.
    Holds nothing but the engine, so a single bridge may be shared freely.
    """
    def __init__(self, engine: PreprocessorEngine | None = None):
        if engine is None:
            from .engine import SassEngine
            engine = SassEngine()
        if not engine.is_available():
            raise EngineUnavailableException(engine)
        self.engine = engine

    def compile(self, filename: str, source: str, compress: bool) -> CompilationOutcome:
        """
        Parse @source in a context scoped to @filename and serialize the
        result, minified when @compress is set.
        """
        done = _Completion()
        self.engine.parse(source, ParseContext(filename), done)

        if done.calls != 1:
            raise EngineContractError(
                f'{self.engine!r} reported {done.calls} outcomes for {filename!r}, expected 1'
            )
        if (done.diagnostic is None) == (done.tree is None):
            raise EngineContractError(
                f'{self.engine!r} must report exactly one of a diagnostic or a tree'
            )

        if done.diagnostic is not None:
            return Failure(done.diagnostic)
        # Engines may defer work to serialization; their diagnostics are
        # still failures. Anything else is a bug and propagates.
        try:
            text = done.tree.serialize(compress=bool(compress))
        except ParseError as e:
            return Failure(e)
        return Output(text)

    def compile_request(self, request: CompilationRequest) -> CompilationOutcome:
        return self.compile(request.filename, request.source, request.compress)
