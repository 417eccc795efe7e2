"""
The engine side of the bridge: the interface a stylesheet preprocessor must
offer, and the default libsass-backed implementation.
"""
from __future__ import annotations

import abc
import re
import typing as t

from .core import ParseContext, ParseError
from .dependencies import PipDependency

if t.TYPE_CHECKING:
    from collections.abc import Set
    from .dependencies import Dependency


OnDone = t.Callable[[ParseError | None, 'StyleTree | None'], None]

_POSITION_RE = re.compile(r'on line (?P<line>\d+)(?::(?P<column>\d+))?')


class StyleTree(abc.ABC):
    """
    Abstract base class for parsed stylesheets, as produced by an engine.
    """
    @abc.abstractmethod
    def serialize(self, compress: bool = False) -> str:
        """
        Render this tree as CSS, minified if @compress is set.
        """


class PreprocessorEngine(abc.ABC):
    """
    Abstract base class for stylesheet preprocessing engines. `parse()`
    reports through @on_done, and must do so exactly once before returning.
    """
    @classmethod
    def get_dependencies(cls) -> Set[Dependency]:
        """
        Return the requirements for this engine.
        """
        return set()

    @classmethod
    def is_available(cls) -> bool:
        """
        Return whether this engine's requirements are installed.
        """
        return all(d.satisfied for d in cls.get_dependencies())

    def __repr__(self):
        return f'{self.__class__.__name__}()'

    @abc.abstractmethod
    def parse(self, source: str, context: ParseContext, on_done: OnDone) -> None:
        ...


def diagnostic_from_message(message: str, filename: str):
    """
    Build a ParseError from engine diagnostic text, picking up a line and
    column where the text reports one.
    """
    line = column = None
    if match := _POSITION_RE.search(message):
        line = int(match['line'])
        if match['column']:
            column = int(match['column'])
    return ParseError(message, filename, line, column)


def _sass_compile(source: str, context: ParseContext, output_style: str, precision: int) -> str:
    # libsass rejects an empty data context. CompileError is a ValueError,
    # as is the error for input libsass cannot take at all, like NUL bytes.
    import sass
    try:
        return sass.compile(
            string=source + '\n',
            output_style=output_style,
            precision=precision,
        )
    except ValueError as e:
        raise diagnostic_from_message(str(e), context.filename) from e


class SassTree(StyleTree):
    """
    A stylesheet accepted by libsass. libsass does not expose its tree, so
    this keeps the validated source and renders it on demand.
    """
    def __init__(self, source: str, context: ParseContext, expanded: str, precision: int):
        self.source = source
        self.context = context
        self.precision = precision
        self._renderings = {False: expanded}

    def serialize(self, compress: bool = False) -> str:
        compress = bool(compress)
        if compress not in self._renderings:
            self._renderings[compress] = _sass_compile(
                self.source, self.context, 'compressed', self.precision
            )
        return self._renderings[compress]


class SassEngine(PreprocessorEngine):
    """
    PreprocessorEngine backed by libsass, compiling SCSS. libsass compiles
    synchronously, so @on_done always fires before `parse()` returns.
    """
    @classmethod
    def get_dependencies(cls):
        return {
            PipDependency('libsass', check_name='sass'),
        }

    def __init__(self, precision: int = 5):
        self.precision = precision

    def __repr__(self):
        return f'{self.__class__.__name__}(precision={self.precision})'

    def parse(self, source: str, context: ParseContext, on_done: OnDone):
        try:
            expanded = _sass_compile(source, context, 'expanded', self.precision)
        except ParseError as e:
            on_done(e, None)
            return
        on_done(None, SassTree(source, context, expanded, self.precision))
