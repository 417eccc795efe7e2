"""
A configured, file-aware compiler built on CompileBridge.
"""
from __future__ import annotations

import logging
import time
import typing as t
from pathlib import Path

from .core import CompileBridge

if t.TYPE_CHECKING:
    from .engine import PreprocessorEngine


logger = logging.getLogger(__name__)

INLINE_NAME = '<inline>'


class CompilerSettings(t.TypedDict, total=False):
    """
    TypedDict for StyleCompiler configuration.
    """
    compress: bool
    encoding: str
    newline: str
    force: bool


DEFAULT_SETTINGS = CompilerSettings(
    compress=False,
    encoding='utf-8',
    newline='\n',
    force=True,
)


class StyleCompiler:
    """
    Compiles stylesheet strings and files to CSS. Instances hold only
    configuration and may be reused across calls and threads.
    """
    def __init__(self, engine: PreprocessorEngine | None = None, **settings: t.Any):
        unknown = settings.keys() - DEFAULT_SETTINGS.keys()
        if unknown:
            raise TypeError(f'Unknown compiler settings: {", ".join(sorted(unknown))}')
        self.settings = CompilerSettings(**(DEFAULT_SETTINGS | settings))
        self.bridge = CompileBridge(engine)

    @property
    def compress(self) -> bool:
        return self.settings['compress']

    @property
    def encoding(self) -> str:
        return self.settings['encoding']

    def compile(self, source: str, name: str = INLINE_NAME) -> str:
        """
        Compile @source to CSS, raising ParseError on failure. @name is used
        for error messages only.
        """
        start = time.perf_counter()
        text = self.bridge.compile(name, source, self.compress).unwrap()
        logger.debug('Compiled %s in %.1f ms', name, (time.perf_counter() - start) * 1000)
        return text

    def compile_file(self, input_path: Path, name: str | None = None) -> str:
        """
        Read and compile @input_path. @name defaults to the file's name.
        """
        input_path = Path(input_path)
        source = input_path.read_text(self.encoding)
        return self.compile(source, name if name is not None else input_path.name)

    def is_stale(self, input_path: Path, output_path: Path) -> bool:
        """
        Return whether @output_path is missing or older than @input_path.
        """
        if not output_path.exists():
            return True
        return output_path.stat().st_mtime < input_path.stat().st_mtime

    def compile_to(self, input_path: Path, output_path: Path, force: bool | None = None) -> bool:
        """
        Compile @input_path and write the CSS to @output_path. Unless @force
        (defaulting to the `force` setting) is set, up-to-date outputs are
        left alone. Returns whether a compilation happened.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        if force is None:
            force = self.settings['force']

        if not force and not self.is_stale(input_path, output_path):
            logger.debug('Skipping %s, %s is up to date', input_path, output_path)
            return False

        data = self.compile_file(input_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(data, self.encoding, newline=self.settings['newline'])
        return True
