"""
A pipeline Step for compiling stylesheets, usable with rule-based build
tools that call steps as `step(path, output_paths)`.
"""
from __future__ import annotations

import contextlib
import shutil
import typing as t
from pathlib import Path

from .compiler import StyleCompiler
from .engine import PreprocessorEngine, SassEngine

if t.TYPE_CHECKING:
    from collections.abc import Set
    from .dependencies import Dependency


class StyleCompileStep:
    """
    Step to preprocess a stylesheet into compliant CSS, writing the result to
    the first output path and copying it to the rest.
    """
    engine_cls: type[PreprocessorEngine] = SassEngine
    context: t.Any = None

    def __init__(self,
                 compress: bool = False,
                 encoding: str = 'utf-8',
                 newline: str = '\n',
                 engine: PreprocessorEngine | None = None):
        self.compress = compress
        self.encoding = encoding
        self.newline = newline
        self.engine = engine
        self._compiler: StyleCompiler | None = None

    @classmethod
    def get_dependencies(cls) -> Set[Dependency]:
        return cls.engine_cls.get_dependencies()

    @classmethod
    def is_available(cls) -> bool:
        return all(d.satisfied for d in cls.get_dependencies())

    def bind(self, context: t.Any):
        """
        Bind this Step to a pipeline context.
        """
        self.context = context

    @property
    def compiler(self) -> StyleCompiler:
        if self._compiler is None:
            self._compiler = StyleCompiler(
                self.engine or self.engine_cls(),
                compress=self.compress,
                encoding=self.encoding,
                newline=self.newline,
            )
        return self._compiler

    @contextlib.contextmanager
    def ensure_outputs(self, output_paths: list[Path]):
        for o_path in output_paths:
            o_path.parent.mkdir(parents=True, exist_ok=True)
        yield
        for o_path in output_paths[1:]:
            shutil.copy(output_paths[0], o_path)

    def __call__(self, path: Path, output_paths: list[Path]):
        if not output_paths:
            return
        processed = self.compiler.compile_file(path)
        with self.ensure_outputs(output_paths):
            output_paths[0].write_text(processed, self.encoding, newline=self.newline)
