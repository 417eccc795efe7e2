"""
The stylebridge command line interface, compiling one stylesheet per run.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .compiler import DEFAULT_SETTINGS, CompilerSettings, StyleCompiler
from .core import EngineUnavailableException, ParseError
from .dependencies import missing
from .engine import PreprocessorEngine, SassEngine
from .pretty_utils import get_console, print_with_style

STDIO = Path('-')
STDIN_NAME = '<stdin>'


class CompileNamespace:
    """
    Internal used to preserve typing between CompilerSettings and argparse.
    """
    input: Path
    output: Path | None
    compress: bool
    encoding: str
    newline: str
    force: bool
    verbose: bool
    audit_dependencies: bool

    def __init__(self, settings: CompilerSettings | None = None):
        self.__dict__.update(DEFAULT_SETTINGS)
        if settings:
            self.__dict__.update(settings)

    def to_compiler_settings(self):
        """
        Convert this argparse-oriented namespace into StyleCompiler settings.
        """
        return CompilerSettings(
            compress=self.compress,
            encoding=self.encoding,
            newline=self.newline,
            force=self.force,
        )

    def resolve_output(self):
        """
        Return the output path, defaulting to the input with a `.css` suffix,
        or stdout when reading from stdin.
        """
        if self.output is not None:
            return self.output
        if self.input == STDIO:
            return STDIO
        return self.input.with_suffix('.css')


def parse_args(arguments: list[str] | None = None, settings: CompilerSettings | None = None, **kw):
    """
    Combine optional CompilerSettings defaults with command line arguments.
    """
    namespace = CompileNamespace(settings)

    parser = argparse.ArgumentParser(**kw)
    parser.add_argument('input',
                        help='stylesheet to compile, or - for stdin',
                        type=Path,
                        nargs='?',
                        default=None)
    parser.add_argument('output',
                        help='file to write CSS to, or - for stdout; defaults to the input with a .css suffix',
                        type=Path,
                        nargs='?',
                        default=None)
    parser.add_argument('-x', '--compress',
                        help='minify the generated CSS',
                        action='store_true',
                        default=namespace.compress)
    parser.add_argument('--force',
                        help='compile even if the output is newer than the input',
                        action=argparse.BooleanOptionalAction,
                        default=namespace.force)
    parser.add_argument('--encoding',
                        help='character encoding for reading and writing files',
                        default=namespace.encoding)
    parser.add_argument('-v', '--verbose',
                        help='show debug logging',
                        action='store_true')
    parser.add_argument('--audit-dependencies',
                        help='show the status of the engine dependencies instead of compiling',
                        action='store_true')

    args = parser.parse_args(arguments, namespace=namespace)
    if args.input is None and not args.audit_dependencies:
        parser.error('the following arguments are required: input')
    if args.input is not None and args.input != STDIO and args.resolve_output() == args.input:
        parser.error(f'output would overwrite the input file {args.input}')
    return args


def pprint_dependencies(engine: type[PreprocessorEngine]):
    """
    Prettily display dependency information for the given engine class.
    """
    print_with_style(f'{engine.__name__} dependencies')
    for dep in sorted(engine.get_dependencies(), key=str):
        if dep.satisfied:
            print_with_style(f'✓ {dep}', style='green')
        else:
            print_with_style(f'✗ {dep}: {dep.install_hint}', style='red')


def pprint_missing_deps(engine: type[PreprocessorEngine]):
    """
    Prettily display an error for the given engine with missing dependencies.
    """
    print_with_style(
        f'{engine.__name__} is unavailable due to missing dependencies!',
        file='stderr',
        style='red'
    )
    for dep in missing(engine.get_dependencies()):
        print_with_style(f'✗ {dep}: {dep.install_hint}', file='stderr', style='red')


def setup_logging():
    """
    Route debug logging to stderr through rich.
    """
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format='%(message)s',
        handlers=[RichHandler(console=get_console('stderr'), show_path=False)],
        force=True,
    )


def run(args: CompileNamespace, engine_cls: type[PreprocessorEngine] = SassEngine):
    """
    Compile according to a parsed namespace.
    """
    compiler = StyleCompiler(engine_cls(), **args.to_compiler_settings())
    output = args.resolve_output()

    if args.input == STDIO:
        source = sys.stdin.buffer.read().decode(compiler.encoding)
        text = compiler.compile(source, STDIN_NAME)
        if output == STDIO:
            sys.stdout.write(text)
        else:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(text, compiler.encoding, newline=compiler.settings['newline'])
        return

    if output == STDIO:
        sys.stdout.write(compiler.compile_file(args.input))
        return

    if compiler.compile_to(args.input, output):
        print_with_style(f'Compiled {args.input} -> {output}', file='stderr', style='green')
    else:
        print_with_style(f'{output} is up to date', file='stderr')


def main(arguments: list[str] | None = None, engine_cls: type[PreprocessorEngine] = SassEngine):
    """
    stylebridge main function. Compiles a stylesheet file (or stdin) to CSS.
    """
    args = parse_args(arguments, prog='stylebridge', description='Compile a stylesheet to CSS.')
    if args.verbose:
        setup_logging()

    if args.audit_dependencies:
        pprint_dependencies(engine_cls)
        return

    try:
        run(args, engine_cls)
    except EngineUnavailableException:
        pprint_missing_deps(engine_cls)
        sys.exit(1)
    except ParseError as e:
        print_with_style(str(e), file='stderr', style='red')
        sys.exit(1)
    except UnicodeDecodeError as e:
        print_with_style(f'{args.input}: cannot decode as {e.encoding}: {e.reason}', file='stderr', style='red')
        sys.exit(1)
    except OSError as e:
        print_with_style(f'{e.filename or args.input}: {e.strerror or e}', file='stderr', style='red')
        sys.exit(1)
