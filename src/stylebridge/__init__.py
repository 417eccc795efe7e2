"""
stylebridge compiles stylesheet preprocessor sources to CSS through an
external engine, as a single synchronous step for build pipelines.
"""
from .compiler import CompilerSettings, StyleCompiler
from .core import (
    CompilationOutcome,
    CompilationRequest,
    CompileBridge,
    EngineContractError,
    EngineUnavailableException,
    Failure,
    Output,
    ParseContext,
    ParseError,
    StyleBridgeException,
)
from .dependencies import Dependency, PipDependency
from .engine import PreprocessorEngine, SassEngine, SassTree, StyleTree
from .steps import StyleCompileStep
