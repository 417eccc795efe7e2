import pytest

from stylebridge.core import (
    CompilationRequest,
    CompileBridge,
    EngineContractError,
    EngineUnavailableException,
    Failure,
    Output,
    ParseContext,
    ParseError,
)
from stylebridge.dependencies import PipDependency
from stylebridge.engine import PreprocessorEngine, StyleTree


class EchoTree(StyleTree):
    def __init__(self, source: str):
        self.source = source
        self.serialized_with: list[bool] = []

    def serialize(self, compress: bool = False) -> str:
        self.serialized_with.append(compress)
        return self.source.replace(' ', '') if compress else self.source


class EchoEngine(PreprocessorEngine):
    """
    Accepts anything except sources containing `!bad`.
    """
    def __init__(self):
        self.contexts: list[ParseContext] = []
        self.trees: list[EchoTree] = []

    def parse(self, source, context, on_done):
        self.contexts.append(context)
        if '!bad' in source:
            on_done(ParseError('bad token', context.filename, 1, source.index('!bad') + 1), None)
            return
        tree = EchoTree(source)
        self.trees.append(tree)
        on_done(None, tree)


class DeferredEngine(PreprocessorEngine):
    def __init__(self):
        self.pending = []

    def parse(self, source, context, on_done):
        self.pending.append(on_done)


class TwiceEngine(PreprocessorEngine):
    def parse(self, source, context, on_done):
        on_done(None, EchoTree(source))
        on_done(ParseError('late', context.filename), None)


class BothEngine(PreprocessorEngine):
    def parse(self, source, context, on_done):
        on_done(ParseError('both', context.filename), EchoTree(source))


class NeitherEngine(PreprocessorEngine):
    def parse(self, source, context, on_done):
        on_done(None, None)


class MissingEngine(EchoEngine):
    @classmethod
    def get_dependencies(cls):
        return {PipDependency('stylebridge-no-such-package', check_name='stylebridge_no_such_package')}


@pytest.fixture
def engine():
    return EchoEngine()


@pytest.fixture
def bridge(engine):
    return CompileBridge(engine)


def test_compile_output(bridge: CompileBridge):
    outcome = bridge.compile('a.style', '.a { color: red; }', False)
    assert outcome == Output('.a { color: red; }')
    assert outcome.ok
    assert outcome.unwrap() == '.a { color: red; }'


def test_compile_failure(bridge: CompileBridge):
    outcome = bridge.compile('a.style', 'a { !bad }', False)
    assert isinstance(outcome, Failure)
    assert not outcome.ok
    assert not hasattr(outcome, 'text')
    assert outcome.diagnostic == ParseError('bad token', 'a.style', 1, 5)
    with pytest.raises(ParseError) as exc_info:
        outcome.unwrap()
    assert exc_info.value is outcome.diagnostic


@pytest.mark.parametrize('compress', [False, True])
def test_compress_gates_serialization(bridge: CompileBridge, engine: EchoEngine, compress: bool):
    outcome = bridge.compile('a.style', '.a { color: red; }', compress)
    assert engine.trees[0].serialized_with == [compress]
    assert outcome.unwrap() == ('.a{color:red;}' if compress else '.a { color: red; }')


def test_filename_scopes_parse_context(bridge: CompileBridge, engine: EchoEngine):
    bridge.compile('one.style', '', False)
    bridge.compile('', '', False)
    assert engine.contexts == [ParseContext('one.style'), ParseContext('')]


def test_empty_source_goes_through_engine(bridge: CompileBridge, engine: EchoEngine):
    assert bridge.compile('', '', False) == Output('')
    assert len(engine.trees) == 1


def test_failure_does_not_serialize(bridge: CompileBridge, engine: EchoEngine):
    bridge.compile('a.style', '!bad', True)
    assert engine.trees == []


def test_compile_request(bridge: CompileBridge):
    request = CompilationRequest('a.style', '.a { }', compress=True)
    assert bridge.compile_request(request) == Output('.a{}')
    assert CompilationRequest('a.style', '.a { }').compress is False


@pytest.mark.parametrize('engine_cls', [DeferredEngine, TwiceEngine, BothEngine, NeitherEngine])
def test_engine_contract_violations(engine_cls):
    bridge = CompileBridge(engine_cls())
    with pytest.raises(EngineContractError):
        bridge.compile('a.style', '.a { }', False)


def test_unavailable_engine():
    engine = MissingEngine()
    with pytest.raises(EngineUnavailableException) as exc_info:
        CompileBridge(engine)
    assert exc_info.value.engine is engine


@pytest.mark.parametrize('error,expected', [
    (ParseError('oops'), 'oops'),
    (ParseError('oops', 'main.scss'), 'main.scss: oops'),
    (ParseError('oops', 'main.scss', 3, 7), 'main.scss@(3,7): oops'),
    (ParseError('oops', 'main.scss', 3), 'main.scss@(3,0): oops'),
    (ParseError('oops', '', 3, 7), '@(3,7): oops'),
])
def test_parse_error_str(error: ParseError, expected: str):
    assert str(error) == expected


def test_outcomes_are_distinct():
    assert Output('x') != Failure(ParseError('x'))
    assert Failure(ParseError('x', 'a')) == Failure(ParseError('x', 'a'))
    assert Failure(ParseError('x', 'a')) != Failure(ParseError('x', 'b'))


class RaisingTree(StyleTree):
    def __init__(self, error: Exception):
        self.error = error

    def serialize(self, compress: bool = False) -> str:
        raise self.error


class LateEngine(PreprocessorEngine):
    def __init__(self, error: Exception):
        self.error = error

    def parse(self, source, context, on_done):
        on_done(None, RaisingTree(self.error))


def test_serialize_diagnostic_is_failure():
    error = ParseError('only found while rendering', 'late.style', 2, 1)
    outcome = CompileBridge(LateEngine(error)).compile('late.style', '.a { }', True)
    assert outcome == Failure(error)


def test_serialize_bug_propagates():
    bridge = CompileBridge(LateEngine(RuntimeError('renderer crashed')))
    with pytest.raises(RuntimeError):
        bridge.compile('late.style', '.a { }', False)
