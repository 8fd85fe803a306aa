import pytest
from kestrel.builtin_function import BuiltinFunction, Registry
from kestrel.environment import Environment, generate_environment
from kestrel.errors import KestrelError
from kestrel.interpreter import standard_registry
from kestrel.types import IntegerVal, FloatVal, NativeFunctionVal, NullVal


def test_declare_then_get():
    env = Environment()
    env.declare('a', IntegerVal(1))
    assert env.get('a') == IntegerVal(1)
    assert 'a' in env


def test_redeclaration_is_a_name_error():
    env = Environment()
    env.declare('a', IntegerVal(1))
    with pytest.raises(KestrelError) as exc_info:
        env.declare('a', IntegerVal(2), 3, 1)
    err = exc_info.value.err
    assert err.name == 'NameError'
    assert err.message == "'a' is already declared"
    assert (err.line, err.column) == (3, 1)
    assert env.get('a') == IntegerVal(1)


def test_assign_requires_declaration():
    env = Environment()
    with pytest.raises(KestrelError) as exc_info:
        env.assign('a', IntegerVal(1))
    assert exc_info.value.err.name == 'NameError'
    assert exc_info.value.err.message == "'a' is undefined"
    assert 'a' not in env


def test_assign_replaces_value():
    env = Environment()
    env.declare('a', IntegerVal(1))
    env.assign('a', FloatVal(2.5))
    assert env.get('a') == FloatVal(2.5)


def test_lookup_missing_returns_none():
    env = Environment()
    assert env.lookup('missing') is None
    with pytest.raises(KestrelError) as exc_info:
        env.get('missing', 4, 2)
    assert exc_info.value.err.name == 'NameError'
    assert (exc_info.value.err.line, exc_info.value.err.column) == (4, 2)


def test_standard_environment_holds_print():
    env = generate_environment(standard_registry())
    assert env.get('print') == NativeFunctionVal('print')


def test_every_registered_native_gets_a_handle():
    registry = Registry()
    registry.register(BuiltinFunction('noop', 0, lambda args: NullVal()))
    registry.register(BuiltinFunction('also', None, lambda args: NullVal()))
    env = generate_environment(registry)
    assert sorted(env.values) == ['also', 'noop']
    assert registry.resolve('noop').arity == 0
    assert registry.resolve('missing') is None


def test_environments_are_independent():
    first = generate_environment(standard_registry())
    second = generate_environment(standard_registry())
    first.declare('a', IntegerVal(1))
    assert second.lookup('a') is None
