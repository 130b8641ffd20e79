"""Tests for code hosts, the compiled-unit cache and the executor."""

import pytest

from plate.compiler import preprocess
from plate.compiler.spec import PREAMBLE_LINES
from plate.config import RenderOptions
from plate.exceptions import (
    TemplateCompileError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from plate.runtime import CompiledUnitCache, Executor, IdentityKey, PythonHost

HELLO = "def _main(_options, _params):\n    return 'hello ' + _params['who']\n\n_compiled = True\n"


class CountingHost(PythonHost):
    """PythonHost that counts loads."""

    def __init__(self):
        self.loads = 0

    def load(self, namespace_id, program, filename, line_offset=0):
        self.loads += 1
        return super().load(namespace_id, program, filename, line_offset)


def key(n):
    return IdentityKey(device=1, inode=n, mtime_ns=1000)


class TestPythonHost:
    def test_load_and_invoke(self):
        host = PythonHost()
        unit = host.load("plate.test.hello", HELLO, "hello.plate")

        assert unit.compiled
        assert unit.module.__name__ == "plate.test.hello"
        assert host.invoke(unit, None, {"who": "you"}) == "hello you"

    def test_units_are_isolated(self):
        host = PythonHost()
        a = host.load("plate.test.a", "x = 'a'\ndef _main(o, p):\n    return x\n", "a")
        b = host.load("plate.test.b", "x = 'b'\ndef _main(o, p):\n    return x\n", "b")

        assert host.invoke(a, None, {}) == "a"
        assert host.invoke(b, None, {}) == "b"

    def test_syntax_error_maps_to_template_line(self):
        program = preprocess("ok\n[[ x = ]]")

        with pytest.raises(TemplateCompileError) as excinfo:
            PythonHost().load("plate.test.bad", program, "bad.plate", PREAMBLE_LINES)

        assert excinfo.value.line == 2
        assert "on line 2" in str(excinfo.value)

    def test_error_while_loading(self):
        with pytest.raises(TemplateCompileError, match="RuntimeError: boom"):
            PythonHost().load("plate.test.boom", "raise RuntimeError('boom')\n", "boom")

    def test_missing_entry_point(self):
        host = PythonHost()
        unit = host.load("plate.test.empty", "_compiled = True\n", "empty.plate")

        with pytest.raises(TemplateCompileError, match="does not define _main"):
            host.invoke(unit, None, {})


class TestCompiledUnitCache:
    def test_install_and_lookup(self):
        cache = CompiledUnitCache()
        unit = cache.install(key(1), HELLO, "hello.plate")

        assert cache.lookup(key(1)) is unit
        assert key(1) in cache
        assert len(cache) == 1
        assert unit.namespace_id == "plate.cached.1_1_1000"

    def test_install_existing_key_does_not_reload(self):
        host = CountingHost()
        cache = CompiledUnitCache(host=host)

        first = cache.install(key(1), HELLO, "hello.plate")
        second = cache.install(key(1), HELLO, "hello.plate")

        assert first is second
        assert host.loads == 1

    def test_uncached_units_get_fresh_namespaces(self):
        cache = CompiledUnitCache()

        a = cache.install(None, HELLO, "<string>")
        b = cache.install(None, HELLO, "<string>")

        assert a.namespace_id.startswith("plate.uncached.")
        assert a.namespace_id != b.namespace_id
        assert len(cache) == 0
        assert cache.lookup(None) is None

    def test_unit_without_compiled_flag_is_a_miss(self):
        cache = CompiledUnitCache()
        cache.install(key(1), "def _main(_options, _params):\n    return ''\n", "x")

        assert key(1) in cache
        assert cache.lookup(key(1)) is None

    def test_changed_identity_is_a_new_unit(self):
        cache = CompiledUnitCache()
        old = cache.install(key(1), HELLO, "hello.plate")
        new = cache.install(key(1)._replace(mtime_ns=2000), HELLO, "hello.plate")

        assert old is not new
        assert len(cache) == 2

    def test_least_recently_used_is_evicted(self):
        cache = CompiledUnitCache(max_size=2)
        cache.install(key(1), HELLO, "one")
        cache.install(key(2), HELLO, "two")
        cache.lookup(key(1))
        cache.install(key(3), HELLO, "three")

        assert key(1) in cache
        assert key(2) not in cache
        assert key(3) in cache

    def test_invalid_max_size(self):
        with pytest.raises(ValueError):
            CompiledUnitCache(max_size=0)

    def test_clear(self):
        cache = CompiledUnitCache()
        cache.install(key(1), HELLO, "hello.plate")
        cache.clear()

        assert len(cache) == 0


class TestExecutor:
    def test_invoke_passes_params(self):
        host = PythonHost()
        unit = host.load("plate.test.exec", HELLO, "hello.plate")

        output = Executor(host).invoke(unit, RenderOptions(params={"who": "all"}))

        assert output == "hello all"

    def test_runtime_error_is_wrapped_with_line(self):
        host = PythonHost()
        program = preprocess("a\n[[ 1 / 0 ]]")
        unit = host.load("plate.test.div", program, "div.plate", PREAMBLE_LINES)

        with pytest.raises(TemplateRuntimeError) as excinfo:
            Executor(host).invoke(unit, RenderOptions())

        assert excinfo.value.line == 2
        assert isinstance(excinfo.value.original, ZeroDivisionError)
        assert str(excinfo.value).startswith("ZeroDivisionError on line 2")
        assert excinfo.value.__cause__ is excinfo.value.original

    def test_plate_errors_pass_through(self):
        host = PythonHost()
        program = (
            "from plate.exceptions import TemplateSyntaxError\n"
            "def _main(_options, _params):\n"
            "    raise TemplateSyntaxError('inner')\n"
        )
        unit = host.load("plate.test.nested", program, "nested.plate")
        executor = Executor(host)

        with pytest.raises(TemplateSyntaxError, match="^inner$"):
            executor.invoke(unit, RenderOptions())
        assert executor.depth == 0
