"""
End-to-end tests for the executor and the Runtime facade.
"""
import textwrap
from pathlib import Path

import pytest

from pipescript import run
from pipescript.ast import Statement, StatementNode
from pipescript.config import Config
from pipescript.environment import Environment
from pipescript.errors import CommandLookupError, EvaluationError, LexError, PipeScriptError
from pipescript.executor import execute
from pipescript.registry import CommandRegistry
from pipescript.runtime import Runtime


def test_value_threads_through_statements(run_source):
    result = run_source("""
        set "a-b-c"
        split "-"
        join "+"
    """)
    assert result == "a+b+c"


def test_initial_value_is_nil(run_source):
    assert run_source("print") is None


def test_if_else_runs_only_else_when_variable_absent(runtime, stdout):
    runtime.run("if $x\nstore $y, 1\nelse\nstore $y, 2\nend")
    assert runtime.env["y"] == 2


def test_if_else_runs_only_if_when_variable_truthy(runtime):
    runtime.run("store $x, 5\nif $x\nstore $y, 1\nelse\nstore $y, 2\nend")
    assert runtime.env["y"] == 1


@pytest.mark.parametrize("a, b, expected", [(1, 0, "first"), (0, 1, "second"), (0, 0, "third"), (1, 1, "first")])
def test_elif_chain_takes_first_true_branch(run_source, a, b, expected):
    result = run_source(f"""
        store $a, {a}
        store $b, {b}
        if $a
          set "first"
        elif $b
          set "second"
        else
          set "third"
        end
    """)
    assert result == expected


def test_untaken_chain_keeps_value(run_source):
    assert run_source('set "keep"\nif 0\nset "no"\nelif 0\nset "no"\nend') == "keep"


def test_nested_chains_do_not_interfere(run_source):
    result = run_source("""
        store $outer, 1
        if $outer
          if 0
            set "inner-if"
          else
            set "inner-else"
          end
          store $seen, "yes"
        else
          set "outer-else"
        end
    """)
    assert result == "inner-else"


def test_foreach_runs_body_per_element(runtime, stdout):
    result = runtime.run("""
set "x,y,z"
split ","
foreach
  print
  store $last
  replace "y", "Y"
end
""")
    assert result == ["x", "Y", "z"]
    assert stdout.getvalue().splitlines() == ["x", "y", "z"]
    assert runtime.env["last"] == "z"
    assert runtime.metrics["commands"]["print"] == 3


def test_foreach_with_nested_conditional(run_source):
    result = run_source("""
        set "1,2,3"
        split ","
        foreach
          if 0
            set "never"
          elif 1
            replace "2", "two"
          end
        end
        join "|"
    """)
    assert result == "1|two|3"


def test_function_and_call(run_source):
    result = run_source("""
        function $shout
          replace "hi", "HI"
        end
        set "hi"
        call $shout
    """)
    assert result == "HI"


def test_unknown_command_stops_the_run(runtime, stdout):
    src = 'print "one"\nprint "two"\n\nfroble\nprint "after"'
    with pytest.raises(CommandLookupError, match="Line 4: Command `froble` not found") as info:
        runtime.run(src)
    assert info.value.line == 4
    assert stdout.getvalue().splitlines() == ["one", "two"]


def test_unknown_command_inside_untaken_branch_is_never_looked_up(run_source):
    assert run_source('set 1\nif 0\nfroble\nend') == 1


def test_run_reads_path(tmp_path, stdout):
    script = tmp_path / "hello.pipe"
    script.write_text('print "hello"\n', encoding="utf-8")
    Runtime(stdout=stdout).run(script)
    assert stdout.getvalue() == "hello\n"


def test_string_source_is_never_treated_as_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "print").write_text("froble", encoding="utf-8")
    assert Runtime().run("set 3\nprint") == 3


def test_run_without_program():
    with pytest.raises(PipeScriptError, match="No program loaded"):
        Runtime().run()


def test_each_run_gets_a_fresh_environment(runtime):
    runtime.load("store $n, $n + 0")
    with pytest.raises(PipeScriptError):
        runtime.run()
    runtime.load("store $n, 1")
    runtime.run()
    first = runtime.env
    runtime.run()
    assert runtime.env is not first
    assert runtime.env.variables == {"n": 1}


def test_metrics_count_statements(runtime):
    runtime.run("set 1\nstore $a\nstore $b\n")
    assert runtime.metrics["statements"] == 3
    assert runtime.metrics["commands"] == {"set": 1, "store": 2}


def test_module_level_run(capsys):
    assert run('set 2 * 21\nprint') == 42
    assert capsys.readouterr().out == "42\n"


def test_custom_block_command_registered_on_registry(stdout):
    registry = CommandRegistry()

    @registry.register("twice", block=True)
    def twice(value, args, line, env, children):
        value = execute(children, value, env)
        return execute(children, value, env)

    @registry.register("inc")
    def inc(value, args, line, env, children):
        return (value or 0) + 1

    rt = Runtime(registry=registry, stdout=stdout)
    assert "twice" in rt.config.block_commands
    assert rt.run("twice\ninc\ninc\nend") == 4


def test_execute_with_hand_built_tree():
    registry = CommandRegistry()
    registry.register("double", lambda value, args, line, env, children: value * 2)
    nodes = [StatementNode(Statement(1, "double")), StatementNode(Statement(2, "double"))]
    assert execute(nodes, 3, Environment(registry=registry)) == 12


COUNTDOWN = """
    store $n, {start}
    function $down
      if $n
        store $n, $n-1
        call $down
      end
    end
    call $down
"""


def test_recursive_call_with_base_case(runtime):
    runtime.run(textwrap.dedent(COUNTDOWN.format(start=50)))
    assert runtime.env["n"] == 0
    assert runtime.env.counts["call"] == 51
    assert runtime.env.call_depth == 0


def test_recursion_deeper_than_limit_is_an_evaluation_error(run_source):
    with pytest.raises(EvaluationError, match=r"Line 6: Call depth exceeded \(100\)"):
        run_source(COUNTDOWN.format(start=300))


def test_unbounded_recursion_names_the_call_line(run_source):
    with pytest.raises(EvaluationError, match=r"Line 2: Call depth exceeded") as info:
        run_source("function $f\ncall $f\nend\ncall $f")
    assert info.value.line == 2


def test_call_depth_limit_comes_from_config(stdout):
    src = textwrap.dedent(COUNTDOWN.format(start=5))
    runtime = Runtime(config=Config(max_call_depth=6), stdout=stdout)
    runtime.run(src)
    assert runtime.env["n"] == 0
    with pytest.raises(EvaluationError, match="Call depth exceeded"):
        Runtime(config=Config(max_call_depth=5), stdout=stdout).run(src)


def test_call_depth_resets_after_failed_call(runtime):
    with pytest.raises(EvaluationError):
        runtime.run("function $f\ncall $f\nend\ncall $f")
    assert runtime.env.call_depth == 0


def test_run_rejects_non_utf8_path(tmp_path):
    script = tmp_path / "bad.pipe"
    script.write_bytes(b'print "ok"\nprint "\xff\xfe abc"\n')
    with pytest.raises(LexError, match="Line 2: .*bad.pipe is not valid UTF-8") as info:
        Runtime().run(script)
    assert info.value.line == 2
