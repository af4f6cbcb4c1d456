import io
import unittest
from contextlib import redirect_stdout

from atscript.lang.error import GenericException
from atscript.lang.lexical import tokenize
from atscript.lang.runtime import Scope, interpolate, run
from atscript.lang.syntax import ArgumentDef, Call, FunctionDecl, Type, Value, parse


def execute(source, scope=None):
    """Runs source and returns (stdout, scope)."""
    with redirect_stdout(io.StringIO()) as out:
        scope = run(parse(tokenize(source)), scope)
    return out.getvalue(), scope


class InterpolateTestCase(unittest.TestCase):

    def test_interpolate(self):
        variables = {"x": Value(Type.INT, 5), "name": Value(Type.STRING, "Ann"), "f": Value(Type.FLOAT, 2.5),
                     "b": Value(Type.BOOL, False)}
        cases = {
            "val is @x*": "val is 5",
            "@name* has @x* and @f*, @b*": "Ann has 5 and 2.5, false",
            "no variables": "no variables",
            "only @ here": "only @ here",
            "a * b": "a * b",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, interpolate(case, variables), case)

    def test_missing_variable(self):
        self.assertRaises(GenericException, interpolate, "hi @name*", {})

    def test_star_before_at(self):
        self.assertRaises(GenericException, interpolate, "*a@", {"": Value(Type.INT, 5)})
        self.assertRaises(GenericException, interpolate, "*x@", {})


class RunTestCase(unittest.TestCase):

    def test_interpolation_round_trip(self):
        out, __ = execute("@ x[int=5];\n/say \"val is @x*\";")
        self.assertEqual("val is 5\n", out)

    def test_greet(self):
        out, __ = execute("@ /greet name@string # /say \"hi @name*\"; #\n/greet \"Ann\";")
        self.assertEqual("hi Ann\n", out)

    def test_redeclaration(self):
        out, scope = execute("@ x[int=1];\n@ x[string=two];\n/say \"@x*\";")
        self.assertEqual("two\n", out)
        self.assertEqual(Value(Type.STRING, "two"), scope.variables["x"])

    def test_declaration_does_not_execute(self):
        out, scope = execute("@ /f # /say \"inside\"; #")
        self.assertEqual("", out)
        self.assertIn("f", scope.functions)

    def test_caller_variables_not_visible(self):
        source = "@ x[int=1];\n@ /f # /say \"@x*\"; #\n/f;"
        self.assertRaises(GenericException, execute, source)

    def test_callee_variables_not_visible_after_call(self):
        source = "@ /f # @ y[int=2]; #\n/f;\n/say \"@y*\";"
        self.assertRaises(GenericException, execute, source)

        __, scope = execute("@ /f # @ y[int=2]; #\n/f;")
        self.assertNotIn("y", scope.variables)

    def test_function_visibility(self):
        self.assertRaises(GenericException, execute, "/g;\n@ /g # #")
        out, __ = execute("@ /g # /say \"g\"; #\n/g;")
        self.assertEqual("g\n", out)

    def test_callee_sees_caller_functions(self):
        source = ("@ /inner # /say \"inner\"; #\n"
                  "@ /outer # /inner; #\n"
                  "/outer;")
        out, __ = execute(source)
        self.assertEqual("inner\n", out)

    def test_functions_resolved_at_call_time(self):
        source = ("@ /outer # /inner; #\n"
                  "@ /inner # /say \"late\"; #\n"
                  "/outer;")
        out, __ = execute(source)
        self.assertEqual("late\n", out)

    def test_argument_truncation(self):
        source = "@ /f a@int b@int # /say \"@a*\"; #\n/f 1;"
        out, __ = execute(source)
        self.assertEqual("1\n", out)

        source = "@ /f a@int b@int # /say \"@b*\"; #\n/f 1;"
        self.assertRaises(GenericException, execute, source)

    def test_extra_arguments_ignored(self):
        out, __ = execute("@ /f a@int # /say \"@a*\"; #\n/f 1 2 3;")
        self.assertEqual("1\n", out)

    def test_argument_types_not_checked(self):
        out, __ = execute("@ /f a@int # /say \"@a*\"; #\n/f \"word\";")
        self.assertEqual("word\n", out)

    def test_say_requires_string(self):
        for source in ("/say 3;", "/say true;", "/say;"):
            self.assertRaises(GenericException, execute, source)

    def test_star_before_at_with_empty_variable(self):
        self.assertRaises(GenericException, execute, "@ [int=5];\n/say \"*a@\";")

    def test_missing_function(self):
        with self.assertRaises(GenericException) as context:
            execute("/say \"before\";\n/missingFn;")
        self.assertIn("missingFn", context.exception.msg)
        self.assertEqual(2, context.exception.line)

    def test_missing_function_aborts(self):
        with redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(GenericException):
                run(parse(tokenize("/missingFn;\n/say \"after\";")))
        self.assertEqual("", out.getvalue())

    def test_run_with_scope(self):
        scope = Scope(variables={"x": Value(Type.BOOL, True)})
        out, returned = execute("/say \"@x*\";", scope)
        self.assertEqual("true\n", out)
        self.assertIs(scope, returned)

    def test_scope_enter(self):
        function = FunctionDecl("f", (ArgumentDef("a", Type.INT), ArgumentDef("b", Type.INT)), ())
        scope = Scope({"f": function}, {"x": Value(Type.INT, 0)})
        entered = scope.enter(function, (Value(Type.INT, 1),))

        self.assertEqual({"a": Value(Type.INT, 1)}, entered.variables)
        self.assertEqual(scope.functions, entered.functions)
        self.assertIsNot(scope.functions, entered.functions)

    def test_nodes(self):
        nodes = [FunctionDecl("f", (ArgumentDef("s", Type.STRING),), (Call("say", (Value(Type.STRING, "@s*!"),)),)),
                 Call("f", (Value(Type.STRING, "done"),))]
        with redirect_stdout(io.StringIO()) as out:
            run(nodes)
        self.assertEqual("done!\n", out.getvalue())


if __name__ == '__main__':
    unittest.main()
