"""
Flags module behavioral tests (definitions, coercion, registry, getters).

Scope
- Validate flag construction: names, kinds, default typing and promotion.
- Validate token parsing for every kind, including list elements and booleans.
- Validate registry semantics: last-wins building, right-biased merging,
  all-or-nothing parse_all, sorted help/usage rendering.
- Validate typed getters and their faults.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from arbor.faults import (
    FlagKindError,
    FlagNotFoundError,
    InvalidValueError,
    MissingValueError,
    UnknownFlagError,
)
from arbor.flags import (
    Flag,
    FlagKind,
    Flags,
    boolean,
    build,
    floating,
    floats,
    integer,
    integers,
    string,
    strings,
)


class TestFlagKind(TestCase):

    def testLabels(self):
        self.assertEqual(FlagKind.INT.label, "<INT>")
        self.assertEqual(FlagKind.STRING_LIST.label, "<STRING_LIST>")

    def testElements(self):
        self.assertIs(FlagKind.INT_LIST.element, FlagKind.INT)
        self.assertIs(FlagKind.FLOAT_LIST.element, FlagKind.FLOAT)
        self.assertIs(FlagKind.STRING_LIST.element, FlagKind.STRING)
        self.assertIs(FlagKind.BOOL.element, FlagKind.BOOL)

    def testEveryKindHasAnEmptyDefault(self):
        for kind in FlagKind:
            Flag("x", kind)  # must not raise


class TestFlagDefinition(TestCase):

    def testDefaultsPerFactory(self):
        self.assertIs(boolean("b").value, False)
        self.assertEqual(integer("i").value, 0)
        self.assertEqual(floating("f").value, 0.0)
        self.assertEqual(string("s").value, "")
        self.assertEqual(integers("is").value, ())
        self.assertEqual(floats("fs").value, ())
        self.assertEqual(strings("ss").value, ())

    def testValueStartsAsDefault(self):
        flag = integer("port", default=8080)
        self.assertEqual(flag.default, 8080)
        self.assertEqual(flag.value, 8080)

    def testNameIsTrimmed(self):
        self.assertEqual(string(" name ").name, "name")

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            string("  ")

    def testPrefixedNameRejected(self):
        with self.assertRaises(ValueError):
            string("--name")

    def testNameWithAssignmentRejected(self):
        with self.assertRaises(ValueError):
            string("a=b")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            string(1)

    def testBoolIsNotAnInt(self):
        with self.assertRaises(TypeError):
            integer("port", default=True)

    def testStringDefaultForIntRejected(self):
        with self.assertRaises(TypeError):
            integer("port", default="80")

    def testIntDefaultPromotedToFloat(self):
        flag = floating("ratio", default=1)
        self.assertEqual(flag.default, 1.0)
        self.assertIsInstance(flag.default, float)

    def testListDefaultsBecomeTuples(self):
        self.assertEqual(integers("ids", default=[1, 2]).default, (1, 2))
        self.assertEqual(floats("xs", default=[1, 2.5]).default, (1.0, 2.5))

    def testListDefaultRejectsString(self):
        with self.assertRaises(TypeError):
            strings("tags", default="a,b")

    def testListDefaultRejectsBadElement(self):
        with self.assertRaises(TypeError):
            integers("ids", default=[1, "2"])

    def testDescriptionMustBeString(self):
        with self.assertRaises(TypeError):
            string("name", descr=3)

    def testConstraintsMustBeCallable(self):
        with self.assertRaises(TypeError):
            string("name", constraints=[1])

    def testUsageAndHelp(self):
        flag = integer("steps", descr="how many")
        self.assertEqual(flag.usage(), "--steps=<INT>")
        self.assertEqual(flag.help(), "--steps=<INT>\t\thow many")

    def testParseLeavesOriginalUntouched(self):
        flag = integer("port", default=1)
        parsed = flag.parse("2")
        self.assertEqual(flag.value, 1)
        self.assertEqual(parsed.value, 2)
        self.assertEqual(parsed.default, 1)

    def testEquality(self):
        self.assertEqual(integer("n", default=1), integer("n", default=1))
        self.assertNotEqual(integer("n", default=1), integer("n", default=2))


class TestFlagParsing(TestCase):

    def setUp(self):
        self.flags = Flags([
            boolean("debug"),
            integer("port", default=8080),
            floating("ratio", default=0.5),
            string("name"),
            integers("ids"),
            floats("weights"),
            strings("tags"),
        ])

    def testBooleanSwitch(self):
        self.assertIs(self.flags.parse("--debug").get_bool("debug"), True)

    def testBooleanLiterals(self):
        self.assertIs(self.flags.parse("--debug=true").get_bool("debug"), True)
        self.assertIs(self.flags.parse("--debug=T").get_bool("debug"), True)
        self.assertIs(self.flags.parse("--debug=false").get_bool("debug"), False)
        self.assertIs(self.flags.parse("--debug=f").get_bool("debug"), False)

    def testBooleanGarbageRejected(self):
        with self.assertRaises(InvalidValueError):
            self.flags.parse("--debug=maybe")

    def testInteger(self):
        self.assertEqual(self.flags.parse("--port=9000").get_int("port"), 9000)

    def testNegativeInteger(self):
        self.assertEqual(self.flags.parse("--port=-1").get_int("port"), -1)

    def testIntegerRejectsGarbage(self):
        with self.assertRaises(InvalidValueError) as context:
            self.flags.parse("--port=abc")
        self.assertEqual(context.exception.options["name"], "port")
        self.assertEqual(context.exception.options["raw"], "abc")
        self.assertIs(context.exception.options["kind"], FlagKind.INT)

    def testIntegerRejectsFloat(self):
        with self.assertRaises(InvalidValueError):
            self.flags.parse("--port=1.5")

    def testFloat(self):
        self.assertEqual(self.flags.parse("--ratio=0.25").get_float("ratio"), 0.25)
        self.assertEqual(self.flags.parse("--ratio=3").get_float("ratio"), 3.0)

    def testFloatRejectsGarbage(self):
        with self.assertRaises(InvalidValueError):
            self.flags.parse("--ratio=half")

    def testStringIsVerbatim(self):
        self.assertEqual(self.flags.parse("--name= spaced out ").get_string("name"), " spaced out ")

    def testValueSplitsOnFirstAssignment(self):
        self.assertEqual(self.flags.parse("--name=a=b").get_string("name"), "a=b")

    def testEmptyString(self):
        self.assertEqual(self.flags.parse("--name=").get_string("name"), "")

    def testMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            self.flags.parse("--port")
        self.assertIsInstance(context.exception, InvalidValueError)
        self.assertEqual(context.exception.options["name"], "port")

    def testIntegerList(self):
        self.assertEqual(self.flags.parse("--ids=1,2,3").get_ints("ids"), (1, 2, 3))

    def testFloatList(self):
        self.assertEqual(self.flags.parse("--weights=1,0.5").get_floats("weights"), (1.0, 0.5))

    def testStringList(self):
        self.assertEqual(self.flags.parse("--tags=a,b,c").get_strings("tags"), ("a", "b", "c"))

    def testEmptyList(self):
        self.assertEqual(self.flags.parse("--ids=").get_ints("ids"), ())

    def testListFailsOnFirstBadElement(self):
        with self.assertRaises(InvalidValueError) as context:
            self.flags.parse("--ids=1,x,y")
        self.assertEqual(context.exception.options["element"], "x")
        self.assertEqual(context.exception.options["raw"], "1,x,y")

    def testUnknownFlag(self):
        with self.assertRaises(UnknownFlagError) as context:
            self.flags.parse("--nope")
        self.assertEqual(context.exception.options["name"], "nope")

    def testUnknownFlagSuggestsCloseMatch(self):
        with self.assertRaises(UnknownFlagError) as context:
            self.flags.parse("--prot=1")
        self.assertIn("port", context.exception.options["suggestions"])
        self.assertIn("--port", context.exception.hint)

    def testTokenWithoutPrefixRejected(self):
        with self.assertRaises(ValueError):
            self.flags.parse("port=1")

    def testParseOnlyTouchesOneFlag(self):
        parsed = self.flags.parse("--port=1")
        for name in self.flags:
            if name != "port":
                self.assertEqual(parsed[name], self.flags[name])

    def testParseAll(self):
        parsed = self.flags.parse_all(["--port=1", "--debug", "--tags=x"])
        self.assertEqual(parsed.get_int("port"), 1)
        self.assertIs(parsed.get_bool("debug"), True)
        self.assertEqual(parsed.get_strings("tags"), ("x",))

    def testParseAllLastTokenWins(self):
        self.assertEqual(self.flags.parse_all(["--port=1", "--port=2"]).get_int("port"), 2)

    def testParseAllIsAllOrNothing(self):
        with self.assertRaises(UnknownFlagError):
            self.flags.parse_all(["--port=1", "--nope"])
        self.assertEqual(self.flags.get_int("port"), 8080)


class TestRegistry(TestCase):

    def testBuildLastDuplicateWins(self):
        flags = build([integer("n", default=1), integer("n", default=2)])
        self.assertEqual(len(flags), 1)
        self.assertEqual(flags.value("n"), 2)

    def testRejectsNonFlags(self):
        with self.assertRaises(TypeError):
            Flags(["n"])

    def testMergeIsRightBiased(self):
        base = Flags([string("name", default="global"), boolean("verbose")])
        overlay = Flags([string("name", default="local")])
        merged = base.merge(overlay)
        self.assertEqual(merged.get_string("name"), "local")
        self.assertIn("verbose", merged)
        self.assertEqual(base.get_string("name"), "global")

    def testMergeOperator(self):
        merged = Flags([integer("n", default=1)]) | Flags([integer("n", default=2)])
        self.assertEqual(merged.value("n"), 2)

    def testMergeAcceptsPlainIterables(self):
        merged = Flags().merge([boolean("b")])
        self.assertIn("b", merged)

    def testHelpIsSorted(self):
        flags = Flags([string("zeta", descr="last"), integer("alpha", descr="first")])
        self.assertEqual(flags.help(), ["--alpha=<INT>\t\tfirst", "--zeta=<STRING>\t\tlast"])

    def testUsageIsSorted(self):
        flags = Flags([strings("b"), boolean("a")])
        self.assertEqual(flags.usage(), ["--a=<BOOL>", "--b=<STRING_LIST>"])

    def testEquality(self):
        self.assertEqual(Flags([integer("n")]), Flags([integer("n")]))
        self.assertNotEqual(Flags([integer("n")]), Flags([integer("m")]))

    def testEmptyRegistryIsFalsy(self):
        self.assertFalse(Flags())


class TestGetters(TestCase):

    def setUp(self):
        self.flags = Flags([string("name", default="x"), integer("n", default=3)])

    def testValue(self):
        self.assertEqual(self.flags.value("name"), "x")

    def testMissingFlag(self):
        with self.assertRaises(FlagNotFoundError) as context:
            self.flags.get_int("missing")
        self.assertEqual(context.exception.options["name"], "missing")

    def testWrongKind(self):
        with self.assertRaises(FlagKindError) as context:
            self.flags.get_int("name")
        self.assertIs(context.exception.options["kind"], FlagKind.STRING)
        self.assertIs(context.exception.options["expected"], FlagKind.INT)

    def testListGetterOnScalar(self):
        with self.assertRaises(FlagKindError):
            self.flags.get_ints("n")


if __name__ == "__main__":
    unittest.main()
