"""
Binder behavioral tests (token classification, pending switches, faults).

Scope
- Validate the three equivalent value syntaxes (spaced, ':' and '=') and the
  '-', '--' and '/' prefixes.
- Validate boolean, scalar and list properties, quoting and the positional sink.
- Validate faults: unknown options, missing values, conversion failures and the
  dangling-option warning.
- Validate bind() prompt handling and shell-mode rendering.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (parse, bind, Flag, Option, Multiple, Cardinals, register).
"""
import contextlib
import io
import sys
import threading
import unittest
import warnings
from dataclasses import dataclass, field
from unittest import TestCase, mock

from argbind import (
    SWITCH,
    Cardinals,
    ConversionError,
    DanglingOptionWarning,
    FaultCode,
    Flag,
    MissingValueForOptionError,
    Multiple,
    Option,
    UnknownOptionError,
    bind,
    parse,
    register,
)


class Settings:
    verbose = Flag("v", "verbose")
    level = Option("l", "level", type=int, default=0)
    name = Option()
    include = Multiple("I", "include")
    files = Cardinals()


class Strict:
    count = Option("x", "expand", type=int, default=0)
    debug = Flag()


@register(verbose=Flag("v"), output=Option("o"), sources=Cardinals())
@dataclass
class Build:
    verbose: bool = False
    output: str = "a.out"
    sources: list = field(default_factory=list)


@dataclass
class Release(Build):
    verbose: bool = True
    output: str = "release.out"


class TestSwitchPattern(TestCase):
    """Token classification against the switch pattern."""

    def testPrefixes(self):
        for token in ("-a", "--a", "/a"):
            with self.subTest(token=token):
                self.assertEqual(SWITCH.fullmatch(token)["switch"], "a")

    def testAttachedValues(self):
        for token in ("--a:b", "--a=b", "-a:b", "/a=b"):
            with self.subTest(token=token):
                match = SWITCH.fullmatch(token)
                self.assertEqual((match["switch"], match["value"]), ("a", "b"))

    def testQuotedValue(self):
        match = SWITCH.fullmatch("--a:'x \"y\"'")
        self.assertEqual(match["quoted"], 'x "y"')

    def testPositionalTokens(self):
        for token in ("a", "file.txt", "--a:b\"c", "--a:b'", "--a:\"b\"c\""):
            with self.subTest(token=token):
                self.assertIsNone(SWITCH.fullmatch(token))

    def testUnclosedQuoteIsASwitch(self):
        for token in ("--a:\"b", "--a:'b", "--a:'b\"", "--a=\"b'"):
            with self.subTest(token=token):
                match = SWITCH.fullmatch(token)
                self.assertEqual((match["switch"], match["loose"]), ("a", "b"))


class TestParse(TestCase):
    """Behavioral tests for parse() against descriptor-declared records."""

    def testSpacedColonAndEqualsAreEquivalent(self):
        for tokens in (["--level", "7"], ["--level:7"], ["--level=7"], ["/level:7"]):
            with self.subTest(tokens=tokens):
                self.assertEqual(parse(tokens, Settings()).level, 7)

    def testStringOptionWithoutConverterKeepsText(self):
        for tokens in (["--name", "bob"], ["--name:bob"], ["--name=bob"]):
            with self.subTest(tokens=tokens):
                self.assertEqual(parse(tokens, Settings()).name, "bob")

    def testParseReturnsTarget(self):
        settings = Settings()
        self.assertIs(parse([], settings), settings)

    def testBareFlagIsTrue(self):
        self.assertTrue(parse(["--verbose"], Settings()).verbose)

    def testFlagAttachedValues(self):
        self.assertFalse(parse(["--verbose:false"], Settings()).verbose)
        self.assertTrue(parse(["-v=TRUE"], Settings()).verbose)
        self.assertFalse(parse(["/v: False "], Settings()).verbose)

    def testFlagNeverConsumesNextToken(self):
        settings = parse(["-v", "input.txt"], Settings())
        self.assertTrue(settings.verbose)
        self.assertEqual(settings.files, ["input.txt"])

    def testFlagBadValueIsConversionError(self):
        with self.assertRaises(ConversionError) as context:
            parse(["--verbose:maybe"], Settings())
        self.assertEqual(context.exception.value, "maybe")
        self.assertEqual(context.exception.type, "boolean")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testListAccumulatesInOrder(self):
        settings = parse(["--include", "a", "--include", "b", "-I:a"], Settings())
        self.assertEqual(settings.include, ["a", "b", "a"])

    def testQuotedValueKeepsWhitespace(self):
        self.assertEqual(parse(['--name:"a b"'], Settings()).name, "a b")

    def testQuotedValueKeepsOtherQuoteKind(self):
        self.assertEqual(parse(["--name:'say \"hi\"'"], Settings()).name, 'say "hi"')
        self.assertEqual(parse(["--name=\"it's\""], Settings()).name, "it's")

    def testUnclosedOrMixedQuotesBindValue(self):
        self.assertEqual(parse(['--name:"abc'], Settings()).name, "abc")
        self.assertEqual(parse(["--name:'abc\""], Settings()).name, "abc")
        self.assertEqual(parse(["--level='7"], Settings()).level, 7)

    def testStrayClosingQuoteIsPositional(self):
        self.assertEqual(parse(['--name:abc"'], Settings()).files, ['--name:abc"'])
        with self.assertRaises(UnknownOptionError):
            parse(['--count:1"'], Strict())

    def testPositionalsGoToSink(self):
        settings = parse(["a", "--level", "2", "b"], Settings())
        self.assertEqual(settings.files, ["a", "b"])
        self.assertEqual(settings.level, 2)

    def testSinkIsAddressableBySwitch(self):
        self.assertEqual(parse(["--files", "x", "y"], Settings()).files, ["x", "y"])

    def testUnknownSwitch(self):
        with self.assertRaises(UnknownOptionError) as context:
            parse(["--bogus"], Settings())
        self.assertEqual(context.exception.token, "bogus")
        self.assertEqual(context.exception.code, FaultCode.UNKNOWN_OPTION)
        self.assertEqual(context.exception.index, 1)

    def testPositionalWithoutSink(self):
        with self.assertRaises(UnknownOptionError) as context:
            parse(["free"], Strict())
        self.assertEqual(context.exception.token, "free")

    def testSwitchWhilePendingIsMissingValue(self):
        with self.assertRaises(MissingValueForOptionError) as context:
            parse(["--count", "--debug"], Strict())
        self.assertEqual(context.exception.option, "count")
        self.assertEqual(context.exception.code, FaultCode.MISSING_VALUE_FOR_OPTION)

    def testNegativeNumberIsASwitch(self):
        with self.assertRaises(MissingValueForOptionError):
            parse(["--count", "-5"], Strict())
        self.assertEqual(parse(["--count=-5"], Strict()).count, -5)

    def testAliasesResolveToSameProperty(self):
        self.assertEqual(parse(["-x", "1"], Strict()).count, 1)
        self.assertEqual(parse(["--expand", "1"], Strict()).count, 1)

    def testResolutionIgnoresCase(self):
        self.assertEqual(parse(["--EXPAND", "2"], Strict()).count, 2)
        self.assertEqual(parse(["--Count=3"], Strict()).count, 3)
        self.assertTrue(parse(["-DEBUG"], Strict()).debug)

    def testConversionFailure(self):
        with self.assertRaises(ConversionError) as context:
            parse(["--level", "abc"], Settings())
        self.assertEqual(context.exception.value, "abc")
        self.assertEqual(context.exception.type, "int")
        self.assertEqual(context.exception.index, 2)
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testEarlierTokensStayBoundAfterFailure(self):
        settings = Settings()
        with self.assertRaises(UnknownOptionError):
            parse(["--verbose", "--level=4", "--bogus"], settings)
        self.assertTrue(settings.verbose)
        self.assertEqual(settings.level, 4)

    def testEmptyTokensLeaveRecordUnchanged(self):
        settings = parse(["-v", "--level=3", "-I", "inc", "f"], Settings())
        parse([], settings)
        self.assertTrue(settings.verbose)
        self.assertEqual(settings.level, 3)
        self.assertEqual(settings.include, ["inc"])
        self.assertEqual(settings.files, ["f"])

    def testBlankAttachedValueMakesSwitchPending(self):
        self.assertEqual(parse(["--level:", "5"], Settings()).level, 5)
        self.assertEqual(parse(["--name=''", "x"], Settings()).name, "x")
        self.assertTrue(parse(["--verbose="], Settings()).verbose)

    def testTrailingPendingSwitchKeepsPriorValue(self):
        settings = Settings()
        settings.level = 9
        with self.assertWarns(DanglingOptionWarning) as context:
            parse(["--level"], settings)
        self.assertEqual(settings.level, 9)
        self.assertEqual(context.warning.option, "level")

    def testTrailingPendingListIsNotTouched(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DanglingOptionWarning)
            settings = parse(["-I"], Settings())
        self.assertEqual(settings.include, [])

    def testNoneArgumentsAreTypeErrors(self):
        with self.assertRaises(TypeError):
            parse(None, Settings())
        with self.assertRaises(TypeError):
            parse([], None)

    def testBareStringTokensRejected(self):
        with self.assertRaises(TypeError):
            parse("--verbose", Settings())

    def testNonStringTokenRejected(self):
        with self.assertRaises(TypeError):
            parse(["--level", 3], Settings())

    def testAcceptsAnyIterable(self):
        settings = parse(iter(("-l", "1", "a")), Settings())
        self.assertEqual((settings.level, settings.files), (1, ["a"]))

    def testIndependentRecordsInThreads(self):
        results = {}

        def work(key, tokens):
            results[key] = parse(tokens, Settings())

        threads = [
            threading.Thread(target=work, args=(index, ["--level", str(index), str(index)]))
            for index in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for index in range(8):
            self.assertEqual(results[index].level, index)
            self.assertEqual(results[index].files, [str(index)])


class TestRegisteredRecord(TestCase):
    """parse() against a dataclass that keeps its own storage."""

    def testRegisteredBindings(self):
        build = parse(["-v", "-o", "app", "main.c", "util.c"], Build())
        self.assertTrue(build.verbose)
        self.assertEqual(build.output, "app")
        self.assertEqual(build.sources, ["main.c", "util.c"])

    def testRegisteredDefaultsUntouched(self):
        build = parse(["x.c"], Build())
        self.assertFalse(build.verbose)
        self.assertEqual(build.output, "a.out")

    def testDataclassSubclassKeepsRegisteredBindings(self):
        release = parse(["-v:false", "-o", "app", "main.c"], Release())
        self.assertFalse(release.verbose)
        self.assertEqual(release.output, "app")
        self.assertEqual(release.sources, ["main.c"])

    def testDataclassSubclassDefaults(self):
        release = parse(["-v"], Release())
        self.assertTrue(release.verbose)
        self.assertEqual(release.output, "release.out")


class TestBind(TestCase):
    """Behavioral tests for the bind() convenience runner."""

    def testBindInstantiatesClassAndSplitsString(self):
        settings = bind(Settings, '--level 3 "my file.txt"')
        self.assertIsInstance(settings, Settings)
        self.assertEqual(settings.level, 3)
        self.assertEqual(settings.files, ["my file.txt"])

    def testBindStringPromptDropsQuotesBeforeBinding(self):
        settings = bind(Settings, '--name:"a b" --level="2"')
        self.assertEqual((settings.name, settings.level), ("a b", 2))
        settings = bind(Settings, '--name:"it\'s"')
        self.assertIsNone(settings.name)
        self.assertEqual(settings.files, ["--name:it's"])

    def testBindKeepsGivenInstance(self):
        settings = Settings()
        self.assertIs(bind(settings, ["-v"]), settings)
        self.assertTrue(settings.verbose)

    def testBindReadsProcessArguments(self):
        with mock.patch.object(sys, "argv", ["prog", "-x", "4"]):
            self.assertEqual(bind(Strict).count, 4)

    def testBindRaisesOutsideShell(self):
        with self.assertRaises(UnknownOptionError):
            bind(Settings, ["--bogus"])

    def testBindRejectsBadPrompt(self):
        with self.assertRaises(TypeError):
            bind(Settings, 42)
        with self.assertRaises(TypeError):
            bind(None, [])

    def testBindRendersAndExitsInShell(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            bind(Settings, ["--bogus"], shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("11112", stderr.getvalue())
        self.assertIn("unknown option 'bogus'", stderr.getvalue())

    def testBindRendersWarningInShell(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), warnings.catch_warnings():
            warnings.simplefilter("error", DanglingOptionWarning)
            settings = bind(Settings, ["--level"], shell=True, colorful=False)
        self.assertEqual(settings.level, 0)
        self.assertIn("12117", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
