import io

from portclient.reporting import ERROR, INFO, SUCCESS, CollectingReporter, ConsoleReporter


def test_console_colors_success_and_error():
    stream = io.StringIO()
    reporter = ConsoleReporter(stream=stream, color=True)
    reporter.report(SUCCESS, "fine")
    reporter.report(ERROR, "broken")
    assert stream.getvalue() == "\x1b[32mfine\x1b[0m\n\x1b[31mbroken\x1b[0m\n"


def test_console_info_only_when_verbose():
    quiet, loud = io.StringIO(), io.StringIO()
    ConsoleReporter(stream=quiet).report(INFO, "Executing: kill")
    ConsoleReporter(verbose=True, stream=loud, color=False).report(INFO, "Executing: kill")
    assert quiet.getvalue() == ""
    assert loud.getvalue() == "Executing: kill\n"


def test_collecting_reporter_filters_by_level():
    reporter = CollectingReporter()
    reporter.report(SUCCESS, "a")
    reporter.report(INFO, "b")
    assert reporter.lines() == ["a", "b"]
    assert reporter.lines(INFO) == ["b"]


def test_console_is_plain_when_not_a_terminal():
    stream = io.StringIO()
    ConsoleReporter(stream=stream).report(ERROR, "broken")
    assert stream.getvalue() == "broken\n"
