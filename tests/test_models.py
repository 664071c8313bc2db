import pytest

from miring.models import Diagnostic, SchemaRun, Severity, add_diagnostic, has_fatal_errors


@pytest.mark.parametrize(
    "value,expected",
    [
        ("fatal", Severity.FATAL),
        ("MIRING", Severity.CHECKLIST),
        ("checklist", Severity.CHECKLIST),
        (" warning ", Severity.WARNING),
        ("info", Severity.INFO),
        ("bogus", Severity.FATAL),
        (None, Severity.FATAL),
        (Severity.INFO, Severity.INFO),
    ],
)
def test_severity_parse(value, expected):
    assert Severity.parse(value) is expected


def test_identical_diagnostics_recorded_once():
    diagnostics = []
    d = Diagnostic("missing", Severity.FATAL, "1.1.a", "add it", "/hml[1]")
    assert add_diagnostic(diagnostics, d)
    assert not add_diagnostic(diagnostics, Diagnostic("missing", Severity.FATAL, "1.1.a", "add it", "/hml[1]"))
    assert add_diagnostic(diagnostics, Diagnostic("missing", Severity.FATAL, "1.1.a", "add it", "/hml[2]"))
    assert len(diagnostics) == 2


def test_fatal_detection():
    assert not has_fatal_errors([])
    assert not has_fatal_errors([Diagnostic("w", Severity.WARNING)])
    assert has_fatal_errors([Diagnostic("w", Severity.WARNING), Diagnostic("f")])


def test_run_states():
    assert SchemaRun().conformant
    assert not SchemaRun(diagnostics=[Diagnostic("x")]).conformant
    failed = SchemaRun(failure="schema missing")
    assert not failed.completed and not failed.conformant
