from lxml import etree

from miring.models import Diagnostic, Sample, Severity
from miring.report import generate_report, is_compliant
from miring.utils import get_hmlid, xml_root


def contains_error_node(report, text):
    root = xml_root(report)
    return any(text in (d.text or "") for d in root.iter("description"))


def test_report_lists_every_result():
    tier1 = [Diagnostic(f"This is a big problem {i}.", Severity.CHECKLIST) for i in (1, 2)]
    tier2 = [Diagnostic(f"This is a big problem {i}.", Severity.CHECKLIST) for i in (3, 4, 5)]
    report = generate_report(tier1 + tier2, "testRoot", "1.2.3.4")

    root = etree.fromstring(report.encode("utf-8"))
    assert len(root.findall("miring-result")) == 5
    assert contains_error_node(report, "This is a big problem 1.")
    assert contains_error_node(report, "This is a big problem 5.")
    assert not contains_error_node(report, "This error text is not in the report.")
    assert get_hmlid(report) == ("testRoot", "1.2.3.4")


def test_result_fields():
    d = Diagnostic("missing", Severity.FATAL, "1.1.a", "add it", "/hml[1]")
    root = etree.fromstring(generate_report([d]).encode("utf-8"))
    result = root.find("miring-result")
    assert result.get("miring-rule-id") == "1.1.a"
    assert result.get("severity") == "fatal"
    assert result.findtext("description") == "missing"
    assert result.findtext("solution") == "add it"
    assert result.findtext("location") == "/hml[1]"


def test_compliance_flag():
    def flag(diagnostics):
        return etree.fromstring(generate_report(diagnostics).encode("utf-8")).get("miring-compliant")

    assert flag([]) == "true"
    assert flag([Diagnostic("A nonFatal error", Severity.WARNING)]) == "true"
    assert flag([Diagnostic("A fatal error"), Diagnostic("A nonFatal error", Severity.WARNING)]) == "false"
    assert flag([Diagnostic("A checklist error", Severity.CHECKLIST)]) == "false"
    assert not is_compliant([Diagnostic("x")])


def test_properties_and_samples():
    report = generate_report(
        [],
        properties={"MessageReceived": "2015-06-01"},
        samples=[Sample("1234-5678-9", "567"), Sample("9876", None)],
    )
    root = etree.fromstring(report.encode("utf-8"))
    assert dict(root.find("properties/property").attrib) == {"name": "MessageReceived", "value": "2015-06-01"}
    samples = root.findall("samples/sample")
    assert [s.get("id") for s in samples] == ["1234-5678-9", "9876"]
    assert samples[1].get("center-code") is None
    assert root.get("timestamp")
