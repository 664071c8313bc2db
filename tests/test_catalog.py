import logging

import pytest

from miring.catalog import RuleCatalog, load_table
from miring.errors import InitializationFailure
from miring.models import Severity
from miring.utils import resolve_resource


@pytest.fixture
def catalog():
    return RuleCatalog.load(resolve_resource("rules"))


def test_bundled_tables_load(catalog):
    assert catalog.lookup_node("hmlid").rule_id == "1.1.a"
    assert catalog.lookup_attribute("variant", "quality-score").rule_id == "5.6.a"
    assert catalog.lookup_attribute("raw-reads", "availability").rule_id == "1.5.b"
    assert catalog.lookup_node("sequence") is None


def test_miring_severity_spelling_is_checklist(catalog):
    assert catalog.lookup_node("glstring").severity is Severity.CHECKLIST


def test_missing_node_uses_row(catalog):
    d = catalog.missing_node("hmlid", "hml", "/hml[1]")
    assert d.message == "There is a missing hmlid node underneath the hml node."
    assert d.solution.startswith("Please add one hmlid node underneath the hml node. ")
    assert d.rule_id == "1.1.a"
    assert d.severity is Severity.CHECKLIST
    assert d.location == "/hml[1]"
    assert catalog.gaps == []


def test_missing_attribute_without_extra_text(catalog):
    d = catalog.missing_attribute("quality-score", "variant", "/hml[1]/variant[1]")
    assert d.message == "The node variant is missing a quality-score attribute."
    assert d.solution == "Please add a quality-score attribute to the variant node."


def test_gap_gives_generic_fatal_diagnostic(catalog, caplog):
    with caplog.at_level(logging.WARNING, logger="miring.catalog"):
        d = catalog.missing_node("sequence", "consensus-sequence-block", "/hml[1]/sample[1]")
        catalog.missing_node("sequence", "consensus-sequence-block", "/hml[1]/sample[2]")
        catalog.missing_attribute("colour", "sample", "/hml[1]/sample[1]")
    assert d.rule_id == "?"
    assert d.severity is Severity.FATAL
    assert d.solution == "Please add one sequence node underneath the consensus-sequence-block node."
    assert catalog.gaps == ["sequence", "sample@colour"]
    assert "No MIRING rule for sequence" in caplog.text


def test_first_matching_row_wins(tmp_path):
    (tmp_path / "missing_node_rules.yml").write_text(
        "- {node-name: hmlid, miring-rule-id: 9.9.a, severity: warning}\n"
        "- {node-name: hmlid, miring-rule-id: 1.1.a}\n",
        encoding="utf-8",
    )
    (tmp_path / "missing_attribute_rules.yml").write_text("[]\n", encoding="utf-8")
    catalog = RuleCatalog.load(tmp_path)
    entry = catalog.lookup_node("hmlid")
    assert entry.rule_id == "9.9.a"
    assert entry.severity is Severity.WARNING


def test_missing_table_raises(tmp_path):
    with pytest.raises(InitializationFailure) as exc:
        RuleCatalog.load(tmp_path)
    assert "missing_node_rules.yml" in exc.value.resource


def test_malformed_rows_raise(tmp_path):
    p = tmp_path / "rules.yml"
    p.write_text("- node-name: hmlid\n", encoding="utf-8")
    with pytest.raises(InitializationFailure):
        load_table(p, "node")
    p.write_text("- {node-name: sample, miring-rule-id: 1.4.a}\n", encoding="utf-8")
    with pytest.raises(InitializationFailure):
        load_table(p, "attribute")
    p.write_text("rules: [\n", encoding="utf-8")
    with pytest.raises(InitializationFailure):
        load_table(p, "node")
