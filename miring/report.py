import datetime

from lxml import etree

from .models import Severity

# findings of these severities make a document non-compliant
BLOCKING = (Severity.FATAL, Severity.CHECKLIST)


def is_compliant(diagnostics) -> bool:
    return not any(d.severity in BLOCKING for d in diagnostics or [])


def generate_report(diagnostics, hmlid_root=None, hmlid_extension=None, properties=None, samples=None) -> str:
    """Serialize a MIRING results report.

    ```xml
    <miring-report timestamp="..." miring-compliant="false">
      <hmlid root="..." extension="..."/>
      <properties><property name="..." value="..."/></properties>
      <samples><sample id="..." center-code="..."/></samples>
      <miring-result miring-rule-id="1.1.a" severity="fatal">
        <description/><solution/><location/>
      </miring-result>
    </miring-report>
    ```
    """
    diagnostics = list(diagnostics or [])
    report = etree.Element("miring-report")
    report.set("timestamp", datetime.datetime.now().isoformat(timespec="seconds"))
    report.set("miring-compliant", "true" if is_compliant(diagnostics) else "false")

    hmlid = etree.SubElement(report, "hmlid")
    if hmlid_root:
        hmlid.set("root", hmlid_root)
    if hmlid_extension:
        hmlid.set("extension", hmlid_extension)

    if properties:
        props_el = etree.SubElement(report, "properties")
        for name, value in properties.items():
            etree.SubElement(props_el, "property", name=str(name), value=str(value or ""))

    if samples:
        samples_el = etree.SubElement(report, "samples")
        for sample in samples:
            sample_el = etree.SubElement(samples_el, "sample")
            if sample.id:
                sample_el.set("id", sample.id)
            if sample.center_code:
                sample_el.set("center-code", sample.center_code)

    for d in diagnostics:
        result = etree.SubElement(report, "miring-result")
        result.set("miring-rule-id", d.rule_id)
        result.set("severity", d.severity.value)
        etree.SubElement(result, "description").text = d.message
        etree.SubElement(result, "solution").text = d.solution
        etree.SubElement(result, "location").text = d.location

    return etree.tostring(report, pretty_print=True, xml_declaration=True, encoding="UTF-8").decode("utf-8")
