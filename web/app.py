import datetime

from flask import Flask, Response, jsonify, request
from lxml import etree
from werkzeug.exceptions import RequestEntityTooLarge

from miring.checklist import MiringValidator
from miring.report import is_compliant
from miring.schema_validator import load_schema
from miring.settings import load_settings
from miring.utils import resolve_resource

app = Flask(__name__)

settings = load_settings()
app.config["MIRING_SETTINGS"] = settings
app.config["MAX_CONTENT_LENGTH"] = settings["upload_max_size_mb"] * 1024 * 1024
app.logger.setLevel(settings["log_level"])


@app.route("/health")
def health():
    """Simple health check for load balancers and uptime checks."""
    return (
        jsonify({"status": "ok", "time": datetime.datetime.now(datetime.timezone.utc).isoformat()}),
        200,
    )


@app.route("/ready")
def ready():
    """Readiness check: schema compiles and every rule resource is present."""
    cfg = app.config["MIRING_SETTINGS"]
    checks = {}
    try:
        load_schema(cfg["schema"])
        checks["schema"] = True
    except Exception as e:
        app.logger.warning("Schema not loadable: %s", e)
        checks["schema"] = False
    rules_dir = resolve_resource(cfg["rules_dir"])
    checks["rules"] = all(
        (rules_dir / name).is_file()
        for name in ("missing_node_rules.yml", "missing_attribute_rules.yml")
    )
    checks["schematron"] = all(resolve_resource(s).is_file() for s in cfg["schematron"])
    ok = all(checks.values())
    return jsonify({"ready": ok, "checks": checks}), 200 if ok else 503


def _uploaded_xml():
    if "xmlfile" in request.files:
        upload = request.files["xmlfile"]
        if upload.filename == "":
            return None
        return upload.read()
    return request.get_data()


@app.route("/validate", methods=["POST"])
def validate():
    try:
        xml = _uploaded_xml()
    except RequestEntityTooLarge:
        return jsonify({"error": "upload too large"}), 413
    if xml is None:
        return jsonify({"error": "no file selected"}), 400

    validator = MiringValidator(xml, settings=app.config["MIRING_SETTINGS"])
    try:
        report = validator.validate()
    except etree.LxmlError as e:
        app.logger.exception("Validation failed")
        return jsonify({"error": str(e)}), 500

    diagnostics = validator.diagnostics
    source = request.files["xmlfile"].filename if "xmlfile" in request.files else "request body"
    app.logger.info("Validated %s: %d findings", source, len(diagnostics))
    if request.args.get("format") == "json":
        return jsonify(
            {
                "miring-compliant": is_compliant(diagnostics),
                "samples": [{"id": s.id, "center-code": s.center_code} for s in validator.samples],
                "diagnostics": [d.to_dict() for d in diagnostics],
            }
        )
    return Response(report, mimetype="application/xml")


if __name__ == "__main__":
    app.run(debug=True)
