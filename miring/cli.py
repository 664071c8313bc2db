import argparse
import json
import logging
from pathlib import Path

from .checklist import MiringValidator
from .report import is_compliant
from .settings import load_settings


def validate_file(path: Path, settings) -> MiringValidator:
    validator = MiringValidator(path.read_bytes(), settings=settings)
    validator.validate()
    return validator


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="miring-validate",
        description="Check HML documents against the MIRING checklist",
    )
    parser.add_argument("files", nargs="+", type=Path, help="HML files to validate")
    parser.add_argument("--json", action="store_true", help="Print diagnostics as JSON")
    parser.add_argument("--report-dir", type=Path, help="Write one report XML per file here")
    parser.add_argument("--settings", help="JSON settings file")
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    logging.basicConfig(
        level=getattr(logging, settings["log_level"], logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    missing = [p for p in args.files if not p.is_file()]
    if missing:
        for p in missing:
            print(f"File not found: {p}")
        return 1
    if args.report_dir:
        args.report_dir.mkdir(parents=True, exist_ok=True)

    results = {}
    failed = 0
    for path in args.files:
        validator = validate_file(path, settings)
        diagnostics = validator.diagnostics
        ok = is_compliant(diagnostics)
        if not ok:
            failed += 1
        results[str(path)] = [d.to_dict() for d in diagnostics]
        if args.report_dir:
            (args.report_dir / f"{path.stem}.miring.xml").write_text(validator.report, encoding="utf-8")
        if not args.json:
            print(f"{path}: {'OK' if ok else 'FAIL'}")
            for d in diagnostics:
                print(f"  [{d.severity.value}] {d.rule_id} {d.location}: {d.message}")

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        print("\nSummary:")
        print(f"  Total:  {len(args.files)}")
        print(f"  Passed: {len(args.files) - failed}")
        print(f"  Failed: {failed}")
    return 2 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
