import argparse
import json
from pathlib import Path

from . import __version__
from .database import Skill, Station, get_session, init_database
from .env import get_settings, load_env
from .importer import run_import
from .logger import get_logger
from .matching import resolve_label
from .normalize import normalize_skill_level
from .report import build_gap_report, gap_report_to_csv, report_filename
from .schema import IMPORT_TYPES, validate_columns
from .tabular import TabularError, read_headers, read_table


def _import_type(value: str) -> str:
    return value.strip().lower().replace("-", "_")


def _open_session(args: argparse.Namespace):
    db_path = Path(args.db) if args.db else get_settings().db_path
    init_database(db_path)
    return get_session(db_path)


def _org(args: argparse.Namespace) -> str:
    return args.org or get_settings().org_id


def cmd_import(args: argparse.Namespace) -> None:
    import_type = _import_type(args.type)
    input_path = Path(args.input)
    try:
        headers, rows = read_table(input_path)
    except TabularError as e:
        raise SystemExit(str(e))

    errors = validate_columns(import_type, headers)
    if errors:
        print("Invalid file:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)

    fuzzy = get_settings().fuzzy_match and not args.no_fuzzy
    session = _open_session(args)
    try:
        result = run_import(session, import_type, rows, _org(args), file_name=input_path.name, fuzzy=fuzzy)
    finally:
        session.close()

    print(
        f"Done. total={result.total_rows} new={result.inserted} updated={result.updated} "
        f"no-change={result.unchanged} failed={result.failed}"
    )
    for failure in result.failed_rows:
        print(f" - line {failure['line']}: {failure['reason']}")
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    get_logger().log_metrics_summary()


def cmd_validate(args: argparse.Namespace) -> None:
    import_type = _import_type(args.type)
    try:
        headers = read_headers(Path(args.input))
    except TabularError as e:
        raise SystemExit(str(e))
    errors = validate_columns(import_type, headers)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_resolve(args: argparse.Namespace) -> None:
    candidates = [c.strip() for c in args.candidates.split(",") if c.strip()] if args.candidates else []
    print(resolve_label(args.label, candidates))


def cmd_level(args: argparse.Namespace) -> None:
    print(normalize_skill_level(args.value))


def cmd_list_skills(args: argparse.Namespace) -> None:
    org_id = _org(args)
    session = _open_session(args)
    try:
        skills = (
            session.query(Skill)
            .filter_by(org_id=org_id)
            .order_by(Skill.skill_code)
            .all()
        )
        if not skills:
            print("No skills in store.")
            return
        print(f"Found {len(skills)} skills for org {org_id}:\n")
        for skill in skills:
            station = session.get(Station, skill.station_id) if skill.station_id else None
            print(f"Code: {skill.skill_code}")
            print(f"  Name: {skill.skill_name}")
            print(f"  Category: {skill.category}")
            print(f"  Station: {station.station_code if station else None}")
            print()
    finally:
        session.close()


def cmd_export_gaps(args: argparse.Namespace) -> None:
    session = _open_session(args)
    try:
        entries = build_gap_report(session, _org(args), area_code=args.area, station_code=args.station)
    finally:
        session.close()

    output = Path(args.output) if args.output else Path(report_filename())
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(gap_report_to_csv(entries), encoding="utf-8")

    critical = sum(1 for e in entries if e["risk_level"] == "critical")
    print(f"Wrote {len(entries)} skills to {output} ({critical} critical)")


def main(argv=None):
    load_env()
    settings = get_settings()
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    parser = argparse.ArgumentParser(prog="skillsync", description="Competence data import and gap reporting")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    type_help = f"Import type: {', '.join(IMPORT_TYPES)}"

    imp = subparsers.add_parser("import", help="Import a CSV/Excel file into the store")
    imp.add_argument("--type", required=True, help=type_help)
    imp.add_argument("--input", required=True, help="Path to .csv or .xlsx file")
    imp.add_argument("--org", help="Organization id (or set SKILLSYNC_ORG_ID)")
    imp.add_argument("--db", help="Path to SQLite database (or set SKILLSYNC_DB_PATH)")
    imp.add_argument("--no-fuzzy", action="store_true", help="Disable fuzzy label matching")
    imp.add_argument("--json", action="store_true", help="Also print the result as JSON")
    imp.set_defaults(func=cmd_import)

    val = subparsers.add_parser("validate", help="Check a file has the columns an import type needs")
    val.add_argument("--type", required=True, help=type_help)
    val.add_argument("--input", required=True, help="Path to .csv or .xlsx file")
    val.set_defaults(func=cmd_validate)

    res = subparsers.add_parser("resolve", help="Resolve a label against candidate labels")
    res.add_argument("--label", required=True, help="Raw label")
    res.add_argument("--candidates", help="Comma-separated canonical labels, in priority order")
    res.set_defaults(func=cmd_resolve)

    lvl = subparsers.add_parser("level", help="Normalize a skill-level value to 0-4")
    lvl.add_argument("value", help="Raw level, e.g. 3, expert, självständig")
    lvl.set_defaults(func=cmd_level)

    lst = subparsers.add_parser("list-skills", help="List the skills catalog")
    lst.add_argument("--org", help="Organization id (or set SKILLSYNC_ORG_ID)")
    lst.add_argument("--db", help="Path to SQLite database (or set SKILLSYNC_DB_PATH)")
    lst.set_defaults(func=cmd_list_skills)

    exp = subparsers.add_parser("export-gaps", help="Write the skill-gap report as CSV")
    exp.add_argument("--output", help="Output path (default: skill-gap-report-<date>.csv)")
    exp.add_argument("--area", help="Only skills in this area code")
    exp.add_argument("--station", help="Only skills on this station code")
    exp.add_argument("--org", help="Organization id (or set SKILLSYNC_ORG_ID)")
    exp.add_argument("--db", help="Path to SQLite database (or set SKILLSYNC_DB_PATH)")
    exp.set_defaults(func=cmd_export_gaps)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except ValueError as e:
            raise SystemExit(str(e))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
