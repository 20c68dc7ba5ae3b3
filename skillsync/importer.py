"""
Spreadsheet import pipeline.

One importer per import type. Each walks the parsed rows, normalizes the
fields, resolves freeform labels against what the organization already has,
and upserts in batches. Bad rows are reported back, never raised.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .database import Area, AreaLeader, Employee, EmployeeSkill, RatingScale, Skill, Station
from .logger import get_logger
from .matching import resolve_label
from .normalize import normalize_code, parse_bool, parse_rating
from .retry import RetryError
from .schema import IMPORT_TYPES, first_value, validate_row
from .storage import (
    area_labels,
    commit_batch,
    employees_by_number,
    find_area,
    find_skill,
    find_station,
    log_import,
    skill_names,
    upsert,
)

BATCH_SIZE = 100
ERRORS_CAP = 50


class RowError(Exception):
    """A single row cannot be imported; the message is shown to the user."""
    pass


@dataclass
class ImportResult:
    import_type: str
    total_rows: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    failed_rows: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def fail(self, line: int, reason: str) -> None:
        self.failed += 1
        if len(self.failed_rows) < ERRORS_CAP:
            self.failed_rows.append({"line": line, "reason": reason})
        get_logger().record_row_failure(reason)

    def count(self, status: str) -> None:
        if status == "new":
            self.inserted += 1
        elif status == "updated":
            self.updated += 1
        else:
            self.unchanged += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "import_type": self.import_type,
            "total_rows": self.total_rows,
            "inserted": self.inserted,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "failed_rows": list(self.failed_rows),
        }


class LabelRegistry:
    """
    Canonical labels known for one field during an import.

    With fuzzy matching on, near-duplicate spellings resolve to the known
    label; otherwise only case-insensitive equality counts as a match.
    """

    def __init__(self, labels: List[str], fuzzy: bool = True):
        self.labels = list(labels)
        self.fuzzy = fuzzy

    def resolve(self, raw: str, register: bool = True) -> str:
        if self.fuzzy:
            label = resolve_label(raw, self.labels)
        else:
            label = next((c for c in self.labels if c.lower() == raw.lower()), raw)

        matched = label in self.labels
        if not matched and register:
            self.labels.append(label)
        get_logger().record_label(matched)
        if matched and label != raw:
            get_logger().debug("Label resolved", raw=raw, canonical=label)
        return label


def _flush(session, result: ImportResult, pending: List[tuple]) -> None:
    try:
        commit_batch(session)
    except (RetryError, SQLAlchemyError) as e:
        session.rollback()
        get_logger().error("Batch commit failed", import_type=result.import_type, rows=len(pending), error=str(e))
        for line, _ in pending:
            result.fail(line, f"Database error: {e}")
        return
    for _, status in pending:
        result.count(status)


def _run_rows(session, import_type: str, rows: List[Dict[str, str]], handler: Callable[[Dict[str, str]], str]) -> ImportResult:
    result = ImportResult(import_type=import_type, total_rows=len(rows))
    pending: List[tuple] = []

    for i, row in enumerate(rows):
        line = i + 2
        errors = validate_row(import_type, row)
        if errors:
            result.fail(line, errors[0])
            continue
        try:
            status = handler(row)
        except RowError as e:
            result.fail(line, str(e))
            continue
        except SQLAlchemyError as e:
            # The session is unusable until rolled back; the whole open batch is lost
            session.rollback()
            get_logger().error("Row write failed", import_type=import_type, line=line, error=str(e))
            for pending_line, _ in pending:
                result.fail(pending_line, f"Database error: {e}")
            pending = []
            result.fail(line, f"Database error: {e}")
            continue

        pending.append((line, status))
        if len(pending) >= BATCH_SIZE:
            _flush(session, result, pending)
            pending = []

    if pending:
        _flush(session, result, pending)

    return result


def _resolve_area(session, org_id: str, raw: str, registry: LabelRegistry) -> Area:
    area = find_area(session, org_id, raw)
    if area is not None:
        get_logger().record_label(True)
        return area

    label = registry.resolve(raw)
    area = find_area(session, org_id, label)
    if area is None:
        area = Area(org_id=org_id, area_code=raw, area_name=raw)
        session.add(area)
        session.flush()
        get_logger().info("Registered new area", org_id=org_id, area=raw)
    return area


def import_areas(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    def handle(row):
        code = normalize_code(first_value(row, "area_code", "code", "area"))
        name = first_value(row, "area_name", "name") or code
        return upsert(session, Area, {"org_id": org_id, "area_code": code}, {"area_name": name})["status"]

    return _run_rows(session, "areas", rows, handle)


def import_stations(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    areas = LabelRegistry(area_labels(session, org_id), fuzzy=fuzzy)

    def handle(row):
        code = normalize_code(first_value(row, "station_code", "code"))
        name = first_value(row, "station_name", "name") or code
        area_raw = first_value(row, "area_code", "area", "area_name")
        area_id = _resolve_area(session, org_id, area_raw, areas).id if area_raw else None
        return upsert(
            session,
            Station,
            {"org_id": org_id, "station_code": code},
            {"station_name": name, "area_id": area_id},
        )["status"]

    return _run_rows(session, "stations", rows, handle)


def import_skills(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    """
    Upsert the skills catalog by skill code.

    The code is the key, so the name is stored as given; a re-import with a
    corrected name renames the skill.
    """
    def handle(row):
        code = normalize_code(first_value(row, "skill_code", "skill_id", "code"))
        name = first_value(row, "skill_name", "name")

        station_id = None
        station_raw = first_value(row, "station_code", "station")
        if station_raw:
            station = find_station(session, org_id, normalize_code(station_raw))
            if station is None:
                get_logger().warning("Skill references unknown station", skill_code=code, station=station_raw)
            else:
                station_id = station.id

        return upsert(
            session,
            Skill,
            {"org_id": org_id, "skill_code": code},
            {
                "skill_name": name,
                "station_id": station_id,
                "category": first_value(row, "category"),
                "description": first_value(row, "description"),
            },
        )["status"]

    return _run_rows(session, "skills", rows, handle)


def import_employees(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    areas = LabelRegistry(area_labels(session, org_id), fuzzy=fuzzy)

    def handle(row):
        number = normalize_code(first_value(row, "employee_number", "employee_id"))
        area_raw = first_value(row, "area_code", "area", "area_name")
        area_id = _resolve_area(session, org_id, area_raw, areas).id if area_raw else None
        return upsert(
            session,
            Employee,
            {"org_id": org_id, "employee_number": number},
            {
                "name": first_value(row, "employee_name", "name"),
                "email": first_value(row, "email"),
                "area_id": area_id,
                "is_active": parse_bool(row.get("is_active"), default=True),
            },
        )["status"]

    return _run_rows(session, "employees", rows, handle)


def import_employee_skills(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    """
    Upsert skill ratings. Employees must exist and be active; skills are found
    by code, or by (fuzzy) name when the file has no code column.
    """
    employees = employees_by_number(session, org_id)
    names = LabelRegistry(skill_names(session, org_id), fuzzy=fuzzy)

    def handle(row):
        number = normalize_code(first_value(row, "employee_number", "employee_id"))
        employee = employees.get(number)
        if employee is None:
            raise RowError(f"Unknown employee: {number}")

        code = first_value(row, "skill_code", "skill_id")
        if code:
            skill = find_skill(session, org_id, code=normalize_code(code))
            missing = code
        else:
            missing = first_value(row, "skill_name", "skill")
            skill = find_skill(session, org_id, name=names.resolve(missing, register=False))
        if skill is None:
            raise RowError(f"Unknown skill: {missing}")

        rating = parse_rating(first_value(row, "rating", "level"))
        return upsert(
            session,
            EmployeeSkill,
            {"employee_id": employee.id, "skill_id": skill.id},
            {"org_id": org_id, "rating": rating},
        )["status"]

    return _run_rows(session, "employee_skills", rows, handle)


def import_area_leaders(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    """
    Upsert area leaders by (area, employee number). The area must already
    exist; leaders never register new areas.
    """
    def handle(row):
        area_code = normalize_code(first_value(row, "area_code", "area"))
        area = find_area(session, org_id, area_code)
        if area is None:
            raise RowError(f"Area not found: {area_code}")

        number = normalize_code(first_value(row, "employee_number", "employee_id", "leader_id"))
        return upsert(
            session,
            AreaLeader,
            {"org_id": org_id, "area_id": area.id, "employee_number": number},
            {"is_primary": parse_bool(row.get("is_primary"), default=False)},
        )["status"]

    return _run_rows(session, "area_leaders", rows, handle)


def _parse_scale_level(raw: str) -> int:
    try:
        level = int(normalize_code(raw))
    except ValueError:
        raise RowError(f"Invalid level: {raw}")
    if not 0 <= level <= 4:
        raise RowError(f"Invalid level: {raw}")
    return level


def import_rating_scales(session, rows: List[Dict[str, str]], org_id: str, fuzzy: bool = True) -> ImportResult:
    def handle(row):
        level = _parse_scale_level(first_value(row, "level"))
        return upsert(
            session,
            RatingScale,
            {"org_id": org_id, "level": level},
            {
                "label": first_value(row, "label"),
                "description": first_value(row, "description"),
                "color": first_value(row, "color"),
            },
        )["status"]

    return _run_rows(session, "rating_scales", rows, handle)


IMPORTERS = {
    "areas": import_areas,
    "stations": import_stations,
    "skills": import_skills,
    "employees": import_employees,
    "employee_skills": import_employee_skills,
    "area_leaders": import_area_leaders,
    "rating_scales": import_rating_scales,
}


def run_import(
    session,
    import_type: str,
    rows: List[Dict[str, str]],
    org_id: str,
    file_name: Optional[str] = None,
    fuzzy: bool = True,
) -> ImportResult:
    """
    Run one import and record it in the import log.

    Raises:
        ValueError: Unknown import type
    """
    importer = IMPORTERS.get(import_type)
    if importer is None:
        raise ValueError(
            f"Unknown import type: {import_type}. Use one of: {', '.join(IMPORT_TYPES)}"
        )

    logger = get_logger()
    logger.info("Import started", import_type=import_type, org_id=org_id, rows=len(rows), fuzzy=fuzzy)

    result = importer(session, rows, org_id, fuzzy=fuzzy)
    log_import(session, org_id, result, file_name=file_name)

    logger.record_import(import_type, result.total_rows, result.inserted, result.updated, result.failed)
    logger.info(
        "Import complete",
        import_type=import_type,
        inserted=result.inserted,
        updated=result.updated,
        unchanged=result.unchanged,
        failed=result.failed,
    )
    return result
