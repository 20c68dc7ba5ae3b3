"""
Persistence helpers shared by the import pipeline.

Keeps query and upsert mechanics out of the importers; no normalization or
matching decisions are made here.
"""

from typing import Any, Dict, List, Optional, Type

from sqlalchemy.exc import OperationalError

from .database import Area, Base, Employee, ImportLog, Skill, Station
from .logger import get_logger
from .retry import exponential_backoff, is_transient_error


def diff_fields(obj: Base, values: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    for k, nv in values.items():
        ov = getattr(obj, k)
        if ov != nv:
            changed[k] = {"old": ov, "new": nv}
    return changed


def upsert(session, model: Type[Base], keys: Dict[str, Any], values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert or update one row identified by `keys`.

    Returns:
        {"status": "new" | "updated" | "no-change", "row": instance}
    """
    row = session.query(model).filter_by(**keys).first()
    if row is None:
        row = model(**keys, **values)
        session.add(row)
        return {"status": "new", "row": row}
    changed = diff_fields(row, values)
    if changed:
        for k, change in changed.items():
            setattr(row, k, change["new"])
        return {"status": "updated", "row": row, "changed": changed}
    return {"status": "no-change", "row": row}


def _log_commit_retry(attempt: int, error: Exception, delay: float):
    get_logger().warning("Commit failed, retrying", attempt=attempt, delay=delay, error=str(error))


@exponential_backoff(
    max_retries=3,
    exceptions=(OperationalError,),
    retry_if=is_transient_error,
    on_retry=_log_commit_retry,
)
def commit_batch(session) -> None:
    """Commit pending changes, retrying while the database is busy."""
    session.commit()


def area_labels(session, org_id: str) -> List[str]:
    """Area names of the org, oldest first."""
    rows = session.query(Area.area_name).filter_by(org_id=org_id).order_by(Area.id).all()
    return [r[0] for r in rows]


def find_area(session, org_id: str, label: str) -> Optional[Area]:
    """Area whose code or name equals `label`, ignoring case."""
    wanted = label.lower()
    for area in session.query(Area).filter_by(org_id=org_id).order_by(Area.id):
        if area.area_code.lower() == wanted or area.area_name.lower() == wanted:
            return area
    return None


def find_station(session, org_id: str, station_code: str) -> Optional[Station]:
    return session.query(Station).filter_by(org_id=org_id, station_code=station_code).first()


def skill_names(session, org_id: str) -> List[str]:
    """Distinct skill names of the org, oldest first."""
    names: List[str] = []
    for (name,) in session.query(Skill.skill_name).filter_by(org_id=org_id).order_by(Skill.id):
        if name not in names:
            names.append(name)
    return names


def find_skill(session, org_id: str, code: Optional[str] = None, name: Optional[str] = None) -> Optional[Skill]:
    """Skill by exact code, or by case-insensitive name."""
    if code:
        return session.query(Skill).filter_by(org_id=org_id, skill_code=code).first()
    if name:
        wanted = name.lower()
        for skill in session.query(Skill).filter_by(org_id=org_id).order_by(Skill.id):
            if skill.skill_name.lower() == wanted:
                return skill
    return None


def employees_by_number(session, org_id: str) -> Dict[str, Employee]:
    """Active employees of the org keyed by employee number."""
    rows = session.query(Employee).filter_by(org_id=org_id, is_active=True).all()
    return {e.employee_number: e for e in rows}


def log_import(session, org_id: str, result, file_name: Optional[str] = None) -> ImportLog:
    """Persist an audit record for a finished import."""
    entry = ImportLog(
        org_id=org_id,
        import_type=result.import_type,
        file_name=file_name,
        total_rows=result.total_rows,
        inserted_count=result.inserted,
        updated_count=result.updated,
        failed_count=result.failed,
        failed_rows=result.failed_rows,
    )
    session.add(entry)
    commit_batch(session)
    return entry
