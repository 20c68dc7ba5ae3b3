from typing import Dict, Iterable, List, Optional, Tuple

IMPORT_TYPES = (
    "areas",
    "stations",
    "skills",
    "employees",
    "employee_skills",
    "area_leaders",
    "rating_scales",
)

# Each required field lists the header names accepted for it, in lookup order
REQUIRED_COLUMNS: Dict[str, List[Tuple[str, ...]]] = {
    "areas": [("area_code", "code", "area")],
    "stations": [("station_code", "code")],
    "skills": [("skill_code", "skill_id", "code"), ("skill_name", "name")],
    "employees": [("employee_number", "employee_id"), ("employee_name", "name")],
    "employee_skills": [
        ("employee_number", "employee_id"),
        ("skill_code", "skill_id", "skill_name", "skill"),
        ("rating", "level"),
    ],
    "area_leaders": [("area_code", "area"), ("employee_number", "employee_id", "leader_id")],
    "rating_scales": [("level",), ("label",)],
}


def _check_type(import_type: str) -> None:
    if import_type not in REQUIRED_COLUMNS:
        raise ValueError(
            f"Unknown import type: {import_type}. Use one of: {', '.join(IMPORT_TYPES)}"
        )


def first_value(row: Dict[str, str], *keys: str) -> Optional[str]:
    """First non-blank value among the given columns, trimmed; None if all are blank."""
    for key in keys:
        value = row.get(key)
        if value is not None and value.strip():
            return value.strip()
    return None


def validate_columns(import_type: str, headers: Iterable[str]) -> List[str]:
    """
    Returns a list of missing-column messages. Empty list means the header row is usable.
    """
    _check_type(import_type)
    present = set(headers)
    errors: List[str] = []
    for aliases in REQUIRED_COLUMNS[import_type]:
        if not present.intersection(aliases):
            errors.append(f"Missing required column: {' or '.join(aliases)}")
    return errors


def validate_row(import_type: str, row: Dict[str, str]) -> List[str]:
    """
    Returns a list of validation error messages for one data row.

    Only presence is checked here; lookups and value parsing happen during import.
    The rating column may be blank (not rated), so it is not required per row.
    """
    _check_type(import_type)
    errors: List[str] = []
    for aliases in REQUIRED_COLUMNS[import_type]:
        if aliases[0] == "rating":
            continue
        if first_value(row, *aliases) is None:
            errors.append(f"Missing {aliases[0]}")
    return errors
