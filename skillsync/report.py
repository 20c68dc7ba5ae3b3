"""
Skill-gap report.

For every skill in the catalog, count how many employees can work it
independently (rating 3 or higher) and flag stations that depend on too
few people.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .database import Area, Employee, EmployeeSkill, Skill, Station

INDEPENDENT_RATING = 3

CSV_HEADERS = [
    "Station Code",
    "Station Name",
    "Skill ID",
    "Skill Name",
    "Independent Count (>=3)",
    "Total Employees",
    "Risk Level",
    "Employee Names",
]


def risk_level(independent_count: int) -> str:
    if independent_count == 0:
        return "critical"
    if independent_count < 2:
        return "warning"
    return "ok"


def _display_name(employee: Employee) -> str:
    # Former employees keep their ratings on record but are listed by number
    return employee.name if employee.is_active else employee.employee_number


def build_gap_report(
    session,
    org_id: str,
    area_code: Optional[str] = None,
    station_code: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Build one report entry per skill of the org.

    Every rating on record counts, including those of deactivated employees.

    Args:
        session: Database session
        org_id: Organization to report on
        area_code: Only skills whose station belongs to this area
        station_code: Only skills bound to this station

    Returns:
        List of entries ordered by station code, then skill code
    """
    query = (
        session.query(Skill, Station)
        .outerjoin(Station, Skill.station_id == Station.id)
        .outerjoin(Area, Station.area_id == Area.id)
        .filter(Skill.org_id == org_id)
    )
    if area_code:
        query = query.filter(Area.area_code == area_code)
    if station_code:
        query = query.filter(Station.station_code == station_code)

    ratings_by_skill: Dict[int, List[Tuple[EmployeeSkill, Employee]]] = defaultdict(list)
    for rating, employee in (
        session.query(EmployeeSkill, Employee)
        .join(Employee, EmployeeSkill.employee_id == Employee.id)
        .filter(EmployeeSkill.org_id == org_id)
        .order_by(Employee.employee_number)
    ):
        ratings_by_skill[rating.skill_id].append((rating, employee))

    entries = []
    for skill, station in query.all():
        ratings = ratings_by_skill.get(skill.id, [])
        independent = sum(
            1 for rating, _ in ratings if rating.rating is not None and rating.rating >= INDEPENDENT_RATING
        )
        entries.append({
            "station_code": station.station_code if station else "N/A",
            "station_name": station.station_name if station else "Unknown",
            "skill_code": skill.skill_code,
            "skill_name": skill.skill_name,
            "independent_count": independent,
            "total_employees": len(ratings),
            "risk_level": risk_level(independent),
            "employees": [
                {"employee_number": e.employee_number, "name": _display_name(e), "rating": r.rating}
                for r, e in ratings
            ],
        })

    entries.sort(key=lambda e: (e["station_code"], e["skill_code"]))
    return entries


def _employee_summary(employees: List[Dict[str, Any]]) -> str:
    return "; ".join(
        f"{e['name']} ({'N' if e['rating'] is None else e['rating']})" for e in employees
    )


def gap_report_to_csv(entries: List[Dict[str, Any]]) -> str:
    """Render report entries as CSV text with a header row."""
    frame = pd.DataFrame(
        [
            [
                e["station_code"],
                e["station_name"],
                e["skill_code"],
                e["skill_name"],
                e["independent_count"],
                e["total_employees"],
                e["risk_level"].upper(),
                _employee_summary(e["employees"]),
            ]
            for e in entries
        ],
        columns=CSV_HEADERS,
    )
    return frame.to_csv(index=False, lineterminator="\n")


def report_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"skill-gap-report-{day.isoformat()}.csv"
