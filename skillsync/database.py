"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for competence data. Every row is scoped to an
organization through `org_id`.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import (
    create_engine,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


class Area(Base):
    """Production area grouping stations and employees."""

    __tablename__ = "areas"
    __table_args__ = (UniqueConstraint("org_id", "area_code"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    area_code = Column(String, nullable=False)
    area_name = Column(String, nullable=False)


class Station(Base):
    """Work station within an area."""

    __tablename__ = "stations"
    __table_args__ = (UniqueConstraint("org_id", "station_code"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    station_code = Column(String, nullable=False)
    station_name = Column(String, nullable=False)
    area_id = Column(Integer, ForeignKey("areas.id"), nullable=True)

    area = relationship("Area")


class Skill(Base):
    """Skills catalog entry."""

    __tablename__ = "skills"
    __table_args__ = (UniqueConstraint("org_id", "skill_code"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    skill_code = Column(String, nullable=False)
    skill_name = Column(String, nullable=False)
    category = Column(String, nullable=True)
    description = Column(String, nullable=True)
    station_id = Column(Integer, ForeignKey("stations.id"), nullable=True)

    station = relationship("Station")


class Employee(Base):
    """Employee identified by the organization's employee number."""

    __tablename__ = "employees"
    __table_args__ = (UniqueConstraint("org_id", "employee_number"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    employee_number = Column(String, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    area_id = Column(Integer, ForeignKey("areas.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class EmployeeSkill(Base):
    """Skill rating (0-4) of one employee. A null rating means not rated."""

    __tablename__ = "employee_skills"
    __table_args__ = (UniqueConstraint("employee_id", "skill_id"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    rating = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    employee = relationship("Employee")
    skill = relationship("Skill")


class AreaLeader(Base):
    """Employee responsible for an area; one leader per area may be primary."""

    __tablename__ = "area_leaders"
    __table_args__ = (UniqueConstraint("org_id", "area_id", "employee_number"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    area_id = Column(Integer, ForeignKey("areas.id"), nullable=False)
    employee_number = Column(String, nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)

    area = relationship("Area")


class RatingScale(Base):
    """Display label for one level of the 0-4 rating scale."""

    __tablename__ = "rating_scales"
    __table_args__ = (UniqueConstraint("org_id", "level"),)

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    level = Column(Integer, nullable=False)
    label = Column(String, nullable=False)
    description = Column(String, nullable=True)
    color = Column(String, nullable=True)


class ImportLog(Base):
    """Audit record of one import run."""

    __tablename__ = "import_logs"

    id = Column(Integer, primary_key=True)
    org_id = Column(String, nullable=False, index=True)
    import_type = Column(String, nullable=False)
    file_name = Column(String, nullable=True)
    total_rows = Column(Integer, nullable=False, default=0)
    inserted_count = Column(Integer, nullable=False, default=0)
    updated_count = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)
    failed_rows = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
