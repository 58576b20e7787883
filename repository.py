# repository.py
from __future__ import annotations

import logging
from typing import Iterable, List
from datetime import date, time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlalchemy import text
from sqlmodel import SQLModel, Field, Session, create_engine, select

from domain import WorkDay

logger = logging.getLogger(__name__)


class WorkDayDB(SQLModel, table=True):
    __tablename__ = "dias"

    id: int | None = Field(default=None, primary_key=True)
    work_date: date = Field(index=True)
    company: str = ""
    role: str
    clock_in: time
    clock_out: time
    break_start: time | None = None
    break_end: time | None = None
    is_holiday: bool = False
    hours_worked: float = 0.0
    overtime_hours: float = 0.0

    def to_domain(self) -> WorkDay:
        return WorkDay(
            work_date=self.work_date,
            company=self.company,
            role=self.role,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            break_start=self.break_start,
            break_end=self.break_end,
            is_holiday=self.is_holiday,
            hours_worked=self.hours_worked,
            overtime_hours=self.overtime_hours,
            record_id=self.id,
        )


def build_engine(db_url: str, echo: bool = False):
    is_sqlite = db_url.startswith("sqlite")
    kwargs = {
        "echo": echo,
        "pool_pre_ping": True,
        "connect_args": {},
    }
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # Postgres gerenciado (Neon/Supabase): sem pool local e com timeout
        kwargs["poolclass"] = NullPool
        kwargs["connect_args"] = {"connect_timeout": 10}
        if "sslmode=" not in db_url:
            db_url += ("&" if "?" in db_url else "?") + "sslmode=require"
    return create_engine(db_url, **kwargs)


class WorkDayRepository:
    """Stores the record collection. The engine never talks to it directly."""
    def __init__(self, url: str = "sqlite:///holerite.db", echo: bool = False):
        self.url = url
        self.engine = build_engine(url, echo=echo)

        # fail fast on an unreachable Postgres, never fall back to SQLite
        if not url.startswith("sqlite"):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("select 1"))
            except SQLAlchemyError as e:
                raise RuntimeError(f"Não foi possível conectar ao Postgres: {e}") from e

        SQLModel.metadata.create_all(self.engine)

    def add(self, d: WorkDay) -> WorkDay:
        with Session(self.engine) as session:
            row = WorkDayDB(
                work_date=d.work_date,
                company=d.company,
                role=d.role,
                clock_in=d.clock_in,
                clock_out=d.clock_out,
                break_start=d.break_start,
                break_end=d.break_end,
                is_holiday=d.is_holiday,
                hours_worked=d.hours_worked,
                overtime_hours=d.overtime_hours,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            logger.info("stored record %s (%s, %s)", row.id, row.work_date, row.role)
            return row.to_domain()

    def list_all(self) -> List[WorkDay]:
        with Session(self.engine) as session:
            rows = session.exec(select(WorkDayDB).order_by(WorkDayDB.id)).all()
            return [r.to_domain() for r in rows]

    def remove(self, record_id: int) -> bool:
        with Session(self.engine) as session:
            row = session.get(WorkDayDB, record_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
        logger.info("removed record %s", record_id)
        return True

    def update_derived(self, days: Iterable[WorkDay]) -> int:
        """Writes refreshed hours/overtime back. Returns how many rows changed."""
        changed = 0
        with Session(self.engine) as session:
            for d in days:
                if d.record_id is None:
                    continue
                row = session.get(WorkDayDB, d.record_id)
                if row is None:
                    continue
                if (row.hours_worked, row.overtime_hours) != (d.hours_worked, d.overtime_hours):
                    row.hours_worked = d.hours_worked
                    row.overtime_hours = d.overtime_hours
                    session.add(row)
                    changed += 1
            if changed:
                session.commit()
        return changed


__all__ = ["WorkDayDB", "WorkDayRepository", "build_engine"]
