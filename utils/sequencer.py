# utils/sequencer.py
import logging
from datetime import date

from sqlalchemy import text, select
from sqlalchemy.orm import Session

from models import DocCounter

logger = logging.getLogger(__name__)

# doc_type -> format; {fy} = "2024-2025", {seq} = running number
DOC_FORMATS = {
    "RCP": "{fy}-RCP-{seq:04d}",
    "INV": "INV-{fy}-{seq:04d}",
    "BILL": "BILL-{fy}-{seq:04d}",
    "VPMT": "VPMT-{fy}-{seq:04d}",
    "VCN": "VCN-{fy}-{seq:04d}",
    "CN": "CN-{fy}-{seq:04d}",
}


def financial_year(on: date | None = None) -> str:
    """Indian financial year (1 Apr - 31 Mar) as 'YYYY-YYYY'."""
    d = on or date.today()
    start = d.year if d.month >= 4 else d.year - 1
    return f"{start}-{start + 1}"


def format_number(doc_type: str, seq: int, fy: str) -> str:
    try:
        fmt = DOC_FORMATS[doc_type]
    except KeyError:
        raise ValueError(f"Unknown document type: {doc_type}")
    return fmt.format(fy=fy, seq=seq)


def _counter(db: Session, doc_type: str, fy: str, lock: bool = False) -> DocCounter | None:
    q = select(DocCounter).where(DocCounter.doc_type == doc_type, DocCounter.financial_year == fy)
    if lock:
        q = q.with_for_update()
    return db.execute(q).scalar_one_or_none()


def peek_number(db: Session, doc_type: str, on: date | None = None) -> str:
    """Next number without consuming it."""
    fy = financial_year(on)
    row = _counter(db, doc_type, fy)
    return format_number(doc_type, (row.seq if row else 0) + 1, fy)


def next_number(db: Session, doc_type: str, on: date | None = None) -> str:
    """Atomically consume the next number of doc_type in the current financial year.

    Runs inside the caller's transaction; the caller commits.
    """
    fy = financial_year(on)
    format_number(doc_type, 0, fy)  # validate doc_type before touching the table
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        seq = db.execute(
            text("""
            INSERT INTO doc_counters (doc_type, financial_year, seq)
            VALUES (:t, :fy, 1)
            ON CONFLICT (doc_type, financial_year)
            DO UPDATE SET seq = doc_counters.seq + 1
            RETURNING seq
            """),
            {"t": doc_type, "fy": fy},
        ).scalar_one()
    else:
        # generic path: row lock where supported (SQLite serializes writers anyway)
        row = _counter(db, doc_type, fy, lock=True)
        if row is None:
            row = DocCounter(doc_type=doc_type, financial_year=fy, seq=1)
            db.add(row)
        else:
            row.seq += 1
        db.flush()
        seq = row.seq

    number = format_number(doc_type, seq, fy)
    logger.info("Allocated %s number %s", doc_type, number)
    return number


def set_counter(db: Session, doc_type: str, seq: int, on: date | None = None) -> DocCounter:
    """Force the counter of the current financial year to seq (used by sync)."""
    fy = financial_year(on)
    format_number(doc_type, 0, fy)
    row = _counter(db, doc_type, fy, lock=True)
    if row is None:
        row = DocCounter(doc_type=doc_type, financial_year=fy, seq=seq)
        db.add(row)
    else:
        row.seq = seq
    db.flush()
    logger.info("Counter %s/%s synced to %s", doc_type, fy, seq)
    return row
