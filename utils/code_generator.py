# utils/code_generator.py
import re
from sqlalchemy.orm import Session


def highest_number(db: Session, model, field: str, contains: str) -> int:
    """
    Highest running number among stored codes containing `contains`
    (e.g. the financial year "2024-2025"). Codes end in -####.
    """
    col = getattr(model, field)
    pat = re.compile(r"-(\d+)$")
    max_n = 0
    for (code,) in db.query(col).filter(col.like(f"%{contains}%")).all():
        m = pat.search(code or "")
        if m:
            n = int(m.group(1))
            if n > max_n: max_n = n
    return max_n
