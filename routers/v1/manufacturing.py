# routers/v1/manufacturing.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas import ManufacturingCompleteIn, ManufacturingCompleteOut
from services.transfer_workflow import complete_manufacturing

router = APIRouter(prefix="/manufacturing", tags=["manufacturing"])


@router.post("/complete", response_model=ManufacturingCompleteOut)
def manufacturing_complete(payload: ManufacturingCompleteIn, db: Session = Depends(get_db)):
    result = complete_manufacturing(db, **payload.model_dump())
    db.commit()
    return result
