from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Child
from ..schemas import ChildOut

router = APIRouter(
    prefix="/children",
    tags=["children"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=List[ChildOut])
def list_children(db: Session = Depends(get_db)):
    return db.query(Child).order_by(Child.name).all()


@router.get("/{child_id}", response_model=ChildOut)
def get_child(child_id: str, db: Session = Depends(get_db)):
    child = db.query(Child).filter(Child.id == child_id).first()
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    return child
