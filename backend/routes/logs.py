# backend/routes/logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from schemas.log import LogPage
from schemas.user import Role, TokenData
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/logs", tags=["Logs"])


@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action, e.g. LOGIN"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    db: Session = Depends(get_db),
    admin: TokenData = Depends(role_required(Role.ADMIN.value)),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if status:
        query = query.filter(Log.status == status.upper())

    # Newest first
    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "success": True,
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
