"""
Dashboard route - the landing summary for an account.

The account's role decides which summary is built; see
services/dashboard.py.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.services.dashboard import build_dashboard

router = APIRouter()


@router.get("/api/dashboard/{account_id}")
def get_dashboard(account_id: str, db: Session = Depends(get_db)):
    """Landing data for the account's role."""
    return {"success": True, "data": build_dashboard(db, account_id)}
