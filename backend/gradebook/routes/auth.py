"""Login route."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.services import accounts

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/api/auth/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return the account summary (never the password hash)."""
    user = accounts.login(db, request.username, request.password)
    return {"success": True, "user": user}
