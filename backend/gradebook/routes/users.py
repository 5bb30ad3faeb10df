"""
Account administration routes.

Lock/unlock and delete carry the requesting account's id so the
super-admin rules can be enforced.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.models.account import Role
from gradebook.security import MAX_PASSWORD_BYTES, password_too_long
from gradebook.services import accounts

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class CreateAccountRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    role: Role
    class_name: Optional[str] = Field(None, description="Class for new students, e.g. 10A1")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError("password must be at most {} bytes".format(MAX_PASSWORD_BYTES))
        return value


class RequesterRequest(BaseModel):
    requester_id: str


class VerifyRequest(BaseModel):
    verified_by: str


@router.get("/api/users")
def list_users(db: Session = Depends(get_db)):
    return {"success": True, "data": accounts.list_accounts(db)}


@router.post("/api/users")
def create_user(request: CreateAccountRequest, db: Session = Depends(get_db)):
    account = accounts.create_account(
        db, request.username, request.password, request.full_name,
        request.role, request.class_name,
    )
    return {"success": True, "data": account.summary()}


@router.post("/api/users/{account_id}/toggle-lock")
def toggle_lock(account_id: str, request: RequesterRequest, db: Session = Depends(get_db)):
    account = accounts.toggle_lock(db, account_id, request.requester_id)
    return {"success": True, "data": {"id": account.id, "is_active": account.is_active}}


@router.delete("/api/users/{account_id}")
def delete_user(account_id: str,
                requester_id: str = Query(..., description="Account performing the deletion"),
                db: Session = Depends(get_db)):
    accounts.delete_account(db, account_id, requester_id)
    return {"success": True}


@router.post("/api/users/{account_id}/verify")
def verify_user(account_id: str, request: VerifyRequest, db: Session = Depends(get_db)):
    account = accounts.verify_admin(db, account_id, request.verified_by)
    return {"success": True, "data": account.summary()}
