"""
Account Service - authentication and account administration.

Rules:
- Only active and verified accounts can log in
- Super-admins can never be locked or deleted
- Only a super-admin may lock or delete another admin
- New admins start unverified; students and teachers start verified
"""

import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.database import utc_now_iso
from gradebook.errors import NotFoundError, AuthorizationError, ValidationError, CredentialError
from gradebook.models.account import Account, Role
from gradebook.models.profiles import StudentProfile, TeacherProfile
from gradebook.security import MAX_PASSWORD_BYTES, get_password_hash, password_too_long, verify_password
from gradebook.services.reference_data import current_academic_year_name
from gradebook.logging_config import get_logger, log_with_context

logger = get_logger("auth")

STUDENT_CODE_PREFIX = "HS"
TEACHER_CODE_PREFIX = "GV"


def login(db: Session, username: str, password: str) -> dict:
    """Check credentials and account state; return the public account summary."""
    account = db.query(Account).filter(Account.username == username).first()

    if not account:
        log_with_context(logger, "INFO", "Login failed: unknown username",
                        extra_data={"username": username})
        raise NotFoundError("Username does not exist")

    if not account.is_active:
        log_with_context(logger, "INFO", "Login refused: account locked",
                        context={"account_id": account.id})
        raise CredentialError("Account is locked", code="ACCOUNT_LOCKED")

    if not account.is_verified:
        log_with_context(logger, "INFO", "Login refused: account not verified",
                        context={"account_id": account.id})
        raise CredentialError("Account has not been verified", code="NOT_VERIFIED")

    if not verify_password(password, account.password_hash):
        log_with_context(logger, "INFO", "Login failed: wrong password",
                        context={"account_id": account.id})
        raise CredentialError("Incorrect password", code="BAD_CREDENTIAL")

    log_with_context(logger, "INFO", "Login succeeded: {}".format(account.username),
                    context={"account_id": account.id, "role": account.role})
    return {
        "id": account.id,
        "username": account.username,
        "full_name": account.full_name,
        "role": account.role,
        "is_super_admin": account.is_super_admin,
        "dashboard": Role(account.role).value,
    }


def list_accounts(db: Session) -> List[dict]:
    return [a.summary() for a in db.query(Account).order_by(Account.created_at).all()]


def _check_admin_action(db: Session, target_id: str, requester_id: str, action: str) -> Account:
    """Shared preconditions of lock/unlock and delete; returns the target."""
    target = db.query(Account).filter(Account.id == target_id).first()
    if not target:
        raise NotFoundError("Account not found")

    if target.is_super_admin:
        raise AuthorizationError("Cannot {} a Super Admin".format(action), code="PROTECTED")

    requester = db.query(Account).filter(Account.id == requester_id).first()
    if target.role == Role.ADMIN.value and not (requester and requester.is_super_admin):
        raise AuthorizationError(
            "Only a Super Admin can {} an Admin account".format(action),
            code="INSUFFICIENT_PRIVILEGE",
        )
    return target


def toggle_lock(db: Session, target_id: str, requester_id: str) -> Account:
    """Lock an active account or unlock a locked one."""
    target = _check_admin_action(db, target_id, requester_id, "lock")
    target.is_active = not target.is_active
    target.updated_at = utc_now_iso()
    db.commit()

    log_with_context(logger, "INFO",
        "Account {}: {}".format("unlocked" if target.is_active else "locked", target.username),
        context={"account_id": target.id, "requester_id": requester_id})
    return target


def delete_account(db: Session, target_id: str, requester_id: str) -> None:
    """
    Delete the account row.

    Student/teacher profiles and score entries are kept, so the score
    history of a removed student survives.
    """
    target = _check_admin_action(db, target_id, requester_id, "delete")
    username = target.username
    db.delete(target)
    db.commit()

    log_with_context(logger, "INFO", "Account deleted: {}".format(username),
                    context={"account_id": target_id, "requester_id": requester_id})


def verify_admin(db: Session, target_id: str, verified_by: str) -> Account:
    """
    Mark an account verified and record who verified it.

    Whether `verified_by` is a super-admin is the caller's concern.
    """
    target = db.query(Account).filter(Account.id == target_id).first()
    if not target:
        raise NotFoundError("Account not found")

    now = utc_now_iso()
    target.is_verified = True
    target.verified_by = verified_by
    target.verification_timestamp = now
    target.updated_at = now
    db.commit()

    log_with_context(logger, "INFO", "Account verified: {}".format(target.username),
                    context={"account_id": target.id, "verified_by": verified_by})
    return target


def next_code(db: Session, column, prefix: str) -> str:
    """
    Next code in the PREFIX000001 sequence for `column`.

    Takes the highest numeric suffix in storage and steps past any
    value that is already taken.
    """
    pattern = re.compile(r"^{}(\d+)$".format(re.escape(prefix)))
    highest = 0
    for (code,) in db.query(column).filter(column.like(prefix + "%")).all():
        match = pattern.match(code)
        if match:
            highest = max(highest, int(match.group(1)))

    number = highest + 1
    candidate = "{}{:06d}".format(prefix, number)
    while db.query(column).filter(column == candidate).first() is not None:
        number += 1
        candidate = "{}{:06d}".format(prefix, number)
    return candidate


def grade_from_class_name(class_name: str) -> str:
    """Leading digits of a class name: '10A1' -> '10'."""
    match = re.match(r"^(\d+)", class_name)
    return match.group(1) if match else class_name[:2]


def create_account(db: Session, username: str, password: str, full_name: str,
                   role: Role, class_name: Optional[str] = None) -> Account:
    """
    Create an account, plus a student or teacher profile where it applies.

    Account and profile are committed together. A username or profile code
    taken by a concurrent request is reported like any other duplicate.
    """
    role = Role(role)
    if password_too_long(password):
        raise ValidationError("Password must be at most {} bytes".format(MAX_PASSWORD_BYTES))
    if db.query(Account).filter(Account.username == username).first():
        raise ValidationError("Username already exists", code="DUPLICATE_USERNAME")

    now = utc_now_iso()
    account = Account(
        username=username,
        password_hash=get_password_hash(password),
        full_name=full_name,
        role=role.value,
        is_super_admin=False,
        is_verified=role != Role.ADMIN,
        is_active=True,
        created_at=now,
        updated_at=now,
    )

    profile_code = None
    try:
        db.add(account)
        db.flush()

        if role == Role.STUDENT and class_name:
            profile_code = next_code(db, StudentProfile.student_code, STUDENT_CODE_PREFIX)
            db.add(StudentProfile(
                account_id=account.id,
                student_code=profile_code,
                class_name=class_name,
                grade=grade_from_class_name(class_name),
                academic_year=current_academic_year_name(db),
            ))
        elif role == Role.TEACHER:
            profile_code = next_code(db, TeacherProfile.teacher_code, TEACHER_CODE_PREFIX)
            db.add(TeacherProfile(account_id=account.id, teacher_code=profile_code))

        db.commit()
    except IntegrityError as e:
        db.rollback()
        log_with_context(logger, "WARNING", "Account creation rejected by store: {}".format(e.orig),
                        extra_data={"username": username})
        if "username" in str(e.orig):
            raise ValidationError("Username already exists", code="DUPLICATE_USERNAME")
        raise ValidationError("Profile code already taken, please retry", code="DUPLICATE_NAME")
    except Exception:
        db.rollback()
        raise
    db.refresh(account)

    log_with_context(logger, "INFO", "Account created: {} ({})".format(username, role.value),
                    context={"account_id": account.id},
                    extra_data={"profile_code": profile_code, "class_name": class_name})
    return account
