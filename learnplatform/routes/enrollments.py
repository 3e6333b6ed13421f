# learnplatform/routes/enrollments.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Enrollment, User
from ..schemas import EnrollmentCreate, EnrollmentOut, EnrollmentWithCourse, EnrollmentWithDetails
from ..security import get_current_user, require_admin
from ..workflows import EnrollmentReviewWorkflow, WorkflowError
from .common import ensure_self_or_admin, workflow_http_error

router = APIRouter()


@router.post("/enrollments", response_model=EnrollmentOut, status_code=201)
def request_enrollment(
    data: EnrollmentCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return EnrollmentReviewWorkflow(db).request(user, data)
    except WorkflowError as e:
        raise workflow_http_error(e)


@router.get("/users/{user_id}/enrollments", response_model=List[EnrollmentWithCourse])
def list_user_enrollments(
    user_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_self_or_admin(user, user_id)
    return (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc())
        .all()
    )


@router.get("/admin/enrollments/pending", response_model=List[EnrollmentWithDetails])
def list_pending_enrollments(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return (
        db.query(Enrollment)
        .filter(Enrollment.status == "pending")
        .order_by(Enrollment.enrolled_at.desc())
        .all()
    )


@router.post("/admin/enrollments/{enrollment_id}/approve", response_model=EnrollmentOut)
def approve_enrollment(
    enrollment_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return EnrollmentReviewWorkflow(db).approve(enrollment_id, admin)
    except WorkflowError as e:
        raise workflow_http_error(e)


@router.post("/admin/enrollments/{enrollment_id}/reject", response_model=EnrollmentOut)
def reject_enrollment(
    enrollment_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        return EnrollmentReviewWorkflow(db).reject(enrollment_id, admin)
    except WorkflowError as e:
        raise workflow_http_error(e)
