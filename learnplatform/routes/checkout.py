# learnplatform/routes/checkout.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import User
from ..schemas import CheckoutRequest, CheckoutResult, PathEnrollResult
from ..security import get_current_user
from ..workflows import CheckoutWorkflow, WorkflowError
from .common import workflow_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResult)
def checkout(
    data: CheckoutRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Turn the caller's whole cart into pending enrollments in one transaction.
    Checking out an empty cart succeeds with no enrollments.
    """
    try:
        result = CheckoutWorkflow(db).run(user, data)
    except WorkflowError as e:
        raise workflow_http_error(e)
    logger.info("Checkout for %s created %d enrollments", user.username, result.enrollments_count)
    return result


@router.post("/paths/{path_id}/enroll", response_model=PathEnrollResult, status_code=201)
def enroll_in_path(
    path_id: str,
    data: CheckoutRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        created = CheckoutWorkflow(db).enroll_path(user, path_id, data)
    except WorkflowError as e:
        raise workflow_http_error(e)
    return PathEnrollResult(
        message=f"تم إرسال طلب التسجيل في {len(created)} دورة",
        enrollments_count=len(created),
    )
