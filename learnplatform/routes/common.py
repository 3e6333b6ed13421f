# learnplatform/routes/common.py
import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import User
from ..workflows import WorkflowError

logger = logging.getLogger(__name__)


def get_or_404(db: Session, model, object_id: str, message: str):
    obj = db.get(model, object_id)
    if obj is None:
        raise HTTPException(status_code=404, detail=message)
    return obj


def commit_or_400(db: Session, message: str):
    """Commit, turning a unique/foreign-key violation into a 400."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error: %s", e.orig)
        raise HTTPException(status_code=400, detail=message)


def ensure_self_or_admin(user: User, user_id: str):
    if user.id != user_id and user.role != "admin":
        raise HTTPException(status_code=403, detail="غير مصرح - لا يمكنك الوصول لبيانات مستخدم آخر")


def apply_updates(obj, data) -> dict:
    """Copy the fields a partial payload actually set onto ``obj``."""
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(obj, field, value)
    return changes


def workflow_http_error(error: WorkflowError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)
