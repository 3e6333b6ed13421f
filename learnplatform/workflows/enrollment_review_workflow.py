from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..counters import refresh_enrollment_counters
from ..models import Course, Enrollment, User
from ..schemas import EnrollmentCreate
from .base_workflow import BaseWorkflow, ConflictError, NotFoundError

REVIEW_DECISIONS = ("approved", "rejected")


class EnrollmentReviewWorkflow(BaseWorkflow):
    """
    Enrollment requests and their administrative review.

    A request always starts as ``pending``; only ``review`` moves it to
    ``approved`` or ``rejected``, stamping the reviewer and the time and
    recomputing the student counters the decision affects.
    """

    def __init__(self, db: Session):
        super().__init__()
        self.db = db

    def request(self, user: User, data: EnrollmentCreate) -> Enrollment:
        try:
            course = self.db.get(Course, data.course_id)
            if not course:
                raise NotFoundError("الدورة غير موجودة")
            existing = self.db.scalar(
                select(Enrollment).where(
                    Enrollment.user_id == user.id,
                    Enrollment.course_id == course.id,
                )
            )
            if existing:
                raise ConflictError("المستخدم مسجل بالفعل في هذه الدورة")

            enrollment = Enrollment(
                user_id=user.id,
                course_id=course.id,
                status="pending",
                payment_method=data.payment_method,
                contact_name=data.contact_name,
                contact_email=data.contact_email,
                contact_phone=data.contact_phone,
            )
            self.db.add(enrollment)
            self.db.commit()
            self.db.refresh(enrollment)
            self.emit_event("enrollment_requested", {"enrollment_id": enrollment.id})
            return enrollment
        except Exception as e:
            self.db.rollback()
            self.handle_error(e, "request")
            raise

    def review(self, enrollment_id: str, reviewer: User, decision: str) -> Enrollment:
        if decision not in REVIEW_DECISIONS:
            raise ValueError(f"unknown review decision: {decision}")
        try:
            enrollment = self.db.get(Enrollment, enrollment_id)
            if not enrollment:
                raise NotFoundError("طلب التسجيل غير موجود")

            previous = enrollment.status
            enrollment.status = decision
            enrollment.reviewed_at = datetime.utcnow()
            enrollment.reviewed_by = reviewer.id
            refresh_enrollment_counters(self.db, enrollment.course_id)
            self.db.commit()
            self.db.refresh(enrollment)
            self.emit_event(
                "enrollment_reviewed",
                {"enrollment_id": enrollment.id, "from": previous, "to": decision},
            )
            return enrollment
        except Exception as e:
            self.db.rollback()
            self.handle_error(e, "review")
            raise

    def approve(self, enrollment_id: str, reviewer: User) -> Enrollment:
        return self.review(enrollment_id, reviewer, "approved")

    def reject(self, enrollment_id: str, reviewer: User) -> Enrollment:
        return self.review(enrollment_id, reviewer, "rejected")
