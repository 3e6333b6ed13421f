from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..models import CartItem, Course, Enrollment, LearningPath, PathCourse, User
from ..schemas import CheckoutRequest, CheckoutResult, EnrollmentOut
from ..views import cart_item_with_details, cart_total
from .base_workflow import BaseWorkflow, NotFoundError


class CheckoutWorkflow(BaseWorkflow):
    """
    Turns a cart (or a single learning path) into pending enrollments.

    All writes of one run share a single transaction: the enrollments are
    created and the cart is cleared together, or nothing changes.
    """

    def __init__(self, db: Session):
        super().__init__()
        self.db = db

    def path_course_ids(self, path_id: str) -> List[str]:
        return list(
            self.db.scalars(
                select(PathCourse.course_id)
                .where(PathCourse.path_id == path_id)
                .order_by(PathCourse.order, PathCourse.added_at)
            ).all()
        )

    def expand_cart(self, items: List[CartItem]) -> List[str]:
        """Course ids a cart resolves to, in cart order, without duplicates."""
        course_ids: List[str] = []
        for item in items:
            if item.item_type == "course":
                if self.db.get(Course, item.item_id) is not None:
                    course_ids.append(item.item_id)
            elif item.item_type == "path":
                course_ids.extend(self.path_course_ids(item.item_id))
        return list(dict.fromkeys(course_ids))

    def enroll_courses(self, user: User, course_ids: List[str], data: CheckoutRequest) -> List[Enrollment]:
        already = set(
            self.db.scalars(
                select(Enrollment.course_id).where(
                    Enrollment.user_id == user.id,
                    Enrollment.course_id.in_(course_ids),
                )
            ).all()
        ) if course_ids else set()

        created = []
        for course_id in course_ids:
            if course_id in already:
                continue
            enrollment = Enrollment(
                user_id=user.id,
                course_id=course_id,
                status="pending",
                payment_method=data.payment_method,
                contact_name=data.contact_name,
                contact_email=data.contact_email,
                contact_phone=data.contact_phone,
            )
            self.db.add(enrollment)
            created.append(enrollment)
        self.db.flush()
        self.emit_event("enrollments_created", {"count": len(created)})
        return created

    def run(self, user: User, data: CheckoutRequest) -> CheckoutResult:
        try:
            items = list(
                self.db.scalars(
                    select(CartItem)
                    .where(CartItem.user_id == user.id)
                    .order_by(CartItem.created_at)
                ).all()
            )
            total = cart_total(cart_item_with_details(self.db, item) for item in items)
            self.ctx.set_data("total", total)
            self.emit_event("cart_loaded", {"items": len(items), "total": total})

            created = self.enroll_courses(user, self.expand_cart(items), data)

            self.db.execute(delete(CartItem).where(CartItem.user_id == user.id))
            self.emit_event("cart_cleared")

            self.db.commit()
            for enrollment in created:
                self.db.refresh(enrollment)
            return CheckoutResult(
                enrollments=[EnrollmentOut.model_validate(e) for e in created],
                enrollments_count=len(created),
                total=total,
            )
        except Exception as e:
            self.db.rollback()
            self.handle_error(e, "checkout")
            raise

    def enroll_path(self, user: User, path_id: str, data: CheckoutRequest) -> List[Enrollment]:
        try:
            if self.db.get(LearningPath, path_id) is None:
                raise NotFoundError("المسار غير موجود")
            course_ids = self.path_course_ids(path_id)
            if not course_ids:
                raise NotFoundError("المسار لا يحتوي على دورات")
            created = self.enroll_courses(user, course_ids, data)
            self.db.commit()
            return created
        except Exception as e:
            self.db.rollback()
            self.handle_error(e, "enroll_path")
            raise
