# learnplatform/counters.py
"""
Denormalized counters, recomputed from the rows they summarize.

Every mutation that touches reviews, enrollments or path membership calls the
matching refresh function inside its own transaction, so stored counters
never drift from a recount.
"""
import logging

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session

from .models import Course, Enrollment, LearningPath, PathCourse, Review

logger = logging.getLogger(__name__)


def refresh_course_rating(db: Session, course_id: str) -> None:
    course = db.get(Course, course_id)
    if not course:
        return
    db.flush()
    avg = db.scalar(select(func.avg(Review.rating)).where(Review.course_id == course_id))
    course.rating = round(float(avg), 1) if avg is not None else 0


def refresh_course_students(db: Session, course_id: str) -> None:
    course = db.get(Course, course_id)
    if not course:
        return
    course.students_count = db.scalar(
        select(func.count(Enrollment.id)).where(
            Enrollment.course_id == course_id,
            Enrollment.status == "approved",
        )
    ) or 0


def refresh_path_courses(db: Session, path_id: str) -> None:
    path = db.get(LearningPath, path_id)
    if not path:
        return
    path.courses_count = db.scalar(
        select(func.count(PathCourse.id)).where(PathCourse.path_id == path_id)
    ) or 0


def refresh_path_students(db: Session, path_id: str) -> None:
    path = db.get(LearningPath, path_id)
    if not path:
        return
    path.students_count = db.scalar(
        select(func.count(distinct(Enrollment.user_id)))
        .join(PathCourse, PathCourse.course_id == Enrollment.course_id)
        .where(PathCourse.path_id == path_id, Enrollment.status == "approved")
    ) or 0


def refresh_enrollment_counters(db: Session, course_id: str) -> None:
    """Course student count plus every path that contains the course."""
    db.flush()
    refresh_course_students(db, course_id)
    path_ids = db.scalars(select(PathCourse.path_id).where(PathCourse.course_id == course_id)).all()
    for path_id in path_ids:
        refresh_path_students(db, path_id)
    logger.debug("Refreshed enrollment counters for course %s (%d paths)", course_id, len(path_ids))


def refresh_path_counters(db: Session, path_id: str) -> None:
    db.flush()
    refresh_path_courses(db, path_id)
    refresh_path_students(db, path_id)
