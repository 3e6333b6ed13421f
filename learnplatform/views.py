# learnplatform/views.py
"""Composition of read-only view types from stored rows."""
from typing import Any, Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from . import schemas
from .config import DEFAULT_PATH_PRICE
from .models import Course, LearningPath, User

UNKNOWN_INSTRUCTOR = {"id": "", "name": "Unknown", "avatar": None, "title": None}


class ItemResolutionError(ValueError):
    """A cart/favorite view does not resolve to exactly one course or path."""


def instructor_summary(user: Optional[User]) -> schemas.InstructorSummary:
    if user is None:
        return schemas.InstructorSummary(**UNKNOWN_INSTRUCTOR)
    return schemas.InstructorSummary.model_validate(user)


def course_with_instructor(course: Course) -> schemas.CourseWithInstructor:
    data = schemas.CourseOut.model_validate(course).model_dump()
    return schemas.CourseWithInstructor(**data, instructor=instructor_summary(course.instructor))


def course_with_content(course: Course) -> schemas.CourseWithContent:
    base = course_with_instructor(course).model_dump()
    sections = []
    for section in course.sections:
        lessons = [
            schemas.LessonOut.model_validate(lesson)
            for lesson in course.lessons
            if lesson.section_id == section.id
        ]
        sections.append(
            schemas.CourseSectionWithLessons(
                **schemas.CourseSectionOut.model_validate(section).model_dump(),
                lessons=lessons,
            )
        )
    return schemas.CourseWithContent(**base, sections=sections)


def load_item(db: Session, item_type: str, item_id: str):
    """Fetch the row a tagged reference points at, or None."""
    if item_type == "course":
        return db.get(Course, item_id)
    if item_type == "path":
        return db.get(LearningPath, item_id)
    return None


def item_details(db: Session, item_type: str, item_id: str) -> dict:
    target = load_item(db, item_type, item_id)
    if target is None:
        return {"course": None, "path": None}
    if item_type == "course":
        return {"course": schemas.CourseOut.model_validate(target), "path": None}
    return {"course": None, "path": schemas.LearningPathOut.model_validate(target)}


def cart_item_with_details(db: Session, item) -> schemas.CartItemWithDetails:
    data = schemas.CartItemOut.model_validate(item).model_dump()
    return schemas.CartItemWithDetails(**data, **item_details(db, item.item_type, item.item_id))


def favorite_with_details(db: Session, favorite, include_user: bool = False) -> schemas.FavoriteWithDetails:
    data = schemas.FavoriteOut.model_validate(favorite).model_dump()
    user = None
    if include_user and favorite.user is not None:
        user = schemas.FavoriteUser.model_validate(favorite.user)
    return schemas.FavoriteWithDetails(
        **data, **item_details(db, favorite.item_type, favorite.item_id), user=user
    )


def _field(item: Any, name: str, alias: str = None):
    if isinstance(item, dict):
        if alias and alias in item:
            return item[alias]
        return item.get(name)
    return getattr(item, name, None)


def _referents(item: Any) -> Tuple[Any, Any]:
    course = _field(item, "course")
    path = _field(item, "path")
    if course is not None and path is not None:
        raise ItemResolutionError("item carries both a course and a path")
    return course, path


def resolve_item(item: Any):
    """
    Return the course or path a cart/favorite entry refers to.

    Works on view objects and on the camelCase dicts the API returns. The
    ``itemType`` tag selects which side is read; an entry with both or
    neither side populated is rejected.
    """
    course, path = _referents(item)
    item_type = _field(item, "item_type", "itemType")
    target = course if item_type == "course" else path if item_type == "path" else None
    if target is None:
        raise ItemResolutionError(f"item of type {item_type!r} has no matching referent")
    return target


def item_price(item: Any, default_path_price: float = DEFAULT_PATH_PRICE) -> float:
    course, path = _referents(item)
    item_type = _field(item, "item_type", "itemType")
    if item_type == "course" and course is not None:
        return float(_field(course, "price") or 0)
    if item_type == "path" and path is not None:
        # Paths have no price of their own
        return float(default_path_price)
    return 0.0


def cart_total(items: Iterable[Any], default_path_price: float = DEFAULT_PATH_PRICE) -> float:
    return sum(item_price(item, default_path_price) for item in items)
