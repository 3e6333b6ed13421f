# learnplatform/routes/courses.py
"""
Course catalog plus course structure management.

Sections and lessons are managed under ``/api/admin``; administrators may
edit any course and instructors only the courses they own.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..counters import refresh_path_counters
from ..database import get_db
from ..models import (
    CartItem, Course, CourseSection, Enrollment, Favorite, Lab, Lesson, PathCourse, Review, User,
)
from ..schemas import (
    CourseCreate, CourseSectionCreate, CourseSectionOut, CourseSectionUpdate, CourseUpdate,
    CourseWithContent, CourseWithInstructor, LessonCreate, LessonOut, LessonUpdate,
    ReviewWithUser, SuccessOut,
)
from ..security import get_current_user, require_admin, require_instructor
from ..views import course_with_content, course_with_instructor
from .common import apply_updates, commit_or_400, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

COURSE_NOT_FOUND = "الدورة غير موجودة"


def ensure_can_edit(user: User, course: Course):
    if user.role != "admin" and course.instructor_id != user.id:
        raise HTTPException(status_code=403, detail="غير مصرح - لا يمكنك تعديل هذه الدورة")


def has_course_access(db: Session, user: User, course: Course) -> bool:
    if user.role == "admin" or course.instructor_id == user.id:
        return True
    return db.query(Enrollment).filter(
        Enrollment.user_id == user.id,
        Enrollment.course_id == course.id,
        Enrollment.status == "approved",
    ).first() is not None


def check_instructor(db: Session, instructor_id: str) -> User:
    instructor = db.get(User, instructor_id)
    if instructor is None or instructor.role not in ("instructor", "admin"):
        raise HTTPException(status_code=404, detail="المدرس غير موجود")
    return instructor


# --- Public catalog ---

@router.get("/courses", response_model=List[CourseWithInstructor])
def list_courses(db: Session = Depends(get_db)):
    courses = (
        db.query(Course)
        .filter(Course.is_published.is_(True))
        .order_by(Course.created_at.desc(), Course.id)
        .all()
    )
    return [course_with_instructor(c) for c in courses]


@router.get("/courses/{course_id}", response_model=CourseWithInstructor)
def get_course(course_id: str, db: Session = Depends(get_db)):
    return course_with_instructor(get_or_404(db, Course, course_id, COURSE_NOT_FOUND))


@router.get("/courses/{course_id}/content", response_model=CourseWithContent)
def get_course_content(
    course_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    if not has_course_access(db, user, course):
        raise HTTPException(status_code=403, detail="يجب أن يكون تسجيلك في الدورة مقبولاً للوصول إلى المحتوى")
    return course_with_content(course)


@router.get("/courses/{course_id}/lessons", response_model=List[LessonOut])
def list_course_lessons(course_id: str, db: Session = Depends(get_db)):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    return [lesson for lesson in course.lessons if lesson.is_published]


@router.get("/courses/{course_id}/reviews", response_model=List[ReviewWithUser])
def list_course_reviews(course_id: str, db: Session = Depends(get_db)):
    get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    return (
        db.query(Review)
        .filter(Review.course_id == course_id)
        .order_by(Review.created_at.desc())
        .all()
    )


# --- Course management ---

@router.post("/courses", response_model=CourseWithInstructor, status_code=201)
def create_course(
    data: CourseCreate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    values = data.model_dump()
    if user.role != "admin" or not data.instructor_id:
        values["instructor_id"] = user.id
    else:
        check_instructor(db, data.instructor_id)

    course = Course(**values)
    db.add(course)
    commit_or_400(db, "تعذر إنشاء الدورة")
    db.refresh(course)
    logger.info("Course %s created by %s", course.id, user.username)
    return course_with_instructor(course)


@router.patch("/courses/{course_id}", response_model=CourseWithInstructor)
def update_course(
    course_id: str,
    data: CourseUpdate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)
    if "instructor_id" in data.model_fields_set:
        if user.role != "admin":
            raise HTTPException(status_code=403, detail="فقط المدير يمكنه تغيير مدرس الدورة")
        check_instructor(db, data.instructor_id)

    apply_updates(course, data)
    commit_or_400(db, "تعذر تحديث الدورة")
    db.refresh(course)
    return course_with_instructor(course)


@router.delete("/courses/{course_id}", response_model=SuccessOut)
def delete_course(
    course_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)

    path_ids = [pid for (pid,) in db.query(PathCourse.path_id).filter(PathCourse.course_id == course_id).all()]
    # Tagged references carry no foreign key
    for model in (CartItem, Favorite):
        db.query(model).filter(model.item_type == "course", model.item_id == course_id).delete()
    db.delete(course)
    db.flush()
    for path_id in path_ids:
        refresh_path_counters(db, path_id)
    db.commit()
    logger.info("Course %s deleted by %s", course_id, user.username)
    return SuccessOut()


@router.get("/admin/courses", response_model=List[CourseWithInstructor])
def admin_list_courses(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    courses = db.query(Course).order_by(Course.created_at.desc(), Course.id).all()
    return [course_with_instructor(c) for c in courses]


@router.get("/admin/courses/{course_id}/content", response_model=CourseWithContent)
def admin_course_content(
    course_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)
    return course_with_content(course)


@router.get("/instructor/courses", response_model=List[CourseWithInstructor])
def instructor_courses(
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    courses = (
        db.query(Course)
        .filter(Course.instructor_id == user.id)
        .order_by(Course.created_at.desc(), Course.id)
        .all()
    )
    return [course_with_instructor(c) for c in courses]


# --- Sections ---

@router.get("/admin/courses/{course_id}/sections", response_model=List[CourseSectionOut])
def list_sections(
    course_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)
    return course.sections


@router.post("/admin/courses/{course_id}/sections", response_model=CourseSectionOut, status_code=201)
def create_section(
    course_id: str,
    data: CourseSectionCreate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)
    section = CourseSection(course_id=course.id, **data.model_dump())
    db.add(section)
    commit_or_400(db, "تعذر إنشاء القسم")
    db.refresh(section)
    return section


@router.patch("/admin/sections/{section_id}", response_model=CourseSectionOut)
def update_section(
    section_id: str,
    data: CourseSectionUpdate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    section = get_or_404(db, CourseSection, section_id, "القسم غير موجود")
    ensure_can_edit(user, section.course)
    apply_updates(section, data)
    commit_or_400(db, "تعذر تحديث القسم")
    db.refresh(section)
    return section


@router.delete("/admin/sections/{section_id}", response_model=SuccessOut)
def delete_section(
    section_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    section = get_or_404(db, CourseSection, section_id, "القسم غير موجود")
    ensure_can_edit(user, section.course)
    db.delete(section)
    db.commit()
    return SuccessOut()


# --- Lessons ---

def check_lesson_refs(db: Session, course: Course, section_id, lab_id):
    if section_id is not None:
        section = db.get(CourseSection, section_id)
        if section is None or section.course_id != course.id:
            raise HTTPException(status_code=400, detail="القسم لا ينتمي إلى هذه الدورة")
    if lab_id is not None and db.get(Lab, lab_id) is None:
        raise HTTPException(status_code=404, detail="المختبر غير موجود")


@router.get("/admin/courses/{course_id}/lessons", response_model=List[LessonOut])
def list_lessons(
    course_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)
    return course.lessons


@router.post("/admin/courses/{course_id}/lessons", response_model=LessonOut, status_code=201)
def create_lesson(
    course_id: str,
    data: LessonCreate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    ensure_can_edit(user, course)
    check_lesson_refs(db, course, data.section_id, data.lab_id)
    lesson = Lesson(course_id=course.id, **data.model_dump())
    db.add(lesson)
    commit_or_400(db, "تعذر إنشاء الدرس")
    db.refresh(lesson)
    return lesson


@router.patch("/admin/lessons/{lesson_id}", response_model=LessonOut)
def update_lesson(
    lesson_id: str,
    data: LessonUpdate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    lesson = get_or_404(db, Lesson, lesson_id, "الدرس غير موجود")
    ensure_can_edit(user, lesson.course)
    fields = data.model_fields_set
    check_lesson_refs(
        db, lesson.course,
        data.section_id if "section_id" in fields else None,
        data.lab_id if "lab_id" in fields else None,
    )
    apply_updates(lesson, data)
    commit_or_400(db, "تعذر تحديث الدرس")
    db.refresh(lesson)
    return lesson


@router.delete("/admin/lessons/{lesson_id}", response_model=SuccessOut)
def delete_lesson(
    lesson_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    lesson = get_or_404(db, Lesson, lesson_id, "الدرس غير موجود")
    ensure_can_edit(user, lesson.course)
    db.delete(lesson)
    db.commit()
    return SuccessOut()
