# learnplatform/models.py
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey,
    Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base

USER_ROLES = ("student", "instructor", "admin")
ENROLLMENT_STATUSES = ("pending", "approved", "rejected")
PAYMENT_METHODS = ("cliq", "paypal")
ITEM_TYPES = ("course", "path")
CONTENT_TYPES = ("text", "number", "image")


def new_id():
    return str(uuid.uuid4())


def _in(column, values):
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint(_in("role", USER_ROLES), name="ck_users_role"),)

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)  # passlib hash
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    role = Column(String, nullable=False, default="student")
    title = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    level = Column(Integer, nullable=False, default=1)
    xp = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    courses = relationship("Course", back_populates="instructor", passive_deletes=True)


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_courses_price"),
        CheckConstraint("original_price IS NULL OR original_price >= 0", name="ck_courses_original_price"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String, nullable=True)
    category = Column(String, nullable=False)
    level = Column(String, nullable=False)
    duration = Column(String, nullable=False)
    price = Column(Float, nullable=False, default=0)
    original_price = Column(Float, nullable=True)
    instructor_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    # Maintained by counters.py
    rating = Column(Float, nullable=False, default=0)
    students_count = Column(Integer, nullable=False, default=0)
    lessons_count = Column(Integer, nullable=False, default=0)
    projects_count = Column(Integer, nullable=False, default=0)
    skills = Column(JSON, nullable=True)
    difficulty = Column(Integer, nullable=False, default=1)
    is_published = Column(Boolean, nullable=False, default=False)
    is_special_offer = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    instructor = relationship("User", back_populates="courses")
    sections = relationship(
        "CourseSection", back_populates="course", passive_deletes=True,
        order_by="[CourseSection.order, CourseSection.id]",
    )
    lessons = relationship(
        "Lesson", back_populates="course", passive_deletes=True,
        order_by="[Lesson.order, Lesson.id]",
    )


class CourseSection(Base):
    __tablename__ = "course_sections"
    id = Column(String(36), primary_key=True, default=new_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    course = relationship("Course", back_populates="sections")


class Lesson(Base):
    __tablename__ = "lessons"
    id = Column(String(36), primary_key=True, default=new_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    section_id = Column(String(36), ForeignKey("course_sections.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    video_url = Column(String, nullable=True)
    lab_id = Column(String(36), ForeignKey("labs.id", ondelete="SET NULL"), nullable=True)
    duration = Column(Integer, nullable=False, default=0)
    order = Column(Integer, nullable=False, default=0)
    xp_reward = Column(Integer, nullable=False, default=50)
    is_published = Column(Boolean, nullable=False, default=False)

    course = relationship("Course", back_populates="lessons")


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
        CheckConstraint(_in("status", ENROLLMENT_STATUSES), name="ck_enrollments_status"),
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_enrollments_progress"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    status = Column(String, nullable=False, default="pending")
    payment_method = Column(String, nullable=True)
    contact_name = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    progress = Column(Integer, nullable=False, default=0)
    completed_lessons = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    enrolled_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", foreign_keys=[user_id])
    course = relationship("Course")


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_reviews_user_course"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")


class Achievement(Base):
    __tablename__ = "achievements"
    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String, nullable=False)
    xp_reward = Column(Integer, nullable=False, default=100)
    requirement = Column(String, nullable=True)


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    achievement_id = Column(String(36), ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False)
    unlocked_at = Column(DateTime, default=datetime.utcnow)

    achievement = relationship("Achievement")


class Lab(Base):
    __tablename__ = "labs"
    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    about = Column(Text, nullable=True)
    environment = Column(String, nullable=True)
    instructions = Column(JSON, nullable=True)
    learning_objectives = Column(JSON, nullable=True)
    icon = Column(String, nullable=False)
    color = Column(String, nullable=False)
    image = Column(String, nullable=True)
    creator_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    duration = Column(Integer, nullable=False)
    level = Column(String, nullable=False)
    technologies = Column(JSON, nullable=True)
    xp_reward = Column(Integer, nullable=False, default=100)
    is_published = Column(Boolean, nullable=False, default=False)

    sections = relationship(
        "LabSection", back_populates="lab", passive_deletes=True,
        order_by="[LabSection.order, LabSection.id]",
    )


class LabSection(Base):
    __tablename__ = "lab_sections"
    id = Column(String(36), primary_key=True, default=new_id)
    lab_id = Column(String(36), ForeignKey("labs.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    xp_reward = Column(Integer, nullable=False, default=25)
    is_published = Column(Boolean, nullable=False, default=True)

    lab = relationship("Lab", back_populates="sections")


class LabProgress(Base):
    __tablename__ = "lab_progress"
    __table_args__ = (UniqueConstraint("user_id", "lab_id", name="uq_lab_progress_user_lab"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lab_id = Column(String(36), ForeignKey("labs.id", ondelete="CASCADE"), nullable=False)
    progress = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)


class LabSubmission(Base):
    __tablename__ = "lab_submissions"
    __table_args__ = (
        CheckConstraint(_in("status", ENROLLMENT_STATUSES), name="ck_lab_submissions_status"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lab_id = Column(String(36), ForeignKey("labs.id", ondelete="CASCADE"), nullable=False)
    section_id = Column(String(36), ForeignKey("lab_sections.id", ondelete="SET NULL"), nullable=True)
    screenshot_url = Column(String, nullable=True)
    details = Column(Text, nullable=True)
    time_spent = Column(Integer, nullable=False, default=0)  # seconds
    status = Column(String, nullable=False, default="pending")
    submitted_at = Column(DateTime, default=datetime.utcnow)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    review_notes = Column(Text, nullable=True)
    xp_awarded = Column(Boolean, nullable=False, default=False)

    user = relationship("User", foreign_keys=[user_id])
    lab = relationship("Lab")


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False, default="info")
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Certificate(Base):
    __tablename__ = "certificates"
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    issued_at = Column(DateTime, default=datetime.utcnow)
    certificate_url = Column(String, nullable=True)


class HomepageContent(Base):
    __tablename__ = "homepage_content"
    __table_args__ = (CheckConstraint(_in("type", CONTENT_TYPES), name="ck_homepage_content_type"),)

    id = Column(String(36), primary_key=True, default=new_id)
    key = Column(String, unique=True, nullable=False)  # hero_title, stats_students, ...
    value = Column(Text, nullable=False)  # always text, decoded by type on read
    type = Column(String, nullable=False, default="text")
    order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class LearningPath(Base):
    __tablename__ = "learning_paths"
    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    color = Column(String, nullable=False, default="#3b82f6")
    level = Column(String, nullable=False, default="مبتدئ")
    duration = Column(String, nullable=True)
    # Maintained by counters.py
    courses_count = Column(Integer, nullable=False, default=0)
    students_count = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    path_courses = relationship(
        "PathCourse", back_populates="path", passive_deletes=True,
        order_by="[PathCourse.order, PathCourse.added_at]",
    )


class PathCourse(Base):
    __tablename__ = "path_courses"
    __table_args__ = (UniqueConstraint("path_id", "course_id", name="uq_path_courses_path_course"),)

    id = Column(String(36), primary_key=True, default=new_id)
    path_id = Column(String(36), ForeignKey("learning_paths.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    added_at = Column(DateTime, default=datetime.utcnow)

    path = relationship("LearningPath", back_populates="path_courses")
    course = relationship("Course")


class LessonReview(Base):
    __tablename__ = "lesson_reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_reviews_user_lesson"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_lesson_reviews_rating"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(String(36), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", "item_type", name="uq_cart_items_user_item"),
        CheckConstraint(_in("item_type", ITEM_TYPES), name="ck_cart_items_item_type"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Tagged reference: item_type selects the table item_id points into
    item_id = Column(String(36), nullable=False)
    item_type = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", "item_type", name="uq_favorites_user_item"),
        CheckConstraint(_in("item_type", ITEM_TYPES), name="ck_favorites_item_type"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    item_id = Column(String(36), nullable=False)
    item_type = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")


class Quiz(Base):
    __tablename__ = "quizzes"
    __table_args__ = (
        CheckConstraint("passing_score >= 0 AND passing_score <= 100", name="ck_quizzes_passing_score"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    lesson_id = Column(String(36), ForeignKey("lessons.id", ondelete="CASCADE"), unique=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    passing_score = Column(Integer, nullable=False, default=70)  # percentage
    xp_reward = Column(Integer, nullable=False, default=25)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    questions = relationship(
        "QuizQuestion", back_populates="quiz", passive_deletes=True,
        order_by="[QuizQuestion.order, QuizQuestion.id]",
    )


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    __table_args__ = (CheckConstraint("correct_answer >= 0", name="ck_quiz_questions_correct_answer"),)

    id = Column(String(36), primary_key=True, default=new_id)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_answer = Column(Integer, nullable=False)  # 0-based index into options
    order = Column(Integer, nullable=False, default=0)

    quiz = relationship("Quiz", back_populates="questions")


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    score = Column(Integer, nullable=False)  # percentage
    answers = Column(JSON, nullable=True)
    passed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, default=datetime.utcnow)

    quiz = relationship("Quiz")
