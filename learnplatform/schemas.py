# learnplatform/schemas.py
"""
Request and response shapes.

``<Entity>Create`` models are the insert validators: they never declare
server-assigned fields (ids, timestamps, review fields, computed counters),
so anything of that kind sent by a caller is dropped during validation.
``<Entity>Out`` models mirror stored rows and the ``...With...`` models are
read-only compositions used as API responses. All of them speak camelCase
JSON on the wire.
"""
import math
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

UserRole = Literal["student", "instructor", "admin"]
EnrollmentStatus = Literal["pending", "approved", "rejected"]
PaymentMethod = Literal["cliq", "paypal"]
ItemType = Literal["course", "path"]
ContentType = Literal["text", "number", "image"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Users / auth ---

class UserOut(CamelModel):
    """A user as exposed over the API; never carries the password hash."""
    id: str
    username: str
    email: str
    name: str
    avatar: Optional[str] = None
    role: UserRole
    title: Optional[str] = None
    bio: Optional[str] = None
    level: int
    xp: int
    points: int
    streak: int
    is_active: bool
    created_at: Optional[datetime] = None


class InstructorSummary(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None
    title: Optional[str] = None


class UserBrief(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None


class UserContact(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None
    email: str
    username: str


class FavoriteUser(CamelModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    email: EmailStr
    name: str = Field(min_length=2)


class LoginRequest(CamelModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)


class AuthResponse(CamelModel):
    user: UserOut
    token: str


class AdminUserCreate(CamelModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    email: EmailStr
    name: str = Field(min_length=2)
    role: UserRole = "student"
    avatar: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = True


class AdminUserUpdate(CamelModel):
    # role is fixed once the account exists
    password: Optional[str] = Field(default=None, min_length=6)
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=2)
    avatar: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    is_active: Optional[bool] = None


# --- Courses ---

class CourseCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str
    image: Optional[str] = None
    category: str
    level: str
    duration: str
    price: float = Field(default=0, ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)
    # Defaults to the calling instructor
    instructor_id: Optional[str] = None
    lessons_count: int = Field(default=0, ge=0)
    projects_count: int = Field(default=0, ge=0)
    skills: Optional[List[str]] = None
    difficulty: int = Field(default=1, ge=1)
    is_published: bool = False
    is_special_offer: bool = False


class CourseUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)
    instructor_id: Optional[str] = None
    lessons_count: Optional[int] = Field(default=None, ge=0)
    projects_count: Optional[int] = Field(default=None, ge=0)
    skills: Optional[List[str]] = None
    difficulty: Optional[int] = Field(default=None, ge=1)
    is_published: Optional[bool] = None
    is_special_offer: Optional[bool] = None


class CourseOut(CamelModel):
    id: str
    title: str
    description: str
    image: Optional[str] = None
    category: str
    level: str
    duration: str
    price: float
    original_price: Optional[float] = None
    instructor_id: str
    rating: float
    students_count: int
    lessons_count: int
    projects_count: int
    skills: Optional[List[str]] = None
    difficulty: int
    is_published: bool
    is_special_offer: bool
    created_at: Optional[datetime] = None


class CourseBrief(CamelModel):
    id: str
    title: str
    image: Optional[str] = None
    price: float


class CourseWithInstructor(CourseOut):
    instructor: InstructorSummary


class CourseSectionCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    order: int = 0
    is_published: bool = True


class CourseSectionUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    order: Optional[int] = None
    is_published: Optional[bool] = None


class CourseSectionOut(CamelModel):
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    order: int
    is_published: bool


class LessonCreate(CamelModel):
    section_id: Optional[str] = None
    title: str = Field(min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    lab_id: Optional[str] = None
    duration: int = Field(default=0, ge=0)
    order: int = 0
    xp_reward: int = Field(default=50, ge=0)
    is_published: bool = False


class LessonUpdate(CamelModel):
    section_id: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    lab_id: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    order: Optional[int] = None
    xp_reward: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class LessonOut(CamelModel):
    id: str
    course_id: str
    section_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    lab_id: Optional[str] = None
    duration: int
    order: int
    xp_reward: int
    is_published: bool


class CourseSectionWithLessons(CourseSectionOut):
    lessons: List[LessonOut] = []


class CourseWithContent(CourseWithInstructor):
    sections: List[CourseSectionWithLessons] = []


class LessonProgressOut(CamelModel):
    id: str
    user_id: str
    lesson_id: str
    is_completed: bool
    completed_at: Optional[datetime] = None


# --- Enrollments ---

class EnrollmentCreate(CamelModel):
    """Status is not accepted here: every new enrollment starts as pending."""
    course_id: str
    payment_method: PaymentMethod
    contact_name: Optional[str] = Field(default=None, min_length=1)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, min_length=1)


class EnrollmentOut(CamelModel):
    id: str
    user_id: str
    course_id: str
    status: EnrollmentStatus
    payment_method: Optional[PaymentMethod] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    progress: int
    completed_lessons: int
    is_completed: bool
    enrolled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None


class EnrollmentWithCourse(EnrollmentOut):
    course: CourseOut


class EnrollmentWithDetails(EnrollmentOut):
    user: UserContact
    course: CourseBrief


class CheckoutRequest(CamelModel):
    payment_method: PaymentMethod
    contact_name: Optional[str] = Field(default=None, min_length=1)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, min_length=1)


class CheckoutResult(CamelModel):
    enrollments: List[EnrollmentOut] = []
    enrollments_count: int
    total: float


class PathEnrollResult(CamelModel):
    message: str
    enrollments_count: int


# --- Reviews ---

class ReviewCreate(CamelModel):
    course_id: str
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class ReviewOut(CamelModel):
    id: str
    user_id: str
    course_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewWithUser(ReviewOut):
    user: UserBrief


class LessonReviewCreate(CamelModel):
    course_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class LessonReviewOut(CamelModel):
    id: str
    user_id: str
    lesson_id: str
    course_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class LessonReviewWithUser(LessonReviewOut):
    user: UserBrief


# --- Labs ---

class LabCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str
    about: Optional[str] = None
    environment: Optional[str] = None
    instructions: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    icon: str
    color: str
    image: Optional[str] = None
    duration: int = Field(ge=0)
    level: str
    technologies: Optional[List[str]] = None
    xp_reward: int = Field(default=100, ge=0)
    is_published: bool = False


class LabUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    about: Optional[str] = None
    environment: Optional[str] = None
    instructions: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    image: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    level: Optional[str] = None
    technologies: Optional[List[str]] = None
    xp_reward: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class LabOut(CamelModel):
    id: str
    title: str
    description: str
    about: Optional[str] = None
    environment: Optional[str] = None
    instructions: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    icon: str
    color: str
    image: Optional[str] = None
    creator_id: Optional[str] = None
    duration: int
    level: str
    technologies: Optional[List[str]] = None
    xp_reward: int
    is_published: bool


class LabBrief(CamelModel):
    id: str
    title: str
    icon: str
    color: str


class LabSectionCreate(CamelModel):
    title: str = Field(min_length=1)
    content: Optional[str] = None
    instructions: Optional[str] = None
    order: int = 0
    xp_reward: int = Field(default=25, ge=0)
    is_published: bool = True


class LabSectionUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    instructions: Optional[str] = None
    order: Optional[int] = None
    xp_reward: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class LabSectionOut(CamelModel):
    id: str
    lab_id: str
    title: str
    content: Optional[str] = None
    instructions: Optional[str] = None
    order: int
    xp_reward: int
    is_published: bool


class LabWithSections(LabOut):
    sections: List[LabSectionOut] = []


class LabProgressOut(CamelModel):
    id: str
    user_id: str
    lab_id: str
    progress: int
    is_completed: bool
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class LabSubmissionCreate(CamelModel):
    screenshot_url: Optional[str] = None
    details: Optional[str] = None
    time_spent: int = Field(default=0, ge=0)


class LabSubmissionReview(CamelModel):
    notes: Optional[str] = None


class LabSubmissionOut(CamelModel):
    id: str
    user_id: str
    lab_id: str
    section_id: Optional[str] = None
    screenshot_url: Optional[str] = None
    details: Optional[str] = None
    time_spent: int
    status: EnrollmentStatus
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None


class LabSubmissionWithDetails(LabSubmissionOut):
    user: UserContact
    lab: LabBrief


# --- Learning paths ---

class LearningPathCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str
    image: Optional[str] = None
    icon: Optional[str] = None
    color: str = "#3b82f6"
    level: str = "مبتدئ"
    duration: Optional[str] = None
    is_published: bool = False
    order: int = 0


class LearningPathUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    level: Optional[str] = None
    duration: Optional[str] = None
    is_published: Optional[bool] = None
    order: Optional[int] = None


class LearningPathOut(CamelModel):
    id: str
    title: str
    description: str
    image: Optional[str] = None
    icon: Optional[str] = None
    color: str
    level: str
    duration: Optional[str] = None
    courses_count: int
    students_count: int
    is_published: bool
    order: int
    created_at: Optional[datetime] = None


class LearningPathWithCourses(LearningPathOut):
    courses: List[CourseOut] = []


class PathCourseCreate(CamelModel):
    course_id: str
    order: int = 0


class PathCourseOut(CamelModel):
    id: str
    path_id: str
    course_id: str
    order: int
    added_at: Optional[datetime] = None


# --- Cart / favorites ---

class ItemRef(CamelModel):
    """Tagged reference: ``item_type`` decides which table ``item_id`` lives in."""
    item_id: str = Field(min_length=1)
    item_type: ItemType


class CartItemCreate(ItemRef):
    pass


class FavoriteCreate(ItemRef):
    pass


class CartItemOut(CamelModel):
    id: str
    user_id: str
    item_id: str
    item_type: ItemType
    created_at: Optional[datetime] = None


class _ItemDetails(CamelModel):
    course: Optional[CourseOut] = None
    path: Optional[LearningPathOut] = None

    @model_validator(mode="after")
    def _one_referent(self):
        if self.course is not None and self.path is not None:
            raise ValueError("an item resolves to a course or a path, never both")
        return self


class CartItemWithDetails(CartItemOut, _ItemDetails):
    pass


class CartSummary(CamelModel):
    items: List[CartItemWithDetails] = []
    count: int
    total: float


class FavoriteOut(CamelModel):
    id: str
    user_id: str
    item_id: str
    item_type: ItemType
    created_at: Optional[datetime] = None


class FavoriteWithDetails(FavoriteOut, _ItemDetails):
    user: Optional[FavoriteUser] = None


class FavoriteCheck(CamelModel):
    is_favorite: bool
    favorite_id: Optional[str] = None


# --- Quizzes ---

class QuizCreate(CamelModel):
    title: str = Field(default="كويز الدرس", min_length=1)
    description: Optional[str] = None
    passing_score: int = Field(default=70, ge=0, le=100)
    xp_reward: int = Field(default=25, ge=0)
    is_published: bool = False


class QuizUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)
    xp_reward: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class QuizOut(CamelModel):
    id: str
    lesson_id: str
    title: str
    description: Optional[str] = None
    passing_score: int
    xp_reward: int
    is_published: bool
    created_at: Optional[datetime] = None


def check_answer_index(options, correct_answer):
    if options is not None and correct_answer is not None and correct_answer >= len(options):
        raise ValueError("correctAnswer must index into options")


class QuizQuestionCreate(CamelModel):
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=2)
    correct_answer: int = Field(ge=0)
    order: int = 0

    @model_validator(mode="after")
    def _answer_in_range(self):
        check_answer_index(self.options, self.correct_answer)
        return self


class QuizQuestionUpdate(CamelModel):
    question: Optional[str] = Field(default=None, min_length=1)
    options: Optional[List[str]] = Field(default=None, min_length=2)
    correct_answer: Optional[int] = Field(default=None, ge=0)
    order: Optional[int] = None

    @model_validator(mode="after")
    def _answer_in_range(self):
        check_answer_index(self.options, self.correct_answer)
        return self


class QuizQuestionOut(CamelModel):
    id: str
    quiz_id: str
    question: str
    options: List[str]
    correct_answer: int
    order: int


class PublicQuizQuestion(CamelModel):
    id: str
    question: str
    options: List[str]
    order: int


class QuizWithQuestions(QuizOut):
    questions: List[QuizQuestionOut] = []


class PublicQuiz(QuizOut):
    questions: List[PublicQuizQuestion] = []


class QuizAttemptCreate(CamelModel):
    answers: List[Optional[int]]


class QuizAttemptOut(CamelModel):
    id: str
    user_id: str
    quiz_id: str
    score: int
    answers: Optional[List[Optional[int]]] = None
    passed: bool
    completed_at: Optional[datetime] = None


class QuizAttemptResult(QuizAttemptOut):
    correct_count: int
    total_questions: int
    passing_score: int


# --- Homepage content ---

def parse_content_value(content_type, value):
    """Decode a stored text value according to its declared type."""
    if content_type == "number":
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return value


class HomepageContentCreate(CamelModel):
    key: str = Field(min_length=1)
    value: str
    type: ContentType = "text"
    order: int = 0
    is_visible: bool = True

    @model_validator(mode="after")
    def _value_matches_type(self):
        if self.type == "number" and parse_content_value("number", self.value) is None:
            raise ValueError("value must be numeric for number content")
        return self


class HomepageContentUpdate(CamelModel):
    value: Optional[str] = None
    type: Optional[ContentType] = None
    order: Optional[int] = None
    is_visible: Optional[bool] = None


class HomepageContentOut(CamelModel):
    id: str
    key: str
    value: str
    type: ContentType
    order: int
    is_visible: bool
    updated_at: Optional[datetime] = None
    parsed_value: Any = None

    @model_validator(mode="after")
    def _parse(self):
        self.parsed_value = parse_content_value(self.type, self.value)
        return self


# --- Notifications / achievements / certificates ---

class NotificationCreate(CamelModel):
    user_id: str
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    type: str = "info"


class NotificationOut(CamelModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    is_read: bool
    created_at: Optional[datetime] = None


class AchievementCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str
    icon: str
    xp_reward: int = Field(default=100, ge=0)
    requirement: Optional[str] = None


class AchievementOut(CamelModel):
    id: str
    title: str
    description: str
    icon: str
    xp_reward: int
    requirement: Optional[str] = None


class UserAchievementOut(CamelModel):
    id: str
    user_id: str
    achievement_id: str
    unlocked_at: Optional[datetime] = None
    achievement: AchievementOut


class CertificateCreate(CamelModel):
    user_id: str
    course_id: str
    certificate_url: Optional[str] = None


class CertificateOut(CamelModel):
    id: str
    user_id: str
    course_id: str
    issued_at: Optional[datetime] = None
    certificate_url: Optional[str] = None


# --- Stats / misc ---

class UserStats(CamelModel):
    total_students: int
    total_courses: int
    total_labs: int
    total_enrollments: int
    total_revenue: float
    average_rating: float


class InstructorStats(CamelModel):
    total_students: int
    total_courses: int
    total_reviews: int
    average_rating: float
    total_revenue: float


class CountOut(CamelModel):
    count: int


class SuccessOut(CamelModel):
    success: bool = True


class VideoUploadOut(CamelModel):
    video_path: str
    filename: str
