import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="learnplatform-videos-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from learnplatform.database import Base, SessionLocal, engine  # noqa: E402
from learnplatform.models import Course, LearningPath, PathCourse, User  # noqa: E402
from learnplatform.security import create_access_token, get_password_hash  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def make_user(db, username, role="student", password="secret123", **extra):
    user = User(
        username=username,
        password=get_password_hash(password),
        email=f"{username}@example.com",
        name=extra.pop("name", username.title()),
        role=role,
        **extra
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def make_course(db, instructor, title="AWS Basics", price=50, **extra):
    values = dict(
        title=title,
        description=f"{title} description",
        category="AWS",
        level="مبتدئ",
        duration="10 ساعات",
        price=price,
        instructor_id=instructor.id,
        is_published=True,
    )
    values.update(extra)
    course = Course(**values)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def make_path(db, title="Cloud Path", courses=(), **extra):
    values = dict(title=title, description=f"{title} description", is_published=True)
    values.update(extra)
    path = LearningPath(**values)
    db.add(path)
    db.flush()
    for order, course in enumerate(courses):
        db.add(PathCourse(path_id=path.id, course_id=course.id, order=order))
    path.courses_count = len(courses)
    db.commit()
    db.refresh(path)
    return path


@pytest.fixture
def admin(db):
    return make_user(db, "admin", role="admin")


@pytest.fixture
def instructor(db):
    return make_user(db, "teacher", role="instructor")


@pytest.fixture
def student(db):
    return make_user(db, "student")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def instructor_headers(instructor):
    return auth_headers(instructor)


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


@pytest.fixture
def course(db, instructor):
    return make_course(db, instructor)


@pytest.fixture
def path(db, instructor):
    first = make_course(db, instructor, title="Kubernetes", price=120)
    second = make_course(db, instructor, title="Terraform", price=80)
    return make_path(db, courses=[first, second])
