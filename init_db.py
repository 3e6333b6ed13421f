from learnplatform.counters import refresh_course_rating, refresh_enrollment_counters, refresh_path_counters
from learnplatform.database import engine, Base, SessionLocal
from learnplatform.models import (
    Achievement, Course, Enrollment, Lab, LabSection, LearningPath, Lesson, Notification,
    PathCourse, Review, User,
)
from learnplatform.routes.homepage import seed_homepage_content
from learnplatform.security import get_password_hash

USERS = [
    {
        "username": "admin", "password": "admin123", "email": "admin@jordancloud.com",
        "name": "مدير النظام", "role": "admin", "title": "مدير المنصة",
        "bio": "مدير منصة سحابة الأردن", "level": 11, "xp": 5000, "points": 10000, "streak": 30,
    },
    {
        "username": "ahmad_instructor", "password": "instructor123", "email": "ahmad@jordancloud.com",
        "name": "أحمد الخطيب", "role": "instructor", "title": "مهندس AWS معتمد",
        "bio": "خبرة 10 سنوات في الحوسبة السحابية", "level": 9, "xp": 4000, "points": 8000, "streak": 20,
    },
    {
        "username": "fatima_instructor", "password": "instructor123", "email": "fatima@jordancloud.com",
        "name": "فاطمة أحمد", "role": "instructor", "title": "خبيرة Azure و Kubernetes",
        "bio": "متخصصة في DevOps والحاويات", "level": 8, "xp": 3500, "points": 7000, "streak": 15,
    },
    {
        "username": "mohammad", "password": "student123", "email": "mohammad@student.com",
        "name": "محمد علي", "role": "student", "title": "طالب متميز",
        "bio": "أتعلم الحوسبة السحابية", "level": 6, "xp": 2500, "points": 3245, "streak": 7,
    },
    {
        "username": "sarah", "password": "student123", "email": "sarah@student.com",
        "name": "سارة محمود", "role": "student", "title": "مبتدئة",
        "bio": None, "level": 2, "xp": 800, "points": 1500, "streak": 3,
    },
]

COURSES = [
    {
        "instructor": "ahmad_instructor",
        "title": "AWS Solutions Architect - Associate",
        "description": "مسار شامل لإتقان خدمات AWS والحصول على شهادة Solutions Architect Associate المعتمدة",
        "category": "AWS", "level": "متوسط", "duration": "40 ساعة", "price": 199, "original_price": 299,
        "lessons_count": 45, "projects_count": 8, "difficulty": 3,
        "skills": ["EC2", "S3", "VPC", "IAM", "Lambda", "RDS", "CloudFormation"],
    },
    {
        "instructor": "fatima_instructor",
        "title": "Kubernetes للمحترفين",
        "description": "تعلم إدارة الحاويات باستخدام Kubernetes من الصفر حتى الاحتراف",
        "category": "Kubernetes", "level": "متقدم", "duration": "35 ساعة", "price": 249, "original_price": 349,
        "lessons_count": 38, "projects_count": 6, "difficulty": 4,
        "skills": ["Pods", "Services", "Deployments", "Helm", "Ingress", "RBAC"],
    },
    {
        "instructor": "fatima_instructor",
        "title": "Azure Fundamentals AZ-900",
        "description": "أساسيات Microsoft Azure للمبتدئين والتحضير لامتحان AZ-900",
        "category": "Azure", "level": "مبتدئ", "duration": "20 ساعة", "price": 99, "original_price": 149,
        "lessons_count": 25, "projects_count": 4, "difficulty": 2,
        "skills": ["Azure Portal", "Virtual Machines", "Storage", "Networking", "Identity"],
    },
    {
        "instructor": "ahmad_instructor",
        "title": "Terraform Infrastructure as Code",
        "description": "إدارة البنية التحتية السحابية باستخدام Terraform",
        "category": "DevOps", "level": "متوسط", "duration": "25 ساعة", "price": 179, "original_price": 249,
        "lessons_count": 30, "projects_count": 5, "difficulty": 3,
        "skills": ["HCL", "Providers", "Modules", "State Management", "Workspaces"],
    },
]

LESSON_TITLES = ["مقدمة في AWS", "إنشاء حساب AWS", "IAM - إدارة الهويات والوصول", "EC2 - الخوادم الافتراضية", "S3 - التخزين السحابي"]

ACHIEVEMENTS = [
    {"title": "المستكشف", "description": "أكمل أول درس", "icon": "compass", "xp_reward": 50},
    {"title": "المتعلم النشط", "description": "أكمل 5 دروس", "icon": "book", "xp_reward": 100},
    {"title": "بطل AWS", "description": "أكمل مسار AWS", "icon": "cloud", "xp_reward": 500},
    {"title": "خبير Kubernetes", "description": "أكمل مسار Kubernetes", "icon": "box", "xp_reward": 500},
    {"title": "سلسلة 7 أيام", "description": "تعلم 7 أيام متتالية", "icon": "flame", "xp_reward": 200},
    {"title": "المثابر", "description": "أكمل 10 مختبرات", "icon": "flask-conical", "xp_reward": 300},
]

LABS = [
    {"title": "إعداد VPC على AWS", "description": "تعلم إنشاء شبكة VPC كاملة مع Subnets و Security Groups",
     "icon": "cloud", "color": "from-orange-500 to-yellow-500", "duration": 45, "level": "متوسط",
     "technologies": ["AWS", "VPC", "Networking"], "xp_reward": 100},
    {"title": "نشر تطبيق على Kubernetes", "description": "نشر تطبيق ويب كامل باستخدام Kubernetes Deployments و Services",
     "icon": "box", "color": "from-blue-500 to-indigo-500", "duration": 60, "level": "متقدم",
     "technologies": ["Kubernetes", "Docker", "YAML"], "xp_reward": 150},
    {"title": "Terraform أساسيات", "description": "إنشاء بنية تحتية سحابية باستخدام Terraform",
     "icon": "boxes", "color": "from-purple-500 to-pink-500", "duration": 30, "level": "مبتدئ",
     "technologies": ["Terraform", "HCL", "AWS"], "xp_reward": 80},
    {"title": "CI/CD مع GitHub Actions", "description": "بناء خط أنابيب CI/CD كامل",
     "icon": "git-branch", "color": "from-gray-600 to-gray-800", "duration": 50, "level": "متوسط",
     "technologies": ["GitHub Actions", "Docker", "YAML"], "xp_reward": 120},
]


def init_db():
    print("Dropping all tables...")
    Base.metadata.drop_all(bind=engine)
    print("Tables dropped successfully")

    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully")

    db = SessionLocal()
    try:
        print("\nCreating users...")
        users = {}
        for data in USERS:
            data = dict(data)
            data["password"] = get_password_hash(data["password"])
            user = User(**data)
            db.add(user)
            users[user.username] = user
        db.commit()
        for user in users.values():
            print(f"- ID: {user.id}, Username: {user.username}, Role: {user.role}")

        print("\nCreating courses...")
        courses = []
        for data in COURSES:
            data = dict(data)
            instructor = users[data.pop("instructor")]
            course = Course(instructor_id=instructor.id, is_published=True, **data)
            db.add(course)
            courses.append(course)
        db.commit()
        print(f"Created {len(courses)} courses")

        aws, kubernetes, azure, terraform = courses
        for i, title in enumerate(LESSON_TITLES):
            db.add(Lesson(
                course_id=aws.id,
                title=title,
                description=f"شرح مفصل عن {title}",
                content=f"محتوى الدرس: {title}",
                duration=45,
                order=i + 1,
                xp_reward=50,
                is_published=True,
            ))

        print("\nCreating enrollments and reviews...")
        student = users["mohammad"]
        db.add(Enrollment(user_id=student.id, course_id=aws.id, status="approved",
                          progress=60, completed_lessons=3, reviewed_by=users["admin"].id))
        db.add(Enrollment(user_id=student.id, course_id=kubernetes.id, status="approved",
                          progress=25, completed_lessons=1, reviewed_by=users["admin"].id))
        db.add(Enrollment(user_id=users["sarah"].id, course_id=azure.id, status="pending",
                          payment_method="cliq", contact_name="سارة محمود"))
        db.add(Review(user_id=student.id, course_id=aws.id, rating=5, comment="دورة ممتازة"))
        db.add(Review(user_id=student.id, course_id=kubernetes.id, rating=4))

        print("\nCreating learning paths...")
        cloud_path = LearningPath(
            title="مسار مهندس السحابة",
            description="من أساسيات Azure إلى تصميم حلول AWS",
            icon="cloud", level="متوسط", duration="85 ساعة", is_published=True, order=1,
        )
        devops_path = LearningPath(
            title="مسار DevOps",
            description="الحاويات والبنية التحتية كرمز",
            icon="git-branch", level="متقدم", duration="60 ساعة", is_published=True, order=2,
        )
        db.add_all([cloud_path, devops_path])
        db.flush()
        for order, course in enumerate([azure, aws]):
            db.add(PathCourse(path_id=cloud_path.id, course_id=course.id, order=order))
        for order, course in enumerate([terraform, kubernetes]):
            db.add(PathCourse(path_id=devops_path.id, course_id=course.id, order=order))

        for course in courses:
            refresh_course_rating(db, course.id)
            refresh_enrollment_counters(db, course.id)
        refresh_path_counters(db, cloud_path.id)
        refresh_path_counters(db, devops_path.id)
        db.commit()

        print("\nCreating achievements and labs...")
        for data in ACHIEVEMENTS:
            db.add(Achievement(**data))
        for data in LABS:
            lab = Lab(creator_id=users["ahmad_instructor"].id, is_published=True, **data)
            db.add(lab)
            db.flush()
            db.add(LabSection(lab_id=lab.id, title="الإعداد", content="تجهيز البيئة", order=1))
            db.add(LabSection(lab_id=lab.id, title="التنفيذ", content="تنفيذ خطوات المختبر", order=2))

        db.add(Notification(
            user_id=student.id,
            title="مبروك! أكملت درساً جديداً",
            message="لقد أكملت درس EC2 بنجاح وحصلت على 50 نقطة خبرة",
            type="success",
        ))
        db.add(Notification(
            user_id=student.id,
            title="دورة جديدة متاحة",
            message="تم إضافة دورة جديدة: Docker للمبتدئين",
            type="info",
        ))
        db.commit()

        print("\nSeeding homepage content...")
        added = seed_homepage_content(db)
        print(f"Added {added} homepage blocks")
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
