from .auth import router as auth_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .courses import router as courses_router
from .enrollments import router as enrollments_router
from .favorites import router as favorites_router
from .homepage import router as homepage_router
from .labs import router as labs_router
from .lessons import router as lessons_router
from .notifications import router as notifications_router
from .paths import router as paths_router
from .quizzes import router as quizzes_router
from .users import router as users_router
from .videos import router as videos_router

__all__ = [
    'auth_router', 'cart_router', 'checkout_router', 'courses_router', 'enrollments_router',
    'favorites_router', 'homepage_router', 'labs_router', 'lessons_router',
    'notifications_router', 'paths_router', 'quizzes_router', 'users_router', 'videos_router',
]
