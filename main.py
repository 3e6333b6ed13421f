# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnplatform.config import CORS_ORIGINS
from learnplatform.database import Base, engine
from learnplatform.routes import (
    auth_router, cart_router, checkout_router, courses_router, enrollments_router,
    favorites_router, homepage_router, labs_router, lessons_router, notifications_router,
    paths_router, quizzes_router, users_router, videos_router,
)

logger = logging.getLogger("learnplatform")

# Create FastAPI app
app = FastAPI(
    title="LearnPlatform API",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error("HTTP %d on %s: %s", exc.status_code, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.info("Validation error on %s: %s", request.url.path, details)
    return JSONResponse(
        status_code=400,
        content={"error": "بيانات غير صالحة", "details": details}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "خطأ في الخادم", "type": type(exc).__name__}
    )


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Include routers
app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])
app.include_router(courses_router, prefix="/api", tags=["Courses"])
app.include_router(lessons_router, prefix="/api", tags=["Lessons"])
app.include_router(enrollments_router, prefix="/api", tags=["Enrollments"])
app.include_router(checkout_router, prefix="/api", tags=["Checkout"])
app.include_router(cart_router, prefix="/api", tags=["Cart"])
app.include_router(favorites_router, prefix="/api", tags=["Favorites"])
app.include_router(labs_router, prefix="/api", tags=["Labs"])
app.include_router(paths_router, prefix="/api", tags=["Learning Paths"])
app.include_router(quizzes_router, prefix="/api", tags=["Quizzes"])
app.include_router(notifications_router, prefix="/api", tags=["Notifications"])
app.include_router(homepage_router, prefix="/api", tags=["Homepage"])
app.include_router(videos_router, prefix="/api", tags=["Videos"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
