import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schoolapp.api.v1.admin.router import router as admin_router
from schoolapp.api.v1.attendance.router import router as attendance_router
from schoolapp.api.v1.auth.router import router as auth_router
from schoolapp.api.v1.classes.router import router as classes_router
from schoolapp.api.v1.dashboard.router import router as dashboard_router
from schoolapp.api.v1.feedback.router import router as feedback_router
from schoolapp.api.v1.marks.router import router as marks_router
from schoolapp.api.v1.schools.router import router as schools_router
from schoolapp.api.v1.students.router import router as students_router
from schoolapp.api.v1.subject_assignments.router import router as subject_assignments_router
from schoolapp.api.v1.subjects.router import router as subjects_router
from schoolapp.api.v1.tasks.router import router as tasks_router
from schoolapp.core.config import settings


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="School Management Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(schools_router)
    app.include_router(classes_router)
    app.include_router(subjects_router)
    app.include_router(students_router)
    app.include_router(subject_assignments_router)
    app.include_router(attendance_router)
    app.include_router(marks_router)
    app.include_router(feedback_router)
    app.include_router(tasks_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
