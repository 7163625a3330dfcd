"""Route handlers for Web API."""

from eduarch.web.routes.health import router as health_router
from eduarch.web.routes.users import router as users_router
from eduarch.web.routes.users import notifications_router
from eduarch.web.routes.courses import router as courses_router
from eduarch.web.routes.courses import assignments_router, materials_router, modules_router
from eduarch.web.routes.coursework import enrollments_router, submissions_router
from eduarch.web.routes.events import router as events_router

__all__ = [
    "health_router",
    "users_router",
    "notifications_router",
    "courses_router",
    "modules_router",
    "materials_router",
    "assignments_router",
    "submissions_router",
    "enrollments_router",
    "events_router",
]
