"""Course content endpoints: courses, modules, materials, assignments."""

from eduarch.web.routes.crud import build_crud_router
from eduarch.web.schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
    ModuleCreate,
    ModuleResponse,
    ModuleUpdate,
)

router = build_crud_router(
    "courses",
    CourseCreate,
    CourseUpdate,
    CourseResponse,
    filters=("teacher_id", "status"),
)

modules_router = build_crud_router(
    "modules",
    ModuleCreate,
    ModuleUpdate,
    ModuleResponse,
    filters=("course_id",),
)

materials_router = build_crud_router(
    "materials",
    MaterialCreate,
    MaterialUpdate,
    MaterialResponse,
    filters=("module_id", "type"),
)

assignments_router = build_crud_router(
    "assignments",
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    filters=("module_id",),
)
