from fastapi import APIRouter

from employee_manager.api.v1.endpoints import auth, employees, health

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(employees.router)
