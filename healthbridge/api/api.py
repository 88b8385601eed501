from fastapi import APIRouter
from healthbridge.api.admin import routes as admin
from healthbridge.api.doctor import routes as doctor
from healthbridge.api.user import routes as user

api_router = APIRouter()
api_router.include_router(user.router, prefix="/user", tags=["user"])
api_router.include_router(doctor.router, prefix="/doctor", tags=["doctor"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
