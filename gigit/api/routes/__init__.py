"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from gigit.api.routes.auth_routes import router as auth_router
from gigit.api.routes.skill_routes import router as skill_router
from gigit.api.routes.job_routes import router as job_router
from gigit.api.routes.worker_routes import router as worker_router
from gigit.api.routes.business_routes import router as business_router
from gigit.api.routes.message_routes import router as message_router
from gigit.api.routes.notification_routes import router as notification_router
from gigit.api.routes.upload_routes import router as upload_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(skill_router)
api_router.include_router(job_router)
api_router.include_router(worker_router)
api_router.include_router(business_router)
api_router.include_router(message_router)
api_router.include_router(notification_router)
api_router.include_router(upload_router)
