from fastapi import APIRouter
from cleanserve.api.v1.routes.auth import router as auth_router
from cleanserve.api.v1.routes.bookings import router as bookings_router
from cleanserve.api.v1.routes.quotations import router as quotations_router
from cleanserve.api.v1.routes.admin import router as admin_router
from cleanserve.api.v1.routes.orders import router as orders_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(bookings_router)
api_router.include_router(orders_router)
api_router.include_router(quotations_router)
api_router.include_router(admin_router)
