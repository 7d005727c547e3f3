"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import auth, bookings, cars

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Cars
api_router.include_router(cars.router, prefix="/cars", tags=["Cars"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
