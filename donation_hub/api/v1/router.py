"""Aggregate all v1 sub-routers."""

from fastapi import APIRouter

from donation_hub.api.v1.accountability import admin_router as admin_accountability_router
from donation_hub.api.v1.accountability import public_router as accountability_router
from donation_hub.api.v1.admin_donations import router as admin_donations_router
from donation_hub.api.v1.donations import router as donations_router
from donation_hub.api.v1.health import router as health_router
from donation_hub.api.v1.products import router as products_router
from donation_hub.api.v1.public import router as public_router
from donation_hub.api.v1.stats import router as stats_router
from donation_hub.api.v1.uploads import router as uploads_router
from donation_hub.api.v1.users import admin_router as users_router
from donation_hub.api.v1.users import me_router

api_v1_router = APIRouter()

# Public
api_v1_router.include_router(health_router, tags=["health"])
api_v1_router.include_router(donations_router, prefix="/donations", tags=["donations"])
api_v1_router.include_router(uploads_router, prefix="/uploads", tags=["uploads"])
api_v1_router.include_router(public_router, prefix="/public", tags=["public"])
api_v1_router.include_router(
    accountability_router, prefix="/accountability", tags=["accountability"]
)

# Authenticated
api_v1_router.include_router(me_router, prefix="/me", tags=["me"])

# Admin
api_v1_router.include_router(
    admin_donations_router, prefix="/admin/donations", tags=["admin-donations"]
)
api_v1_router.include_router(
    admin_accountability_router, prefix="/admin/accountability", tags=["admin-accountability"]
)
api_v1_router.include_router(stats_router, prefix="/admin/stats", tags=["admin-stats"])
api_v1_router.include_router(products_router, prefix="/admin/products", tags=["admin-products"])
api_v1_router.include_router(users_router, prefix="/admin/users", tags=["admin-users"])
