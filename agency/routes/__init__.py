"""
HTTP routes for the agency API, one module per resource.
"""

from fastapi import APIRouter

from agency.routes import (
    applications,
    auth,
    bookings,
    companies,
    gallery,
    models,
    newsletter,
    team,
)

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(applications.router, prefix="/applications", tags=["applications"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(models.router, prefix="/models", tags=["models"])
router.include_router(gallery.router, prefix="/gallery", tags=["gallery"])
router.include_router(team.router, prefix="/team", tags=["team"])
router.include_router(companies.router, prefix="/companies", tags=["companies"])
router.include_router(companies.about_router, prefix="/about", tags=["about"])
router.include_router(newsletter.router, prefix="/newsletter", tags=["newsletter"])
