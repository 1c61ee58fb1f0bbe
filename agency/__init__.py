"""
Backend package for the modeling agency website.

This package provides a FastAPI application with document-store and image-host
abstractions for managing model profiles, bookings, gallery content and public
model applications.
"""
