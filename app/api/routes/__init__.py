# This file marks the routes directory as a Python package. 

from .auth_routes import router as auth_router
from .students_routes import router as students_router

__all__ = [
    'auth_router',
    'students_router',
]
