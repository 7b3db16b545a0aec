"""
API Components - FastAPI server and endpoints

This module provides:
- FastAPI application factory with monitoring and CORS
- REST endpoints for content chat, category administration and category chat
- Service container and dependency injection

License: MIT
"""

from .main import create_app, main
from .dependencies import ServiceContainer, build_services, get_services

__all__ = [
    "create_app",
    "main",
    "ServiceContainer",
    "build_services",
    "get_services",
]
