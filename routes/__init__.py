# Routes package __init__.py - re-exports routers for main.py convenience
from .state import router as state_router
from .grades import router as grades_router
from .rewards import router as rewards_router
from .transfer import router as transfer_router
from .sync import router as sync_router
from .stats import router as stats_router
from .library import router as library_router

__all__ = ['state_router', 'grades_router', 'rewards_router', 'transfer_router', 'sync_router', 'stats_router', 'library_router']
