from routes.scan_routes import router as scan_router
from routes.report_routes import router as report_router
from routes.dashboard_routes import router as dashboard_router

__all__ = [
    'scan_router',
    'report_router',
    'dashboard_router'
]
