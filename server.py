# Scan Dashboard API Server
from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from config import get_settings, Database
from routes import scan_router, report_router, dashboard_router
from services.errors import ScanDashboardError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

settings = get_settings()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await Database.connect_db()
    logger.info('Application started')
    yield
    # Shutdown
    await Database.close_db()
    logger.info('Application shutdown')

app = FastAPI(
    title='Scan Dashboard API',
    description='Trigger and monitor security scans of companies and domains',
    version='1.0.0',
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(','),
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

@app.exception_handler(ScanDashboardError)
async def scan_dashboard_error_handler(request: Request, exc: ScanDashboardError):
    if exc.status_code >= 500:
        logger.error(f'{request.method} {request.url.path} failed: {exc}')
    else:
        logger.info(f'{request.method} {request.url.path}: {exc}')
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f'Unhandled error on {request.method} {request.url.path}')
    return JSONResponse(
        status_code=500,
        content={'error': 'Internal server error', 'details': str(exc)}
    )

# API Router
api_router = APIRouter(prefix='/api')

api_router.include_router(scan_router)
api_router.include_router(report_router)
api_router.include_router(dashboard_router)

app.include_router(api_router)

@app.get('/')
async def root():
    return {'message': 'Scan Dashboard API v1.0.0', 'status': 'operational'}

@app.get('/health')
async def health():
    return {'status': 'healthy'}

@app.get('/api/health')
async def api_health():
    """Health check endpoint for API"""
    return {
        'status': 'healthy',
        'service': 'scan-dashboard-api',
        'version': '1.0.0'
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", reload=True)
