from fastapi import APIRouter
from csvbridge.api.routers import auth, admin, connections, imports, templates, cleanup

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(connections.router, prefix="/connections", tags=["connections"])
api_router.include_router(imports.router, prefix="/imports", tags=["imports"])
api_router.include_router(templates.router, prefix="/mapping-templates", tags=["mapping-templates"])
api_router.include_router(cleanup.router, prefix="/cleanup", tags=["cleanup"])
