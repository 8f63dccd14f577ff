from fastapi import APIRouter
from app.modules.codes.router import router as codes_router
from app.modules.clients.router import router as clients_router
from app.modules.addresses.router import router as addresses_router

api_router = APIRouter()
api_router.include_router(codes_router, tags=["codes"])
api_router.include_router(clients_router, prefix="/clients", tags=["clients"])
api_router.include_router(addresses_router, tags=["addresses"])
# addresses_router paths already start with /clients/{client_id}/addresses

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
