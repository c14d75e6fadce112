import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from mesalink.api.v1.router import api_router_v1
from mesalink.core.config import settings
from mesalink.core.exceptions import AppError, TransientInfraError
from mesalink.core.logging import configure_logging
from mesalink.database import engine
from mesalink.db.base_class import Base
from mesalink.db import models  # noqa: F401  (registra os modelos no metadata)
from mesalink.services.redis_service import redis_publisher

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API de pedidos por QR: sessões de mesa, envio de pedidos e quadro da cozinha",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=settings.PROJECT_VERSION,
    contact={
        "name": "Suporte Técnico",
        "email": settings.SUPPORT_EMAIL,
    },
    license_info={
        "name": "MIT",
    },
)

# Configuração de CORS
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejeitado ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path}: payload inválido ({len(errors)} erros)")
    return JSONResponse(status_code=400, content={"message": "Solicitação inválida", "errors": errors})


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Erro de banco em {request.method} {request.url.path}", exc_info=exc)
    error = TransientInfraError("Erro interno, tente novamente")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Opcional: Criar tabelas automaticamente (em desenvolvimento)
# Em produção, use migrações com Alembic
if settings.ENVIRONMENT == "development":
    @app.on_event("startup")
    def create_tables():
        Base.metadata.create_all(bind=engine)
        logger.info("Tabelas criadas com sucesso (apenas em desenvolvimento)")


@app.on_event("shutdown")
def close_redis():
    redis_publisher.close()


# Inclui todas as rotas da API V1
app.include_router(api_router_v1, prefix=settings.API_V1_STR)


@app.get("/", tags=["Root"])
def read_root():
    return {
        "message": f"Bem-vindo à API {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}",
        "docs": "/docs",
        "status": "operacional",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health", tags=["Health Check"])
def health_check():
    """Endpoint para verificação de saúde da API"""
    return {
        "status": "healthy",
        "database": "configured" if settings.DATABASE_URL else "missing",
        "environment": settings.ENVIRONMENT,
    }
