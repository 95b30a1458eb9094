"""
Aplicação FastAPI principal
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from desempenho import __version__
from desempenho.config import settings
from desempenho.api import analyses
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Performance Analytics API",
    description="API para análise de avaliações de desempenho e perfil comportamental",
    version=__version__
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rotas
app.include_router(analyses.router, prefix=settings.API_V1_PREFIX)

@app.get("/")
async def root():
    return {
        "message": "Performance Analytics API",
        "version": __version__,
        "status": "running"
    }

@app.get("/health")
async def health():
    return {"status": "healthy"}
