"""
Configurações da aplicação
"""
import os
from typing import List


def _env_float(name: str, default: float) -> float:
    """Lê um float do ambiente, aceitando vírgula decimal."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip().replace(",", "."))
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Configurações da aplicação"""

    # API
    API_V1_PREFIX: str = "/api/v1"
    CORS_ORIGINS: list = _env_list("DESEMPENHO_CORS_ORIGINS", [
        "http://localhost:3000",
        "http://localhost:5173",
    ])

    # Análises
    DEFAULT_TARGET_SCORE: float = _env_float("DESEMPENHO_TARGET_SCORE", 9.0)  # Meta
    TOP_PERFORMERS_LIMIT: int = int(os.getenv("DESEMPENHO_TOP_PERFORMERS", "10"))
    RANKING_PERIOD_TOP: int = 5
    DONUT_SLICES: int = 5
    TOP_DISC_TYPES: int = 3
    RANKING_TIMELINE_TOP: int = 10

    @classmethod
    def get_target_score(cls, override=None) -> float:
        """Retorna a meta informada ou a meta padrão configurada"""
        if override is None:
            return cls.DEFAULT_TARGET_SCORE
        return float(override)

settings = Settings()
