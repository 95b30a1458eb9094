"""
Modelos de dados
"""
from desempenho.models.schemas import (
    FilterSpecModel,
    AnalysisRequest,
    RankingRequest,
    BehavioralRequest,
    AnalysisResponse,
    ErrorResponse
)

__all__ = [
    'FilterSpecModel',
    'AnalysisRequest',
    'RankingRequest',
    'BehavioralRequest',
    'AnalysisResponse',
    'ErrorResponse'
]
