"""
Endpoints para análises de desempenho
"""
from fastapi import APIRouter, HTTPException, status
from desempenho.models.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    BehavioralRequest,
    ErrorResponse,
    RankingRequest
)
from desempenho.services.kpi_calculator import KPICalculator
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analyses",
    tags=["analyses"],
    responses={500: {"model": ErrorResponse, "description": "Erro ao calcular análise"}}
)

GROUP_ERRORS = {400: {"model": ErrorResponse, "description": "group_value sem group_by"}}


def _internal_error(analysis: str, error: Exception) -> HTTPException:
    logger.error(f"Erro ao calcular {analysis}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Erro ao calcular análise: {str(error)}"
    )


def _check_group(group_by, group_value):
    if group_value and not group_by:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Informe group_by junto com group_value"
        )


@router.post("/general", response_model=AnalysisResponse)
async def get_general(request: AnalysisRequest):
    """
    Calcula métricas gerais: média, distribuições por setor e cargo,
    destaque e lista de performance.
    """
    try:
        results = KPICalculator.calculate_general(
            request.evaluations,
            request.employees,
            request.filters.model_dump(),
            request.top_n
        )
        return AnalysisResponse(
            analysis_type="general",
            results=results,
            filters=request.filters.model_dump()
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("métricas gerais", e)


@router.post("/competencies", response_model=AnalysisResponse)
async def get_competencies(request: AnalysisRequest):
    """
    Calcula a matriz de competências por setor e a evolução mensal.
    """
    try:
        results = KPICalculator.calculate_competencies(
            request.evaluations,
            request.employees,
            request.filters.model_dump(),
            request.target_score
        )
        return AnalysisResponse(
            analysis_type="competencies",
            results=results,
            filters=request.filters.model_dump()
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("competências", e)


@router.post("/comparative", response_model=AnalysisResponse)
async def get_comparative(request: AnalysisRequest):
    """
    Calcula o comparativo individual x setor x empresa.
    """
    try:
        results = KPICalculator.calculate_comparative(
            request.evaluations,
            request.employees,
            request.filters.model_dump()
        )
        return AnalysisResponse(
            analysis_type="comparative",
            results=results,
            filters=request.filters.model_dump()
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("comparativo", e)


@router.post("/ranking", response_model=AnalysisResponse, responses=GROUP_ERRORS)
async def get_ranking(request: RankingRequest):
    """
    Calcula o ranking de colaboradores, opcionalmente restrito a um setor,
    cargo ou nível e às situações cadastrais informadas.
    """
    _check_group(request.group_by, request.group_value)

    try:
        results = KPICalculator.calculate_ranking(
            request.evaluations,
            request.employees,
            request.filters.model_dump(),
            request.top_n,
            group_by=request.group_by,
            group_value=request.group_value,
            statuses=request.statuses
        )
        return AnalysisResponse(
            analysis_type="ranking",
            results=results,
            filters={
                **request.filters.model_dump(),
                'group_by': request.group_by,
                'group_value': request.group_value,
                'statuses': request.statuses
            }
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("ranking", e)


@router.post("/behavioral", response_model=AnalysisResponse, responses=GROUP_ERRORS)
async def get_behavioral(request: BehavioralRequest):
    """
    Calcula estatísticas de perfil comportamental (DISC).
    """
    _check_group(request.group_by, request.group_value)

    try:
        results = KPICalculator.calculate_behavioral(
            request.employees,
            request.evaluations,
            company_id=request.company_id,
            group_by=request.group_by,
            group_value=request.group_value
        )
        return AnalysisResponse(
            analysis_type="behavioral",
            results=results,
            filters={
                'company_id': request.company_id,
                'group_by': request.group_by,
                'group_value': request.group_value
            }
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("perfil comportamental", e)


@router.post("/dashboard", response_model=AnalysisResponse)
async def get_dashboard(request: AnalysisRequest):
    """
    Calcula todas as visões do dashboard de uma vez.
    """
    try:
        results = KPICalculator.calculate_dashboard(
            request.evaluations,
            request.employees,
            request.filters.model_dump(),
            target_score=request.target_score,
            company_id=request.company_id,
            top_n=request.top_n
        )
        return AnalysisResponse(
            analysis_type="dashboard",
            results=results,
            filters=request.filters.model_dump()
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("dashboard", e)
