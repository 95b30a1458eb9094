"""
Schemas Pydantic para validação de dados
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal


class FilterSpecModel(BaseModel):
    """Filtros do dashboard"""
    search_term: str = ""
    sector: str = ""
    date_start: str = Field("", description="Data inicial ISO (YYYY-MM-DD), inclusiva")
    date_end: str = Field("", description="Data final ISO (YYYY-MM-DD), inclusiva")


class AnalysisRequest(BaseModel):
    """Request para análise de avaliações"""
    evaluations: List[Dict[str, Any]] = Field(default_factory=list)
    employees: List[Dict[str, Any]] = Field(default_factory=list)
    filters: FilterSpecModel = Field(default_factory=FilterSpecModel)
    target_score: Optional[float] = Field(None, description="Meta exibida na evolução (padrão 9.0)")
    company_id: Optional[str] = None
    top_n: Optional[int] = Field(None, ge=1, le=200)


class RankingRequest(AnalysisRequest):
    """Request para o ranking de colaboradores"""
    group_by: Optional[Literal["sector", "role", "level"]] = None
    group_value: Optional[str] = None
    statuses: List[str] = Field(default_factory=list, description="Situações cadastrais aceitas (vazio = todas)")


class BehavioralRequest(BaseModel):
    """Request para análise de perfil comportamental"""
    employees: List[Dict[str, Any]] = Field(default_factory=list)
    evaluations: List[Dict[str, Any]] = Field(default_factory=list)
    company_id: Optional[str] = None
    group_by: Optional[Literal["sector", "role", "level"]] = None
    group_value: Optional[str] = None


class AnalysisResponse(BaseModel):
    """Response de análise"""
    analysis_type: str
    results: Dict[str, Any]
    filters: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Response de erro (corpo do HTTPException)"""
    detail: str
