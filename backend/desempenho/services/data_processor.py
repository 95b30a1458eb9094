"""
Serviço para preparação dos dados
"""
import pandas as pd
from typing import Any, Dict, Iterable, List, Optional, Tuple
from desempenho.utils.filters import FilterSpec, apply_filters, normalize_filters
from desempenho.utils.matching import normalize_and_match
from desempenho.utils.normalizer import normalize_employees, to_frame
import logging

logger = logging.getLogger(__name__)


class DataProcessor:
    """Serviço para normalizar e filtrar avaliações e colaboradores"""

    @staticmethod
    def prepare(
        raw_evaluations: Optional[Iterable[Any]],
        raw_employees: Optional[Iterable[Any]] = None
    ) -> Tuple[pd.DataFrame, List[Dict[str, Any]]]:
        """
        Normaliza os registros brutos.

        Args:
            raw_evaluations: Avaliações como vieram do banco de documentos
            raw_employees: Colaboradores como vieram do banco de documentos

        Returns:
            (DataFrame de avaliações canônicas, lista de colaboradores canônicos)
        """
        employees = normalize_employees(raw_employees)
        evaluations = to_frame(normalize_and_match(raw_evaluations, employees))
        return evaluations, employees

    @staticmethod
    def filter_evaluations(df: pd.DataFrame, filters: Any = None) -> pd.DataFrame:
        """
        Aplica o filtro do dashboard.

        Args:
            df: DataFrame de avaliações canônicas
            filters: FilterSpec, dict solto ou None

        Returns:
            DataFrame filtrado
        """
        spec: FilterSpec = normalize_filters(filters)
        filtrado = apply_filters(
            df,
            search_term=spec.search_term,
            sector=spec.sector,
            date_start=spec.date_start,
            date_end=spec.date_end,
        )
        logger.info(f"Filtro aplicado: {len(filtrado)} de {len(df)} avaliações")
        return filtrado
