"""
Estatísticas de perfil comportamental (DISC).

Cada colaborador com perfil tem um vetor {D, I, S, C} (0-100) e um tipo
primário. As estatísticas cruzam o tipo primário com a nota média das
avaliações do colaborador.
"""
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd
import logging

from desempenho.config import settings
from desempenho.utils.kpi_helpers import safe_mean
from desempenho.utils.matching import name_key
from desempenho.utils.normalizer import DISC_TYPES, to_frame

logger = logging.getLogger(__name__)

GROUP_DIMENSIONS = ("sector", "role", "level")

PROFILE_COLUMNS = [
    "id", "name", "sector", "role", "level", "company_id",
    "primary_type", "disc_estimated", *DISC_TYPES, "eval_score",
]


def _evaluation_scores(evaluations: pd.DataFrame):
    """Média das notas por id de colaborador e por nome."""
    if evaluations.empty:
        return {}, {}
    com_id = evaluations[evaluations["employee_id"].notna()]
    por_id = com_id.groupby("employee_id")["score"].mean().to_dict()
    nomes = evaluations["name"].map(name_key)
    por_nome = evaluations.assign(_nome=nomes).groupby("_nome")["score"].mean().to_dict()
    return por_id, por_nome


def build_profile_frame(
    employees: Iterable[Dict[str, Any]],
    evaluations: Optional[Union[pd.DataFrame, List[Dict[str, Any]]]] = None
) -> pd.DataFrame:
    """
    Monta o DataFrame de perfis: uma linha por colaborador com DISC,
    incluindo a nota média das suas avaliações (NaN se não houver).
    """
    if not isinstance(evaluations, pd.DataFrame):
        evaluations = to_frame(evaluations)
    por_id, por_nome = _evaluation_scores(evaluations)

    linhas = []
    for emp in employees:
        vetor = emp.get("disc")
        if not vetor:
            continue
        if emp.get("id") and emp["id"] in por_id:
            nota = por_id[emp["id"]]
        else:
            nota = por_nome.get(name_key(emp.get("name")), np.nan)
        linhas.append({
            "id": emp.get("id"),
            "name": emp.get("name"),
            "sector": emp.get("sector"),
            "role": emp.get("role"),
            "level": emp.get("level"),
            "company_id": emp.get("company_id"),
            "primary_type": emp.get("primary_type"),
            "disc_estimated": bool(emp.get("disc_estimated")),
            **{tipo: float(vetor.get(tipo, 0.0)) for tipo in DISC_TYPES},
            "eval_score": float(nota),
        })
    return pd.DataFrame(linhas, columns=PROFILE_COLUMNS)


def rank_types(grupo: pd.DataFrame, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Ordena os tipos primários de um grupo pela nota média das avaliações,
    depois pela quantidade de colaboradores; empate final segue D > I > S > C.
    """
    limit = settings.TOP_DISC_TYPES if limit is None else limit
    estatisticas = []
    for tipo in DISC_TYPES:
        membros = grupo[grupo["primary_type"] == tipo]
        if membros.empty:
            continue
        estatisticas.append({
            "type": tipo,
            "count": int(len(membros)),
            "evaluated": int(membros["eval_score"].notna().sum()),
            "avg_score": safe_mean(membros["eval_score"])
        })
    ordenado = sorted(estatisticas, key=lambda item: (-item["avg_score"], -item["count"]))
    return ordenado[:limit]


def calculate_top_types(frame: pd.DataFrame, dimension: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Top tipos primários de cada grupo da dimensão (setor, cargo ou nível)."""
    if frame.empty:
        return []
    return [
        {"group": nome, "total": int(len(grupo)), "top_types": rank_types(grupo, limit)}
        for nome, grupo in frame.groupby(dimension, sort=False)
    ]


def calculate_disc_statistics(
    employees: Iterable[Dict[str, Any]],
    evaluations: Optional[Union[pd.DataFrame, List[Dict[str, Any]]]] = None,
    company_id: Optional[str] = None,
    group_by: Optional[str] = None,
    group_value: Optional[str] = None,
    limit: Optional[int] = None
) -> Dict[str, Any]:
    """
    Calcula estatísticas DISC.

    Args:
        employees: Colaboradores normalizados
        evaluations: Avaliações normalizadas (DataFrame ou lista)
        company_id: Empresa ("all" ou vazio = todas)
        group_by: "sector", "role" ou "level" para restringir o conjunto
        group_value: Valor do recorte
        limit: Quantidade de tipos no top de cada grupo

    Returns:
        Dict com médias DISC, contagem por tipo primário, top tipos por
        setor/cargo/nível e os perfis considerados
    """
    selecionados = [emp for emp in employees if emp.get("disc")]

    if company_id and company_id != "all":
        selecionados = [emp for emp in selecionados if emp.get("company_id") == company_id]

    if group_by in GROUP_DIMENSIONS and group_value:
        selecionados = [emp for emp in selecionados if emp.get(group_by) == group_value]

    frame = build_profile_frame(selecionados, evaluations)
    logger.info(f"Perfis DISC considerados: {len(frame)}")

    return {
        "total_profiles": int(len(frame)),
        "averages": {tipo: safe_mean(frame[tipo]) for tipo in DISC_TYPES},
        "type_counts": {tipo: int((frame["primary_type"] == tipo).sum()) for tipo in DISC_TYPES},
        "top_types": {
            dimensao: calculate_top_types(frame, dimensao, limit)
            for dimensao in GROUP_DIMENSIONS
        },
        "profiles": [
            {**perfil, "eval_score": None if pd.isna(perfil["eval_score"]) else perfil["eval_score"]}
            for perfil in frame.to_dict("records")
        ]
    }
