"""
Filtros do dashboard (nome, setor e período).
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from desempenho.utils.normalizer import to_frame


@dataclass(frozen=True)
class FilterSpec:
    search_term: str = ""
    sector: str = ""
    date_start: str = ""
    date_end: str = ""


def _pick(raw: Mapping, *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def normalize_filters(raw: Any) -> FilterSpec:
    """Converte filtros soltos (dict, None ou FilterSpec) em FilterSpec."""
    if isinstance(raw, FilterSpec):
        return raw
    if not isinstance(raw, Mapping):
        return FilterSpec()
    return FilterSpec(
        search_term=_pick(raw, "search_term", "searchTerm", "name"),
        sector=_pick(raw, "sector", "selectedSector"),
        date_start=_pick(raw, "date_start", "dateStart", "start"),
        date_end=_pick(raw, "date_end", "dateEnd", "end"),
    )


def apply_filters(
    df: pd.DataFrame,
    search_term: str = "",
    sector: str = "",
    date_start: str = "",
    date_end: str = ""
) -> pd.DataFrame:
    """
    Filtra avaliações normalizadas.

    Args:
        df: DataFrame de avaliações (colunas de EVALUATION_COLUMNS)
        search_term: Trecho do nome (sem diferenciar maiúsculas)
        sector: Setor exato
        date_start: Data inicial ISO (inclusiva)
        date_end: Data final ISO (inclusiva)

    Datas ISO são comparadas como texto: a ordem lexical é a cronológica.
    Avaliações sem data válida ficam de fora quando há limite de período.

    Returns:
        DataFrame filtrado
    """
    if df is None:
        return to_frame([])
    if df.empty:
        return df.copy()

    mask = pd.Series(True, index=df.index)

    if search_term:
        mask &= df["name"].astype(str).str.lower().str.contains(
            search_term.lower(), regex=False, na=False
        )

    if sector:
        mask &= df["sector"] == sector

    if date_start or date_end:
        mask &= df["date_iso"].astype(str) != ""

    if date_start:
        mask &= df["date_iso"] >= date_start

    if date_end:
        mask &= df["date_iso"] <= date_end

    return df[mask].copy()


def filter_by_status(df: pd.DataFrame, statuses: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Mantém as avaliações de colaboradores cadastrados com uma das situações.
    Sem situações informadas nada é filtrado; avaliações sem vínculo saem
    sempre que há filtro.
    """
    aceitas = [s for s in (statuses or []) if s]
    if df is None:
        return to_frame([])
    if not aceitas or df.empty:
        return df
    return df[df["employee_status"].isin(aceitas)].copy()


def filter_records(records: Optional[Iterable[Mapping]], spec: Any = None) -> List[Dict[str, Any]]:
    """Versão em listas de dicts de `apply_filters`."""
    filtros = normalize_filters(spec)
    df = apply_filters(
        to_frame(records),
        search_term=filtros.search_term,
        sector=filtros.sector,
        date_start=filtros.date_start,
        date_end=filtros.date_end,
    )
    return df.to_dict("records")
