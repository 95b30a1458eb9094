"""
Módulo para cálculos de indicadores de desempenho.
Todas as funções recebem o DataFrame de avaliações normalizadas (já filtrado)
e devolvem estruturas simples (dicts e listas), prontas para serialização.
Nenhum cálculo divide por zero: conjuntos vazios resultam em 0.
"""
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from desempenho.config import settings
from desempenho.utils.filters import filter_by_status
from desempenho.utils.matching import name_key
from desempenho.utils.normalizer import (
    DEFAULT_LEVEL,
    EVALUATION_COLUMNS,
    LEADER,
    MONTH_UNKNOWN,
    strip_accents,
)

LEVELS = ("Estratégico", "Tático", "Operacional")
RANKING_GROUPS = ("sector", "role", "level")


def safe_mean(series) -> float:
    """Calcula média de forma segura; 0.0 quando não há valores numéricos."""
    valores = pd.to_numeric(pd.Series(series, dtype="object"), errors="coerce").dropna()
    if valores.empty:
        return 0.0
    return float(valores.mean())


def safe_div(numerador: float, denominador: float) -> float:
    return float(numerador) / float(denominador) if denominador else 0.0


def sort_desc_stable(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """
    Ordena de forma decrescente pela coluna.
    Em caso de empate vence a primeira ocorrência (ordem original).
    """
    if df.empty:
        return df
    return (
        df.assign(_ordem=range(len(df)))
        .sort_values([column, "_ordem"], ascending=[False, True])
        .drop(columns="_ordem")
    )


def to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Linhas do DataFrame como dicts, apenas com as colunas canônicas."""
    if df.empty:
        return []
    colunas = [c for c in EVALUATION_COLUMNS if c in df.columns]
    return df[colunas].to_dict("records")


def value_distribution(df: pd.DataFrame, column: str) -> List[Dict[str, Any]]:
    """Contagem por valor da coluna, na ordem em que cada valor aparece."""
    if df.empty:
        return []
    counts = df.groupby(column, sort=False).size()
    return [{"name": nome, "value": int(total)} for nome, total in counts.items()]


def leader_mask(df: pd.DataFrame) -> pd.Series:
    """
    Identifica avaliações de liderança.
    Usa o tipo da avaliação; sem tipo, procura "líder"/"lider" no cargo.
    """
    tipo = df["evaluation_type"]
    por_cargo = df["role"].astype(str).str.lower().str.contains("líder|lider", regex=True, na=False)
    return (tipo == LEADER) | (tipo.isna() & por_cargo)


def calculate_general_metrics(df: pd.DataFrame, top_n: Optional[int] = None) -> Dict[str, Any]:
    """
    Calcula métricas gerais.

    Returns:
        Dict com total de avaliações, média geral, distribuições por setor
        e cargo, colaboradores distintos, destaque e lista de performance
    """
    top_n = settings.TOP_PERFORMERS_LIMIT if top_n is None else top_n
    total = len(df)

    if total == 0:
        return {
            "total_evaluations": 0,
            "average_score": 0.0,
            "active_sectors_count": 0,
            "active_roles_count": 0,
            "active_employees_count": 0,
            "sector_distribution": [],
            "role_distribution": [],
            "top_employee": None,
            "performance_list": []
        }

    ranking = to_records(sort_desc_stable(df, "score"))
    nomes = df["name"].astype(str).str.strip().str.lower()

    return {
        "total_evaluations": total,
        "average_score": safe_mean(df["score"]),
        "active_sectors_count": int(df["sector"].nunique()),
        "active_roles_count": int(df["role"].nunique()),
        "active_employees_count": int(nomes.nunique()),
        "sector_distribution": value_distribution(df, "sector"),
        "role_distribution": value_distribution(df, "role"),
        "top_employee": ranking[0],
        "performance_list": ranking[:top_n]
    }


def calculate_competency_matrix(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Calcula a matriz critério x setor.

    Cada linha traz a média do critério em cada setor com dados e a média
    ponderada do critério em todos os setores. Critérios e setores aparecem
    na ordem em que surgem nos dados.

    Returns:
        Lista de dicts com criteria, level, sectors e average
    """
    if df.empty:
        return []

    notas = [
        {"criteria": criterio, "sector": setor, "level": nivel, "value": valor}
        for setor, nivel, detalhes in zip(df["sector"], df["level"], df["details"])
        if isinstance(detalhes, dict)
        for criterio, valor in detalhes.items()
    ]
    if not notas:
        return []

    longo = pd.DataFrame(notas, columns=["criteria", "sector", "level", "value"])
    celulas = (
        longo.groupby(["criteria", "sector"], sort=False)["value"]
        .agg(total="sum", n="count")
        .reset_index()
    )
    niveis = longo.groupby("criteria", sort=False)["level"].first()

    matriz = []
    for criterio, grupo in celulas.groupby("criteria", sort=False):
        setores = {
            setor: safe_div(total, n)
            for setor, total, n in zip(grupo["sector"], grupo["total"], grupo["n"])
        }
        matriz.append({
            "criteria": criterio,
            "level": niveis.get(criterio),
            "sectors": setores,
            "average": safe_div(grupo["total"].sum(), grupo["n"].sum())
        })
    return matriz


def calculate_evolution(df: pd.DataFrame, target_score: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    Calcula a evolução mensal das notas (liderança x demais).

    Args:
        df: DataFrame de avaliações
        target_score: Meta exibida como linha de referência (padrão: settings)

    Avaliações sem data válida ficam fora da série.

    Returns:
        Lista de meses em ordem crescente com médias de líderes, demais e geral
    """
    meta = settings.get_target_score(target_score)

    if df.empty:
        return []

    datados = df[df["month_key"] != MONTH_UNKNOWN]
    if datados.empty:
        return []

    datados = datados.assign(_lider=leader_mask(datados).astype(bool))

    evolucao = []
    for mes, grupo in datados.groupby("month_key", sort=True):
        lideres = grupo.loc[grupo["_lider"], "score"]
        demais = grupo.loc[~grupo["_lider"], "score"]
        evolucao.append({
            "month_key": mes,
            "leader_avg": safe_mean(lideres),
            "leader_count": int(len(lideres)),
            "other_avg": safe_mean(demais),
            "other_count": int(len(demais)),
            "overall_avg": safe_mean(grupo["score"]),
            "count": int(len(grupo)),
            "target": meta
        })
    return evolucao


def calculate_sector_evolution(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Calcula a evolução mensal da média por setor.
    Todos os setores do conjunto filtrado aparecem em todos os meses (0 sem dados).
    """
    if df.empty:
        return []

    setores = list(dict.fromkeys(df["sector"]))
    datados = df[df["month_key"] != MONTH_UNKNOWN]
    if datados.empty:
        return []

    medias = datados.groupby(["month_key", "sector"])["score"].mean()

    evolucao = []
    for mes in sorted(datados["month_key"].unique()):
        evolucao.append({
            "month_key": mes,
            "sectors": {setor: float(medias.get((mes, setor), 0.0)) for setor in setores}
        })
    return evolucao


def level_bucket(level: Any) -> str:
    """Nível da avaliação em uma das faixas de LEVELS; o restante é Operacional."""
    token = strip_accents(str(level or "")).strip().lower()
    for nome in LEVELS:
        if strip_accents(nome).lower() == token:
            return nome
    return DEFAULT_LEVEL


def calculate_level_evolution(df: pd.DataFrame, target_score: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    Calcula a evolução mensal da média por nível (Estratégico, Tático, Operacional).

    Avaliações sem data válida ficam fora da série. Níveis sem avaliação
    no mês aparecem com média 0.

    Returns:
        Lista de meses em ordem crescente com média e contagem por nível,
        média geral e meta
    """
    meta = settings.get_target_score(target_score)

    if df.empty:
        return []

    datados = df[df["month_key"] != MONTH_UNKNOWN]
    if datados.empty:
        return []

    datados = datados.assign(_nivel=datados["level"].map(level_bucket))

    evolucao = []
    for mes, grupo in datados.groupby("month_key", sort=True):
        por_nivel = grupo.groupby("_nivel")["score"]
        medias = por_nivel.mean()
        contagens = por_nivel.size()
        evolucao.append({
            "month_key": mes,
            "levels": {nivel: float(medias.get(nivel, 0.0)) for nivel in LEVELS},
            "level_counts": {nivel: int(contagens.get(nivel, 0)) for nivel in LEVELS},
            "overall_avg": safe_mean(grupo["score"]),
            "count": int(len(grupo)),
            "target": meta
        })
    return evolucao


def calculate_comparative_metrics(
    df: pd.DataFrame,
    general: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Calcula o comparativo individual x setor x empresa.

    Args:
        df: DataFrame de avaliações
        general: Resultado de `calculate_general_metrics` (calculado se None)

    A classificação acima/abaixo da média fica a cargo de quem consome.

    Returns:
        Dict com médias por setor, média da empresa e uma linha por avaliação
    """
    if df.empty:
        return {"sector_averages": {}, "company_avg": 0.0, "individual_data": []}

    if general is None:
        general = calculate_general_metrics(df)
    media_empresa = general["average_score"]

    medias_setor = {
        setor: float(media)
        for setor, media in df.groupby("sector", sort=False)["score"].mean().items()
    }

    individual = []
    for nome, setor, nota in zip(df["name"], df["sector"], df["score"]):
        nota = float(nota)
        media_setor = medias_setor.get(setor, 0.0)
        individual.append({
            "name": nome,
            "sector": setor,
            "metric": "Nota Geral",
            "individual_score": nota,
            "sector_avg": media_setor,
            "company_avg": media_empresa,
            "diff_sector": nota - media_setor,
            "diff_company": nota - media_empresa
        })

    return {
        "sector_averages": medias_setor,
        "company_avg": media_empresa,
        "individual_data": individual
    }


def employee_keys(df: pd.DataFrame) -> pd.Series:
    """Chave do colaborador de cada avaliação: id vinculado ou nome normalizado."""
    return df["employee_id"].where(df["employee_id"].notna(), df["name"].map(name_key)).astype(str)


def calculate_employee_ranking(
    df: pd.DataFrame,
    period_top: Optional[int] = None,
    group_by: Optional[str] = None,
    group_value: Optional[str] = None,
    statuses: Optional[Iterable[str]] = None
) -> List[Dict[str, Any]]:
    """
    Calcula o ranking de colaboradores pela média das avaliações.

    Args:
        df: DataFrame de avaliações
        period_top: Quantas maiores notas de cada data contam como destaque
        group_by: "sector", "role" ou "level" para restringir o ranking
        group_value: Valor do recorte
        statuses: Situações cadastrais aceitas (vazio = todas)

    Setor, cargo e nível vêm do cadastro do colaborador quando há vínculo;
    sem vínculo, da própria avaliação.

    Destaques:
        by_selection: avaliações marcadas como funcionário do mês
        by_score: vezes em que ficou entre as `period_top` maiores notas de uma data

    Returns:
        Lista ordenada pela média (decrescente); empate mantém a primeira ocorrência
    """
    period_top = settings.RANKING_PERIOD_TOP if period_top is None else period_top

    df = filter_by_status(df, statuses)
    if df.empty:
        return []

    base = df.assign(
        _chave=employee_keys(df),
        _setor=df["employee_sector"].where(df["employee_sector"].notna(), df["sector"]),
        _cargo=df["employee_role"].where(df["employee_role"].notna(), df["role"]),
        _nivel=df["employee_level"].where(df["employee_level"].notna(), df["level"]),
    )

    destaques_nota: Dict[str, int] = {}
    datados = base[base["date_iso"] != ""]
    for _, periodo in datados.groupby("date_iso", sort=True):
        for chave_colab in sort_desc_stable(periodo, "score")["_chave"].head(period_top):
            destaques_nota[chave_colab] = destaques_nota.get(chave_colab, 0) + 1

    ranking = []
    for chave_colab, grupo in base.groupby("_chave", sort=False):
        primeiro = grupo.iloc[0]
        total = float(grupo["score"].sum())
        ranking.append({
            "employee_key": chave_colab,
            "employee_id": primeiro["employee_id"],
            "name": primeiro["name"],
            "sector": primeiro["_setor"],
            "role": primeiro["_cargo"],
            "level": primeiro["_nivel"],
            "total_score": total,
            "evaluation_count": int(len(grupo)),
            "average_score": safe_div(total, len(grupo)),
            "dates": [d for d in grupo["date_iso"] if d],
            "highlights": {
                "by_selection": int(grupo["highlight"].astype(bool).sum()),
                "by_score": destaques_nota.get(chave_colab, 0)
            }
        })

    # sorted é estável: em empate vence quem apareceu primeiro
    ranking = sorted(ranking, key=lambda item: -item["average_score"])

    if group_by in RANKING_GROUPS and group_value:
        ranking = [item for item in ranking if item[group_by] == group_value]
    return ranking


def calculate_ranking_timeline(
    df: pd.DataFrame,
    ranking: List[Dict[str, Any]],
    limit: Optional[int] = None,
    statuses: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """
    Calcula a pontuação acumulada (soma das notas) dos primeiros do ranking.

    Para cada data com avaliação de algum deles, o valor de cada colaborador
    é a soma das suas notas até a data, inclusive; None antes da primeira.

    Returns:
        Dict com as séries (chave e nome) e os pontos em ordem de data
    """
    limit = settings.RANKING_TIMELINE_TOP if limit is None else limit
    topo = ranking[:limit]

    df = filter_by_status(df, statuses)
    if df.empty or not topo:
        return {"series": [], "points": []}

    chaves = [item["employee_key"] for item in topo]
    base = df.assign(_chave=employee_keys(df))
    base = base[base["_chave"].isin(chaves) & (base["date_iso"] != "")]

    acumulado = {
        chave: grupo.groupby("date_iso")["score"].sum().sort_index().cumsum()
        for chave, grupo in base.groupby("_chave", sort=False)
    }

    pontos = []
    for data in sorted(base["date_iso"].unique()):
        valores = {}
        for chave in chaves:
            serie = acumulado.get(chave)
            anteriores = serie[serie.index <= data] if serie is not None else []
            valores[chave] = float(anteriores.iloc[-1]) if len(anteriores) else None
        pontos.append({"date": data, "values": valores})

    return {
        "series": [{"employee_key": item["employee_key"], "name": item["name"]} for item in topo],
        "points": pontos
    }
