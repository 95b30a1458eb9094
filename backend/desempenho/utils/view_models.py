"""
Montagem dos dados de gráficos e tabelas do dashboard.
Apenas renomeia, arredonda e ordena o que os cálculos já produziram.
"""
from typing import Any, Dict, List, Optional

from desempenho.config import settings
from desempenho.utils.normalizer import DISC_TYPES, MONTH_UNKNOWN


MONTH_ABBR = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")
OTHERS_LABEL = "Outros"

DISC_LABELS = {
    "D": "Dominância",
    "I": "Influência",
    "S": "Estabilidade",
    "C": "Conformidade",
}


def format_month_year(key: Optional[str]) -> str:
    """Rótulo curto do mês: "2024-03" -> "mar/24"."""
    if not key or len(key) < 7:
        return MONTH_UNKNOWN
    try:
        ano = int(key[:4])
        mes = int(key[5:7])
    except ValueError:
        return MONTH_UNKNOWN
    if not 1 <= mes <= 12:
        return MONTH_UNKNOWN
    return f"{MONTH_ABBR[mes - 1]}/{ano % 100:02d}"


def distribution_chart(distribution: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Distribuição na ordem em que os valores apareceram."""
    return [{"name": item["name"], "value": item["value"]} for item in distribution]


def donut_chart(distribution: List[Dict[str, Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Maiores fatias em ordem decrescente, o restante agrupado em "Outros"."""
    limit = settings.DONUT_SLICES if limit is None else limit
    ordenado = sorted(distribution_chart(distribution), key=lambda item: -item["value"])
    if len(ordenado) <= limit:
        return ordenado

    fatias = ordenado[:limit]
    outros = sum(item["value"] for item in ordenado[limit:])
    if outros > 0:
        fatias.append({"name": OTHERS_LABEL, "value": outros})
    return fatias


def performance_row(record: Dict[str, Any], position: int) -> Dict[str, Any]:
    return {
        "position": position,
        "name": record["name"],
        "sector": record["sector"],
        "role": record["role"],
        "score": round(record["score"], 2),
        "date": record["date_iso"],
        "month": format_month_year(record["month_key"]),
        "highlight": "Sim" if record.get("highlight") else "Não"
    }


def performance_table(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [performance_row(record, posicao) for posicao, record in enumerate(records, start=1)]


def kpi_cards(general: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "health_score": round(general["average_score"], 2),
        "total_evaluations": general["total_evaluations"],
        "active_sectors": general["active_sectors_count"],
        "active_roles": general["active_roles_count"],
        "active_employees": general["active_employees_count"]
    }


def matrix_table(matrix: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Uma linha por critério: colunas dinâmicas por setor e média geral."""
    linhas = []
    for row in matrix:
        linha = {"criteria": row["criteria"], "level": row["level"]}
        for setor, media in row["sectors"].items():
            linha[setor] = round(media, 2)
        linha["average"] = round(row["average"], 2)
        linhas.append(linha)
    return linhas


def matrix_sectors(matrix: List[Dict[str, Any]]) -> List[str]:
    """Setores que aparecem como colunas da matriz, em ordem de descoberta."""
    setores: Dict[str, None] = {}
    for row in matrix:
        for setor in row["sectors"]:
            setores.setdefault(setor, None)
    return list(setores)


def evolution_chart(evolution: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "date": format_month_year(bucket["month_key"]),
            "month": bucket["month_key"],
            "Líderes": round(bucket["leader_avg"], 1),
            "Demais": round(bucket["other_avg"], 1),
            "Média Geral": round(bucket["overall_avg"], 1),
            "Meta": bucket["target"]
        }
        for bucket in evolution
    ]


def level_evolution_chart(evolution: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Uma linha por mês com a média de cada nível, a média geral e a meta."""
    linhas = []
    for bucket in evolution:
        linha = {"date": format_month_year(bucket["month_key"]), "month": bucket["month_key"]}
        for nivel, media in bucket["levels"].items():
            linha[nivel] = round(media, 1)
        linha["Média Geral"] = round(bucket["overall_avg"], 1)
        linha["Meta"] = bucket["target"]
        linhas.append(linha)
    return linhas


def sector_evolution_chart(evolution: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    linhas = []
    for bucket in evolution:
        linha = {"date": format_month_year(bucket["month_key"]), "month": bucket["month_key"]}
        for setor, media in bucket["sectors"].items():
            linha[setor] = round(media, 1)
        linhas.append(linha)
    return linhas


def comparative_table(comparative: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "name": row["name"],
            "metric": row["metric"],
            "sector": row["sector"],
            "individualScore": round(row["individual_score"], 2),
            "sectorAvg": round(row["sector_avg"], 2),
            "companyAvg": round(row["company_avg"], 2),
            "diffSector": round(row["diff_sector"], 2),
            "diffCompany": round(row["diff_company"], 2)
        }
        for row in comparative["individual_data"]
    ]


def ranking_table(ranking: List[Dict[str, Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    linhas = ranking if limit is None else ranking[:limit]
    return [
        {
            "position": posicao,
            "name": item["name"],
            "sector": item["sector"],
            "role": item["role"],
            "level": item["level"],
            "averageScore": round(item["average_score"], 2),
            "evaluationCount": item["evaluation_count"],
            "highlightsBySelection": item["highlights"]["by_selection"],
            "highlightsByScore": item["highlights"]["by_score"]
        }
        for posicao, item in enumerate(linhas, start=1)
    ]


def ranking_timeline_chart(timeline: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Pontuação acumulada por data, uma coluna por colaborador (pelo nome)."""
    nomes = {serie["employee_key"]: serie["name"] for serie in timeline["series"]}
    linhas = []
    for ponto in timeline["points"]:
        linha = {"date": ponto["date"]}
        for chave, valor in ponto["values"].items():
            linha[nomes.get(chave, chave)] = None if valor is None else round(valor, 2)
        linhas.append(linha)
    return linhas


def disc_bar_chart(averages: Dict[str, float]) -> List[Dict[str, Any]]:
    return [
        {"name": f"{DISC_LABELS[tipo]} ({tipo})", "type": tipo, "value": round(averages[tipo], 1)}
        for tipo in DISC_TYPES
    ]


def disc_radar_chart(averages: Dict[str, float]) -> List[Dict[str, Any]]:
    return [{"dimension": DISC_LABELS[tipo], "value": round(averages[tipo], 1)} for tipo in DISC_TYPES]


def disc_pie_chart(type_counts: Dict[str, int]) -> List[Dict[str, Any]]:
    """Distribuição de tipos primários sem as fatias vazias."""
    return [
        {"name": tipo, "value": type_counts[tipo], "label": f"{tipo} ({type_counts[tipo]})"}
        for tipo in DISC_TYPES
        if type_counts[tipo] > 0
    ]


def top_types_table(top_types: Dict[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    linhas = []
    for dimensao, grupos in top_types.items():
        for grupo in grupos:
            for posicao, item in enumerate(grupo["top_types"], start=1):
                linhas.append({
                    "dimension": dimensao,
                    "group": grupo["group"],
                    "rank": posicao,
                    "type": item["type"],
                    "label": DISC_LABELS[item["type"]],
                    "count": item["count"],
                    "avgScore": round(item["avg_score"], 2)
                })
    return linhas


def behavioral_view(disc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "total_profiles": disc["total_profiles"],
        "bar": disc_bar_chart(disc["averages"]),
        "radar": disc_radar_chart(disc["averages"]),
        "pie": disc_pie_chart(disc["type_counts"]),
        "top_types": top_types_table(disc["top_types"]),
        "profiles": [
            {
                "name": perfil["name"],
                "sector": perfil["sector"],
                "role": perfil["role"],
                "level": perfil["level"],
                "primaryType": perfil["primary_type"],
                **{tipo: round(perfil[tipo], 1) for tipo in DISC_TYPES},
                "estimated": perfil["disc_estimated"]
            }
            for perfil in disc["profiles"]
        ]
    }


def assemble_dashboard(
    general: Dict[str, Any],
    matrix: List[Dict[str, Any]],
    evolution: List[Dict[str, Any]],
    sector_evolution: List[Dict[str, Any]],
    comparative: Dict[str, Any],
    ranking: Optional[List[Dict[str, Any]]] = None,
    disc: Optional[Dict[str, Any]] = None,
    level_evolution: Optional[List[Dict[str, Any]]] = None,
    ranking_timeline: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Junta todas as visões do dashboard em um único payload."""
    top = general["top_employee"]
    return {
        "kpis": kpi_cards(general),
        "sector_counts": distribution_chart(general["sector_distribution"]),
        "sector_distribution": donut_chart(general["sector_distribution"]),
        "role_distribution": donut_chart(general["role_distribution"]),
        "top_employee": performance_row(top, 1) if top else None,
        "performance_list": performance_table(general["performance_list"]),
        "matrix": matrix_table(matrix),
        "matrix_sectors": matrix_sectors(matrix),
        "evolution": evolution_chart(evolution),
        "level_evolution": level_evolution_chart(level_evolution or []),
        "sector_evolution": sector_evolution_chart(sector_evolution),
        "comparative": comparative_table(comparative),
        "ranking": ranking_table(ranking or []),
        "ranking_timeline": ranking_timeline_chart(ranking_timeline or {"series": [], "points": []}),
        "behavioral": behavioral_view(disc) if disc is not None else None
    }
