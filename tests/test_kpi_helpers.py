import pytest

from desempenho.utils.kpi_helpers import (
    calculate_comparative_metrics,
    calculate_competency_matrix,
    calculate_employee_ranking,
    calculate_evolution,
    calculate_general_metrics,
    calculate_level_evolution,
    calculate_ranking_timeline,
    calculate_sector_evolution,
    level_bucket,
    safe_div,
    safe_mean,
    value_distribution,
)
from desempenho.utils.normalizer import to_frame


def test_safe_helpers():
    assert safe_mean([]) == 0.0
    assert safe_mean([1, 2, None]) == 1.5
    assert safe_div(1, 0) == 0.0
    assert safe_div(3, 2) == 1.5


def test_general_metrics_on_empty_input():
    general = calculate_general_metrics(to_frame([]))

    assert general["total_evaluations"] == 0
    assert general["average_score"] == 0.0
    assert general["active_employees_count"] == 0
    assert general["top_employee"] is None
    assert general["performance_list"] == []


def test_general_metrics(frame_of, raw_evaluations, raw_employees):
    general = calculate_general_metrics(frame_of(raw_evaluations, raw_employees))

    assert general["total_evaluations"] == 4
    assert general["average_score"] == pytest.approx((7 + 9 + 8.5 + 0) / 4)
    assert general["active_sectors_count"] == 3
    assert general["active_employees_count"] == 4
    assert general["top_employee"]["name"] == "Bruno Lima"
    assert [r["score"] for r in general["performance_list"]] == [9.0, 8.5, 7.0, 0.0]


def test_distribution_keeps_first_seen_order(frame_of):
    df = frame_of([{"sector": "RH"}, {"sector": "TI"}, {"sector": "TI"}, {}])

    assert value_distribution(df, "sector") == [
        {"name": "RH", "value": 1},
        {"name": "TI", "value": 2},
        {"name": "Geral", "value": 1},
    ]


def test_top_employee_tie_goes_to_first_record(frame_of):
    df = frame_of([
        {"employeeName": "Primeiro", "average": 9},
        {"employeeName": "Segundo", "average": 9},
        {"employeeName": "Terceiro", "average": 5},
    ])

    general = calculate_general_metrics(df, top_n=2)

    assert general["top_employee"]["name"] == "Primeiro"
    assert [r["name"] for r in general["performance_list"]] == ["Primeiro", "Segundo"]


def test_competency_matrix_averages_per_sector(frame_of):
    df = frame_of([
        {"sector": "Vendas", "details": {"Comunicação": 6}},
        {"sector": "Vendas", "details": {"Comunicação": 8}},
        {"sector": "TI", "details": {"Comunicação": 10, "Lógica": "9,5"}},
    ])

    matrix = calculate_competency_matrix(df)

    assert [row["criteria"] for row in matrix] == ["Comunicação", "Lógica"]
    comunicacao = matrix[0]
    assert comunicacao["sectors"] == {"Vendas": 7.0, "TI": 10.0}
    assert comunicacao["average"] == pytest.approx(8.0)
    assert matrix[1]["sectors"] == {"TI": 9.5}


def test_competency_matrix_without_details(frame_of):
    assert calculate_competency_matrix(frame_of([{"average": 7}])) == []


def test_evolution_splits_leaders(frame_of):
    df = frame_of([
        {"type": "leader", "average": 9, "date": "2024-03-15"},
        {"type": "contributor", "average": 7, "date": "2024-03-15"},
    ])

    evolution = calculate_evolution(df)

    assert len(evolution) == 1
    bucket = evolution[0]
    assert bucket["month_key"] == "2024-03"
    assert bucket["leader_avg"] == 9.0
    assert bucket["other_avg"] == 7.0
    assert bucket["overall_avg"] == 8.0
    assert bucket["target"] == 9.0


def test_evolution_custom_target(frame_of):
    df = frame_of([{"average": 7, "date": "2024-03-15"}])

    assert calculate_evolution(df, target_score=8.5)[0]["target"] == 8.5


def test_evolution_uses_role_when_type_is_missing(frame_of):
    df = frame_of([
        {"role": "Líder de Equipe", "average": 10, "date": "2024-01-05"},
        {"role": "Analista", "average": 6, "date": "2024-01-06"},
    ])

    bucket = calculate_evolution(df)[0]

    assert bucket["leader_count"] == 1
    assert bucket["leader_avg"] == 10.0
    assert bucket["other_avg"] == 6.0


def test_evolution_is_chronological_and_skips_undated(frame_of):
    df = frame_of([
        {"average": 5, "date": "2024-03-01"},
        {"average": 6, "date": "sem data"},
        {"average": 7, "date": "2023-12-01"},
    ])

    evolution = calculate_evolution(df)

    assert [b["month_key"] for b in evolution] == ["2023-12", "2024-03"]
    assert sum(b["count"] for b in evolution) == 2


def test_sector_evolution_fills_missing_sectors(frame_of, scenario_evaluations):
    evolution = calculate_sector_evolution(frame_of(scenario_evaluations))

    assert evolution == [
        {"month_key": "2024-01", "sectors": {"TI": 8.0, "RH": 9.0}},
        {"month_key": "2024-02", "sectors": {"TI": 6.0, "RH": 0.0}},
    ]


def test_comparative_metrics(frame_of):
    df = frame_of([
        {"employeeName": "A", "sector": "X", "average": 4},
        {"employeeName": "B", "sector": "X", "average": 6},
        {"employeeName": "C", "sector": "Y", "average": 10},
        {"employeeName": "D", "sector": "Y", "average": 10},
    ])

    comparative = calculate_comparative_metrics(df)

    assert comparative["company_avg"] == 7.5
    assert comparative["sector_averages"] == {"X": 5.0, "Y": 10.0}
    linha = comparative["individual_data"][1]
    assert linha["individual_score"] == 6.0
    assert linha["diff_sector"] == pytest.approx(1.0)
    assert linha["diff_company"] == pytest.approx(-1.5)


def test_comparative_on_empty_input():
    assert calculate_comparative_metrics(to_frame([])) == {
        "sector_averages": {}, "company_avg": 0.0, "individual_data": []
    }


def test_ranking_orders_by_average_with_stable_ties(frame_of):
    df = frame_of([
        {"employeeName": "Ana", "average": 8, "date": "2024-01-10", "funcionarioMes": "Sim"},
        {"employeeName": "Bia", "average": 8, "date": "2024-02-10"},
        {"employeeName": "Caio", "average": 6, "date": "2024-01-10"},
        {"employeeName": "Caio", "average": 10, "date": "2024-02-10"},
    ])

    ranking = calculate_employee_ranking(df, period_top=1)

    assert [item["name"] for item in ranking] == ["Ana", "Bia", "Caio"]
    caio = ranking[2]
    assert caio["evaluation_count"] == 2
    assert caio["average_score"] == 8.0
    assert caio["dates"] == ["2024-01-10", "2024-02-10"]
    assert ranking[0]["highlights"] == {"by_selection": 1, "by_score": 1}
    assert ranking[1]["highlights"] == {"by_selection": 0, "by_score": 0}
    assert caio["highlights"]["by_score"] == 1


def test_ranking_groups_by_employee_id(frame_of, raw_employees):
    df = frame_of([
        {"employeeId": "e1", "average": 6},
        {"employeeName": "ana souza", "average": 8},
    ], raw_employees)

    ranking = calculate_employee_ranking(df)

    assert len(ranking) == 1
    assert ranking[0]["employee_key"] == "e1"
    assert ranking[0]["average_score"] == 7.0


def test_evolution_ignores_partial_dates(frame_of):
    df = frame_of([
        {"average": 8, "date": "2024-03-15"},
        {"average": 2, "date": "mar"},
        {"average": 4, "date": "jan/24"},
        {"average": 6, "date": "15/03"},
    ])

    evolution = calculate_evolution(df)

    assert [(b["month_key"], b["overall_avg"]) for b in evolution] == [("2024-03", 8.0)]


@pytest.mark.parametrize("level, expected", [
    ("Estratégico", "Estratégico"),
    ("estrategico", "Estratégico"),
    ("TÁTICO", "Tático"),
    ("Operacional", "Operacional"),
    ("Júnior", "Operacional"),
    (None, "Operacional"),
])
def test_level_bucket(level, expected):
    assert level_bucket(level) == expected


def test_level_evolution(frame_of):
    df = frame_of([
        {"type": "Estratégico", "average": 9, "date": "2024-01-10"},
        {"type": "Tático", "average": 7, "date": "2024-01-20"},
        {"type": "Tático", "average": 8, "date": "2024-01-25"},
        {"average": 6, "date": "2024-02-05"},
        {"type": "Tático", "average": 10, "date": "sem data"},
    ])

    evolution = calculate_level_evolution(df, target_score=8.5)

    assert [b["month_key"] for b in evolution] == ["2024-01", "2024-02"]
    janeiro, fevereiro = evolution
    assert janeiro["levels"] == {"Estratégico": 9.0, "Tático": 7.5, "Operacional": 0.0}
    assert janeiro["level_counts"] == {"Estratégico": 1, "Tático": 2, "Operacional": 0}
    assert janeiro["overall_avg"] == pytest.approx(8.0)
    assert janeiro["target"] == 8.5
    assert fevereiro["levels"]["Operacional"] == 6.0


def test_level_evolution_on_empty_input():
    assert calculate_level_evolution(to_frame([])) == []


def test_ranking_merges_unmatched_names_case_insensitively(frame_of):
    df = frame_of([
        {"employeeName": "Ana", "average": 8},
        {"employeeName": "ana ", "average": 6},
        {"employeeName": "Bia", "average": 5},
    ])

    ranking = calculate_employee_ranking(df)

    assert len(ranking) == 2
    assert ranking[0]["name"] == "Ana"
    assert ranking[0]["evaluation_count"] == 2
    assert ranking[0]["average_score"] == 7.0
    assert calculate_general_metrics(df)["active_employees_count"] == len(ranking)


def test_ranking_prefers_registered_fields(frame_of, raw_employees):
    df = frame_of([
        {"employeeId": "e2", "sector": "Outro", "role": "Vendedor", "type": "Operacional", "average": 9},
        {"employeeName": "Fulano", "sector": "RH", "level": "Tático", "average": 7},
    ], raw_employees)

    bruno, fulano = calculate_employee_ranking(df)

    assert (bruno["sector"], bruno["role"], bruno["level"]) == ("Vendas", "Líder de Vendas", "Tático")
    assert (fulano["sector"], fulano["level"]) == ("RH", "Tático")


def test_ranking_group_filter(frame_of, raw_evaluations, raw_employees):
    df = frame_of(raw_evaluations, raw_employees)

    vendas = calculate_employee_ranking(df, group_by="sector", group_value="Vendas")
    taticos = calculate_employee_ranking(df, group_by="level", group_value="Tático")

    assert [item["name"] for item in vendas] == ["Bruno Lima", "Ana Souza"]
    assert [item["name"] for item in taticos] == ["Bruno Lima"]
    assert len(calculate_employee_ranking(df, group_by="sector")) == 4


def test_ranking_status_filter(frame_of):
    employees = [
        {"id": "a", "name": "Ana", "status": "Ativo"},
        {"id": "b", "name": "Bia", "status": "Desligado"},
    ]
    df = frame_of([
        {"employeeId": "a", "average": 7},
        {"employeeId": "b", "average": 9},
        {"employeeName": "Sem Cadastro", "average": 10},
    ], employees)

    assert [item["name"] for item in calculate_employee_ranking(df, statuses=["Ativo"])] == ["Ana"]
    assert len(calculate_employee_ranking(df)) == 3


def test_ranking_timeline_is_cumulative(frame_of):
    df = frame_of([
        {"employeeName": "Ana", "average": 8, "date": "2024-01-10"},
        {"employeeName": "Bia", "average": 8, "date": "2024-02-10"},
        {"employeeName": "Caio", "average": 6, "date": "2024-01-10"},
        {"employeeName": "Caio", "average": 10, "date": "2024-02-10"},
    ])
    ranking = calculate_employee_ranking(df)

    timeline = calculate_ranking_timeline(df, ranking)

    assert [serie["name"] for serie in timeline["series"]] == ["Ana", "Bia", "Caio"]
    assert timeline["points"] == [
        {"date": "2024-01-10", "values": {"ana": 8.0, "bia": None, "caio": 6.0}},
        {"date": "2024-02-10", "values": {"ana": 8.0, "bia": 8.0, "caio": 16.0}},
    ]


def test_ranking_timeline_limit(frame_of):
    df = frame_of([{"employeeName": f"P{i}", "average": i, "date": "2024-01-10"} for i in range(12)])
    ranking = calculate_employee_ranking(df)

    timeline = calculate_ranking_timeline(df, ranking)

    assert len(timeline["series"]) == 10
    assert timeline["series"][0]["name"] == "P11"
    assert calculate_ranking_timeline(df, [], limit=3) == {"series": [], "points": []}
