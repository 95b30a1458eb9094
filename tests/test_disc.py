import pytest

from desempenho.utils.disc import build_profile_frame, calculate_disc_statistics, rank_types
from desempenho.utils.normalizer import normalize_employees


def _employees(*tipos, sector="Vendas"):
    return normalize_employees([
        {"id": f"p{i}", "name": f"Pessoa {i}", "sector": sector, "discProfile": tipo, "companyId": "c1"}
        for i, tipo in enumerate(tipos)
    ])


def test_type_counts_and_top_types_without_evaluations():
    stats = calculate_disc_statistics(_employees("D", "I", "S", "C", "I"))

    assert stats["total_profiles"] == 5
    assert stats["type_counts"] == {"D": 1, "I": 2, "S": 1, "C": 1}

    vendas = stats["top_types"]["sector"][0]
    assert vendas["group"] == "Vendas"
    assert vendas["total"] == 5
    assert [item["type"] for item in vendas["top_types"]] == ["I", "D", "S"]


def test_top_types_prefer_higher_evaluation_score(frame_of):
    employees = _employees("D", "S", "S")
    df = frame_of([
        {"employeeId": "p0", "average": 6},
        {"employeeId": "p1", "average": 9},
        {"employeeId": "p2", "average": 8},
    ], [
        {"id": emp["id"], "name": emp["name"]} for emp in employees
    ])

    top = calculate_disc_statistics(employees, df)["top_types"]["sector"][0]["top_types"]

    assert [item["type"] for item in top] == ["S", "D"]
    assert top[0]["avg_score"] == pytest.approx(8.5)
    assert top[0]["evaluated"] == 2


def test_evaluation_score_falls_back_to_name(frame_of):
    employees = normalize_employees([{"name": "Ana", "discProfile": "C"}])
    df = frame_of([{"employeeName": "ana", "average": 7}])

    frame = build_profile_frame(employees, df)

    assert frame.loc[0, "eval_score"] == 7.0


def test_company_scope(raw_employees):
    employees = normalize_employees(raw_employees)

    c1 = calculate_disc_statistics(employees, company_id="c1")
    todos = calculate_disc_statistics(employees, company_id="all")

    assert c1["total_profiles"] == 2
    assert todos["total_profiles"] == 3
    assert calculate_disc_statistics(employees)["total_profiles"] == 3


def test_group_filter(raw_employees):
    employees = normalize_employees(raw_employees)

    stats = calculate_disc_statistics(employees, group_by="sector", group_value="TI")

    assert stats["total_profiles"] == 1
    assert stats["profiles"][0]["name"] == "Carla Dias"
    assert stats["type_counts"]["C"] == 1


def test_averages_and_estimated_flag(raw_employees):
    stats = calculate_disc_statistics(normalize_employees(raw_employees), company_id="c1")

    # Ana (vetor real) e Bruno (tipo D estimado)
    assert stats["averages"]["D"] == pytest.approx((20 + 85) / 2)
    assert stats["averages"]["I"] == pytest.approx((80 + 50) / 2)
    estimados = {p["name"]: p["disc_estimated"] for p in stats["profiles"]}
    assert estimados == {"Ana Souza": False, "Bruno Lima": True}


def test_profiles_without_evaluations_have_no_score(raw_employees):
    stats = calculate_disc_statistics(normalize_employees(raw_employees))

    assert all(p["eval_score"] is None for p in stats["profiles"])


def test_empty_input():
    stats = calculate_disc_statistics([])

    assert stats["total_profiles"] == 0
    assert stats["averages"] == {"D": 0.0, "I": 0.0, "S": 0.0, "C": 0.0}
    assert stats["type_counts"] == {"D": 0, "I": 0, "S": 0, "C": 0}
    assert stats["top_types"] == {"sector": [], "role": [], "level": []}
    assert stats["profiles"] == []


def test_rank_types_limit():
    frame = build_profile_frame(_employees("C", "S", "I", "D"))

    assert [item["type"] for item in rank_types(frame, limit=2)] == ["D", "I"]
