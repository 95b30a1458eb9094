import logging

from desempenho.utils.matching import (
    AMBIGUOUS,
    MATCHED,
    UNMATCHED,
    build_employee_index,
    match_employee,
    name_key,
    normalize_and_match,
)
from desempenho.utils.normalizer import normalize_employees


def _index(raw_employees):
    return build_employee_index(normalize_employees(raw_employees))


def test_name_key():
    assert name_key("  Ana Souza ") == "ana souza"
    assert name_key(None) == ""


def test_match_by_id_replaces_name(raw_employees):
    result = match_employee({"employeeId": "e1", "employeeName": "Ana S."}, _index(raw_employees))

    assert result.status == MATCHED
    assert result.strategy == "id"
    assert result.employee["name"] == "Ana Souza"


def test_match_by_name_is_case_insensitive(raw_employees):
    result = match_employee({"employeeName": "  carla dias"}, _index(raw_employees))

    assert result.status == MATCHED
    assert result.strategy == "name"
    assert result.employee["id"] == "e3"


def test_id_and_name_pointing_to_same_employee(raw_employees):
    result = match_employee({"employeeId": "e2", "employeeName": "Bruno Lima"}, _index(raw_employees))

    assert result.status == MATCHED
    assert result.strategy == "id"
    assert len(result.candidates) == 2


def test_code_and_name_disagree_is_ambiguous(caplog):
    index = _index([
        {"id": "a", "name": "Ana", "employeeCode": "M1"},
        {"id": "b", "name": "Bia"},
    ])

    with caplog.at_level(logging.WARNING, logger="desempenho.utils.matching"):
        result = match_employee({"employeeCode": "M1", "employeeName": "Bia"}, index)

    assert result.status == AMBIGUOUS
    assert result.employee is None
    assert [strategy for strategy, _ in result.candidates] == ["code", "name"]
    assert "ambíguo" in caplog.text


def test_duplicate_names_are_ambiguous():
    index = _index([{"id": "a", "name": "Ana"}, {"id": "b", "name": "ana"}])

    result = match_employee({"employeeName": "Ana"}, index)

    assert result.status == AMBIGUOUS


def test_unmatched(raw_employees):
    result = match_employee({"employeeName": "Fulano"}, _index(raw_employees))

    assert result.status == UNMATCHED
    assert result.candidates == ()


def test_normalize_and_match_keeps_unmatched_records(raw_evaluations, raw_employees):
    records = normalize_and_match(raw_evaluations, normalize_employees(raw_employees))

    assert len(records) == 4
    assert [r["match_status"] for r in records] == [MATCHED, MATCHED, MATCHED, UNMATCHED]
    assert records[3]["name"] == "Diego"
    assert records[3]["employee_id"] is None


def test_ambiguous_match_keeps_evaluation_fields():
    employees = normalize_employees([{"id": "a", "name": "Ana"}, {"id": "b", "name": "Ana"}])

    record = normalize_and_match([{"employeeName": "Ana", "average": 8}], employees)[0]

    assert record["match_status"] == AMBIGUOUS
    assert record["employee_id"] is None
    assert record["name"] == "Ana"


def test_without_employees_everything_is_unmatched(raw_evaluations):
    records = normalize_and_match(raw_evaluations)

    assert {r["match_status"] for r in records} == {UNMATCHED}
    assert records[0]["employee_id"] == "e1"


def test_matched_record_carries_employee_registration(raw_evaluations, raw_employees):
    records = normalize_and_match(raw_evaluations, normalize_employees(raw_employees))

    bruno = records[1]
    assert bruno["employee_level"] == "Tático"
    assert bruno["employee_sector"] == "Vendas"
    assert bruno["employee_status"] == "Ativo"
    assert records[3]["employee_status"] is None
