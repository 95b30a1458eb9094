import pytest

from desempenho.utils.matching import normalize_and_match
from desempenho.utils.normalizer import normalize_employees, to_frame


def make_frame(raw_evaluations, raw_employees=None):
    """Avaliações brutas -> DataFrame canônico."""
    employees = normalize_employees(raw_employees)
    return to_frame(normalize_and_match(raw_evaluations, employees))


@pytest.fixture
def frame_of():
    return make_frame


@pytest.fixture
def scenario_evaluations():
    return [
        {"employeeName": "Ana", "sector": "TI", "average": 8, "date": "2024-01-10"},
        {"employeeName": "Bruno", "sector": "TI", "average": 6, "date": "2024-02-10"},
        {"employeeName": "Carla", "sector": "RH", "average": 9, "date": "2024-01-20"},
    ]


@pytest.fixture
def raw_evaluations():
    return [
        {
            "id": "ev1", "employeeId": "e1", "employeeName": "Ana Souza",
            "sector": "Vendas", "role": "Vendedora", "type": "contributor",
            "date": "2024-03-15", "average": 7,
            "details": {"Comunicação": 6, "Negociação": "7,5"},
        },
        {
            "id": "ev2", "employeeId": "e2", "employeeName": "Bruno Lima",
            "sector": "Vendas", "role": "Líder de Vendas", "type": "leader",
            "date": "2024-03-20", "average": 9, "funcionarioMes": "Sim",
            "details": {"Comunicação": 8},
        },
        {
            "id": "ev3", "employeeId": "e3", "employeeName": "Carla Dias",
            "sector": "TI", "role": "Analista", "date": "2024-02-05",
            "notaFinal": "8,5", "detalhes": {"Comunicação": "9"},
        },
        {
            "id": "ev4", "employeeName": "Diego", "average": "abc", "date": "sem data",
        },
    ]


@pytest.fixture
def raw_employees():
    return [
        {"id": "e1", "name": "Ana Souza", "sector": "Vendas", "role": "Vendedora",
         "jobLevel": "Operacional", "companyId": "c1", "discScores": {"D": 20, "I": 80, "S": 60, "C": 40}},
        {"id": "e2", "name": "Bruno Lima", "sector": "Vendas", "role": "Líder de Vendas",
         "jobLevel": "Tático", "companyId": "c1", "discProfile": "D"},
        {"id": "e3", "name": "Carla Dias", "sector": "TI", "role": "Analista",
         "jobLevel": "Operacional", "companyId": "c2", "discScores": {"D": 30, "I": 30, "S": 30, "C": 90}},
        {"id": "e4", "name": "Eva Sem Perfil", "sector": "TI", "companyId": "c1"},
    ]
