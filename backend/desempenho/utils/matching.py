"""
Vínculo entre avaliações e colaboradores.

A avaliação pode referenciar o colaborador por id, por código (matrícula)
ou apenas pelo nome. Todas as estratégias são testadas e o resultado traz
os candidatos em ordem (id, código, nome); quando eles apontam para
colaboradores diferentes o vínculo é marcado como ambíguo e nenhum
candidato é escolhido.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from desempenho.utils.normalizer import evaluation_refs, normalize_evaluation

logger = logging.getLogger(__name__)

MATCHED = "matched"
AMBIGUOUS = "ambiguous"
UNMATCHED = "unmatched"


def name_key(name: Any) -> str:
    """Chave de comparação de nomes (minúsculas, sem espaços nas pontas)."""
    return str(name or "").strip().lower()


@dataclass(frozen=True)
class MatchResult:
    status: str
    strategy: Optional[str] = None
    employee: Optional[Dict[str, Any]] = None
    candidates: Tuple[Tuple[str, Dict[str, Any]], ...] = ()


@dataclass
class EmployeeIndex:
    by_id: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    by_code: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    by_name: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


def build_employee_index(employees: Optional[Iterable[Dict[str, Any]]]) -> EmployeeIndex:
    """Indexa colaboradores normalizados por id, código e nome."""
    index = EmployeeIndex()
    for emp in employees or []:
        if emp.get("id"):
            index.by_id.setdefault(emp["id"], emp)
        if emp.get("code"):
            index.by_code.setdefault(emp["code"], []).append(emp)
        chave = name_key(emp.get("name"))
        if chave:
            index.by_name.setdefault(chave, []).append(emp)
    return index


def match_employee(raw_evaluation: Any, index: EmployeeIndex) -> MatchResult:
    """
    Procura o colaborador de uma avaliação bruta.

    Returns:
        MatchResult com status "matched", "ambiguous" ou "unmatched"
    """
    employee_id, code, nome = evaluation_refs(raw_evaluation)

    candidates = []
    if employee_id and employee_id in index.by_id:
        candidates.append(("id", index.by_id[employee_id]))
    if code:
        candidates.extend(("code", emp) for emp in index.by_code.get(code, []))
    if nome:
        candidates.extend(("name", emp) for emp in index.by_name.get(name_key(nome), []))

    if not candidates:
        return MatchResult(status=UNMATCHED)

    distintos = {id(emp) for _, emp in candidates}
    if len(distintos) > 1:
        logger.warning(
            f"Vínculo ambíguo para avaliação (id={employee_id!r}, código={code!r}, nome={nome!r}): "
            f"{len(distintos)} colaboradores candidatos"
        )
        return MatchResult(status=AMBIGUOUS, candidates=tuple(candidates))

    strategy, employee = candidates[0]
    logger.debug(f"Avaliação vinculada ao colaborador {employee.get('id')!r} pela estratégia '{strategy}'")
    return MatchResult(status=MATCHED, strategy=strategy, employee=employee, candidates=tuple(candidates))


def normalize_and_match(
    raw_evaluations: Optional[Iterable[Any]],
    employees: Optional[Iterable[Dict[str, Any]]] = None
) -> List[Dict[str, Any]]:
    """
    Normaliza avaliações brutas vinculando cada uma ao colaborador.

    Args:
        raw_evaluations: Avaliações brutas
        employees: Colaboradores já normalizados

    Returns:
        Lista de avaliações canônicas
    """
    index = build_employee_index(employees)
    registros = []
    status_count = {MATCHED: 0, AMBIGUOUS: 0, UNMATCHED: 0}
    for raw in raw_evaluations or []:
        match = match_employee(raw, index)
        status_count[match.status] += 1
        registros.append(normalize_evaluation(raw, match))

    if registros:
        logger.info(
            f"{len(registros)} avaliações normalizadas "
            f"(vinculadas={status_count[MATCHED]}, ambíguas={status_count[AMBIGUOUS]}, "
            f"sem vínculo={status_count[UNMATCHED]})"
        )
    return registros
