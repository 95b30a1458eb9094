"""
Módulo para normalização de registros brutos de avaliações e colaboradores.
Os registros chegam do banco de documentos sem esquema fixo: campos podem
faltar, vir como texto com vírgula decimal ou usar nomes legados.
Nenhuma função deste módulo lança exceção para dados malformados.
"""
import math
import numbers
import re
import unicodedata
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd


UNKNOWN_NAME = "Desconhecido"
DEFAULT_SECTOR = "Geral"
DEFAULT_ROLE = "Não definido"
DEFAULT_LEVEL = "Operacional"
DEFAULT_STATUS = "Ativo"
MONTH_UNKNOWN = "N/A"

LEADER = "leader"
CONTRIBUTOR = "contributor"
LEADER_TOKENS = {"leader", "lider", "lideranca", "gestor"}
CONTRIBUTOR_TOKENS = {"contributor", "colaborador", "liderado"}

DISC_TYPES = ("D", "I", "S", "C")

# Vetores usados quando o colaborador só tem o tipo primário cadastrado
DISC_DEFAULTS = {
    "D": {"D": 85.0, "I": 50.0, "S": 40.0, "C": 50.0},
    "I": {"D": 50.0, "I": 85.0, "S": 50.0, "C": 40.0},
    "S": {"D": 40.0, "I": 50.0, "S": 85.0, "C": 50.0},
    "C": {"D": 40.0, "I": 40.0, "S": 50.0, "C": 85.0},
}

EVALUATION_COLUMNS = [
    "id", "employee_id", "employee_code", "name", "sector", "role",
    "evaluation_type", "level", "date_iso", "month_key", "score", "details",
    "company_id", "highlight", "match_status", "match_strategy",
    "employee_sector", "employee_role", "employee_level", "employee_status",
]

EMPLOYEE_COLUMNS = [
    "id", "code", "name", "sector", "role", "level", "admission_date",
    "company_id", "status", "disc", "disc_estimated", "primary_type",
]

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
# Formatos brasileiros aceitos além do ISO; todos exigem dia, mês e ano com 4 dígitos
_DATE_FORMATS = (
    "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y",
    "%d/%m/%Y %H:%M", "%d/%m/%Y %H:%M:%S",
)
_MIN_YEAR = 1900
_FLAG_TRUE = {"sim", "s", "true", "yes", "1"}


def strip_accents(text: str) -> str:
    """Remove acentos ("líder" -> "lider")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def to_number(value: Any) -> float:
    """
    Converte um valor qualquer em float.

    Aceita número nativo ou texto com "." ou "," como separador decimal.
    Qualquer outra entrada (ausente, não numérica, objeto) vira 0.0.
    Valores finitos fora da faixa 0-10 são mantidos como vieram.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        result = float(value)
    elif isinstance(value, str):
        texto = value.strip().replace(",", ".")
        # float() aceita "1_0"; separador de dígitos não é nota válida
        if not texto or "_" in texto:
            return 0.0
        try:
            result = float(texto)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return result if math.isfinite(result) else 0.0


def to_text(value: Any) -> str:
    """Texto limpo de um campo; vazio para None, NaN e objetos."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return ""
    number = float(value)
    if not math.isfinite(number):
        return ""
    if number.is_integer():
        return str(int(number))
    return str(value)


def first_text(raw: Mapping, *keys: str) -> str:
    """Retorna o primeiro campo não vazio entre as chaves informadas."""
    for key in keys:
        texto = to_text(raw.get(key))
        if texto:
            return texto
    return ""


def parse_date(value: Any) -> Optional[date]:
    """
    Converte o campo de data em `date`.
    Strings ISO (YYYY-MM-DD) são lidas literalmente; as demais só são
    aceitas nos formatos de _DATE_FORMATS (dia primeiro, padrão brasileiro).
    Datas parciais ("mar", "15/03", "jan/24") não são datas.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    texto = value.strip()
    if not texto:
        return None

    match = _ISO_DATE.match(texto)
    if match:
        try:
            parsed = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError:
            return None
        return parsed if parsed.year >= _MIN_YEAR else None

    for fmt in _DATE_FORMATS:
        parsed = pd.to_datetime(texto, format=fmt, errors="coerce")
        if not pd.isna(parsed) and parsed.year >= _MIN_YEAR:
            return parsed.date()
    return None


def month_key(value: Optional[date]) -> str:
    """Chave YYYY-MM do mês ou o sentinela "N/A"."""
    if value is None:
        return MONTH_UNKNOWN
    return f"{value.year:04d}-{value.month:02d}"


def canonical_type(value: Any) -> Optional[str]:
    """Tipo de avaliação canônico: "leader", "contributor" ou None."""
    token = strip_accents(to_text(value)).lower()
    if token in LEADER_TOKENS:
        return LEADER
    if token in CONTRIBUTOR_TOKENS:
        return CONTRIBUTOR
    return None


def _as_mapping(raw: Any) -> Mapping:
    return raw if isinstance(raw, Mapping) else {}


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return to_text(value).lower() in _FLAG_TRUE


def evaluation_refs(raw: Any) -> Tuple[str, str, str]:
    """Referências ao colaborador presentes na avaliação: (id, código, nome)."""
    raw = _as_mapping(raw)
    return (
        first_text(raw, "employeeId"),
        first_text(raw, "employeeCode", "matricula", "code"),
        first_text(raw, "employeeName", "displayName"),
    )


def normalize_details(raw: Mapping) -> Dict[str, float]:
    """Critérios da avaliação; o esquema atual ("details") vence o legado."""
    detalhes = raw.get("details")
    if detalhes is None:
        detalhes = raw.get("detalhes")
    if not isinstance(detalhes, Mapping):
        return {}
    return {str(criterio): to_number(nota) for criterio, nota in detalhes.items()}


def normalize_evaluation(raw: Any, match=None) -> Dict[str, Any]:
    """
    Converte uma avaliação bruta no formato canônico.

    Args:
        raw: Registro bruto (dict com qualquer estrutura)
        match: Resultado de `match_employee` (opcional). Só um vínculo
            inequívoco substitui o nome e o id informados na avaliação.

    Returns:
        Dict com as colunas de EVALUATION_COLUMNS
    """
    raw = _as_mapping(raw)
    employee_id, employee_code, nome = evaluation_refs(raw)

    employee = getattr(match, "employee", None)
    if employee is not None:
        nome = employee.get("name") or nome
        employee_id = employee.get("id") or employee_id
        employee_code = employee_code or employee.get("code") or ""

    tipo_bruto = first_text(raw, "evaluationType", "type")
    tipo = canonical_type(tipo_bruto)
    nivel = first_text(raw, "level", "jobLevel") or (tipo_bruto if tipo is None else "")

    if raw.get("average") is not None:
        score = to_number(raw.get("average"))
    else:
        score = to_number(raw.get("notaFinal"))

    data = parse_date(raw.get("date"))

    return {
        "id": first_text(raw, "id"),
        "employee_id": employee_id or None,
        "employee_code": employee_code or None,
        "name": nome or UNKNOWN_NAME,
        "sector": first_text(raw, "sector") or DEFAULT_SECTOR,
        "role": first_text(raw, "role") or DEFAULT_ROLE,
        "evaluation_type": tipo,
        "level": nivel or DEFAULT_LEVEL,
        "date_iso": data.isoformat() if data else "",
        "month_key": month_key(data),
        "score": score,
        "details": normalize_details(raw),
        "company_id": first_text(raw, "companyId") or None,
        "highlight": _flag(raw.get("funcionarioMes", raw.get("funcionario_mes"))),
        "match_status": getattr(match, "status", None),
        "match_strategy": getattr(match, "strategy", None),
        # Cadastro do colaborador vinculado (None sem vínculo único)
        "employee_sector": (employee or {}).get("sector"),
        "employee_role": (employee or {}).get("role"),
        "employee_level": (employee or {}).get("level"),
        "employee_status": (employee or {}).get("status"),
    }


def disc_vector(value: Any) -> Optional[Dict[str, float]]:
    """Vetor {D, I, S, C}; None quando nenhuma dimensão foi informada."""
    if not isinstance(value, Mapping):
        return None
    vetor = {}
    informado = False
    for tipo in DISC_TYPES:
        bruto = value.get(tipo, value.get(tipo.lower()))
        if bruto is not None:
            informado = True
        vetor[tipo] = to_number(bruto)
    return vetor if informado else None


def primary_type(vector: Optional[Mapping]) -> Optional[str]:
    """Dimensão de maior pontuação; empates seguem a ordem D > I > S > C."""
    if not vector:
        return None
    maior = max(vector[tipo] for tipo in DISC_TYPES)
    for tipo in DISC_TYPES:
        if vector[tipo] == maior:
            return tipo
    return None


def _type_letter(value: Any) -> Optional[str]:
    texto = to_text(value).upper()
    if texto and texto[0] in DISC_TYPES:
        return texto[0]
    return None


def normalize_employee(raw: Any) -> Dict[str, Any]:
    """Converte um colaborador bruto no formato canônico (EMPLOYEE_COLUMNS)."""
    raw = _as_mapping(raw)

    vetor = disc_vector(raw.get("discScores"))
    if vetor is None:
        vetor = disc_vector(raw.get("discProfile"))
    estimado = False
    if vetor is None:
        declarado = _type_letter(raw.get("discProfile")) or _type_letter(raw.get("primaryType"))
        if declarado:
            vetor = dict(DISC_DEFAULTS[declarado])
            estimado = True

    admissao = parse_date(raw.get("admissionDate"))

    return {
        "id": first_text(raw, "id") or None,
        "code": first_text(raw, "employeeCode", "matricula", "code") or None,
        "name": first_text(raw, "name", "nome", "displayName") or UNKNOWN_NAME,
        "sector": first_text(raw, "sector") or DEFAULT_SECTOR,
        "role": first_text(raw, "role") or DEFAULT_ROLE,
        "level": first_text(raw, "jobLevel", "level") or DEFAULT_LEVEL,
        "admission_date": admissao.isoformat() if admissao else "",
        "company_id": first_text(raw, "companyId") or None,
        "status": first_text(raw, "status") or DEFAULT_STATUS,
        "disc": vetor,
        "disc_estimated": estimado,
        "primary_type": primary_type(vetor),
    }


def normalize_employees(raws: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    return [normalize_employee(raw) for raw in (raws or [])]


def to_frame(records: Optional[Iterable[Mapping]], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """DataFrame com colunas fixas; válido mesmo sem registros."""
    return pd.DataFrame(list(records or []), columns=columns or EVALUATION_COLUMNS)
