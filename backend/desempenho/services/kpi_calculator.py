"""
Serviço para cálculo de indicadores de desempenho
"""
from typing import Any, Dict, Iterable, Optional
from desempenho.services.data_processor import DataProcessor
from desempenho.utils import disc, kpi_helpers, view_models
import logging

logger = logging.getLogger(__name__)


class KPICalculator:
    """
    Serviço para calcular as visões do dashboard.
    Cada chamada refaz o pipeline completo: normalização, filtro,
    agregação e montagem. Nada é guardado entre chamadas.
    """

    @staticmethod
    def calculate_general(
        evaluations: Iterable[Any],
        employees: Optional[Iterable[Any]] = None,
        filters: Any = None,
        top_n: Optional[int] = None
    ) -> Dict:
        """
        Calcula métricas gerais.

        Returns:
            Dict com métricas gerais e distribuições prontas para gráfico
        """
        df, _ = DataProcessor.prepare(evaluations, employees)
        df = DataProcessor.filter_evaluations(df, filters)

        general = kpi_helpers.calculate_general_metrics(df, top_n)

        return {
            'metrics': general,
            'kpis': view_models.kpi_cards(general),
            'sector_distribution': view_models.donut_chart(general['sector_distribution']),
            'role_distribution': view_models.donut_chart(general['role_distribution']),
            'performance_list': view_models.performance_table(general['performance_list'])
        }

    @staticmethod
    def calculate_competencies(
        evaluations: Iterable[Any],
        employees: Optional[Iterable[Any]] = None,
        filters: Any = None,
        target_score: Optional[float] = None
    ) -> Dict:
        """
        Calcula matriz de competências e evolução temporal.

        Returns:
            Dict com matriz e evoluções por liderança, por nível e por setor
        """
        df, _ = DataProcessor.prepare(evaluations, employees)
        df = DataProcessor.filter_evaluations(df, filters)

        matrix = kpi_helpers.calculate_competency_matrix(df)
        evolution = kpi_helpers.calculate_evolution(df, target_score)
        level_evolution = kpi_helpers.calculate_level_evolution(df, target_score)
        sector_evolution = kpi_helpers.calculate_sector_evolution(df)

        return {
            'matrix': view_models.matrix_table(matrix),
            'matrix_sectors': view_models.matrix_sectors(matrix),
            'evolution': view_models.evolution_chart(evolution),
            'level_evolution': view_models.level_evolution_chart(level_evolution),
            'sector_evolution': view_models.sector_evolution_chart(sector_evolution)
        }

    @staticmethod
    def calculate_comparative(
        evaluations: Iterable[Any],
        employees: Optional[Iterable[Any]] = None,
        filters: Any = None
    ) -> Dict:
        """
        Calcula o comparativo individual x setor x empresa.

        Returns:
            Dict com médias por setor, média da empresa e linhas individuais
        """
        df, _ = DataProcessor.prepare(evaluations, employees)
        df = DataProcessor.filter_evaluations(df, filters)

        comparative = kpi_helpers.calculate_comparative_metrics(df)

        return {
            'sector_averages': {k: round(v, 2) for k, v in comparative['sector_averages'].items()},
            'company_avg': round(comparative['company_avg'], 2),
            'individual_data': view_models.comparative_table(comparative)
        }

    @staticmethod
    def calculate_ranking(
        evaluations: Iterable[Any],
        employees: Optional[Iterable[Any]] = None,
        filters: Any = None,
        top_n: Optional[int] = None,
        group_by: Optional[str] = None,
        group_value: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None
    ) -> Dict:
        """
        Calcula o ranking de colaboradores pela média das avaliações.

        Returns:
            Dict com a tabela do ranking, total de colaboradores e a
            pontuação acumulada dos primeiros colocados
        """
        df, _ = DataProcessor.prepare(evaluations, employees)
        df = DataProcessor.filter_evaluations(df, filters)

        ranking = kpi_helpers.calculate_employee_ranking(
            df,
            group_by=group_by,
            group_value=group_value,
            statuses=statuses
        )
        timeline = kpi_helpers.calculate_ranking_timeline(df, ranking, statuses=statuses)

        return {
            'ranking': view_models.ranking_table(ranking, top_n),
            'total_employees': len(ranking),
            'timeline': view_models.ranking_timeline_chart(timeline)
        }

    @staticmethod
    def calculate_behavioral(
        employees: Iterable[Any],
        evaluations: Optional[Iterable[Any]] = None,
        company_id: Optional[str] = None,
        group_by: Optional[str] = None,
        group_value: Optional[str] = None
    ) -> Dict:
        """
        Calcula estatísticas de perfil comportamental (DISC).

        Returns:
            Dict com gráficos e tabelas DISC
        """
        df, normalized = DataProcessor.prepare(evaluations, employees)

        stats = disc.calculate_disc_statistics(
            normalized,
            df,
            company_id=company_id,
            group_by=group_by,
            group_value=group_value
        )

        return view_models.behavioral_view(stats)

    @staticmethod
    def calculate_dashboard(
        evaluations: Iterable[Any],
        employees: Optional[Iterable[Any]] = None,
        filters: Any = None,
        target_score: Optional[float] = None,
        company_id: Optional[str] = None,
        top_n: Optional[int] = None
    ) -> Dict:
        """
        Calcula todas as visões do dashboard em uma única passada.

        Returns:
            Dict com KPIs, distribuições, matriz, evoluções, comparativo,
            ranking e perfil comportamental
        """
        df, normalized = DataProcessor.prepare(evaluations, employees)
        filtered = DataProcessor.filter_evaluations(df, filters)

        general = kpi_helpers.calculate_general_metrics(filtered, top_n)
        ranking = kpi_helpers.calculate_employee_ranking(filtered)

        return view_models.assemble_dashboard(
            general=general,
            matrix=kpi_helpers.calculate_competency_matrix(filtered),
            evolution=kpi_helpers.calculate_evolution(filtered, target_score),
            sector_evolution=kpi_helpers.calculate_sector_evolution(filtered),
            comparative=kpi_helpers.calculate_comparative_metrics(filtered, general),
            ranking=ranking,
            disc=disc.calculate_disc_statistics(normalized, df, company_id=company_id),
            level_evolution=kpi_helpers.calculate_level_evolution(filtered, target_score),
            ranking_timeline=kpi_helpers.calculate_ranking_timeline(filtered, ranking)
        )
