"""
Serviços de negócio
"""
from desempenho.services.data_processor import DataProcessor
from desempenho.services.kpi_calculator import KPICalculator

__all__ = ['DataProcessor', 'KPICalculator']
