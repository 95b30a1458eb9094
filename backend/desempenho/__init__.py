"""
Motor de análises do dashboard de avaliação de desempenho
"""
__version__ = "1.0.0"
