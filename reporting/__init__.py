"""
Reporting of simulation results.
"""

from .data_export import StatisticsReporter

__all__ = ['StatisticsReporter']
