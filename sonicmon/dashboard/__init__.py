"""
sonicmon Dashboard Module

Panel polling, series merging and page data for the SONiC dashboard.
All dashboard logic is contained in pure Python for easy debugging and maintenance.
"""

from .controller import DashboardController

__all__ = ["DashboardController"]
