"""
SmartHome BOQ Core Package
Bill-of-Quantities and Quotation Engine for home-automation projects
"""

__version__ = "0.1.0"
__author__ = "SmartHome Integrations Development Team"

from . import engine
from . import infra

__all__ = ["engine", "infra"]
