"""
web/routes package
==================
Blueprint routes for main and budget
"""

from .main import main_bp
from .budget import budget_bp

__all__ = ['main_bp', 'budget_bp']
