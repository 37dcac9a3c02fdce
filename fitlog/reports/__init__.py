# -*- coding: utf-8 -*-
"""
Weekly / monthly training reports
"""

from .generator import generate_dashboard_summary, generate_monthly_report, generate_weekly_report
from .models import DashboardSummary, MonthlyReport, WeeklyReport

__all__ = [
    'generate_weekly_report',
    'generate_monthly_report',
    'generate_dashboard_summary',
    'WeeklyReport',
    'MonthlyReport',
    'DashboardSummary',
]
