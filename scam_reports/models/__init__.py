# Imported by migrations/env.py so Alembic sees every table
from .base import Base
from .report import Report, ReportStatus

__all__ = ["Base", "Report", "ReportStatus"]
