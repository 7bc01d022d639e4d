"""
cad_svg — преобразование DXF-чертежей в SVG.

Основной пайплайн запускается через main.py, пакетный — через
cad_svg.batch.
"""

from cad_svg.logging_config import (
    setup_logging,
    configure_default_logging,
    log_timing,
    LogContext,
)

__all__ = [
    "setup_logging",
    "configure_default_logging",
    "log_timing",
    "LogContext",
]
