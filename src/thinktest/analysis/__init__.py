"""WordPress plugin analysis engine."""

from thinktest.analysis.engine import PluginAnalyzer, analyze_plugin
from thinktest.analysis.models import AnalysisMethod, AnalysisResult, AnalysisRules

__all__ = [
    "AnalysisMethod",
    "AnalysisResult",
    "AnalysisRules",
    "PluginAnalyzer",
    "analyze_plugin",
]
