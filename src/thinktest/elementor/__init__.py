"""Elementor widget analysis."""

from thinktest.elementor.analyzer import analyze_elementor_widget, is_elementor_widget
from thinktest.elementor.models import Control, ControlSection, ElementorWidgetAnalysis

__all__ = [
    "Control",
    "ControlSection",
    "ElementorWidgetAnalysis",
    "analyze_elementor_widget",
    "is_elementor_widget",
]
