"""Elementor widget analysis models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

ControlDefault = str | int | bool | None


@dataclass(frozen=True)
class Control:
    """A control registered with ``$this->add_control()``."""

    id: str
    type: str | None = None
    label: str | None = None
    default: ControlDefault = None
    options: dict[str, str] = field(default_factory=dict)
    condition: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ControlSection:
    """A section opened with ``$this->start_controls_section()``."""

    id: str
    label: str | None = None
    tab: str | None = None


@dataclass(frozen=True)
class ElementorWidgetAnalysis:
    """What an Elementor widget class declares about itself."""

    is_elementor_widget: bool
    widget_name: str | None = None
    widget_title: str | None = None
    widget_icon: str | None = None
    widget_categories: tuple[str, ...] = ()
    controls: tuple[Control, ...] = ()
    control_sections: tuple[ControlSection, ...] = ()
    has_render_method: bool = False
    style_dependencies: tuple[str, ...] = ()
    script_dependencies: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in (
            "widget_categories",
            "controls",
            "control_sections",
            "style_dependencies",
            "script_dependencies",
        ):
            data[key] = list(data[key])
        return data
