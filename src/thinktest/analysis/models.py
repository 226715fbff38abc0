"""Analysis data models — immutable results produced once per analysis call."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields


class AnalysisMethod(enum.Enum):
    """How the facts of a result were obtained."""

    AST = "ast"
    REGEX_FALLBACK = "regex_fallback"


class DbCategory(enum.Enum):
    """Category of a database operation."""

    OPTIONS = "options"
    POSTS = "posts"
    USERS = "users"
    METADATA = "metadata"
    DIRECT_DATABASE = "direct_database"
    GENERAL = "general"


class SecurityCategory(enum.Enum):
    """Category of a security-related call."""

    NONCE_VERIFICATION = "nonce_verification"
    DATA_SANITIZATION = "data_sanitization"
    OUTPUT_ESCAPING = "output_escaping"
    AUTHORIZATION = "authorization"
    GENERAL_SECURITY = "general_security"


class Priority(enum.Enum):
    """Priority of a test recommendation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class NamedLocation:
    """A function or class declaration site."""

    name: str
    line: int


@dataclass(frozen=True)
class PatternHit:
    """A raw call to one of the core WordPress API functions."""

    function: str
    line: int
    type: str = "hook"


@dataclass(frozen=True)
class HookCall:
    """An ``add_action`` or ``add_filter`` registration."""

    name: str
    callback: str
    line: int
    priority: int = 10


@dataclass(frozen=True)
class AjaxHandler:
    """A ``wp_ajax_*`` action registration."""

    action: str
    hook: str
    callback: str
    line: int
    is_public: bool = False


@dataclass(frozen=True)
class RestEndpoint:
    """A ``register_rest_route`` call."""

    namespace: str
    route: str
    line: int
    methods: tuple[str, ...] = ("GET",)


@dataclass(frozen=True)
class DbOperation:
    """A call into the WordPress data layer or a ``$wpdb`` reference."""

    type: str
    category: DbCategory
    line: int


@dataclass(frozen=True)
class SecurityHit:
    """A call to a nonce, sanitization, escaping or capability function."""

    type: str
    category: SecurityCategory
    line: int


@dataclass(frozen=True)
class Recommendation:
    """A qualitative suggestion for what the generated suite should cover."""

    type: str
    description: str
    priority: Priority


@dataclass(frozen=True)
class AnalysisRules:
    """Which fact categories the analyzer reports."""

    detect_hooks: bool = True
    detect_filters: bool = True
    detect_ajax_handlers: bool = True
    detect_rest_endpoints: bool = True
    detect_database: bool = True
    detect_security: bool = True

    @classmethod
    def from_mapping(cls, data: dict) -> AnalysisRules:
        known = {f.name for f in fields(cls)}
        return cls(**{k: bool(v) for k, v in data.items() if k in known})


@dataclass(frozen=True)
class AnalysisResult:
    """Top-level output of a plugin analysis."""

    filename: str
    analysis_method: AnalysisMethod = AnalysisMethod.AST
    wordpress_patterns: tuple[PatternHit, ...] = ()
    functions: tuple[NamedLocation, ...] = ()
    classes: tuple[NamedLocation, ...] = ()
    hooks: tuple[HookCall, ...] = ()
    filters: tuple[HookCall, ...] = ()
    ajax_handlers: tuple[AjaxHandler, ...] = ()
    rest_endpoints: tuple[RestEndpoint, ...] = ()
    database_operations: tuple[DbOperation, ...] = ()
    security_patterns: tuple[SecurityHit, ...] = ()
    test_recommendations: tuple[Recommendation, ...] = field(default=())
    parsed_file_count: int | None = None
    failed_file_count: int | None = None

    @property
    def is_multi_file(self) -> bool:
        return self.parsed_file_count is not None

    def to_dict(self) -> dict:
        """Return a JSON-serialisable mapping of this result."""
        data = _to_jsonable(self)
        if not self.is_multi_file:
            del data["parsed_file_count"]
            del data["failed_file_count"]
        return data


def _to_jsonable(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, tuple):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    return value
