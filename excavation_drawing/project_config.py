"""
JSON-based project configuration for excavation_drawing.

Config file lookup (first match is used, files are never merged):
1. Explicit config file path
2. Project config (./.geoviz.json)
3. User config (~/.geoviz.json)
4. Built-in defaults (config.py) when no file is found

Example .geoviz.json:
{
    "report": {
        "title": "GeoViz Dynamic",
        "filename_prefix": "GeoViz_Scavo"
    },
    "page": {
        "margin_mm": 15.0,
        "flat_margin_factor": 0.9
    },
    "overlap": {
        "min_draw_mm": 2.0,
        "min_label_mm": 6.0
    },
    "colors": {
        "bottom": "#3b82f6",
        "sides_long": "#ef4444",
        "sides_short": "#10b981",
        "sfido": "#f59e0b"
    },
    "output": {
        "formats": ["pdf", "dxf"],
        "output_dir": "reports"
    }
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from excavation_drawing.config import (
    DEFAULT_COLORS,
    FILENAME_PREFIX,
    FLAT_MARGIN_FACTOR,
    FLAT_MAX_DRAW_HEIGHT_MM,
    ISO_MARGIN_FACTOR,
    MARGIN_FACTOR_RANGE,
    PAGE_MARGIN_MM,
    REPORT_SUBTITLE_FLAT,
    REPORT_SUBTITLE_ISO,
    REPORT_TITLE,
    STRIP_MIN_DRAW_MM,
    STRIP_MIN_LABEL_MM,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".geoviz.json"

SUPPORTED_FORMATS = ("pdf", "svg", "dxf")


@dataclass
class ReportConfig:
    """Header texts and file naming."""
    title: str = REPORT_TITLE
    subtitle_flat: str = REPORT_SUBTITLE_FLAT
    subtitle_iso: str = REPORT_SUBTITLE_ISO
    filename_prefix: str = FILENAME_PREFIX


@dataclass
class PageConfig:
    """Page layout parameters (mm)."""
    margin_mm: float = PAGE_MARGIN_MM
    flat_max_height_mm: float = FLAT_MAX_DRAW_HEIGHT_MM
    flat_margin_factor: float = FLAT_MARGIN_FACTOR
    iso_margin_factor: float = ISO_MARGIN_FACTOR


@dataclass
class OverlapConfig:
    """Visibility thresholds for overlap strips (scaled page mm)."""
    min_draw_mm: float = STRIP_MIN_DRAW_MM
    min_label_mm: float = STRIP_MIN_LABEL_MM


@dataclass
class ColorsConfig:
    """Default surface colors (#RRGGBB)."""
    bottom: str = DEFAULT_COLORS['bottom']
    sides_long: str = DEFAULT_COLORS['sides_long']
    sides_short: str = DEFAULT_COLORS['sides_short']
    sfido: str = DEFAULT_COLORS['sfido']


@dataclass
class OutputConfig:
    """Output files produced by an export."""
    formats: List[str] = field(default_factory=lambda: ["pdf"])
    output_dir: str = ""


_SECTIONS = {
    'report': ReportConfig,
    'page': PageConfig,
    'overlap': OverlapConfig,
    'colors': ColorsConfig,
    'output': OutputConfig,
}


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    report: ReportConfig = field(default_factory=ReportConfig)
    page: PageConfig = field(default_factory=PageConfig)
    overlap: OverlapConfig = field(default_factory=OverlapConfig)
    colors: ColorsConfig = field(default_factory=ColorsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def __post_init__(self) -> None:
        self._clamp_margin_factor()

    def _clamp_margin_factor(self) -> None:
        lo, hi = MARGIN_FACTOR_RANGE
        factor = self.page.flat_margin_factor
        if not lo <= factor <= hi:
            clamped = min(max(factor, lo), hi)
            logger.warning(
                "flat_margin_factor %.3f outside [%.2f, %.2f], using %.2f",
                factor, lo, hi, clamped,
            )
            self.page.flat_margin_factor = clamped

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from a dictionary.

        Unknown sections and keys (including ``_comment`` entries) are
        ignored; output formats are lower-cased and filtered to the
        supported set.
        """
        config = cls()

        for section_name in _SECTIONS:
            if section_name not in data:
                continue
            section = getattr(config, section_name)
            for key, value in data[section_name].items():
                if hasattr(section, key) and not key.startswith('_'):
                    setattr(section, key, value)

        formats = [str(f).lower() for f in config.output.formats]
        unknown = [f for f in formats if f not in SUPPORTED_FORMATS]
        if unknown:
            logger.warning("Ignoring unsupported output formats: %s", unknown)
        config.output.formats = [f for f in formats if f in SUPPORTED_FORMATS] or ["pdf"]

        config._clamp_margin_factor()
        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find the configuration file.

    Search order:
    1. Explicit config path (if provided)
    2. .geoviz.json in the current working directory
    3. ~/.geoviz.json

    Returns:
        Path to config file if found, None otherwise
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_config(
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration, falling back to defaults when none is found."""
    config_path = find_config_file(explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations; non-default values of ``override`` win."""
    merged = ProjectConfig.from_dict(base.to_dict())

    for section_name, section_cls in _SECTIONS.items():
        defaults = section_cls()
        override_section = getattr(override, section_name)
        merged_section = getattr(merged, section_name)
        for f in fields(section_cls):
            value = getattr(override_section, f.name)
            if value != getattr(defaults, f.name):
                setattr(merged_section, f.name, value)

    return merged


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> None:
    """Write a documented sample configuration file."""
    sample: Dict[str, Any] = {"_comment": "GeoViz excavation report configuration", "_version": "1.0"}
    sample.update(ProjectConfig().to_dict())
    sample['overlap']['_comment'] = "Strips narrower than min_draw_mm on the page are not drawn"
    sample['output']['_comment'] = "Formats: pdf (always two pages), svg (one file per page), dxf (1:1 cutting pattern)"

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
