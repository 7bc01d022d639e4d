"""
JSON-based project configuration for cad_svg.

Allows overriding default conversion values through:
1. .cadsvg.json file in the DXF file's directory
2. .cadsvg.json file in the current directory
3. ~/.cadsvg.json in the user's home directory
4. Explicit config file path via CLI

Configuration hierarchy (later overrides earlier):
1. Built-in defaults (config.py)
2. Config file found by find_config_file()
3. CLI arguments

Example .cadsvg.json:
{
    "conversion": {
        "reverse_y": true,
        "concentrate_inserts": false,
        "create_viewbox_from_model_space_extent": true
    },
    "attributes": {
        "stroke": "black",
        "stroke_width": 0.1,
        "fill": null
    },
    "dimensions": {
        "arrow_size": 2.5,
        "text_height": 2.5,
        "font_family": "Arial"
    },
    "output": {
        "prefix": "",
        "output_dir": "svg"
    }
}
"""

import json
import logging
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from cad_svg.config import (
    DIM_ARROW_SIZE,
    DIM_DECIMALS,
    DIM_EXTENSION_LINE_EXTENSION,
    DIM_EXTENSION_LINE_OFFSET,
    DIM_FONT_FAMILY,
    DIM_LINE_EXTENSION,
    DIM_TEXT_HEIGHT,
    DIM_TEXT_WIDTH_FACTOR,
    SVG_DEFAULT_FILL,
    SVG_DEFAULT_STROKE,
    SVG_DEFAULT_STROKE_WIDTH,
    SVG_PRECISION,
)

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILENAME = ".cadsvg.json"


@dataclass
class ConversionOptionsConfig:
    """Document-level conversion switches."""
    reverse_y: bool = True  # DXF is Y-up, SVG is Y-down
    concentrate_inserts: bool = False
    create_viewbox_from_model_space_extent: bool = True
    create_extra_group_for_free_elements: bool = False
    create_debug_points: bool = False


@dataclass
class AttributesConfig:
    """Global presentation attributes of the <svg> element (None = not set)."""
    stroke: Optional[str] = SVG_DEFAULT_STROKE
    stroke_width: Optional[float] = SVG_DEFAULT_STROKE_WIDTH
    fill: Optional[str] = SVG_DEFAULT_FILL


@dataclass
class DimensionsConfig:
    """Dimension style fallbacks, used where the document has no value."""
    arrow_size: float = DIM_ARROW_SIZE
    text_height: float = DIM_TEXT_HEIGHT
    extension_line_extension: float = DIM_EXTENSION_LINE_EXTENSION
    extension_line_offset: float = DIM_EXTENSION_LINE_OFFSET
    dimension_line_extension: float = DIM_LINE_EXTENSION
    decimals: int = DIM_DECIMALS
    font_family: str = DIM_FONT_FAMILY
    text_width_factor: float = DIM_TEXT_WIDTH_FACTOR


@dataclass
class OutputConfig:
    """Output file configuration."""
    prefix: str = ""
    suffix: str = ""
    output_dir: str = ""
    precision: int = SVG_PRECISION


_SECTIONS = {
    'conversion': ConversionOptionsConfig,
    'attributes': AttributesConfig,
    'dimensions': DimensionsConfig,
    'output': OutputConfig,
}


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    conversion: ConversionOptionsConfig = field(default_factory=ConversionOptionsConfig)
    attributes: AttributesConfig = field(default_factory=AttributesConfig)
    dimensions: DimensionsConfig = field(default_factory=DimensionsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from dictionary.

        Unknown sections and keys (including "_comment") are ignored.

        Raises:
            ValueError: If a section is not a JSON object
        """
        config = cls()

        for section_name in _SECTIONS:
            if section_name not in data:
                continue
            section_data = data[section_name]
            if not isinstance(section_data, dict):
                raise ValueError(
                    f"Config section '{section_name}' must be an object, "
                    f"got {type(section_data).__name__}"
                )
            section = getattr(config, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)

        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from JSON string."""
        data = json.loads(json_str)
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from JSON file.

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
    dxf_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find configuration file using search hierarchy.

    Search order:
    1. Explicit config path (if provided)
    2. .cadsvg.json in DXF file's directory
    3. .cadsvg.json in current working directory
    4. ~/.cadsvg.json in user's home directory

    Returns:
        Path to config file if found, None otherwise
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    if dxf_path:
        dxf_config = Path(dxf_path).parent / CONFIG_FILENAME
        if dxf_config.exists():
            return dxf_config

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_config(
    dxf_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration with fallback to defaults.

    A broken config file is reported and replaced by the defaults.
    """
    config_path = find_config_file(dxf_path, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, IOError, ValueError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations, with override taking precedence.

    Only values of override that differ from the built-in defaults are applied.
    """
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
    """Create a sample configuration file with documentation."""
    sample: Dict[str, Any] = {
        "_comment": "DXF to SVG converter configuration",
        "_version": "1.0",
    }
    comments = {
        'conversion': "Document conversion switches",
        'attributes': "Presentation attributes of the <svg> element (null = omit)",
        'dimensions': "Dimension style fallbacks (document DIMSTYLE wins)",
        'output': "Output file settings",
    }
    for section_name, section_cls in _SECTIONS.items():
        sample[section_name] = {"_comment": comments[section_name], **asdict(section_cls())}

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
