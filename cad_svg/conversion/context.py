"""
Conversion context shared by all entity converters of one document.

The context is created once per document and passed explicitly to every
converter; there is no module-level state.

Contents:
- ConversionOptions - document-level switches (from ProjectConfig.conversion)
- ConversionInfo    - conversion log and entity counters
- DefsCollection    - append-only, insertion-ordered <defs> items
- ViewboxData       - viewBox of the output document
- ConversionContext - everything above plus presentation attributes and
                      dimension defaults
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from cad_svg.config import SVG_PRECISION
from cad_svg.drawing.dimensions.definition import DimensionStyleProperties
from cad_svg.project_config import (
    AttributesConfig,
    DimensionsConfig,
    ProjectConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionOptions:
    """Document-level conversion switches.

    Attributes:
        reverse_y: Flip the drawing vertically (DXF is Y-up, SVG is Y-down).
        concentrate_inserts: Move all <use> elements of INSERTs to the end.
        create_viewbox_from_model_space_extent: Set viewBox from $EXTMIN/$EXTMAX.
        create_extra_group_for_free_elements: Put model space entities into a
            "_free" block and reference it with a single <use>.
        create_debug_points: Mark dimension text middle points with red dots.
    """
    reverse_y: bool = True
    concentrate_inserts: bool = False
    create_viewbox_from_model_space_extent: bool = True
    create_extra_group_for_free_elements: bool = False
    create_debug_points: bool = False

    @classmethod
    def from_config(cls, config: ProjectConfig) -> 'ConversionOptions':
        c = config.conversion
        return cls(
            reverse_y=bool(c.reverse_y),
            concentrate_inserts=bool(c.concentrate_inserts),
            create_viewbox_from_model_space_extent=bool(c.create_viewbox_from_model_space_extent),
            create_extra_group_for_free_elements=bool(c.create_extra_group_for_free_elements),
            create_debug_points=bool(c.create_debug_points),
        )


@dataclass
class ConversionInfo:
    """Conversion log and counters for one document."""
    messages: List[str] = field(default_factory=list)
    total_entities: int = 0
    successful_entity_conversions: int = 0
    failed_entity_conversions: int = 0
    skipped_by_type: Counter = field(default_factory=Counter)

    def log(self, message: str) -> None:
        """Append a message to the conversion log and forward it to logging."""
        self.messages.append(message)
        logger.info(message)

    def count_success(self) -> None:
        self.total_entities += 1
        self.successful_entity_conversions += 1

    def count_failure(self) -> None:
        self.total_entities += 1
        self.failed_entity_conversions += 1

    def count_skipped(self, dxftype: str) -> None:
        self.total_entities += 1
        self.skipped_by_type[dxftype] += 1

    @property
    def skipped_entities(self) -> int:
        return sum(self.skipped_by_type.values())

    def summary(self) -> str:
        return (
            f"Converted {self.successful_entity_conversions} of "
            f"{self.total_entities} entities"
        )

    def to_dict(self) -> Dict:
        return {
            'total_entities': self.total_entities,
            'successful_entity_conversions': self.successful_entity_conversions,
            'failed_entity_conversions': self.failed_entity_conversions,
            'skipped_by_type': dict(self.skipped_by_type),
            'messages': list(self.messages),
        }


class DefsCollection:
    """Append-only, insertion-ordered collection of reusable <defs> items.

    Items are never removed or replaced: adding an id that is already
    present keeps the first element.
    """

    def __init__(self):
        self._items: Dict[str, object] = {}

    def add(self, item_id: str, element) -> bool:
        """Add an element; return False if the id is already taken."""
        if item_id in self._items:
            logger.debug("Defs item %s already present, keeping the first one", item_id)
            return False
        self._items[item_id] = element
        return True

    def get(self, item_id: str):
        return self._items.get(item_id)

    def first_id(self) -> Optional[str]:
        return next(iter(self._items), None)

    def ids(self) -> List[str]:
        return list(self._items)

    def __contains__(self, item_id) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Tuple[str, object]]:
        return iter(list(self._items.items()))


@dataclass
class ViewboxData:
    """viewBox of the output document in drawing units (Y-up)."""
    min_x: float = 0.0
    min_y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    enabled: bool = False

    def set_extents(self, min_x: float, min_y: float, max_x: float, max_y: float) -> None:
        self.min_x = float(min_x)
        self.min_y = float(min_y)
        self.width = float(max_x) - float(min_x)
        self.height = float(max_y) - float(min_y)
        self.enabled = True

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_svg_viewbox(self, reverse_y: bool) -> Tuple[float, float, float, float]:
        """viewBox tuple in SVG coordinates.

        With reverse_y the drawing is flipped by scale(1,-1), so the
        visible Y range is [-(min_y + height), -min_y].
        """
        y = -(self.min_y + self.height) if reverse_y else self.min_y
        return (self.min_x, y, self.width, self.height)


@dataclass
class ConversionContext:
    """State shared by all converters of one document."""
    options: ConversionOptions = field(default_factory=ConversionOptions)
    attributes: AttributesConfig = field(default_factory=AttributesConfig)
    dimensions: DimensionsConfig = field(default_factory=DimensionsConfig)
    precision: int = SVG_PRECISION
    info: ConversionInfo = field(default_factory=ConversionInfo)
    defs: DefsCollection = field(default_factory=DefsCollection)
    viewbox: ViewboxData = field(default_factory=ViewboxData)

    @classmethod
    def from_config(cls, config: Optional[ProjectConfig] = None) -> 'ConversionContext':
        """Create a fresh context from a project configuration."""
        config = config or ProjectConfig()
        return cls(
            options=ConversionOptions.from_config(config),
            attributes=config.attributes,
            dimensions=config.dimensions,
            precision=int(config.output.precision),
        )

    def default_dimension_style(self) -> DimensionStyleProperties:
        """Dimension style used where the document has no value."""
        return DimensionStyleProperties.from_config(self.dimensions)
