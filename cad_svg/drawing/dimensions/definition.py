"""
Входные данные линейного размера: определение и размерный стиль.

  - DimensionDefinition       — точки и значение одного размера
  - DimensionStyleProperties  — разрешённые параметры DIMSTYLE
  - TextMovement              — политика перемещения текста (DIMTMOVE)

Оба класса неизменяемы и строятся из ezdxf-объекта DIMENSION
(from_entity) или напрямую (тесты, внешние источники).
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ezdxf.math import Vec2

from cad_svg.config import (
    DIM_ARROW_SIZE,
    DIM_DECIMALS,
    DIM_EXTENSION_LINE_EXTENSION,
    DIM_EXTENSION_LINE_OFFSET,
    DIM_LINE_EXTENSION,
    DIM_MEASUREMENT_PLACEHOLDER,
    DIM_TEXT_HEIGHT,
)
from cad_svg.drawing.dimensions.geometry import DimensionError, InvalidStyleError
from cad_svg.drawing.dimensions.solver import unit
from cad_svg.drawing.text_metrics import format_measurement

# Значения dimtype & 7 для линейных размеров
DIMTYPE_ROTATED = 0
DIMTYPE_ALIGNED = 1
LINEAR_DIMTYPES = (DIMTYPE_ROTATED, DIMTYPE_ALIGNED)


class TextMovement(Enum):
    """Что происходит при перемещении размерного текста (DIMTMOVE)."""
    MOVE_DIM_LINE_WITH_TEXT = 0
    ADD_LEADER_WHEN_TEXT_MOVED = 1
    MOVE_TEXT_FREELY = 2

    @classmethod
    def from_value(cls, value) -> 'TextMovement':
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise InvalidStyleError(f"Недопустимое значение DIMTMOVE: {value!r}") from None


@dataclass(frozen=True)
class DimensionDefinition:
    """Определение линейного размера.

    Attributes:
        first_point: первая измеряемая точка (DXF 13).
        second_point: вторая измеряемая точка (DXF 14).
        definition_point: точка на размерной линии (DXF 10).
        measurement: значение размера (длина размерной линии).
        text_middle_point: центр текста (DXF 11); None — середина размерной линии.
        text_rotation: дополнительный поворот текста, градусы (DXF 53).
        text: готовая строка надписи.
        dimension_type: dimtype & 7 (0 — повёрнутый, 1 — параллельный).
        attachment_point: точка привязки текста (DXF 71), не используется.
        rotation: угол повёрнутого размера (DXF 50), не используется.
        horizontal_direction: DXF 51, не используется.
        ext_line_rotation: наклон выносных линий (DXF 52), не используется.
    """
    first_point: Vec2
    second_point: Vec2
    definition_point: Vec2
    measurement: float
    text_middle_point: Optional[Vec2] = None
    text_rotation: float = 0.0
    text: str = ""
    dimension_type: int = DIMTYPE_ALIGNED
    attachment_point: int = 5
    rotation: float = 0.0
    horizontal_direction: float = 0.0
    ext_line_rotation: float = 0.0

    @classmethod
    def from_entity(cls, dim, decimals: int = DIM_DECIMALS) -> 'DimensionDefinition':
        """Построить определение из ezdxf-объекта DIMENSION.

        Точка определения переносится вдоль размерной линии на вторую
        выносную линию, на какой бы выносной её ни записал файл.

        Raises:
            DimensionError: размер не линейный или p1 совпадает с p2
                у параллельного размера.
        """
        dimtype = dim.dimtype
        if dimtype not in LINEAR_DIMTYPES:
            raise DimensionError(f"Размер типа {dimtype} не является линейным")

        dxf = dim.dxf
        p1 = Vec2(dxf.get('defpoint2', (0.0, 0.0, 0.0)))
        p2 = Vec2(dxf.get('defpoint3', (0.0, 0.0, 0.0)))
        dp = Vec2(dxf.get('defpoint', (0.0, 0.0, 0.0)))
        rotation = float(dxf.get('angle', 0.0))

        if dimtype == DIMTYPE_ALIGNED:
            measurement = p1.distance(p2)
            direction = unit(p2 - p1, "p2 - p1")
        else:
            direction = Vec2.from_deg_angle(rotation)
            measurement = abs((p2 - p1).dot(direction))

        # ezdxf хранит в defpoint точку на первой выносной линии;
        # раскладке нужна точка на второй
        dp = dp + direction * direction.dot(p2 - dp)

        text_mid = dxf.get('text_midpoint')
        text_override = dxf.get('text', DIM_MEASUREMENT_PLACEHOLDER)

        return cls(
            first_point=p1,
            second_point=p2,
            definition_point=dp,
            measurement=measurement,
            text_middle_point=Vec2(text_mid) if text_mid is not None else None,
            text_rotation=float(dxf.get('text_rotation', 0.0)),
            text=format_measurement(measurement, decimals, text_override),
            dimension_type=dimtype,
            attachment_point=int(dxf.get('attachment_point', 5)),
            rotation=rotation,
            horizontal_direction=float(dxf.get('horizontal_direction', 0.0)),
            ext_line_rotation=float(dxf.get('oblique_angle', 0.0)),
        )


@dataclass(frozen=True)
class DimensionStyleProperties:
    """Параметры размерного стиля, нужные раскладке.

    Все длины уже умножены на DIMSCALE.

    Attributes:
        extension_line_extension: вылет выносной за размерную линию (DIMEXE).
        extension_line_offset: отступ выносной от измеряемой точки (DIMEXO).
        dimension_line_extension: вылет размерной линии за выносные (DIMDLE).
        arrow_size: длина стрелки (DIMASZ).
        arrow_head_block1, arrow_head_block2: формы стрелок (DIMBLK1/2).
        text_height: высота текста (DIMTXT).
        text_movement: политика перемещения текста (DIMTMOVE).
        text_vertical_alignment: DIMTAD, не используется.
        text_vertical_position: DIMTVP, не используется.
        dimension_scale: DIMSCALE, уже учтён в длинах.
        decimals: DIMDEC.
    """
    extension_line_extension: float = DIM_EXTENSION_LINE_EXTENSION
    extension_line_offset: float = DIM_EXTENSION_LINE_OFFSET
    dimension_line_extension: float = DIM_LINE_EXTENSION
    arrow_size: float = DIM_ARROW_SIZE
    arrow_head_block1: str = ""
    arrow_head_block2: str = ""
    text_height: float = DIM_TEXT_HEIGHT
    text_movement: TextMovement = TextMovement.MOVE_DIM_LINE_WITH_TEXT
    text_vertical_alignment: int = 0
    text_vertical_position: float = 0.0
    dimension_scale: float = 1.0
    decimals: int = DIM_DECIMALS

    def validate(self) -> 'DimensionStyleProperties':
        """Проверить область значений; вернуть self.

        Значения не подрезаются: «исправленный» стиль дал бы
        неверный, но внешне успешный чертёж.

        Raises:
            InvalidStyleError: значение вне допустимой области.
        """
        for name in ('extension_line_extension', 'extension_line_offset',
                     'dimension_line_extension', 'arrow_size', 'text_height',
                     'dimension_scale'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidStyleError(f"{name} должно быть конечным числом, получено {value!r}")

        if self.arrow_size < 0:
            raise InvalidStyleError(f"arrow_size < 0: {self.arrow_size}")
        if self.text_height < 0:
            raise InvalidStyleError(f"text_height < 0: {self.text_height}")
        if self.dimension_scale <= 0:
            raise InvalidStyleError(f"dimension_scale <= 0: {self.dimension_scale}")
        if not isinstance(self.text_movement, TextMovement):
            raise InvalidStyleError(f"Недопустимая политика текста: {self.text_movement!r}")
        return self

    @classmethod
    def from_config(cls, dimensions_config) -> 'DimensionStyleProperties':
        """Стиль по умолчанию из секции "dimensions" конфигурации."""
        return cls(
            extension_line_extension=dimensions_config.extension_line_extension,
            extension_line_offset=dimensions_config.extension_line_offset,
            dimension_line_extension=dimensions_config.dimension_line_extension,
            arrow_size=dimensions_config.arrow_size,
            text_height=dimensions_config.text_height,
            decimals=dimensions_config.decimals,
        )

    @classmethod
    def from_entity(cls, dim, fallback: Optional['DimensionStyleProperties'] = None
                    ) -> 'DimensionStyleProperties':
        """Разрешить стиль ezdxf-объекта DIMENSION (DIMSTYLE + переопределения).

        Args:
            dim: ezdxf Dimension.
            fallback: значения для атрибутов, которых нет ни в
                переопределениях, ни в DIMSTYLE.
        """
        base = fallback or cls()
        override = dim.override()

        def get(name: str, default):
            value = override.get(name, default)
            return default if value is None else value

        scale = float(get('dimscale', 1.0)) or 1.0

        if get('dimsah', 0):
            block1 = str(get('dimblk1', ''))
            block2 = str(get('dimblk2', ''))
        else:
            block1 = block2 = str(get('dimblk', ''))

        return cls(
            extension_line_extension=float(get('dimexe', base.extension_line_extension)) * scale,
            extension_line_offset=float(get('dimexo', base.extension_line_offset)) * scale,
            dimension_line_extension=float(get('dimdle', base.dimension_line_extension)) * scale,
            arrow_size=float(get('dimasz', base.arrow_size)) * scale,
            arrow_head_block1=block1,
            arrow_head_block2=block2,
            text_height=float(get('dimtxt', base.text_height)) * scale,
            text_movement=TextMovement.from_value(get('dimtmove', base.text_movement.value)),
            text_vertical_alignment=int(get('dimtad', 0)),
            text_vertical_position=float(get('dimtvp', 0.0)),
            dimension_scale=scale,
            decimals=int(get('dimdec', base.decimals)),
        )
