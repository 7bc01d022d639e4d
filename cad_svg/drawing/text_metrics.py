"""
Оценка размеров текста и форматирование размерных надписей.

Точных метрик шрифта конвертер не знает: ширина строки оценивается
как len(text) * height * width_factor (как фон размерной надписи
в svg_renderer), чего достаточно для раскладки размерной линии.
"""

from typing import Optional

from ezdxf.tools.text import plain_mtext

from cad_svg.config import (
    DIM_DECIMALS,
    DIM_MEASUREMENT_PLACEHOLDER,
    DIM_TEXT_WIDTH_FACTOR,
)


def text_size(text_height: float) -> float:
    """Размер шрифта (em) для заданной высоты текста DXF."""
    return float(text_height)


def estimate_text_length(
    text: str,
    text_height: float,
    width_factor: float = DIM_TEXT_WIDTH_FACTOR,
) -> float:
    """Оценить длину строки вдоль базовой линии.

    Args:
        text: строка (без MTEXT-разметки).
        text_height: высота шрифта.
        width_factor: ширина символа в долях высоты.

    Returns:
        Длина строки в единицах чертежа; 0 для пустой строки.
    """
    return len(text) * text_size(text_height) * width_factor


def format_measurement(
    value: float,
    decimals: int = DIM_DECIMALS,
    text_override: Optional[str] = None,
    suppress_trailing_zeros: bool = True,
) -> str:
    """Сформировать текст размера по правилам DXF.

    - None, "" или "<>" — измеренное значение;
    - строка с "<>" — значение подставляется вместо "<>";
    - " " (один пробел) — текст подавлен, возвращается "";
    - иначе — текст пользователя как есть (MTEXT-разметка снимается).

    Args:
        value: измеренное значение.
        decimals: число знаков после запятой (DIMDEC).
        text_override: текст размера из DXF (group code 1).
        suppress_trailing_zeros: убирать хвостовые нули ("12.50" → "12.5").

    Returns:
        Готовая строка надписи.
    """
    formatted = f"{abs(value):.{max(int(decimals), 0)}f}"
    if suppress_trailing_zeros and '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')

    if text_override is None or text_override == "":
        return formatted
    if text_override == " ":
        return ""

    text = plain_mtext(text_override)
    return text.replace(DIM_MEASUREMENT_PLACEHOLDER, formatted)
