"""
Встроенные значения по умолчанию для конвертера DXF → SVG.

Значения переопределяются через .cadsvg.json (см. project_config).
Размерные параметры соответствуют метрическому шаблону DIMSTYLE "ISO-25".
"""

# ---------------------------------------------------------------------------
# Размеры (DIMSTYLE по умолчанию, единицы чертежа)
# ---------------------------------------------------------------------------

DIM_ARROW_SIZE = 2.5               # DIMASZ
DIM_TEXT_HEIGHT = 2.5              # DIMTXT
DIM_EXTENSION_LINE_EXTENSION = 1.25  # DIMEXE
DIM_EXTENSION_LINE_OFFSET = 0.625    # DIMEXO
DIM_LINE_EXTENSION = 0.0           # DIMDLE
DIM_DECIMALS = 2                   # DIMDEC
DIM_FONT_FAMILY = "Arial"

# Множитель «размер шрифта → порог выноски»
DIM_TEXT_SIZE_FACTOR = 1.5
# Выноска строится, если текст смещён дальше LEADER_FACTOR * textSize
DIM_LEADER_FACTOR = 1.4
# Оценка ширины символа в долях высоты шрифта
DIM_TEXT_WIDTH_FACTOR = 0.6
# Ширина заполненной стрелки в долях её длины (раствор ≈ 20°)
DIM_ARROW_WIDTH_RATIO = 1.0 / 3.0
# Радиус точки-маркера в долях длины стрелки
DIM_DOT_RATIO = 0.25

# Шаблон текста размера: "<>" заменяется измеренным значением
DIM_MEASUREMENT_PLACEHOLDER = "<>"

# ---------------------------------------------------------------------------
# Геометрические допуски
# ---------------------------------------------------------------------------

GEOMETRY_EPSILON = 1e-9

# ---------------------------------------------------------------------------
# Вывод SVG
# ---------------------------------------------------------------------------

SVG_PRECISION = 4                  # знаков после запятой в координатах
SVG_DEFAULT_STROKE = "black"
SVG_DEFAULT_STROKE_WIDTH = 0.1
SVG_DEFAULT_FILL = "none"
SVG_DEBUG_POINT_RADIUS = 0.5

# Минимальное число сегментов при аппроксимации эллипсов
ELLIPSE_SEGMENTS = 64

# Максимальное отклонение ломаной от кривой при аппроксимации
FLATTENING_DISTANCE = 0.01
# Радиус точки (POINT)
SVG_POINT_RADIUS = 0.1
# Межстрочный интервал MTEXT в долях высоты
MTEXT_LINE_SPACING = 1.667
