"""
Загрузка DXF-документов через ezdxf.

Единственная ответственность: прочитать файл и вернуть ezdxf-документ
вместе с краткой сводкой (версия, число слоёв, блоков и объектов).
Разбор структуры документа целиком выполняет ezdxf.
"""

import logging
import os
from dataclasses import dataclass
from typing import Tuple

import ezdxf
from ezdxf import recover
from ezdxf.document import Drawing

logger = logging.getLogger(__name__)


@dataclass
class DXFInfo:
    """Metadata about a loaded DXF document."""
    filepath: str
    dxf_version: str
    file_size_bytes: int
    n_layers: int
    n_blocks: int
    n_modelspace_entities: int
    recovered: bool = False

    @property
    def file_size_kb(self) -> float:
        """File size in kilobytes."""
        return self.file_size_bytes / 1024


class DXFLoadError(Exception):
    """Ошибка при загрузке или разборе DXF-файла."""


def load_dxf(filepath: str, use_recover: bool = False) -> Tuple[Drawing, DXFInfo]:
    """Загрузить DXF-файл.

    Args:
        filepath: путь к файлу.
        use_recover: читать через ezdxf.recover (для повреждённых файлов);
            найденные и исправленные ошибки пишутся в лог.

    Returns:
        (doc, info)

    Raises:
        DXFLoadError: файл не найден, не читается или не является DXF.
    """
    if not os.path.isfile(filepath):
        raise DXFLoadError(f"Файл не найден: {filepath!r}")

    recovered = False
    try:
        if use_recover:
            doc, auditor = recover.readfile(filepath)
            if auditor.has_errors or auditor.has_fixes:
                recovered = True
                logger.warning(
                    "DXF восстановлен: %d ошибок, %d исправлений (%s)",
                    len(auditor.errors), len(auditor.fixes), filepath,
                )
        else:
            doc = ezdxf.readfile(filepath)
    except ezdxf.DXFStructureError as exc:
        raise DXFLoadError(f"Повреждённая структура DXF {filepath!r}: {exc}") from exc
    except IOError as exc:
        raise DXFLoadError(f"Не удалось прочитать файл {filepath!r}: {exc}") from exc

    msp = doc.modelspace()
    info = DXFInfo(
        filepath=filepath,
        dxf_version=doc.dxfversion,
        file_size_bytes=os.path.getsize(filepath),
        n_layers=len(doc.layers),
        n_blocks=len(doc.blocks),
        n_modelspace_entities=len(msp),
        recovered=recovered,
    )

    logger.info(
        "Загружен DXF %s: версия %s, слоёв %d, блоков %d, объектов %d (%.1f КБ)",
        os.path.basename(filepath), info.dxf_version, info.n_layers,
        info.n_blocks, info.n_modelspace_entities, info.file_size_kb,
    )
    return doc, info
