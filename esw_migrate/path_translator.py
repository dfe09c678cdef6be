"""
Таблица соответствия каталогов экспорта каталогам результата.

Создается заново на каждый проход миграции и только растет.
"""

import os
from pathlib import Path
from typing import Dict, Union

PathLike = Union[str, Path]


class UnresolvedParentError(Exception):
    """Каталог экспорта еще не сопоставлен каталогу результата."""

    def __init__(self, input_dir: Path):
        self.input_dir = input_dir
        super().__init__(f"Нет соответствия для каталога экспорта: {input_dir}")


def _normalize(path: PathLike) -> Path:
    return Path(os.path.abspath(path))


class PathTranslator:
    """Отображение каталог экспорта -> каталог результата."""

    def __init__(self, input_root: PathLike, output_root: PathLike):
        """
        Args:
            input_root: Корень экспорта
            output_root: Корень результата
        """
        self._mapping: Dict[Path, Path] = {}
        self.record(input_root, output_root)

    def resolve(self, input_dir: PathLike) -> Path:
        """
        Возвращает каталог результата для каталога экспорта.

        Raises:
            UnresolvedParentError: Если каталог еще не записан
        """
        key = _normalize(input_dir)
        try:
            return self._mapping[key]
        except KeyError:
            raise UnresolvedParentError(key) from None

    def record(self, input_dir: PathLike, output_dir: PathLike) -> None:
        """Записывает соответствие. Существующая запись перезаписывается."""
        self._mapping[_normalize(input_dir)] = _normalize(output_dir)

    def __contains__(self, input_dir: PathLike) -> bool:
        return _normalize(input_dir) in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)
