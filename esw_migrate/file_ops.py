"""
Модуль для операций с файловой системой.

Поиск дескрипторов, создание каталогов, копирование документов
и установка дат модификации.
"""

import os
import shutil
import time
from datetime import date
from pathlib import Path
from typing import List

try:
    from .logger import ArchiveMigratorLogger
except ImportError:
    from logger import ArchiveMigratorLogger


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""
    pass


def midnight_timestamp(stamp: date) -> float:
    """Возвращает POSIX-время полуночи (локальное время) указанной даты."""
    return time.mktime((stamp.year, stamp.month, stamp.day, 0, 0, 0, 0, 0, -1))


def path_depth(path: Path) -> int:
    """Глубина пути: количество разделителей."""
    return str(path).count(os.sep)


class FileOps:
    """Класс для операций с файловой системой."""

    def __init__(self, logger: ArchiveMigratorLogger, dry_run: bool = False):
        """
        Инициализация операций с файлами.

        Args:
            logger: Логгер для записи операций
            dry_run: Не изменять файловую систему
        """
        self.logger = logger
        self.dry_run = dry_run

    def find_descriptors(self, root: Path, pattern: str = "*.ESW") -> List[Path]:
        """
        Находит все дескрипторы под корнем экспорта на любой глубине.

        Args:
            root: Корень экспорта
            pattern: Шаблон имени дескриптора

        Returns:
            List[Path]: Абсолютные пути дескрипторов
        """
        root = Path(os.path.abspath(root))
        return sorted(p for p in root.rglob(pattern) if p.is_file())

    def ensure_directory(self, path: Path) -> bool:
        """
        Создает каталог если он не существует.

        Returns:
            bool: True если каталог был создан

        Raises:
            FileOperationError: Если создать каталог не удалось
        """
        if path.is_dir():
            return False
        if self.dry_run:
            return True

        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.log_file_operation("mkdir", path, False)
            raise FileOperationError(f"Ошибка создания каталога {path}: {e}") from e

        self.logger.log_file_operation("mkdir", path, True)
        return True

    def copy_file(self, source: Path, target: Path) -> None:
        """
        Копирует файл (содержимое и права).

        Raises:
            FileOperationError: Если копирование не удалось
        """
        if self.dry_run:
            return

        try:
            shutil.copy(str(source), str(target))
        except OSError as e:
            self.logger.log_file_operation("copy", target, False)
            raise FileOperationError(f"Ошибка копирования {source} -> {target}: {e}") from e

        self.logger.log_file_operation("copy", target, True)

    def set_timestamp(self, path: Path, stamp: date) -> None:
        """
        Устанавливает время доступа и модификации на полночь даты.

        Raises:
            FileOperationError: Если установить время не удалось
        """
        if self.dry_run:
            return

        ts = midnight_timestamp(stamp)
        try:
            os.utime(path, (ts, ts))
        except OSError as e:
            self.logger.log_file_operation("touch", path, False)
            raise FileOperationError(f"Ошибка установки даты {path}: {e}") from e

        self.logger.log_timestamp_set(path, stamp)

    def count_output_entries(self, root: Path) -> dict:
        """
        Считает каталоги и файлы под корнем результата.

        Returns:
            dict: {'directories': int, 'files': int}
        """
        stats = {'directories': 0, 'files': 0}
        if not root.is_dir():
            return stats

        for entry in root.rglob("*"):
            if entry.is_dir():
                stats['directories'] += 1
            elif entry.is_file():
                stats['files'] += 1
        return stats
