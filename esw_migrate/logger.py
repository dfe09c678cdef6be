"""
Модуль для настройки и управления логированием приложения.

Обеспечивает централизованную настройку логирования с ротацией файлов,
цветным выводом в консоль и различными уровнями детализации.
"""

import logging
import logging.handlers
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

try:
    from .config_loader import LoggingConfig
except ImportError:
    from config_loader import LoggingConfig


LOGGER_NAME = 'esw_migrator'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        if record.levelname in self.COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


class ArchiveMigratorLogger:
    """Класс для управления логированием миграции архива."""

    def __init__(self, config: LoggingConfig):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
        """
        self.config = config
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с файловым и консольным выводом."""
        self.logger = logging.getLogger(LOGGER_NAME)
        level = getattr(logging, self.config.level.upper())
        self.logger.setLevel(level)

        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        fmt = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        datefmt = '%Y-%m-%d %H:%M:%S'

        log_file_path = Path(self.config.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file_path,
            maxBytes=self.config.max_log_size * 1024 * 1024,  # MB -> байты
            backupCount=self.config.backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        file_handler.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(fmt=fmt, datefmt=datefmt))
        console_handler.setLevel(level)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def get_logger(self) -> logging.Logger:
        """
        Возвращает настроенный логгер.

        Returns:
            logging.Logger: Настроенный логгер
        """
        if self.logger is None:
            raise RuntimeError("Логгер не инициализирован")
        return self.logger

    def log_migration_start(self, input_root: Path, output_root: Path, total_descriptors: int) -> None:
        """
        Логирует начало прохода миграции.

        Args:
            input_root: Корень экспорта архива
            output_root: Корень результата
            total_descriptors: Найдено дескрипторов
        """
        self.logger.info("🚀 Начало миграции архива")
        self.logger.info(f"📁 Экспорт: {input_root}")
        self.logger.info(f"📂 Результат: {output_root}")
        self.logger.info(f"📊 Найдено дескрипторов: {total_descriptors}")

    def log_migration_end(self, stats: dict) -> None:
        """
        Логирует завершение прохода миграции.

        Args:
            stats: Статистика прохода (MigrationStats.to_dict())
        """
        self.logger.info("✅ Миграция завершена")
        self.logger.info("📊 Статистика:")
        self.logger.info(f"   • Обработано: {stats.get('processed', 0)}")
        self.logger.info(f"   • Папок: {stats.get('containers', 0)}")
        self.logger.info(f"   • Документов: {stats.get('documents', 0)}")
        self.logger.info(f"   • Скопировано: {stats.get('copied_files', 0)}")
        self.logger.info(f"   • Уже существовало: {stats.get('existing_files', 0)}")
        self.logger.info(f"   • Пропущено: {stats.get('skipped_records', 0)}")

    def log_pass_start(self, pass_number: int, total_passes: int) -> None:
        """Логирует начало очередного прохода."""
        self.logger.info(f"🔄 Проход {pass_number} из {total_passes}")

    def log_folder_processed(self, input_folder: Path, output_folder: Path) -> None:
        """
        Логирует обработку папки.

        Args:
            input_folder: Подпапка экспорта
            output_folder: Папка результата
        """
        self.logger.info(f"📁 Папка: {input_folder} → {output_folder}")

    def log_document_processed(self, source: Path, target: Path, copied: bool) -> None:
        """
        Логирует обработку документа.

        Args:
            source: Исходный файл
            target: Файл результата
            copied: True если файл скопирован, False если уже существовал
        """
        if copied:
            self.logger.info(f"📄 Файл: {source} → {target}")
        else:
            self.logger.info(f"⏭️ Файл уже существует: {target}")

    def log_empty_document(self, descriptor: Path) -> None:
        """Логирует дескриптор документа без расширения."""
        self.logger.warning(f"⚠️ Пустой документ (нет DOCEXT): {descriptor}")

    def log_missing_source(self, source: Path) -> None:
        """Логирует отсутствие исходного файла документа."""
        self.logger.error(f"❌ Исходный файл не найден: {source}")

    def log_timestamp_set(self, path: Path, stamp: date) -> None:
        """Логирует установку даты модификации."""
        self.logger.debug(f"🕒 Дата {stamp.isoformat()} установлена: {path}")

    def log_planned_unit(self, description: str) -> None:
        """Логирует действие в режиме dry-run."""
        self.logger.info(f"📝 [dry-run] {description}")

    def log_config_loaded(self, config_path: str) -> None:
        """
        Логирует успешную загрузку конфигурации.

        Args:
            config_path: Путь к файлу конфигурации
        """
        self.logger.info(f"⚙️ Конфигурация загружена из {config_path}")

    def log_file_operation(self, operation: str, file_path: Path, success: bool = True) -> None:
        """
        Логирует операцию с файлом.

        Args:
            operation: Тип операции (mkdir, copy, touch)
            file_path: Путь к файлу
            success: Успешность операции
        """
        status = "✅" if success else "❌"
        self.logger.debug(f"{status} {operation.upper()}: {file_path}")

    def log_system_info(self, info: str) -> None:
        """
        Логирует системную информацию.

        Args:
            info: Информационное сообщение
        """
        self.logger.info(f"ℹ️ {info}")

    def log_warning(self, message: str) -> None:
        """
        Логирует предупреждение.

        Args:
            message: Сообщение предупреждения
        """
        self.logger.warning(f"⚠️ {message}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")

    def log_finished_at(self) -> None:
        self.logger.info(f"⏰ Время завершения: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")


def setup_logger(config: LoggingConfig) -> logging.Logger:
    """
    Удобная функция для быстрой настройки логгера.

    Args:
        config: Конфигурация логирования

    Returns:
        logging.Logger: Настроенный логгер
    """
    migrator_logger = ArchiveMigratorLogger(config)
    return migrator_logger.get_logger()


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Получает логгер по имени.

    Args:
        name: Имя логгера

    Returns:
        logging.Logger: Логгер
    """
    return logging.getLogger(name)
