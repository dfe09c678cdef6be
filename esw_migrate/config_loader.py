"""
Модуль для загрузки и валидации конфигурации приложения.

Обеспечивает централизованную загрузку параметров из config/settings.ini
с валидацией и удобным доступом к настройкам.
"""

import codecs
import configparser
from pathlib import Path
from typing import Optional
from dataclasses import dataclass


@dataclass
class PathsConfig:
    """Конфигурация путей к экспорту и результату."""
    input_root: Path
    output_root: Path


@dataclass
class MigratorConfig:
    """Конфигурация параметров миграции."""
    descriptor_pattern: str = "*.ESW"
    metadata_encoding: str = "cp1252"
    passes: int = 1
    defer_folder_timestamps: bool = False


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str
    log_file: Path
    max_log_size: int
    backup_count: int


@dataclass
class Config:
    """Основная конфигурация приложения."""
    paths: PathsConfig
    migrator: MigratorConfig
    logging: LoggingConfig


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""

    def __init__(self, config_path: str = "config/settings.ini"):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу конфигурации
        """
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """
        Загружает конфигурацию из файла.

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если файл конфигурации не найден
            ValueError: Если конфигурация некорректна
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")

        config_parser = configparser.ConfigParser()
        config_parser.read(self.config_path, encoding='utf-8')

        try:
            self._config = Config(
                paths=self._load_paths_config(config_parser),
                migrator=self._load_migrator_config(config_parser),
                logging=self._load_logging_config(config_parser)
            )

            self._validate_config()

            return self._config

        except ValueError as e:
            self._config = None
            raise ValueError(f"Ошибка загрузки конфигурации: {e}") from e

    def _load_paths_config(self, parser: configparser.ConfigParser) -> PathsConfig:
        """Загружает конфигурацию путей."""
        section = 'paths'

        if not parser.has_section(section):
            raise ValueError(f"Секция '{section}' не найдена в конфигурации")

        return PathsConfig(
            input_root=Path(parser.get(section, 'input_root', fallback='in')),
            output_root=Path(parser.get(section, 'output_root', fallback='out'))
        )

    def _load_migrator_config(self, parser: configparser.ConfigParser) -> MigratorConfig:
        """Загружает конфигурацию мигратора. Секция необязательна."""
        section = 'migrator'

        if not parser.has_section(section):
            return MigratorConfig()

        return MigratorConfig(
            descriptor_pattern=parser.get(section, 'descriptor_pattern', fallback='*.ESW'),
            metadata_encoding=parser.get(section, 'metadata_encoding', fallback='cp1252'),
            passes=parser.getint(section, 'passes', fallback=1),
            defer_folder_timestamps=parser.getboolean(section, 'defer_folder_timestamps', fallback=False)
        )

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'

        if not parser.has_section(section):
            raise ValueError(f"Секция '{section}' не найдена в конфигурации")

        return LoggingConfig(
            level=parser.get(section, 'level', fallback='INFO'),
            log_file=Path(parser.get(section, 'log_file', fallback='logs/migrator.log')),
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5)
        )

    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ValueError("Конфигурация не загружена")

        validate_config(self._config)

    def get_config(self) -> Config:
        """
        Возвращает загруженную конфигурацию.

        Returns:
            Config: Объект конфигурации

        Raises:
            ValueError: Если конфигурация не загружена
        """
        if self._config is None:
            raise ValueError("Конфигурация не загружена. Вызовите load_config() сначала.")
        return self._config

    def reload_config(self) -> Config:
        """
        Перезагружает конфигурацию из файла.

        Returns:
            Config: Обновленный объект конфигурации
        """
        self._config = None
        return self.load_config()


def validate_config(config: Config) -> None:
    """
    Проверяет значения конфигурации.

    Существование входного каталога здесь не проверяется: пути могут быть
    переопределены из командной строки, проверку выполняет мигратор.

    Raises:
        ValueError: Если значение некорректно
    """
    if not config.migrator.descriptor_pattern.strip():
        raise ValueError("Шаблон дескрипторов не может быть пустым")

    try:
        codecs.lookup(config.migrator.metadata_encoding)
    except LookupError:
        raise ValueError(f"Неизвестная кодировка метаданных: {config.migrator.metadata_encoding}")

    if config.migrator.passes < 1:
        raise ValueError("Количество проходов должно быть больше 0")

    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config.logging.level.upper() not in valid_levels:
        raise ValueError(f"Некорректный уровень логирования: {config.logging.level}")


def load_config(config_path: str = "config/settings.ini") -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        config_path: Путь к файлу конфигурации

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path)
    return loader.load_config()


if __name__ == "__main__":
    try:
        config = load_config()
        print("✅ Конфигурация успешно загружена!")
        print(f"📁 Экспорт архива: {config.paths.input_root}")
        print(f"📂 Результат: {config.paths.output_root}")
        print(f"🔤 Кодировка метаданных: {config.migrator.metadata_encoding}")
        print(f"📝 Уровень логирования: {config.logging.level}")
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Ошибка загрузки конфигурации: {e}")
