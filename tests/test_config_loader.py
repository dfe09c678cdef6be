"""
Тесты для модуля config_loader.py
"""

import os
import tempfile
from pathlib import Path

import pytest

from esw_migrate.config_loader import ConfigLoader, load_config

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "settings.ini"

VALID_CONFIG = """[paths]
input_root = export
output_root = result

[migrator]
descriptor_pattern = *.ESW
metadata_encoding = {encoding}
passes = {passes}
defer_folder_timestamps = true

[logging]
level = {level}
log_file = logs/test.log
max_log_size = 10
backup_count = 5
"""


def write_temp_config(text: str) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.ini', delete=False, encoding='utf-8') as f:
        f.write(text)
        return f.name


class TestConfigLoader:
    """Тесты для класса ConfigLoader."""

    def test_load_default_config(self):
        """Тест загрузки конфигурации из репозитория."""
        config = load_config(str(DEFAULT_CONFIG))

        assert config.paths.input_root == Path("in")
        assert config.paths.output_root == Path("out")
        assert config.migrator.descriptor_pattern == "*.ESW"
        assert config.migrator.metadata_encoding == "cp1252"
        assert config.migrator.passes == 1
        assert config.migrator.defer_folder_timestamps is False
        assert config.logging.level == "INFO"
        assert config.logging.log_file == Path("logs/migrator.log")
        assert config.logging.max_log_size == 10
        assert config.logging.backup_count == 5

    def test_load_custom_config(self):
        temp_config = write_temp_config(VALID_CONFIG.format(encoding="latin-1", passes=2, level="DEBUG"))
        try:
            config = load_config(temp_config)
            assert config.paths.input_root == Path("export")
            assert config.migrator.metadata_encoding == "latin-1"
            assert config.migrator.passes == 2
            assert config.migrator.defer_folder_timestamps is True
        finally:
            os.unlink(temp_config)

    def test_migrator_section_optional(self):
        """Без секции [migrator] используются значения по умолчанию."""
        temp_config = write_temp_config(
            "[paths]\ninput_root = a\noutput_root = b\n\n[logging]\nlevel = INFO\n"
        )
        try:
            config = load_config(temp_config)
            assert config.migrator.metadata_encoding == "cp1252"
            assert config.migrator.passes == 1
        finally:
            os.unlink(temp_config)

    def test_config_file_not_found(self):
        """Тест ошибки при отсутствии файла конфигурации."""
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent_config.ini")

    def test_missing_paths_section(self):
        temp_config = write_temp_config("[logging]\nlevel = INFO\n")
        try:
            with pytest.raises(ValueError, match="Секция 'paths' не найдена"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_unknown_encoding(self):
        temp_config = write_temp_config(VALID_CONFIG.format(encoding="no-such-codec", passes=1, level="INFO"))
        try:
            with pytest.raises(ValueError, match="Неизвестная кодировка"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_invalid_passes(self):
        temp_config = write_temp_config(VALID_CONFIG.format(encoding="cp1252", passes=0, level="INFO"))
        try:
            with pytest.raises(ValueError, match="Количество проходов"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_invalid_log_level(self):
        """Тест валидации некорректного уровня логирования."""
        temp_config = write_temp_config(VALID_CONFIG.format(encoding="cp1252", passes=1, level="INVALID_LEVEL"))
        try:
            with pytest.raises(ValueError, match="Некорректный уровень логирования"):
                load_config(temp_config)
        finally:
            os.unlink(temp_config)

    def test_reload_config(self):
        """Тест перезагрузки конфигурации."""
        loader = ConfigLoader(str(DEFAULT_CONFIG))
        config1 = loader.load_config()
        config2 = loader.reload_config()

        assert config1 == config2
        assert loader.get_config() == config2

    def test_get_config_without_load(self):
        """Тест получения конфигурации без предварительной загрузки."""
        loader = ConfigLoader()

        with pytest.raises(ValueError, match="Конфигурация не загружена"):
            loader.get_config()
