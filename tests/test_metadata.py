"""
Тесты для модуля metadata.py
"""

import shutil
import tempfile
from datetime import date
from pathlib import Path

import pytest

from esw_migrate.metadata import (
    ArchiveRecord,
    MalformedMetadataError,
    parse_descriptor,
    read_record,
)


class TestParseDescriptor:
    """Тесты для parse_descriptor."""

    @pytest.fixture
    def temp_dir(self):
        """Создает временную директорию для тестов."""
        temp_path = tempfile.mkdtemp()
        yield Path(temp_path)
        shutil.rmtree(temp_path, ignore_errors=True)

    def write(self, path: Path, text: str) -> Path:
        path.write_bytes(text.encode("cp1252"))
        return path

    def test_sections_and_keys(self, temp_dir):
        """Секции и пары ключ=значение разбираются с обрезкой пробелов."""
        path = self.write(temp_dir / "A.ESW", (
            "; comment\r\n"
            "# another comment\r\n"
            "\r\n"
            "[GENERAL]\r\n"
            "  SHORTDESC = Büro \r\n"
            "ABLDATE=2020-05-01\r\n"
            "[EXTRA]\r\n"
            "FORMULA=a=b=c\r\n"
        ))

        sections = parse_descriptor(path)

        assert sections == {
            "GENERAL": {"SHORTDESC": "Büro", "ABLDATE": "2020-05-01"},
            "EXTRA": {"FORMULA": "a=b=c"},
        }

    def test_repeated_key_overwrites(self, temp_dir):
        path = self.write(temp_dir / "A.ESW", "[GENERAL]\nKEY=1\nKEY=2\n")
        assert parse_descriptor(path)["GENERAL"]["KEY"] == "2"

    def test_repeated_section_restarts(self, temp_dir):
        """Повторный заголовок секции начинает её заново."""
        path = self.write(temp_dir / "A.ESW", "[GENERAL]\nA=1\n[GENERAL]\nB=2\n")
        assert parse_descriptor(path)["GENERAL"] == {"B": "2"}

    def test_key_before_section(self, temp_dir):
        """Ключ до первой секции - ошибка."""
        path = self.write(temp_dir / "A.ESW", "KEY=value\n[GENERAL]\n")

        with pytest.raises(MalformedMetadataError) as exc_info:
            parse_descriptor(path)

        assert exc_info.value.path == path
        assert str(path) in str(exc_info.value)

    def test_lines_without_delimiter_ignored(self, temp_dir):
        path = self.write(temp_dir / "A.ESW", "[GENERAL]\njust text\nKEY=v\n")
        assert parse_descriptor(path) == {"GENERAL": {"KEY": "v"}}

    def test_decoded_as_cp1252(self, temp_dir):
        """Файл читается в cp1252, а не в кодировке платформы."""
        path = temp_dir / "A.ESW"
        path.write_bytes(b"[GENERAL]\nSHORTDESC=Gr\xf6\xdfe \x81\n")
        assert parse_descriptor(path)["GENERAL"]["SHORTDESC"] == "Größe _"


class TestArchiveRecord:
    """Тесты для ArchiveRecord и read_record."""

    @pytest.fixture
    def temp_dir(self):
        temp_path = tempfile.mkdtemp()
        yield Path(temp_path)
        shutil.rmtree(temp_path, ignore_errors=True)

    def test_read_record(self, temp_dir):
        """Запись строится из секции GENERAL."""
        path = temp_dir / "0001ABCD.ESW"
        path.write_bytes(
            "[GENERAL]\nSHORTDESC=Büro/Akte?\nABLDATE=2020-05-01\nDOCEXT=.PDF\n".encode("cp1252")
        )

        record = read_record(path)

        assert record.id == "0001ABCD"
        assert record.short_description == "Büro/Akte?"
        assert record.document_date == date(2020, 5, 1)
        assert record.document_extension == ".PDF"
        assert record.companion_folder == temp_dir / "0001ABCD"
        assert record.source_payload == temp_dir / "0001ABCD.PDF"

    def test_missing_extension_is_empty(self):
        record = ArchiveRecord.from_sections(
            Path("x/A.ESW"), {"GENERAL": {"SHORTDESC": "A", "ABLDATE": "2001-02-03"}}
        )
        assert record.document_extension == ""

    @pytest.mark.parametrize("sections", [
        {},
        {"GENERAL": {"ABLDATE": "2020-05-01"}},
        {"GENERAL": {"SHORTDESC": "A"}},
        {"GENERAL": {"SHORTDESC": "A", "ABLDATE": "01.05.2020"}},
        {"GENERAL": {"SHORTDESC": "A", "ABLDATE": "2020-02-30"}},
    ])
    def test_invalid_records(self, sections):
        """Нет обязательных полей или некорректная дата - ошибка."""
        with pytest.raises(MalformedMetadataError):
            ArchiveRecord.from_sections(Path("x/A.ESW"), sections)

    def test_unreadable_descriptor(self, temp_dir):
        with pytest.raises(MalformedMetadataError):
            read_record(temp_dir / "missing.ESW")
