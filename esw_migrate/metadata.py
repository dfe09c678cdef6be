"""
Модуль для чтения дескрипторов архива (*.ESW).

Дескриптор - INI-подобный файл в кодировке Windows-1252. Из секции
GENERAL используются ключи SHORTDESC, ABLDATE и DOCEXT.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

try:
    from .sanitizer import LEGACY_ENCODING, decode_legacy
except ImportError:
    from sanitizer import LEGACY_ENCODING, decode_legacy


GENERAL_SECTION = "GENERAL"
SHORTDESC_KEY = "SHORTDESC"
ABLDATE_KEY = "ABLDATE"
DOCEXT_KEY = "DOCEXT"
DATE_FORMAT = "%Y-%m-%d"

_SECTION_RE = re.compile(r"^\[(.+?)\]$")
_KEY_VALUE_RE = re.compile(r"^([^=]+?)=(.*)$")

Sections = Dict[str, Dict[str, str]]


class MalformedMetadataError(Exception):
    """Исключение для некорректного дескриптора."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class RecordKind(Enum):
    """Тип записи архива, определяется наличием одноименной подпапки."""
    CONTAINER = "container"
    LEAF_DOCUMENT = "document"


def parse_descriptor(path: Path, encoding: str = LEGACY_ENCODING) -> Sections:
    """
    Читает дескриптор и возвращает словарь секций.

    Пустые строки и комментарии (";" или "#") пропускаются. Разделителем
    ключа и значения служит первый "=". Повторный ключ перезаписывает
    предыдущее значение, повторный заголовок секции начинает её заново.

    Args:
        path: Путь к дескриптору
        encoding: Кодировка файла

    Returns:
        Sections: {секция: {ключ: значение}}

    Raises:
        MalformedMetadataError: Если ключ встречен до первой секции
        OSError: Если файл не удалось прочитать
    """
    sections: Sections = {}
    current: Optional[Dict[str, str]] = None

    text = decode_legacy(Path(path).read_bytes(), encoding)

    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line or line.startswith((";", "#")):
            continue

        section_match = _SECTION_RE.match(line)
        if section_match:
            current = {}
            sections[section_match.group(1)] = current
            continue

        key_value_match = _KEY_VALUE_RE.match(line)
        if key_value_match:
            if current is None:
                raise MalformedMetadataError(
                    path, f"Ключ '{key_value_match.group(1).strip()}' до секции (строка {line_number})"
                )
            current[key_value_match.group(1).strip()] = key_value_match.group(2).strip()

    return sections


@dataclass(frozen=True)
class ArchiveRecord:
    """Содержимое одного дескриптора."""
    id: str
    descriptor_path: Path
    short_description: str
    document_date: date
    document_extension: str = ""

    @property
    def parent_dir(self) -> Path:
        """Каталог экспорта, в котором лежит дескриптор."""
        return self.descriptor_path.parent

    @property
    def companion_folder(self) -> Path:
        """Одноименная подпапка, наличие которой означает папку архива."""
        return self.parent_dir / self.id

    @property
    def source_payload(self) -> Path:
        """Ожидаемый файл документа рядом с дескриптором."""
        return self.parent_dir / f"{self.id}{self.document_extension}"

    @classmethod
    def from_sections(cls, path: Path, sections: Sections) -> "ArchiveRecord":
        """
        Строит запись из разобранных секций.

        Raises:
            MalformedMetadataError: Если нет обязательных полей или дата некорректна
        """
        general = sections.get(GENERAL_SECTION)
        if general is None:
            raise MalformedMetadataError(path, f"Нет секции [{GENERAL_SECTION}]")

        for key in (SHORTDESC_KEY, ABLDATE_KEY):
            if key not in general:
                raise MalformedMetadataError(path, f"Нет ключа {GENERAL_SECTION}.{key}")

        try:
            document_date = datetime.strptime(general[ABLDATE_KEY], DATE_FORMAT).date()
        except ValueError:
            raise MalformedMetadataError(path, f"Некорректная дата '{general[ABLDATE_KEY]}'")

        return cls(
            id=path.stem,
            descriptor_path=path,
            short_description=general[SHORTDESC_KEY],
            document_date=document_date,
            document_extension=general.get(DOCEXT_KEY, "")
        )


def read_record(path: Path, encoding: str = LEGACY_ENCODING) -> ArchiveRecord:
    """
    Читает дескриптор и возвращает запись архива.

    Args:
        path: Путь к дескриптору
        encoding: Кодировка файла

    Returns:
        ArchiveRecord: Запись архива
    """
    path = Path(path)
    try:
        sections = parse_descriptor(path, encoding)
    except OSError as e:
        raise MalformedMetadataError(path, f"Не удалось прочитать дескриптор ({e})") from e
    return ArchiveRecord.from_sections(path, sections)
