"""
Модуль для преобразования описаний из метаданных в безопасные имена файлов.

Описания в экспорте ELO хранятся в однобайтовой западноевропейской
кодировке (Windows-1252). Имя строится так:
    1. декодирование с заменой недекодируемых байтов на "_";
    2. транслитерация немецких умлаутов и ß;
    3. замена зарезервированных символов пути на "_";
    4. удаление управляющих символов;
    5. обрезка пробелов, ограничение длины 255 символами, повторная обрезка.
"""

import re
from typing import Union

LEGACY_ENCODING = "cp1252"
REPLACEMENT_CHAR = "_"
MAX_NAME_LENGTH = 255

TRANSLITERATION = {
    "Ä": "Ae", "ä": "ae",
    "Ö": "Oe", "ö": "oe",
    "Ü": "Ue", "ü": "ue",
    "ß": "ss",
}

_TRANSLITERATION_RE = re.compile("[" + "".join(TRANSLITERATION) + "]")
_RESERVED_RE = re.compile(r'[/\\:*?"<>|]')
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def decode_legacy(raw: bytes, encoding: str = LEGACY_ENCODING) -> str:
    """
    Декодирует байты в однобайтовой кодировке, не падая на ошибках.

    В cp1252 не определены байты 0x81, 0x8D, 0x8F, 0x90 и 0x9D; каждый такой
    байт превращается в один символ "_".

    Args:
        raw: Исходные байты
        encoding: Кодировка источника

    Returns:
        str: Декодированный текст
    """
    return raw.decode(encoding, errors="replace").replace("\ufffd", REPLACEMENT_CHAR)


def transliterate(text: str) -> str:
    """Заменяет умлауты и ß на ASCII-последовательности, остальное не трогает."""
    return _TRANSLITERATION_RE.sub(lambda match: TRANSLITERATION[match.group(0)], text)


def sanitize_filename(value: Union[str, bytes], encoding: str = LEGACY_ENCODING) -> str:
    """
    Превращает описание из метаданных в имя, допустимое в файловой системе.

    Пустой результат не считается ошибкой здесь: проверку выполняет
    вызывающий код.

    Args:
        value: Описание (байты в legacy-кодировке или уже декодированный текст)
        encoding: Кодировка для байтового значения

    Returns:
        str: Безопасное имя длиной не более 255 символов
    """
    text = decode_legacy(value, encoding) if isinstance(value, bytes) else value

    text = transliterate(text)
    text = _RESERVED_RE.sub(REPLACEMENT_CHAR, text)
    text = _CONTROL_RE.sub("", text)

    return text.strip()[:MAX_NAME_LENGTH].strip()
