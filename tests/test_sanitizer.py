"""
Тесты для модуля sanitizer.py
"""

import pytest

from esw_migrate.sanitizer import (
    MAX_NAME_LENGTH,
    TRANSLITERATION,
    decode_legacy,
    sanitize_filename,
    transliterate,
)

RESERVED = '/\\:*?"<>|'


class TestDecodeLegacy:
    """Тесты для декодирования cp1252."""

    def test_decodes_umlauts(self):
        """Байты cp1252 декодируются в символы."""
        assert decode_legacy("Büro Größe".encode("cp1252")) == "Büro Größe"

    def test_undefined_bytes_become_underscore(self):
        """Неопределенные в cp1252 байты заменяются на '_'."""
        assert decode_legacy(b"a\x81b\x9dc") == "a_b_c"


class TestTransliterate:
    """Тесты для таблицы транслитерации."""

    @pytest.mark.parametrize("char,expected", [
        ("Ä", "Ae"), ("ä", "ae"),
        ("Ö", "Oe"), ("ö", "oe"),
        ("Ü", "Ue"), ("ü", "ue"),
        ("ß", "ss"),
    ])
    def test_table(self, char, expected):
        """Каждый символ таблицы заменяется своей ASCII-последовательностью."""
        assert transliterate(char) == expected

    def test_other_characters_untouched(self):
        """Символы вне таблицы не меняются."""
        assert transliterate("éàñ Ça") == "éàñ Ça"

    def test_table_is_complete(self):
        assert set(TRANSLITERATION) == set("ÄäÖöÜüß")


class TestSanitizeFilename:
    """Тесты для sanitize_filename."""

    def test_reserved_characters_replaced(self):
        """Зарезервированные символы пути заменяются на '_'."""
        assert sanitize_filename('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"

    def test_office_scenario(self):
        """Описание 'Büro/Akte?' превращается в 'Buero_Akte_'."""
        assert sanitize_filename("Büro/Akte?") == "Buero_Akte_"

    def test_bytes_input(self):
        """Байтовое значение декодируется как cp1252."""
        assert sanitize_filename("Größe".encode("cp1252")) == "Groesse"

    def test_control_characters_removed(self):
        """Управляющие символы удаляются, а не заменяются."""
        assert sanitize_filename("Ak\x00te\t1\x7f\x85") == "Akte1"

    def test_whitespace_trimmed(self):
        assert sanitize_filename("   Rechnung 2020  ") == "Rechnung 2020"

    def test_truncated_to_max_length(self):
        """Результат не длиннее 255 символов и без пробелов по краям."""
        value = "x" * 254 + " " + "y" * 100
        result = sanitize_filename(value)
        assert len(result) <= MAX_NAME_LENGTH
        assert result == "x" * 254

    def test_umlaut_expansion_counts_towards_limit(self):
        result = sanitize_filename("ä" * 200)
        assert len(result) == MAX_NAME_LENGTH

    def test_empty_result_is_returned(self):
        """Пустой результат возвращается как есть, проверка у вызывающего."""
        assert sanitize_filename(" \x01 ") == ""

    @pytest.mark.parametrize("value", [
        "Büro/Akte?",
        "  <Ordner>  Ä|Ö|Ü  ",
        "\x07Steuer\\2019:" + "ß" * 300,
        "plain",
        b"Kunde \x81 M\xfcller",
    ])
    def test_result_is_safe_and_fixed_point(self, value):
        """Результат безопасен, повторная очистка его не меняет."""
        result = sanitize_filename(value)
        assert not any(ch in result for ch in RESERVED)
        assert not any(ord(ch) < 0x20 or 0x7f <= ord(ch) <= 0x9f for ch in result)
        assert len(result) <= MAX_NAME_LENGTH
        assert sanitize_filename(result) == result
