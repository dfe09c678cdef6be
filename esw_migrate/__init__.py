"""
ESW Archive Migrator

Утилита для переноса экспорта архива ELO (дескрипторы *.ESW и файлы документов)
в плоскую человекочитаемую структуру каталогов с восстановлением дат.
"""

__version__ = "1.0.0"
__author__ = "ESW Migrator Team"
__description__ = "Utility for migrating an ELO archive export to a readable directory tree"
