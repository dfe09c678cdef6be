"""
Модуль бизнес-логики миграции архива.

Обходит дескрипторы экспорта от родителей к потомкам, определяет для
каждого тип записи (папка или документ), вычисляет путь результата через
таблицу соответствия каталогов и выполняет идемпотентную операцию:
создание каталога или копирование документа с установкой даты.

Даты папок окончательно выставляются только повторным запуском: запись
потомков в только что созданную папку сдвигает её дату модификации.
Режим defer_folder_timestamps выставляет даты папок после обработки всех
записей и позволяет обойтись одним запуском.

Одновременный запуск двух миграций в один каталог результата не
поддерживается и ничем не блокируется.
"""

import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

try:
    from .config_loader import Config
    from .logger import ArchiveMigratorLogger
    from .file_ops import FileOps, path_depth
    from .metadata import ArchiveRecord, MalformedMetadataError, RecordKind, read_record
    from .path_translator import PathTranslator
    from .sanitizer import sanitize_filename
except ImportError:
    from config_loader import Config
    from logger import ArchiveMigratorLogger
    from file_ops import FileOps, path_depth
    from metadata import ArchiveRecord, MalformedMetadataError, RecordKind, read_record
    from path_translator import PathTranslator
    from sanitizer import sanitize_filename


class MigrationError(Exception):
    """Исключение для ошибок миграции."""
    pass


class MissingSourcePayloadError(MigrationError):
    """Файл документа отсутствует в экспорте."""

    def __init__(self, source: Path, descriptor: Path):
        self.source = source
        self.descriptor = descriptor
        super().__init__(f"Исходный файл не найден: {source} (дескриптор {descriptor})")


@dataclass(frozen=True)
class ClassifiedRecord:
    """Запись архива с уже определенным типом."""
    record: ArchiveRecord
    kind: RecordKind


@dataclass(frozen=True)
class ReplicationUnit:
    """Готовое к выполнению действие для одной записи."""
    kind: RecordKind
    target: Path
    stamp: date
    source: Optional[Path] = None
    descriptor: Optional[Path] = None

    def describe(self) -> str:
        if self.kind is RecordKind.CONTAINER:
            return f"mkdir {self.source} -> {self.target} @ {self.stamp.isoformat()}"
        return f"copy {self.source} -> {self.target} @ {self.stamp.isoformat()}"


class MigrationStats:
    """Класс для хранения статистики одного прохода."""

    def __init__(self):
        self.total_descriptors = 0
        self.processed = 0
        self.containers = 0
        self.documents = 0
        self.copied_files = 0
        self.existing_files = 0
        self.skipped: List[Path] = []
        self.start_time = None
        self.end_time = None

    @property
    def skipped_records(self) -> int:
        return len(self.skipped)

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность прохода в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def to_dict(self) -> Dict:
        """Преобразует статистику в словарь."""
        return {
            'total_descriptors': self.total_descriptors,
            'processed': self.processed,
            'containers': self.containers,
            'documents': self.documents,
            'copied_files': self.copied_files,
            'existing_files': self.existing_files,
            'skipped_records': self.skipped_records,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration()
        }


class ReplicationEngine:
    """Основной класс для миграции экспорта архива."""

    def __init__(self, config: Config, logger: ArchiveMigratorLogger,
                 file_ops: Optional[FileOps] = None, dry_run: bool = False):
        """
        Инициализация мигратора.

        Args:
            config: Конфигурация приложения
            logger: Логгер для записи операций
            file_ops: Операции с файлами (по умолчанию создаются)
            dry_run: Только вывести план действий
        """
        self.config = config
        self.logger = logger
        self.dry_run = dry_run
        self.file_ops = file_ops or FileOps(logger, dry_run=dry_run)
        self.input_root = Path(os.path.abspath(config.paths.input_root))
        self.output_root = Path(os.path.abspath(config.paths.output_root))
        self.encoding = config.migrator.metadata_encoding
        self.defer_folder_timestamps = config.migrator.defer_folder_timestamps
        self.translator = PathTranslator(self.input_root, self.output_root)
        self.stats = MigrationStats()
        self._pending_folders: List[Tuple[Path, date]] = []

    def discover(self) -> List[Path]:
        """
        Находит дескрипторы и упорядочивает их по глубине.

        Сортировка устойчивая: записи одной глубины идут в порядке поиска.

        Returns:
            List[Path]: Дескрипторы, родители раньше потомков
        """
        found = self.file_ops.find_descriptors(self.input_root, self.config.migrator.descriptor_pattern)
        return sorted(found, key=path_depth)

    def classify(self, descriptor: Path) -> ClassifiedRecord:
        """
        Читает дескриптор и определяет тип записи.

        Raises:
            MalformedMetadataError: Если дескриптор некорректен
        """
        record = read_record(descriptor, self.encoding)
        kind = RecordKind.CONTAINER if record.companion_folder.is_dir() else RecordKind.LEAF_DOCUMENT
        return ClassifiedRecord(record=record, kind=kind)

    def target_name(self, record: ArchiveRecord) -> str:
        name = sanitize_filename(record.short_description, self.encoding)
        if not name:
            raise MalformedMetadataError(record.descriptor_path, "Пустое имя после очистки SHORTDESC")
        return name

    def plan(self, classified: ClassifiedRecord) -> Optional[ReplicationUnit]:
        """
        Вычисляет действие для записи.

        Для папки сразу записывает соответствие подпапки экспорта каталогу
        результата, чтобы потомки могли его найти.

        Returns:
            ReplicationUnit или None если запись пропущена

        Raises:
            UnresolvedParentError: Если родительский каталог не сопоставлен
        """
        record = classified.record

        if classified.kind is RecordKind.CONTAINER:
            target = self.translator.resolve(record.parent_dir) / self.target_name(record)
            self.translator.record(record.companion_folder, target)
            return ReplicationUnit(
                kind=RecordKind.CONTAINER,
                target=target,
                stamp=record.document_date,
                source=record.companion_folder,
                descriptor=record.descriptor_path
            )

        if not record.document_extension:
            self.logger.log_empty_document(record.descriptor_path)
            self.stats.skipped.append(record.descriptor_path)
            return None

        parent_output = self.translator.resolve(record.parent_dir)
        target = parent_output / f"{self.target_name(record)}{record.document_extension.lower()}"
        return ReplicationUnit(
            kind=RecordKind.LEAF_DOCUMENT,
            target=target,
            stamp=record.document_date,
            source=record.source_payload,
            descriptor=record.descriptor_path
        )

    def apply(self, unit: ReplicationUnit) -> None:
        """
        Выполняет действие. Повторный вызов не меняет содержимое результата,
        но всегда заново выставляет дату.

        Raises:
            MissingSourcePayloadError: Если нужно копировать, а исходника нет
            FileOperationError: Если операция с файлом не удалась
        """
        if self.dry_run:
            self.logger.log_planned_unit(unit.describe())

        if unit.kind is RecordKind.CONTAINER:
            self.file_ops.ensure_directory(unit.target)
            self.stats.containers += 1
            self.logger.log_folder_processed(unit.source, unit.target)
            if self.defer_folder_timestamps:
                self._pending_folders.append((unit.target, unit.stamp))
            else:
                self.file_ops.set_timestamp(unit.target, unit.stamp)
            return

        copied = False
        if unit.target.exists():
            self.stats.existing_files += 1
        else:
            if not unit.source.is_file():
                self.logger.log_missing_source(unit.source)
                raise MissingSourcePayloadError(unit.source, unit.descriptor)
            self.file_ops.copy_file(unit.source, unit.target)
            self.stats.copied_files += 1
            copied = True

        self.stats.documents += 1
        self.logger.log_document_processed(unit.source, unit.target, copied)
        self.file_ops.set_timestamp(unit.target, unit.stamp)

    def process_descriptor(self, descriptor: Path) -> Optional[ReplicationUnit]:
        """Полностью обрабатывает один дескриптор."""
        unit = self.plan(self.classify(descriptor))
        if unit is not None:
            self.apply(unit)
        self.stats.processed += 1
        return unit

    def finalize_folder_timestamps(self) -> None:
        """Выставляет отложенные даты папок, начиная с самых глубоких."""
        for target, stamp in sorted(self._pending_folders, key=lambda item: path_depth(item[0]), reverse=True):
            self.file_ops.set_timestamp(target, stamp)
        self.logger.log_system_info(f"Даты папок выставлены: {len(self._pending_folders)}")
        self._pending_folders.clear()

    def run(self) -> MigrationStats:
        """
        Выполняет один полный проход миграции.

        Таблица соответствия каталогов строится заново. Ошибки не
        перехватываются: проход прерывается на первой фатальной ошибке,
        уже созданный результат остается на месте.

        Returns:
            MigrationStats: Статистика прохода

        Raises:
            MigrationError: Если корень экспорта не существует
        """
        self.translator = PathTranslator(self.input_root, self.output_root)
        self.stats = MigrationStats()
        self._pending_folders = []
        self.stats.start_time = datetime.now()

        if not self.input_root.is_dir():
            raise MigrationError(f"Каталог экспорта не существует: {self.input_root}")

        try:
            descriptors = self.discover()
            self.stats.total_descriptors = len(descriptors)
            self.logger.log_migration_start(self.input_root, self.output_root, len(descriptors))

            self.file_ops.ensure_directory(self.output_root)

            for descriptor in descriptors:
                self.process_descriptor(descriptor)

            if self.defer_folder_timestamps:
                self.finalize_folder_timestamps()

        except Exception as e:
            self.logger.log_critical_error("Миграция прервана", e)
            raise
        finally:
            self.stats.end_time = datetime.now()

        self.logger.log_migration_end(self.stats.to_dict())
        self.logger.log_finished_at()
        return self.stats

    def migrate(self, passes: Optional[int] = None) -> List[MigrationStats]:
        """
        Выполняет несколько полных проходов подряд.

        Args:
            passes: Количество проходов (по умолчанию из конфигурации)

        Returns:
            List[MigrationStats]: Статистика каждого прохода
        """
        if passes is None:
            passes = self.config.migrator.passes

        results = []
        for pass_number in range(1, passes + 1):
            self.logger.log_pass_start(pass_number, passes)
            results.append(self.run())
        return results

    def survey(self) -> Dict:
        """
        Считает записи экспорта по типам без изменения файловой системы.

        Returns:
            Dict: Количество дескрипторов, папок, документов, пустых
                документов, некорректных дескрипторов и содержимое результата
        """
        if not self.input_root.is_dir():
            raise MigrationError(f"Каталог экспорта не существует: {self.input_root}")

        result = {
            'descriptors': 0,
            'containers': 0,
            'documents': 0,
            'empty_documents': 0,
            'malformed': 0
        }

        for descriptor in self.discover():
            result['descriptors'] += 1
            try:
                classified = self.classify(descriptor)
            except MalformedMetadataError as e:
                self.logger.log_warning(str(e))
                result['malformed'] += 1
                continue

            if classified.kind is RecordKind.CONTAINER:
                result['containers'] += 1
            elif classified.record.document_extension:
                result['documents'] += 1
            else:
                result['empty_documents'] += 1

        result['output'] = self.file_ops.count_output_entries(self.output_root)
        return result


def create_engine(config: Config, logger: ArchiveMigratorLogger, dry_run: bool = False) -> ReplicationEngine:
    """
    Удобная функция для создания мигратора.

    Args:
        config: Конфигурация приложения
        logger: Логгер
        dry_run: Только вывести план действий

    Returns:
        ReplicationEngine: Объект мигратора
    """
    return ReplicationEngine(config, logger, dry_run=dry_run)
