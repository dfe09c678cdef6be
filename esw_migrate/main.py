"""
Главный модуль CLI интерфейса для утилиты миграции архива.

Предоставляет командный интерфейс для выполнения миграции экспорта ELO
и просмотра состояния экспорта и результата.
"""

import argparse
import dataclasses
import sys
from pathlib import Path

try:
    from .config_loader import load_config, validate_config
    from .logger import ArchiveMigratorLogger
    from .migrator import ReplicationEngine, create_engine, MigrationError
    from .metadata import MalformedMetadataError
    from .path_translator import UnresolvedParentError
    from .file_ops import FileOperationError
except ImportError:
    from config_loader import load_config, validate_config
    from logger import ArchiveMigratorLogger
    from migrator import ReplicationEngine, create_engine, MigrationError
    from metadata import MalformedMetadataError
    from path_translator import UnresolvedParentError
    from file_ops import FileOperationError


class ArchiveMigratorCLI:
    """Класс для обработки команд CLI."""

    def __init__(self):
        self.config = None
        self.logger = None

    def setup(self, config_path: str = "config/settings.ini",
              input_root: str = None, output_root: str = None) -> bool:
        """
        Инициализирует CLI с конфигурацией.

        Args:
            config_path: Путь к файлу конфигурации
            input_root: Переопределение корня экспорта
            output_root: Переопределение корня результата

        Returns:
            bool: True если инициализация успешна
        """
        try:
            config = load_config(config_path)

            paths = config.paths
            if input_root:
                paths = dataclasses.replace(paths, input_root=Path(input_root))
            if output_root:
                paths = dataclasses.replace(paths, output_root=Path(output_root))
            self.config = dataclasses.replace(config, paths=paths)

            self.logger = ArchiveMigratorLogger(self.config.logging)
            self.logger.log_config_loaded(config_path)
            return True

        except (OSError, ValueError) as e:
            print(f"❌ Ошибка инициализации: {e}")
            return False

    def _engine(self, args) -> ReplicationEngine:
        config = self.config
        if getattr(args, 'defer_folder_timestamps', False):
            migrator = dataclasses.replace(config.migrator, defer_folder_timestamps=True)
            config = dataclasses.replace(config, migrator=migrator)
        validate_config(config)
        return create_engine(config, self.logger, dry_run=getattr(args, 'dry_run', False))

    def cmd_migrate(self, args) -> int:
        """
        Команда миграции экспорта.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            engine = self._engine(args)
            passes = args.passes if args.passes is not None else self.config.migrator.passes
            if passes < 1:
                print("❌ Количество проходов должно быть больше 0")
                return 1

            results = engine.migrate(passes)

            last = results[-1]
            print("\n✅ Миграция завершена!")
            print(f"📊 Проходов: {len(results)}")
            print(f"   • Дескрипторов: {last.total_descriptors}")
            print(f"   • Папок: {last.containers}")
            print(f"   • Документов: {last.documents}")
            print(f"   • Скопировано за все проходы: {sum(s.copied_files for s in results)}")
            print(f"   • Пропущено: {last.skipped_records}")

            if last.skipped:
                print("\n⚠️ Пропущенные дескрипторы (нет DOCEXT):")
                for path in last.skipped[:10]:
                    print(f"   • {path}")
                if len(last.skipped) > 10:
                    print(f"   ... и еще {len(last.skipped) - 10}")

            if len(results) == 1 and not engine.defer_folder_timestamps and not engine.dry_run:
                print("\nℹ️ Запустите миграцию еще раз, чтобы выставить даты папок")

            return 0

        except MalformedMetadataError as e:
            print(f"❌ Некорректный дескриптор: {e}")
            return 1
        except UnresolvedParentError as e:
            print(f"❌ Нарушен порядок обхода: {e}")
            return 1
        except MigrationError as e:
            print(f"❌ Ошибка миграции: {e}")
            return 1
        except (FileOperationError, ValueError) as e:
            print(f"❌ Ошибка: {e}")
            return 1

    def cmd_status(self, args) -> int:
        """
        Команда просмотра состояния экспорта и результата.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            engine = self._engine(args)
            status = engine.survey()
        except (MigrationError, ValueError) as e:
            print(f"❌ Ошибка получения статуса: {e}")
            return 1

        print("📊 Состояние миграции архива")
        print("=" * 50)

        print(f"\n📁 Экспорт: {engine.input_root}")
        print(f"   • Дескрипторов: {status['descriptors']}")
        print(f"   • Папок: {status['containers']}")
        print(f"   • Документов: {status['documents']}")
        print(f"   • Пустых документов: {status['empty_documents']}")
        print(f"   • Некорректных дескрипторов: {status['malformed']}")

        print(f"\n📂 Результат: {engine.output_root}")
        print(f"   • Каталогов: {status['output']['directories']}")
        print(f"   • Файлов: {status['output']['files']}")

        return 0 if status['malformed'] == 0 else 1


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        description="Утилита миграции экспорта архива ELO в читаемую структуру каталогов",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Первый запуск: структура и документы
  esw-migrate migrate

  # Второй запуск обязателен: выставляет даты папок
  esw-migrate migrate

  # Оба прохода за один вызов
  esw-migrate migrate --passes 2

  # Один проход с отложенной установкой дат папок
  esw-migrate migrate --defer-folder-timestamps

  # Только показать план
  esw-migrate migrate --dry-run

  # Состояние экспорта и результата
  esw-migrate status --input-root in --output-root out

Запускать две миграции в один каталог результата одновременно нельзя.
        """
    )

    parser.add_argument(
        '--config',
        default='config/settings.ini',
        help='Путь к файлу конфигурации (по умолчанию: config/settings.ini)'
    )
    parser.add_argument('--input-root', help='Корень экспорта (переопределяет конфигурацию)')
    parser.add_argument('--output-root', help='Корень результата (переопределяет конфигурацию)')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод'
    )

    subparsers = parser.add_subparsers(dest='command', help='Доступные команды')

    migrate_parser = subparsers.add_parser('migrate', help='Миграция экспорта')
    migrate_parser.add_argument(
        '--passes',
        type=int,
        help='Количество проходов (по умолчанию из конфигурации)'
    )
    migrate_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Только вывести план действий'
    )
    migrate_parser.add_argument(
        '--defer-folder-timestamps',
        action='store_true',
        help='Выставлять даты папок после обработки всех записей'
    )

    subparsers.add_parser('status', help='Состояние экспорта и результата')

    return parser


def main(argv=None):
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = ArchiveMigratorCLI()

    if not cli.setup(args.config, args.input_root, args.output_root):
        return 1

    try:
        if args.command == 'migrate':
            return cli.cmd_migrate(args)
        elif args.command == 'status':
            return cli.cmd_status(args)
        else:
            print(f"❌ Неизвестная команда: {args.command}")
            return 1

    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем")
        return 1
    except Exception as e:
        print(f"❌ Неожиданная ошибка: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
