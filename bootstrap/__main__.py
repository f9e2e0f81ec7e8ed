# bootstrap/__main__.py
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bootstrap.application import Application
from bootstrap.config.app_config import ApplicationConfig
from configs.config_loader import ConfigLoader

logger = logging.getLogger(__name__)


def print_summary(app: Application) -> None:
    """Print what ended up in each registry."""
    print('\n' + '=' * 60)
    print(f'APPLICATION {app.aid} ({app.state.value})')
    print('=' * 60)
    groups = [
        ('controllers', app.get_all_controllers()),
        ('modules', app.get_all_modules()),
        ('services', app.get_all_services()),
        ('objects', app.get_all_objects()),
        ('plugins', app.get_all_plugins()),
        ('widgets', app.get_all_widgets()),
    ]
    for label, pairs in groups:
        print(f'\n{label}: {len(pairs)}')
        for name, instance in pairs:
            print(f'  - {name:<30} -> {type(instance).__name__}')
    report = app.last_activation
    if report is not None and report.has_failures:
        print('\nActivation failures:')
        for failure in report.failures:
            print(f'  ✗ {failure}')
    print()


async def main(manifests: List[Path], config_path: Optional[Path], timeout_ms: Optional[int], sequential: bool) -> int:
    loader = ConfigLoader()
    overrides = {}
    if timeout_ms is not None:
        overrides['timeout_ms'] = timeout_ms
    if sequential:
        overrides['load_strategy'] = 'sequential'
    config = ApplicationConfig.from_mapping(await loader.load_app_config(config_path, overrides))
    manifest = await loader.load_manifest(manifests)

    app = Application(config)
    logger.info('Starting %s with %d manifest file(s): %s', app.aid, len(manifests), [str(p) for p in manifests])
    result = await app.load_modules(manifest)
    if not result.success:
        print(f'\n✗ Loading failed; failed sections: {", ".join(result.failed_sections) or "-"}')
        for error in result.errors:
            print(f'  - {error}')
        print_summary(app)
        return 1

    app.activate()
    print_summary(app)
    print('✓ Application activated')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m bootstrap',
        description='Load component manifests into an application and activate it.',
    )
    parser.add_argument('manifests', nargs='+', type=Path, help='Manifest YAML/JSON files, later files override earlier ones')
    parser.add_argument('--config', type=Path, default=None, help='Application config YAML')
    parser.add_argument('--timeout-ms', type=int, default=None, help='Per-section load timeout in milliseconds')
    parser.add_argument('--sequential', action='store_true', help='Load sections one at a time instead of concurrently')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def cli(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    for path in args.manifests:
        if not path.exists():
            print(f'Error: manifest file not found: {path}')
            return 1
    try:
        return asyncio.run(main(args.manifests, args.config, args.timeout_ms, args.sequential))
    except KeyboardInterrupt:
        print('\n✗ Bootstrap interrupted by user')
        return 130
    except Exception as e:
        logger.critical('Bootstrap failed with an unhandled exception: %s', e, exc_info=True)
        print(f'\n✗ FATAL BOOTSTRAP ERROR: {e}')
        return 2


if __name__ == '__main__':
    sys.exit(cli())
