from __future__ import annotations
import asyncio
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Final, Iterable, Mapping, Optional, Sequence, Union
import yaml

from configs.config_utils import ConfigMerger

__all__: Sequence[str] = ('ConfigLoader', 'DEFAULT_APP_CONFIG')
logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_APP_CONFIG: Dict[str, Any] = {
    'timeout_ms': 30000,
    'load_strategy': 'concurrent',
    'pubsub_service': 'PubSub',
}

_RE_ENV_DEFAULT: Final[re.Pattern[str]] = re.compile('\\$\\{([A-Za-z_][A-Za-z0-9_]*)(?::-|-)(.*?)\\}')


def _interpolate_env(value: str) -> str:
    if not isinstance(value, str):
        return value

    def _repl(match: re.Match[str]) -> str:
        var, default = (match.group(1), match.group(2))
        return os.getenv(var, default)

    before = value
    value = _RE_ENV_DEFAULT.sub(_repl, value)
    value = os.path.expandvars(value)

    if before != value:
        logger.debug("Env expand: '%s' -> '%s'", before, value)
    elif '${' in before:
        logger.warning("Unresolved env var in '%s'", before)

    return value


def _expand_tree(node: Any) -> Any:
    if isinstance(node, dict):
        return {k: _expand_tree(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_expand_tree(v) for v in node]
    if isinstance(node, str):
        return _interpolate_env(node)
    return node


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.debug('Config file not found: %s', path)
        return {}
    if path.suffix.lower() == '.json':
        data = json.loads(text) or {}
    else:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        logger.warning('%s does not contain a top-level mapping - ignored', path)
        return {}
    return data


class ConfigLoader:
    """
    Reads manifests and application settings from YAML (or JSON) files.

    Several manifest files are layered in order, later files overriding
    earlier ones key by key. ``${VAR:-default}`` placeholders are expanded
    after merging so every layer sees the same environment.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir: Path = base_dir if base_dir is not None else Path.cwd()

    def _resolve(self, path: PathLike) -> Path:
        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else self._base_dir / candidate

    async def load_manifest(self, paths: Union[PathLike, Iterable[PathLike]]) -> Dict[str, Any]:
        if isinstance(paths, (str, Path)):
            paths = [paths]
        manifest: Dict[str, Any] = {}
        for path in paths:
            full_path = self._resolve(path)
            data = await asyncio.to_thread(_load_yaml, full_path)
            if data:
                manifest = ConfigMerger.merge(manifest, data, f'manifest: {full_path.name}')
                logger.info('Merged manifest layer: %s', full_path)
        manifest = _expand_tree(manifest)
        logger.debug('Resolved manifest keys: %s', list(manifest))
        return manifest

    async def load_app_config(self, path: Optional[PathLike] = None, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        cfg: Dict[str, Any] = dict(DEFAULT_APP_CONFIG)
        if path is not None:
            full_path = self._resolve(path)
            data = await asyncio.to_thread(_load_yaml, full_path)
            # settings may sit at the top level or under an ``application`` key
            section = data.get('application', data)
            if not isinstance(section, dict):
                logger.warning("%s 'application' section is not a mapping - skipped.", full_path)
                section = {}
            cfg = ConfigMerger.merge(cfg, section, f'app_config: {full_path.name}')
        if overrides:
            cfg = ConfigMerger.merge(cfg, dict(overrides), 'app_config_overrides')
        cfg = _expand_tree(cfg)
        logger.debug('Resolved application config: %s', cfg)
        return cfg
