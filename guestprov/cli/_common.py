from __future__ import annotations

import sys
from pathlib import Path

import scriptconfig as scfg
import ubelt as ub
from loguru import logger

from ..config import ProvisionerConfig, load
from ..plan import FolderCollector
from ..provisioner import Provisioner

log = logger

DEFAULT_CONFIG_NAME = '.guestprov.toml'


class _BaseCommand(scfg.DataConfig):
    """Base options shared by all commands."""

    config = scfg.Value(
        None, help=f'Path to config TOML (default: {DEFAULT_CONFIG_NAME}).'
    )
    verbose = scfg.Value(
        0,
        short_alias=['v'],
        isflag='counter',
        help='Increase verbosity (-v, -vv).',
    )


def _highlight(text: str) -> str:
    if sys.stdout.isatty():
        return ub.highlight_code(text, lexer_name='bash')
    return text


def _cfg_path(p: str | None) -> Path:
    return Path(p or DEFAULT_CONFIG_NAME).resolve()


def _load_cfg(config_path: str | None) -> ProvisionerConfig:
    cfg, _ = _load_cfg_with_path(config_path)
    return cfg


def _load_cfg_with_path(config_path: str | None) -> tuple[ProvisionerConfig, Path]:
    path = _cfg_path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f'Config not found: {path}. '
            f'Run: guestprov config init --config {path}'
        )
    cfg = load(path).expanded_paths()
    # Relative host paths are relative to the config file, not the cwd.
    if not Path(cfg.paths.root_path).is_absolute():
        cfg.paths.root_path = str((path.parent / cfg.paths.root_path).resolve())
    log.debug('Loaded config {} (root_path={})', path, cfg.paths.root_path)
    return cfg, path


def _configured_provisioner(
    cfg: ProvisionerConfig, comm=None, *, check: bool = True, sink=None
) -> tuple[Provisioner, FolderCollector]:
    prov = Provisioner(cfg, comm, sink=sink)
    folders = FolderCollector()
    prov.configure(folders, check=check)
    return prov, folders


__all__ = [name for name in globals() if not name.startswith('__')]
