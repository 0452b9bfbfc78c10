"""CLI commands for creating, showing, and validating the provisioner config."""

from __future__ import annotations

import sys

import scriptconfig as scfg

from ..config import ProvisionerConfig, dump_toml, save, validate
from ._common import _BaseCommand, _cfg_path, _load_cfg_with_path


class InitCLI(_BaseCommand):
    """Write a default provisioner config file."""

    force = scfg.Value(
        False, isflag=True, help='Overwrite an existing config file.'
    )
    host = scfg.Value('', help='Guest address to store in guest.host.')
    platform = scfg.Value('linux', help='Guest platform: linux or windows.')

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        path = _cfg_path(args.config)
        if path.exists() and not args.force:
            print(f'Config already exists: {path}', file=sys.stderr)
            print('Use --force to overwrite it.', file=sys.stderr)
            return 2
        cfg = ProvisionerConfig()
        cfg.guest.host = str(args.host or '')
        cfg.guest.platform = str(args.platform or 'linux')
        save(path, cfg)
        print(f'Wrote config: {path}')
        return 0


class ConfigShowCLI(_BaseCommand):
    """Show the resolved config content."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg, path = _load_cfg_with_path(args.config)
        print(f'# Config: {path}')
        print(dump_toml(cfg), end='')
        return 0


class ConfigValidateCLI(_BaseCommand):
    """Report problems with the config; exit 1 when any are found."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg, path = _load_cfg_with_path(args.config)
        problems = validate(cfg)
        if not problems:
            print(f'✅ {path} is valid')
            return 0
        print(f'❌ {path} has {len(problems)} problem(s):')
        for item in problems:
            print(f'  - {item}')
        return 1


class ConfigModalCLI(scfg.ModalCLI):
    """Config file management."""

    init = InitCLI
    show = ConfigShowCLI
    validate = ConfigValidateCLI
