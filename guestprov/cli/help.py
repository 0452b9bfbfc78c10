"""Help commands that show what provisioning does on the guest."""

from __future__ import annotations

import shlex
import textwrap

import scriptconfig as scfg

from ..binary import FALLBACK_PREFIX
from ._common import (
    _BaseCommand,
    _configured_provisioner,
    _highlight,
    _load_cfg_with_path,
)


class HelpRawCLI(_BaseCommand):
    """Print guest shell probes equivalent to the provision preflight checks."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg, _ = _load_cfg_with_path(args.config)
        prov, _ = _configured_provisioner(cfg, check=False)
        temp_dir = shlex.quote(cfg.puppet.temp_dir)
        checks = '\n'.join(
            f'sudo test -d {shlex.quote(p)} && echo ok {shlex.quote(p)}'
            for p in prov.plan.check_paths
        ) or '# (no synced folders to check)'
        lines = textwrap.dedent(
            f"""
            # guestprov help raw
            # Run these inside the guest ({cfg.guest.user}@{cfg.guest.host or '<GUEST>'}).

            # Scratch directory (maps to: provision setup)
            sudo mkdir -p {temp_dir}
            sudo chmod 0777 {temp_dir}

            # Synced folders (maps to: shared folder verification)
            __CHECKS__

            # Puppet binary (maps to: binary detection)
            sh -c 'command -v puppet' || sudo test -x {FALLBACK_PREFIX}/puppet
            """
        ).strip().replace('__CHECKS__', checks)
        print(_highlight(lines))
        return 0


class HelpModalCLI(scfg.ModalCLI):
    """Help and discovery commands."""

    raw = HelpRawCLI
