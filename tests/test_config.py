"""Tests for test config."""

from __future__ import annotations

from pathlib import Path

from guestprov.config import (
    ProvisionerConfig,
    dump_toml,
    load,
    loads,
    save,
    validate,
)
from guestprov.paths import GuestPath, HostPath


def test_dump_load_roundtrip(tmp_path: Path) -> None:
    cfg = ProvisionerConfig()
    cfg.guest.name = 'my "vm"'
    cfg.guest.port = 2222
    cfg.guest.color = False
    cfg.puppet.manifests_path = GuestPath('/etc/puppet/manifests')
    cfg.puppet.module_path = ['modules', 'site']
    cfg.puppet.facter = {'role': 'web', 'dc': 'ams'}
    cfg.puppet.options = ['--verbose']
    cfg.verbosity = 3
    fpath = tmp_path / '.guestprov.toml'
    save(fpath, cfg)

    cfg2 = load(fpath)
    assert cfg2.guest.name == cfg.guest.name
    assert cfg2.guest.port == 2222
    assert cfg2.guest.color is False
    assert cfg2.puppet.manifests_path == GuestPath('/etc/puppet/manifests')
    assert cfg2.puppet.environment_path is None
    assert cfg2.puppet.module_path == ['modules', 'site']
    assert cfg2.puppet.facter == {'role': 'web', 'dc': 'ams'}
    assert cfg2.puppet.options == ['--verbose']
    assert cfg2.verbosity == 3


def test_dump_toml_verbosity_default_omitted() -> None:
    text = dump_toml(ProvisionerConfig())
    assert 'verbosity =' not in text
    assert 'manifests_path' not in text
    assert 'facter = {}' in text


def test_loads_accepts_shorthand_forms() -> None:
    cfg = loads(
        '[puppet]\n'
        'manifests_path = "manifests"\n'
        'module_path = "modules"\n'
        'options = "--verbose --debug"\n'
        'facter = { enabled = true, count = 3 }\n'
    )
    assert cfg.puppet.manifests_path == HostPath('manifests')
    assert cfg.puppet.module_path == ['modules']
    assert cfg.puppet.options == ['--verbose --debug']
    assert cfg.puppet.facter == {'enabled': 'true', 'count': '3'}


def test_mode_selection() -> None:
    cfg = ProvisionerConfig()
    assert cfg.puppet.mode_kind() == 'manifest'
    assert cfg.puppet.effective_manifests_path() == HostPath('manifests')
    cfg.puppet.environment_path = HostPath('envs')
    assert cfg.puppet.mode_kind() == 'environment'
    assert cfg.puppet.effective_manifests_path() is None


def test_expanded_paths_expands_env(monkeypatch) -> None:
    monkeypatch.setenv('GUESTPROV_TEST_DIR', '/tmp/gp-x')
    cfg = ProvisionerConfig()
    cfg.paths.root_path = '$GUESTPROV_TEST_DIR/project'
    cfg.paths.ssh_identity_file = '$GUESTPROV_TEST_DIR/id_ed25519'
    cfg.puppet.module_path = ['$GUESTPROV_TEST_DIR/mods']
    out = cfg.expanded_paths()
    assert out.paths.root_path == '/tmp/gp-x/project'
    assert out.paths.ssh_identity_file == '/tmp/gp-x/id_ed25519'
    assert out.puppet.module_path == ['/tmp/gp-x/mods']


def test_validate_valid_project(tmp_path: Path) -> None:
    (tmp_path / 'manifests').mkdir()
    (tmp_path / 'manifests' / 'default.pp').write_text('')
    cfg = ProvisionerConfig()
    cfg.paths.root_path = str(tmp_path)
    assert validate(cfg) == []


def test_validate_reports_problems(tmp_path: Path) -> None:
    (tmp_path / 'manifests').mkdir()
    cfg = ProvisionerConfig()
    cfg.paths.root_path = str(tmp_path)
    cfg.guest.platform = 'solaris'
    cfg.puppet.module_path = ['nope']
    cfg.puppet.hiera_config_path = 'hiera.yaml'
    problems = validate(cfg)
    assert any('guest.platform' in p for p in problems)
    assert any('manifest file does not exist' in p for p in problems)
    assert any('module path does not exist' in p for p in problems)
    assert any('hiera config file does not exist' in p for p in problems)


def test_validate_mode_exclusivity(tmp_path: Path) -> None:
    (tmp_path / 'envs').mkdir()
    cfg = ProvisionerConfig()
    cfg.paths.root_path = str(tmp_path)
    cfg.puppet.manifests_path = GuestPath('/etc/puppet/manifests')
    cfg.puppet.environment_path = HostPath('envs')
    problems = validate(cfg)
    assert problems == [
        'manifests_path and environment_path are mutually exclusive; '
        'environment mode would be used'
    ]


def test_validate_reports_duplicate_module_paths(tmp_path: Path) -> None:
    (tmp_path / 'manifests').mkdir()
    (tmp_path / 'manifests' / 'default.pp').write_text('')
    (tmp_path / 'mods').mkdir()
    cfg = ProvisionerConfig()
    cfg.paths.root_path = str(tmp_path)
    cfg.puppet.module_path = ['mods', './mods']
    assert validate(cfg) == [
        f'The module path is listed more than once: {tmp_path / "mods"}'
    ]
