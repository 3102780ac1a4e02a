"""Tests for store location resolution."""

import stat

import pytest

from stamp.config import MEMO, STAMP, StoreConfig, load_config
from stamp.errors import ConfigError, ValidationError


class TestLoadConfig:
    def test_default_paths(self, tmp_path):
        cfg = load_config(STAMP, environ={}, home=tmp_path)
        assert cfg.path == tmp_path / ".stamp"
        assert cfg.categorized
        assert cfg.confirm_delete
        assert cfg.rc_path == tmp_path / ".stamprc"

        memo = load_config(MEMO, environ={}, home=tmp_path)
        assert memo.path == tmp_path / ".memo"
        assert memo.with_status

    def test_home_from_environment(self, tmp_path):
        cfg = load_config(STAMP, environ={"HOME": str(tmp_path)})
        assert cfg.path == tmp_path / ".stamp"

    def test_rc_file(self, tmp_path):
        (tmp_path / ".stamprc").write_text(
            "# notes live elsewhere\n"
            f'STAMP_PATH="{tmp_path / "notes"}"\n'
            "STAMP_CONFIRM_DELETE=no\n"
        )
        cfg = load_config(STAMP, environ={}, home=tmp_path)
        assert cfg.path == tmp_path / "notes"
        assert not cfg.confirm_delete

    def test_environment_wins_over_rc(self, tmp_path):
        (tmp_path / ".memorc").write_text(f"MEMO_PATH={tmp_path / 'from-rc'}\n")
        env = {"MEMO_PATH": str(tmp_path / "from-env"), "MEMO_CONFIRM_DELETE": "yes"}
        cfg = load_config(MEMO, environ=env, home=tmp_path)
        assert cfg.path == tmp_path / "from-env"
        assert cfg.confirm_delete

    def test_no_home_without_path(self):
        with pytest.raises(ConfigError):
            load_config(STAMP, environ={})

    def test_no_home_with_explicit_path(self, tmp_path):
        cfg = load_config(STAMP, environ={"STAMP_PATH": str(tmp_path / "n")})
        assert cfg.path == tmp_path / "n"
        assert cfg.rc_path is None


class TestStoreConfig:
    def test_store_paths(self, tmp_path):
        cfg = StoreConfig(path=tmp_path)
        assert cfg.store_path("") == tmp_path
        assert cfg.store_path("work") == tmp_path / "work"
        assert cfg.store("work").path == tmp_path / "work"
        with pytest.raises(ValidationError):
            cfg.store_path("../escape")

    def test_memo_store_ignores_category(self, tmp_path):
        cfg = StoreConfig(path=tmp_path / ".memo", categorized=False)
        assert cfg.store_path("anything") == tmp_path / ".memo"
        assert cfg.store().with_status

    def test_ensure_base_dir(self, tmp_path):
        cfg = StoreConfig(path=tmp_path / "a" / "b")
        cfg.ensure()
        assert cfg.path.is_dir()
        assert stat.S_IMODE(cfg.path.stat().st_mode) == 0o700

    def test_ensure_memo_file(self, tmp_path):
        cfg = StoreConfig(path=tmp_path / "sub" / ".memo", categorized=False)
        cfg.ensure()
        assert cfg.path.is_file()
        assert cfg.path.read_text() == ""
