# tests/test_config.py
"""Tests for TstructConfig, the Pydantic Settings single source of truth."""

import pytest


class TestTstructConfig:
    """Test TstructConfig defaults and overrides."""

    def test_default_values(self, monkeypatch):
        """Config should have sensible defaults without any env vars."""
        from tstruct.config import TstructConfig

        for name in ("DIRECTIVE_KEY", "HOOK_NAME", "INFER_REQUIRED", "COPY_RECORDS", "LOG_LEVEL"):
            monkeypatch.delenv(f"TSTRUCT_{name}", raising=False)
        cfg = TstructConfig()
        assert cfg.directive_key == "tstruct"
        assert cfg.hook_name == "tstruct_set"
        assert cfg.infer_required is False
        assert cfg.copy_records is True
        assert cfg.log_level == "WARNING"

    def test_env_override(self, monkeypatch):
        """Environment variables with TSTRUCT_ prefix override defaults."""
        from tstruct.config import TstructConfig

        monkeypatch.setenv("TSTRUCT_DIRECTIVE_KEY", "rec")
        monkeypatch.setenv("TSTRUCT_INFER_REQUIRED", "true")
        cfg = TstructConfig()
        assert cfg.directive_key == "rec"
        assert cfg.infer_required is True

    def test_invalid_log_level(self, monkeypatch):
        from pydantic import ValidationError

        from tstruct.config import TstructConfig

        monkeypatch.setenv("TSTRUCT_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            TstructConfig()

    def test_get_config_singleton(self):
        """get_config() returns the same instance."""
        from tstruct.config import get_config

        c1 = get_config()
        c2 = get_config()
        assert c1 is c2


class TestConfigEffects:
    """Config values change how records are registered and built."""

    def test_custom_directive_key(self):
        from dataclasses import dataclass, field

        from tstruct import MissingFieldsError, TstructConfig, build_registry

        @dataclass
        class Memo:
            body: str = field(default="", metadata={"rec": "+"})
            secret: str = field(default="", metadata={"tstruct": "-"})

        funcs = build_registry(Memo, config=TstructConfig(directive_key="rec"))
        assert "secret" in funcs
        with pytest.raises(MissingFieldsError):
            funcs["Memo"]()

    def test_custom_hook_name(self):
        from dataclasses import dataclass, field

        from tstruct import TstructConfig, build_registry

        @dataclass
        class Money:
            cents: int = 0

            def parse(self, text: str) -> None:
                self.cents = round(float(text) * 100)

        @dataclass
        class Payment:
            amount: Money = field(default_factory=Money)

        funcs = build_registry(Payment, config=TstructConfig(hook_name="parse"))
        assert "cents" not in funcs
        assert funcs["Payment"](funcs["amount"]("1.25")).amount == Money(125)

    def test_copy_records_disabled(self):
        from dataclasses import dataclass, field

        from tstruct import TstructConfig, build_registry

        @dataclass
        class Inner:
            n: int = 0

        @dataclass
        class Outer:
            inner: Inner = field(default_factory=Inner)

        funcs = build_registry(Outer, config=TstructConfig(copy_records=False))
        inner = funcs["Inner"](funcs["n"](1))
        assert funcs["Outer"](funcs["inner"](inner)).inner is inner
