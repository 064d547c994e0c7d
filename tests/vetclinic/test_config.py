import pytest

from vetclinic.core import config


def test_get_bool_parses_common_truthy_values() -> None:
    assert config._get_bool(' Yes ') is True
    assert config._get_bool('0') is False
    assert config._get_bool(None, default=True) is True


def test_get_list_splits_and_strips() -> None:
    assert config._get_list('http://a, http://b ,', ['x']) == ['http://a', 'http://b']
    assert config._get_list('', ['x']) == ['x']


def test_validate_runtime_config_accepts_defaults() -> None:
    config.validate_runtime_config()


@pytest.mark.parametrize(
    ('overrides', 'message'),
    [
        ({'APP_ENV': 'production', 'JWT_SECRET_KEY': 'change-me'}, 'JWT_SECRET_KEY'),
        ({'BUSINESS_OPEN_HOUR': 18, 'BUSINESS_CLOSE_HOUR': 17}, 'BUSINESS_OPEN_HOUR'),
        ({'BUSINESS_CLOSE_HOUR': 25}, 'BUSINESS_OPEN_HOUR'),
        ({'SLOT_INTERVAL_MINUTES': 0}, 'SLOT_INTERVAL_MINUTES'),
    ],
)
def test_validate_runtime_config_rejects_bad_settings(
    monkeypatch: pytest.MonkeyPatch, overrides: dict, message: str
) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'development')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'test-secret')
    monkeypatch.setattr(config, 'BUSINESS_OPEN_HOUR', 9)
    monkeypatch.setattr(config, 'BUSINESS_CLOSE_HOUR', 17)
    monkeypatch.setattr(config, 'SLOT_INTERVAL_MINUTES', 30)
    for name, value in overrides.items():
        monkeypatch.setattr(config, name, value)

    with pytest.raises(RuntimeError, match=message):
        config.validate_runtime_config()
