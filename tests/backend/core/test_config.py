import pytest

from backend.core import config


def test_validate_runtime_config_requires_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', '')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_validate_runtime_config_accepts_configured_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'configured')

    config.validate_runtime_config()


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        (None, ['http://localhost:5173']),
        ('https://a.example, https://b.example', ['https://a.example', 'https://b.example']),
        ('', []),
    ],
)
def test_get_list(value, expected) -> None:
    assert config._get_list(value, default=['http://localhost:5173']) == expected
