from salesdesk_auth.constants import _get_env_bool, _get_env_int, _get_env_str


def test_get_env_int_valid_integer(monkeypatch):
    monkeypatch.setenv("TEST_VAR", "123")
    assert _get_env_int("TEST_VAR", 999) == 123


def test_get_env_int_invalid_string(monkeypatch, capsys):
    monkeypatch.setenv("TEST_VAR", "3.14")
    assert _get_env_int("TEST_VAR", 999) == 999
    assert "Invalid integer value for TEST_VAR" in capsys.readouterr().out


def test_get_env_int_unset(monkeypatch):
    monkeypatch.delenv("TEST_VAR", raising=False)
    assert _get_env_int("TEST_VAR", 7) == 7


def test_get_env_str_blank_uses_default(monkeypatch):
    monkeypatch.setenv("TEST_VAR", "   ")
    assert _get_env_str("TEST_VAR", "fallback") == "fallback"
    monkeypatch.setenv("TEST_VAR", " https://erp.example.com/api ")
    assert _get_env_str("TEST_VAR", "fallback") == "https://erp.example.com/api"


def test_get_env_bool(monkeypatch):
    monkeypatch.delenv("TEST_VAR", raising=False)
    assert _get_env_bool("TEST_VAR") is False
    assert _get_env_bool("TEST_VAR", True) is True
    for truthy in ("true", "1", "YES"):
        monkeypatch.setenv("TEST_VAR", truthy)
        assert _get_env_bool("TEST_VAR") is True
    monkeypatch.setenv("TEST_VAR", "off")
    assert _get_env_bool("TEST_VAR", True) is False
