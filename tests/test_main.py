from wedrop_inventory.config import ENV_API_TOKEN, ENV_API_URL
from wedrop_inventory.main import build_parser, load_settings, main


def test_parser_knows_every_command():
    parser = build_parser()

    for argv in (["test-connection"], ["stats"], ["abc", "--top", "3"], ["movements", "42"], ["snapshot"], ["api"]):
        args = parser.parse_args(argv)
        assert callable(args.func)


def test_missing_config_file_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_API_URL, "https://api.test/v1")
    monkeypatch.setenv(ENV_API_TOKEN, "env-token")

    settings = load_settings(str(tmp_path / "absent.yaml"))

    assert settings.api.is_configured
    assert settings.api.token == "env-token"


def test_test_connection_without_credentials(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv(ENV_API_URL, raising=False)
    monkeypatch.delenv(ENV_API_TOKEN, raising=False)

    exit_code = main(["--config", str(tmp_path / "absent.yaml"), "test-connection"])

    assert exit_code == 1
    assert "API não configurada" in capsys.readouterr().out
