from marketscraper import playwright_env


def test_launch_kwargs_defaults(monkeypatch) -> None:
    for name in (
        "MARKETSCRAPER_HEADLESS",
        "MARKETSCRAPER_BROWSER_CHANNEL",
        "MARKETSCRAPER_PROXY",
        "MARKETSCRAPER_SLOW_MO_MS",
        "MARKETSCRAPER_CHROMIUM_ARGS",
    ):
        monkeypatch.delenv(name, raising=False)

    kwargs = playwright_env.launch_kwargs()

    assert kwargs["headless"] is True
    assert "--disable-blink-features=AutomationControlled" in kwargs["args"]
    assert "channel" not in kwargs
    assert "proxy" not in kwargs
    assert "slow_mo" not in kwargs


def test_launch_kwargs_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MARKETSCRAPER_HEADLESS", "false")
    monkeypatch.setenv("MARKETSCRAPER_BROWSER_CHANNEL", "chrome")
    monkeypatch.setenv("MARKETSCRAPER_PROXY", "10.0.0.1:8080")
    monkeypatch.setenv("MARKETSCRAPER_SLOW_MO_MS", "250")
    monkeypatch.setenv("MARKETSCRAPER_CHROMIUM_ARGS", "--lang=tr-TR")

    kwargs = playwright_env.launch_kwargs()

    assert kwargs["headless"] is False
    assert kwargs["channel"] == "chrome"
    assert kwargs["proxy"] == {"server": "http://10.0.0.1:8080"}
    assert kwargs["slow_mo"] == 250
    assert kwargs["args"][-1] == "--lang=tr-TR"


def test_viewport_parsing(monkeypatch) -> None:
    monkeypatch.delenv("MARKETSCRAPER_VIEWPORT", raising=False)
    assert playwright_env.viewport() == {"width": 1280, "height": 1200}

    monkeypatch.setenv("MARKETSCRAPER_VIEWPORT", "1920x1080")
    assert playwright_env.viewport() == {"width": 1920, "height": 1080}

    monkeypatch.setenv("MARKETSCRAPER_VIEWPORT", "wide")
    assert playwright_env.viewport() == {"width": 1280, "height": 1200}
