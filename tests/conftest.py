import pytest

import puppet.config
from puppet.config import PuppetConfig


@pytest.fixture
def client(tmp_path, monkeypatch):
    """
    Flask test client on the module-level app, with config reset to defaults,
    config writes redirected to tmp_path and the engine reseeded.
    """
    monkeypatch.setattr(puppet.config, "CONFIG_FILE", str(tmp_path / "puppet_config.json"))

    from server.app import app, config, engine

    config.from_dict(PuppetConfig().to_dict())
    engine.seed()
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
    config.from_dict(PuppetConfig().to_dict())
    engine.seed()
