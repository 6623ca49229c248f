from puppet.config import PuppetConfig


def test_defaults_are_valid():
    assert PuppetConfig().validate() == []


def test_validate_reports_each_problem():
    cfg = PuppetConfig()
    cfg.smoothing.mode = "median"
    cfg.smoothing.merge = "deep"
    cfg.smoothing.window_size = 0
    cfg.server.port = 70000
    cfg.logging.level = "LOUD"
    assert len(cfg.validate()) == 5


def test_save_and_load_round_trip(tmp_path):
    path = str(tmp_path / "cfg.json")
    cfg = PuppetConfig()
    cfg.smoothing.mode = "average"
    cfg.smoothing.window_size = 6
    assert cfg.save(path)

    loaded = PuppetConfig()
    assert loaded.load(path)
    assert loaded.smoothing.mode == "average"
    assert loaded.smoothing.window_size == 6


def test_load_missing_or_corrupt_file_keeps_defaults(tmp_path):
    cfg = PuppetConfig()
    assert not cfg.load(str(tmp_path / "missing.json"))

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert not cfg.load(str(bad))
    assert cfg.to_dict() == PuppetConfig().to_dict()


def test_from_dict_ignores_unknown_keys():
    cfg = PuppetConfig()
    cfg.from_dict({"smoothing": {"mode": "average", "color": "red"}, "camera": {"device": 1}})
    assert cfg.smoothing.mode == "average"
    assert not hasattr(cfg.smoothing, "color")
