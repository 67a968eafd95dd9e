from divi_sync.cli import parse_args


def test_parse_args_defaults():
    args = parse_args(["sync"])
    assert args.command == "sync"
    assert args.data_dir == "./data"
    assert args.check_all is False
    assert args.resync_all is False
    assert args.overlay_config_dir is None


def test_parse_args_short_flags():
    args = parse_args(["sync", "-d", "mirror", "-a", "-A"])
    assert args.data_dir == "mirror"
    assert args.check_all is True
    assert args.resync_all is True


def test_parse_args_current_command():
    assert parse_args(["current"]).command == "current"
