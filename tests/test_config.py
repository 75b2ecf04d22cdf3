import threading

import pytest

from daemon_config import GameModeConfig
from daemon_config.constants import (
    CONFIG_LIST_MAX,
    CONFIG_NAME,
    CONFIG_VALUE_MAX,
    DEFAULT_REAPER_FREQ,
)
from daemon_config.exceptions import ConfigNotInitializedError, ConfigTornDownError

FULL = """\
[filter]
whitelist=foo
whitelist=bar
blacklist=evil

[general]
reaper_freq=10

[custom]
start=notify-send "on"
start=renice -n 5
end=notify-send "off"
"""


def test_defaults_without_file(config):
    assert config.source_path is None
    assert config.get_reaper_thread_frequency() == DEFAULT_REAPER_FREQ
    assert config.get_start_scripts() == ()
    assert config.get_end_scripts() == ()


def test_init_loads_file(make_config, write_config):
    path = write_config(FULL)
    cfg = make_config()
    cfg.init()
    assert cfg.source_path == str(path)
    assert cfg.reload_count == 1
    assert cfg.loaded_at is not None
    assert cfg.get_reaper_thread_frequency() == 10
    assert cfg.get_start_scripts() == ('notify-send "on"', "renice -n 5")
    assert cfg.get_end_scripts() == ('notify-send "off"',)


def test_empty_whitelist_allows_everything(config):
    assert config.is_client_whitelisted("anything")
    assert config.is_client_whitelisted("")


def test_empty_blacklist_blocks_nothing(config):
    assert not config.is_client_blacklisted("anything")
    assert not config.is_client_blacklisted("")


def test_substring_matching(config, write_config):
    write_config("[filter]\nwhitelist=foo\nblacklist=bad\n")
    config.reload()
    assert config.is_client_whitelisted("myfoogame")
    assert config.is_client_whitelisted("/usr/bin/foo --fullscreen")
    assert not config.is_client_whitelisted("bar")
    assert not config.is_client_whitelisted("")
    assert config.is_client_blacklisted("/opt/badgame")
    assert not config.is_client_blacklisted("goodgame")


def test_any_whitelist_entry_matches(config, write_config):
    write_config(FULL)
    config.reload()
    assert config.is_client_whitelisted("barbarian")
    assert config.is_client_whitelisted("foo")
    assert not config.is_client_whitelisted("baz")


def test_reload_clears_stale_state(config, write_config):
    write_config("[filter]\nwhitelist=x\n[general]\nreaper_freq=30\n")
    config.reload()
    assert not config.is_client_whitelisted("y")

    write_config("[custom]\nstart=echo\n")
    config.reload()
    assert config.is_client_whitelisted("y")
    assert config.get_reaper_thread_frequency() == DEFAULT_REAPER_FREQ
    assert config.get_start_scripts() == ("echo",)
    assert config.reload_count == 3


def test_reload_is_idempotent(config, write_config):
    write_config(FULL)
    config.reload()
    first = dict(config.snapshot())
    config.reload()
    assert dict(config.snapshot()) == first


def test_reload_after_file_removed_restores_defaults(config, write_config):
    path = write_config(FULL)
    config.reload()
    path.unlink()
    config.reload()
    assert config.source_path is None
    assert config.get_start_scripts() == ()
    assert config.get_reaper_thread_frequency() == DEFAULT_REAPER_FREQ


@pytest.mark.parametrize("raw", ["0", "-5", "abc", "", "99999999999999999999999"])
def test_invalid_reaper_freq_keeps_default(config, write_config, raw):
    write_config(f"[general]\nreaper_freq={raw}\n")
    config.reload()
    assert config.get_reaper_thread_frequency() == DEFAULT_REAPER_FREQ


def test_last_valid_reaper_freq_wins(config, write_config):
    write_config("[general]\nreaper_freq=7\nreaper_freq=0\nreaper_freq=11\nreaper_freq=x\n")
    config.reload()
    assert config.get_reaper_thread_frequency() == 11


def test_list_capacity_boundary(config, write_config):
    lines = "\n".join(f"start=script{i}" for i in range(CONFIG_LIST_MAX + 1))
    write_config(f"[custom]\n{lines}\n")
    config.reload()
    scripts = config.get_start_scripts()
    assert len(scripts) == CONFIG_LIST_MAX
    assert scripts == tuple(f"script{i}" for i in range(CONFIG_LIST_MAX))


def test_entry_length_boundary(config, write_config):
    ok = "a" * (CONFIG_VALUE_MAX - 1)
    too_long = "b" * CONFIG_VALUE_MAX
    write_config(f"[custom]\nend={ok}\nend={too_long}\nend=after\n")
    config.reload()
    assert config.get_end_scripts() == (ok, "after")


def test_unknown_sections_and_keys_are_ignored(config, write_config, info_logs):
    write_config("[filter]\nwhitelist=foo\ngreylist=x\n[other]\nwhitelist=y\n")
    config.reload()
    assert config.snapshot()["whitelist"] == ("foo",)
    assert "Value ignored [filter] greylist=x" in info_logs.text
    assert "Value ignored [other] whitelist=y" in info_logs.text


def test_script_lists_are_snapshots(config, write_config):
    write_config(FULL)
    config.reload()
    scripts = config.get_start_scripts()
    write_config("[custom]\nstart=other\n")
    config.reload()
    assert scripts == ('notify-send "on"', "renice -n 5")
    assert config.get_start_scripts() == ("other",)


def test_query_before_init_raises(make_config):
    cfg = make_config()
    with pytest.raises(ConfigNotInitializedError):
        cfg.is_client_whitelisted("x")
    with pytest.raises(ConfigNotInitializedError):
        cfg.reload()


def test_destroy_blocks_operations(make_config):
    cfg = make_config()
    cfg.init()
    cfg.destroy()
    assert cfg.torn_down
    with pytest.raises(ConfigTornDownError):
        cfg.get_reaper_thread_frequency()
    with pytest.raises(ConfigTornDownError):
        cfg.reload()
    with pytest.raises(ConfigTornDownError):
        cfg.init()
    with pytest.raises(ConfigTornDownError):
        cfg.register_post_reload_hook(lambda s: None)
    # second destroy is a no-op
    cfg.destroy()


def test_second_init_reloads(config):
    config.init()
    assert config.reload_count == 2


def test_context_manager(config_dir, write_config):
    write_config("[general]\nreaper_freq=2\n")
    with GameModeConfig(search_dirs=[str(config_dir)]) as cfg:
        assert cfg.initialized
        assert cfg.get_reaper_thread_frequency() == 2
    with pytest.raises(ConfigTornDownError):
        cfg.get_reaper_thread_frequency()


def test_direct_assignment_forbidden(config):
    with pytest.raises(AttributeError):
        config.whitelist = ["x"]  # type: ignore[attr-defined]


def test_instances_are_independent(make_config, tmp_path, write_config, config_dir):
    other_dir = tmp_path / "other"
    other_dir.mkdir()
    write_config("[general]\nreaper_freq=3\n")
    write_config("[general]\nreaper_freq=4\n", directory=other_dir)
    a = make_config()
    b = make_config(search_dirs=[str(other_dir)])
    a.init()
    b.init()
    assert a.get_reaper_thread_frequency() == 3
    assert b.get_reaper_thread_frequency() == 4


def test_post_reload_hooks(make_config, write_config):
    seen = []
    cfg = make_config()
    cfg.register_post_reload_hook(lambda snap: seen.append(snap["reaper_frequency"]))
    write_config("[general]\nreaper_freq=8\n")
    cfg.init()
    write_config("[general]\nreaper_freq=9\n")
    cfg.reload()
    assert seen == [8, 9]


@pytest.mark.parametrize("mode", ["log", "ignore"])
def test_failing_hook_does_not_break_init_or_reload(make_config, write_config, info_logs, mode):
    def boom(_):
        raise RuntimeError("hook failed")

    cfg = make_config(hook_failure_mode=mode)
    cfg.register_post_reload_hook(boom)
    write_config("[general]\nreaper_freq=8\n")
    cfg.init()
    assert cfg.get_reaper_thread_frequency() == 8

    write_config("[general]\nreaper_freq=9\n")
    cfg.reload()
    assert cfg.get_reaper_thread_frequency() == 9
    assert cfg.reload_count == 2
    assert "hook failed" in info_logs.text
    assert "1 reload hook(s) failed after load 2" in info_logs.text


def test_hook_failure_mode_cannot_propagate(make_config):
    with pytest.raises(ValueError):
        make_config(hook_failure_mode="raise")


def test_hooks_get_snapshot_of_their_own_load(make_config, write_config):
    seen = []
    cfg = make_config()

    def reload_once_more(snap):
        seen.append(("outer", snap["reaper_frequency"]))
        if snap["reaper_frequency"] == 8:
            write_config("[general]\nreaper_freq=9\n")
            cfg.reload()

    cfg.register_post_reload_hook(reload_once_more)
    cfg.register_post_reload_hook(lambda snap: seen.append(("last", snap["reaper_frequency"])))
    write_config("[general]\nreaper_freq=8\n")
    cfg.init()
    # the nested reload finishes first, then the first load's remaining hook still sees 8
    assert seen == [("outer", 8), ("outer", 9), ("last", 9), ("last", 8)]


def test_undecodable_bytes_are_kept_verbatim(make_config, config_dir):
    (config_dir / CONFIG_NAME).write_bytes(b"[filter]\nwhitelist=g\xffame\nblacklist=\xfe\xfe\n")
    cfg = make_config()
    cfg.init()
    assert cfg.snapshot()["whitelist"] == ("g\udcffame",)
    assert cfg.is_client_whitelisted("/usr/bin/g\udcffame")
    assert not cfg.is_client_whitelisted("g\ufffdame")
    assert cfg.is_client_blacklisted("x\udcfe\udcfey")
    assert not cfg.is_client_blacklisted("\udcfe")


def test_undecodable_byte_counts_as_one_byte(make_config, config_dir):
    fits = b"a" * (CONFIG_VALUE_MAX - 2) + b"\xff"
    too_long = b"b" * (CONFIG_VALUE_MAX - 1) + b"\xff"
    (config_dir / CONFIG_NAME).write_bytes(
        b"[custom]\nstart=" + fits + b"\nstart=" + too_long + b"\n"
    )
    cfg = make_config()
    cfg.init()
    scripts = cfg.get_start_scripts()
    assert len(scripts) == 1
    assert scripts[0].encode("utf-8", "surrogateescape") == fits


def test_repr(config):
    assert repr(config).startswith("<GameModeConfig")


def test_queries_never_see_mixed_state(config, write_config):
    file_a = "[filter]\nwhitelist=alpha\n[general]\nreaper_freq=10\n[custom]\nstart=a1\nend=a2\n"
    file_b = "[filter]\nblacklist=beta\n[general]\nreaper_freq=20\n[custom]\nstart=b1\nend=b2\n"
    state_a = {
        "whitelist": ("alpha",),
        "blacklist": (),
        "start_scripts": ("a1",),
        "end_scripts": ("a2",),
        "reaper_frequency": 10,
    }
    state_b = {
        "whitelist": (),
        "blacklist": ("beta",),
        "start_scripts": ("b1",),
        "end_scripts": ("b2",),
        "reaper_frequency": 20,
    }
    write_config(file_a)
    config.reload()

    stop = threading.Event()
    bad = []

    def reader():
        while not stop.is_set():
            snap = dict(config.snapshot())
            if snap not in (state_a, state_b):
                bad.append(snap)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    try:
        for i in range(50):
            write_config(file_b if i % 2 == 0 else file_a)
            config.reload()
    finally:
        stop.set()
        for t in readers:
            t.join(5)

    assert bad == []
