from __future__ import annotations

from keybot.env import path_from_home, resolve, resolve_from_environ, with_go_path


class TestResolve:
    def test_search_path_ends_with_shims(self):
        env = resolve("/home/bot")
        assert env.home_dir == "/home/bot"
        assert env.search_path == (
            "/sbin:/usr/sbin:/bin:/usr/bin:/usr/local/bin:/home/bot/.rbenv/shims"
        )
        assert env.go_path_override is None

    def test_from_environ_reads_home(self):
        env = resolve_from_environ({"HOME": "/Users/keybase", "GOPATH": "/ignored"})
        assert env.home_dir == "/Users/keybase"
        assert env.search_path.endswith(":/Users/keybase/.rbenv/shims")
        assert env.go_path_override is None

    def test_path_from_home(self):
        assert path_from_home(resolve("/home/bot"), "go-ios") == "/home/bot/go-ios"

    def test_with_go_path_copies(self):
        env = resolve("/home/bot")
        android = with_go_path(env, "/home/bot/go-android")
        assert android.go_path_override == "/home/bot/go-android"
        assert android.search_path == env.search_path
        assert env.go_path_override is None
