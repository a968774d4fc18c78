"""Tests for the file-backed version list cache."""

import os
import time

from proxy.cache import VersionListCache, serialize_versions


class TestSerializeVersions:
    def test_newline_joined_with_trailing_newline(self):
        assert serialize_versions(["v1.0.0", "v1.1.0"]) == b"v1.0.0\nv1.1.0\n"

    def test_empty_list_is_empty(self):
        assert serialize_versions([]) == b""


class TestVersionListCache:
    """Tests for lookup/store on disk."""

    def test_path_uses_escaped_module(self, tmp_path):
        cache = VersionListCache(str(tmp_path))
        expected = os.path.join(str(tmp_path), "github.com/!burnt!sushi/toml", "@v", "listproxy")
        assert cache.path_for("github.com/BurntSushi/toml") == expected

    def test_miss_when_absent(self, tmp_path):
        cache = VersionListCache(str(tmp_path))
        assert cache.lookup("example.com/m") is None

    def test_store_then_lookup(self, tmp_path):
        cache = VersionListCache(str(tmp_path))

        with cache.store("example.com/m", ["v0.1.0", "v0.2.0"]) as f:
            assert f.read() == b"v0.1.0\nv0.2.0\n"

        with cache.lookup("example.com/m") as f:
            assert f.read() == b"v0.1.0\nv0.2.0\n"

        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 0

    def test_store_empty_list_writes_empty_file(self, tmp_path):
        cache = VersionListCache(str(tmp_path))
        with cache.store("example.com/m", []) as f:
            assert f.read() == b""
        assert os.path.getsize(cache.path_for("example.com/m")) == 0

    def test_expired_entry_is_a_miss(self, tmp_path):
        cache = VersionListCache(str(tmp_path), ttl=300)
        cache.store("example.com/m", ["v1.0.0"]).close()

        old = time.time() - 301
        os.utime(cache.path_for("example.com/m"), (old, old))

        assert cache.lookup("example.com/m") is None

    def test_store_replaces_and_leaves_no_temp_files(self, tmp_path):
        cache = VersionListCache(str(tmp_path))
        cache.store("example.com/m", ["v1.0.0"]).close()
        cache.store("example.com/m", ["v1.0.0", "v1.0.1"]).close()

        directory = os.path.dirname(cache.path_for("example.com/m"))
        assert os.listdir(directory) == ["listproxy"]
        with open(cache.path_for("example.com/m"), "rb") as f:
            assert f.read() == b"v1.0.0\nv1.0.1\n"

    def test_created_directories_are_not_world_writable(self, tmp_path):
        cache = VersionListCache(str(tmp_path))
        cache.store("example.com/m", ["v1.0.0"]).close()

        mode = os.stat(os.path.dirname(cache.path_for("example.com/m"))).st_mode
        assert mode & 0o002 == 0
