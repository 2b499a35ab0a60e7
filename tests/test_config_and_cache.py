from pathlib import Path

import pytest
import redis
from pydantic import ValidationError

from src.database.redis import RedisCache
from src.database.redis_real import RedisCache as RealRedisCache
from src.utils.config_loader import DEFAULT_CONFIG_PATH, StorefrontConfig, load_storefront_config


def test_bundled_config_loads():
    config = load_storefront_config()
    assert DEFAULT_CONFIG_PATH.exists()
    assert config.chat.typing_delay_seconds == 1.0
    assert config.newsletter.chatbot_list_id == 2
    assert config.catalog_dir().joinpath("products-f.json").exists()


def test_missing_config_falls_back_to_defaults(tmp_path):
    config = load_storefront_config(tmp_path / "nope.yml")
    assert config == StorefrontConfig()


def test_invalid_config_raises(tmp_path):
    path = tmp_path / "storefront.yml"
    path.write_text("chat:\n  typing_delay_seconds: -2\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_storefront_config(path)


def test_catalog_dir_resolves_relative_paths(tmp_path):
    config = StorefrontConfig(catalog={"data_dir": "custom"})
    assert config.catalog_dir(root=tmp_path) == tmp_path / "custom"
    absolute = StorefrontConfig(catalog={"data_dir": str(tmp_path)})
    assert absolute.catalog_dir() == Path(tmp_path)


def test_in_memory_cache_sessions_and_values():
    cache = RedisCache()
    cache.update_session("missing", {"a": 1})
    assert cache.get_session("missing") is None

    cache.set_session("s1", {"a": 1})
    cache.update_session("s1", {"b": 2})
    assert cache.get_session("s1") == {"a": 1, "b": 2}
    cache.delete_session("s1")
    assert cache.get_session("s1") is None

    cache.set("flag", 1)
    assert cache.get("flag") == "1"
    cache.delete("flag")
    assert cache.get("flag") is None
    assert cache.ping() is True


class FakeRedis:
    def __init__(self, fail_ping=False):
        self.data = {}
        self.ttls = {}
        self.fail_ping = fail_ping

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.data.pop(key, None)

    def ping(self):
        if self.fail_ping:
            raise redis.ConnectionError("down")
        return True


def test_redis_cache_prefixes_and_ttls():
    client = FakeRedis()
    cache = RealRedisCache("redis://unused", default_ttl=60, client=client)

    cache.set_session("s1", {"context": {"current_flow": None}}, ttl=1800)
    cache.update_session("s1", {"message_count": 3})
    assert cache.get_session("s1") == {"context": {"current_flow": None}, "message_count": 3}
    assert client.ttls["session:s1"] == 60

    cache.set("popup", "true")
    cache.set("sub", "123", ttl=10)
    assert client.data["kv:popup"] == "true"
    assert client.ttls["kv:sub"] == 10

    client.data["session:bad"] = "{not json"
    assert cache.get_session("bad") is None
    assert cache.ping() is True
    assert RealRedisCache("redis://unused", client=FakeRedis(fail_ping=True)).ping() is False
