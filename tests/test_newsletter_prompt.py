from datetime import timedelta

from src.database.redis import RedisCache
from src.storefront.newsletter_prompt import (
    SUBSCRIBED_KEY,
    NewsletterPromptPolicy,
    VisitorStorage,
    shown_key,
)


def test_popup_shows_once_per_trigger_and_source(clock):
    policy = NewsletterPromptPolicy(RedisCache(), clock=clock)

    assert policy.should_show("exit-intent")
    policy.mark_shown("exit-intent")
    assert not policy.should_show("exit-intent")
    assert policy.should_show("exit-intent", source="footer")
    assert policy.should_show("scroll")


def test_show_once_disabled_never_records(clock):
    cache = RedisCache()
    policy = NewsletterPromptPolicy(cache, clock=clock, show_once=False)
    policy.mark_shown("scroll")
    assert cache.get(shown_key("scroll", "homepage")) is None
    assert policy.should_show("scroll")


def test_recent_subscription_suppresses_popup_for_a_day(clock):
    cache = RedisCache()
    policy = NewsletterPromptPolicy(cache, clock=clock)
    policy.record_subscription()

    assert cache.get(SUBSCRIBED_KEY) == str(int(clock.now.timestamp() * 1000))
    assert not policy.should_show("time-delay")

    clock.now += timedelta(hours=23, minutes=59)
    assert not policy.should_show("time-delay")
    clock.now += timedelta(minutes=2)
    assert policy.should_show("time-delay")


def test_corrupt_subscription_flag_is_ignored(clock):
    cache = RedisCache()
    cache.set(SUBSCRIBED_KEY, "yesterday")
    assert not NewsletterPromptPolicy(cache, clock=clock).recently_subscribed()


def test_visitor_storage_scopes_flags(clock):
    cache = RedisCache()
    alice = NewsletterPromptPolicy(VisitorStorage(cache, "alice"), clock=clock)
    bob = NewsletterPromptPolicy(VisitorStorage(cache, "bob"), clock=clock)

    alice.mark_shown("manual")
    alice.record_subscription()

    assert cache.get("visitor:alice:" + shown_key("manual", "homepage")) == "true"
    assert not alice.should_show("scroll")
    assert bob.should_show("manual")
