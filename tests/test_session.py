"""Tests for the click-to-play session API."""

import pytest

from clicktoplay.core.errors import UnknownOriginError
from clicktoplay.core.permissions import Permission
from clicktoplay.session import ClickToPlaySession, PluginHost

ORIGIN = "http://mochi.test:8888"
OTHER = "http://other.test"
URL = "http://mochi.test:8888/plugin_add_dynamically.html"


def scenario_a(session):
    """First object prompts, activation click allows the origin."""
    assert session.add_object(ORIGIN) == 0
    assert session.notification_visible() is True
    assert session.is_activated(0) is False

    result = session.click_activate(ORIGIN)
    assert result.ok
    assert result.activated == [0]
    assert session.is_activated(0) is True

    assert session.add_object(ORIGIN) == 1
    assert session.is_activated(1) is True


def test_session_is_a_plugin_host():
    assert isinstance(ClickToPlaySession(), PluginHost)


def test_plugin_host_requires_setters():
    assert {"set_click_to_play", "set_permission"} <= PluginHost.__abstractmethods__

    class ReadOnlyHost(PluginHost):
        def new_page(self, url):
            pass

        def add_object(self, origin):
            return 0

        def navigate(self, kind, url):
            pass

        def click_activate(self, origin, remember=False):
            pass

        def is_activated(self, index):
            return False

        def notification_visible(self):
            return False

        def object_count(self):
            return 0

    with pytest.raises(TypeError):
        ReadOnlyHost()


def test_no_notification_before_objects(session):
    assert session.notification_visible() is False
    assert session.object_count() == 0


def test_scenario_a_activation(session):
    scenario_a(session)
    assert len(session.gate.shown_events) == 1


def test_scenario_b_hash_change_keeps_activation(session):
    scenario_a(session)

    session.navigate("hash", URL + "#x")
    assert session.is_activated(0) is True
    assert session.is_activated(1) is True

    assert session.add_object(ORIGIN) == 2
    assert session.is_activated(2) is True


def test_scenario_c_history_replace_keeps_activation(session):
    scenario_a(session)
    session.navigate("hash", "#x")
    session.add_object(ORIGIN)

    session.navigate("replace", "http://mochi.test:8888/url2")
    assert session.add_object(ORIGIN) == 3
    assert all(session.is_activated(i) for i in range(4))


def test_scenario_d_full_load_requires_fresh_prompt(session):
    scenario_a(session)
    session.navigate("hash", "#x")
    session.add_object(ORIGIN)
    session.navigate("replace", "url2")
    session.add_object(ORIGIN)

    session.navigate("full", "http://mochi.test:8888/url3")
    assert session.object_count() == 0
    assert session.notification_visible() is False

    assert session.add_object(ORIGIN) == 0
    assert session.is_activated(0) is False
    assert session.notification_visible() is True
    assert len(session.gate.shown_events) == 2


def test_full_navigation_always_resets(session):
    session.add_object(ORIGIN)
    session.add_object(OTHER)
    session.navigate("full", URL)

    assert session.object_count() == 0
    assert session.notification_visible() is False
    with pytest.raises(IndexError):
        session.is_activated(0)


def test_click_activate_is_idempotent(session):
    session.add_object(ORIGIN)
    session.add_object(OTHER)
    session.add_object(ORIGIN)

    first = session.click_activate(ORIGIN)
    assert first.activated == [0, 2]
    assert session.is_activated(1) is False
    assert session.notification_visible() is True

    second = session.click_activate(ORIGIN)
    assert second.ok is False
    assert second.activated == []
    assert second.error["code"] == "UNKNOWN_ORIGIN"
    assert [session.is_activated(i) for i in range(3)] == [True, False, True]


def test_click_activate_strict_raises(session):
    with pytest.raises(UnknownOriginError):
        session.click_activate(ORIGIN, strict=True)


def test_click_activate_unknown_origin_is_noop(session):
    session.add_object(ORIGIN)
    result = session.click_activate(OTHER)

    assert result.ok is False
    assert session.is_activated(0) is False
    assert session.notification_visible() is True


def test_click_to_play_disabled():
    session = ClickToPlaySession(click_to_play=False)
    session.new_page(URL)

    session.add_object(ORIGIN)
    assert session.is_activated(0) is True
    assert session.notification_visible() is False
    assert session.gate.shown_events == []


def test_toggle_click_to_play_affects_new_objects(session):
    session.add_object(ORIGIN)
    session.set_click_to_play(False)
    session.add_object(ORIGIN)

    assert session.is_activated(0) is False
    assert session.is_activated(1) is True


def test_stored_blocked_permission_does_not_prompt(session):
    session.set_permission(ORIGIN, "block")
    session.add_object(ORIGIN)

    assert session.is_activated(0) is False
    assert session.gate.shown_events == []
    assert session.notification_visible() is True


def test_default_permissions_allow_origin():
    session = ClickToPlaySession(default_permissions={ORIGIN: Permission.ALLOWED})
    session.new_page(URL)
    session.add_object(ORIGIN + "/plugin.swf")

    assert session.is_activated(0) is True
    assert session.notification_visible() is False


def test_remembered_activation_survives_full_load(session):
    session.add_object(ORIGIN)
    session.click_activate(ORIGIN, remember=True)

    session.new_page(URL)
    session.add_object(ORIGIN)
    assert session.is_activated(0) is True

    session.clear_permissions()
    session.new_page(URL)
    session.add_object(ORIGIN)
    assert session.is_activated(0) is False


def test_origins_are_normalized(session):
    session.add_object("HTTP://Mochi.Test:8888/plugin.swf")
    result = session.click_activate("http://mochi.test:8888")

    assert result.activated == [0]
    assert session.page.object_at(0).origin == ORIGIN
