"""Tests for navigation tracking."""

import pytest

from clicktoplay.core.navigation import NavigationKind, NavigationTracker, TrackerState

URL = "http://mochi.test:8888/plugin_add_dynamically.html"


@pytest.fixture
def tracker():
    t = NavigationTracker()
    t.full_load(URL)
    return t


def test_initial_state():
    tracker = NavigationTracker()
    assert tracker.state == TrackerState.INITIAL
    assert tracker.page.url == "about:blank"
    assert len(tracker.page) == 0


def test_full_load_replaces_page(tracker):
    old_page = tracker.page
    old_page.add_object("http://a.test").activate()

    new_page = tracker.full_load("http://other.test/")

    assert tracker.state == TrackerState.LOADED
    assert new_page is tracker.page
    assert new_page is not old_page
    assert new_page.url == "http://other.test/"
    assert len(new_page) == 0
    assert len(old_page) == 0


@pytest.mark.parametrize("kind", ["hash", "replace"])
def test_in_page_navigation_keeps_objects(tracker, kind):
    page = tracker.page
    page.add_object("http://a.test").activate()
    page.add_object("http://a.test")

    result = tracker.navigate(kind, "#somewhere")

    assert result is page
    assert tracker.page is page
    assert len(page) == 2
    assert page.object_at(0).activated is True
    assert page.object_at(1).activated is False


def test_relative_urls_resolve_against_current_page(tracker):
    tracker.hash_change("#anchorNavigation")
    assert tracker.page.url == URL + "#anchorNavigation"

    tracker.history_replace("replacedState")
    assert tracker.page.url == "http://mochi.test:8888/replacedState"

    assert [kind for kind, _ in tracker.history] == [
        NavigationKind.FULL, NavigationKind.HASH, NavigationKind.REPLACE
    ]


def test_reset_listeners_run_on_full_load_only(tracker):
    seen = []
    tracker.add_reset_listener(seen.append)

    tracker.hash_change("#a")
    tracker.history_replace("b")
    assert seen == []

    tracker.full_load(URL)
    assert seen == [tracker.page]


def test_in_page_navigation_before_load():
    tracker = NavigationTracker()
    tracker.hash_change("http://a.test/#x")
    assert tracker.state == TrackerState.INITIAL
    assert tracker.page.url == "http://a.test/#x"


def test_fragment_on_blank_page():
    tracker = NavigationTracker()
    tracker.hash_change("#x")
    assert tracker.page.url == "about:blank#x"

    tracker.hash_change("#y")
    assert tracker.page.url == "about:blank#y"

    tracker.history_replace("replacedState")
    assert tracker.page.url == "replacedState"


def test_navigation_kind_parse():
    assert NavigationKind.parse("FULL") == NavigationKind.FULL
    assert NavigationKind.parse(NavigationKind.HASH) == NavigationKind.HASH
    with pytest.raises(ValueError, match="Unknown navigation kind"):
        NavigationKind.parse("reload")
