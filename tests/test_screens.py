"""Tests for dealersdojo.core.screens: screen navigation."""

from __future__ import annotations

from dealersdojo.core.screens import Screen, ScreenNavigator
from dealersdojo.core.session import SessionController

from conftest import ScriptedRelay


class TestScreenNavigator:
    def test_starts_on_start_screen(self):
        nav = ScreenNavigator()
        assert nav.active is Screen.START
        assert nav.is_visible(Screen.START)
        assert not nav.is_visible(Screen.GAME)

    def test_exactly_one_visible(self):
        nav = ScreenNavigator()
        nav.show(Screen.DEBRIEF)
        assert [s for s in Screen if nav.is_visible(s)] == [Screen.DEBRIEF]

    def test_listeners_notified_on_change_only(self):
        nav = ScreenNavigator()
        seen = []
        nav.on_change(seen.append)
        nav.show(Screen.LEVEL_SELECT)
        nav.show(Screen.LEVEL_SELECT)
        assert seen == [Screen.LEVEL_SELECT]


class TestBoundToController:
    def test_full_lifecycle(self, controller: SessionController, relay: ScriptedRelay):
        nav = ScreenNavigator()
        nav.bind(controller)
        nav.show(Screen.LEVEL_SELECT)

        relay.outcomes = [4, 4, 4]
        controller.start_level(1)
        assert nav.active is Screen.GAME

        controller.submit_turn("a")
        controller.submit_turn("b")
        assert nav.active is Screen.GAME
        controller.submit_turn("c")
        assert nav.active is Screen.DEBRIEF

        controller.return_to_level_select()
        assert nav.active is Screen.LEVEL_SELECT

    def test_unknown_level_keeps_screen(self, controller: SessionController):
        nav = ScreenNavigator()
        nav.bind(controller)
        nav.show(Screen.LEVEL_SELECT)
        controller.start_level(404)
        assert nav.active is Screen.LEVEL_SELECT

    def test_abandon_mission_returns_to_select(self, controller: SessionController):
        nav = ScreenNavigator()
        nav.bind(controller)
        controller.start_level(1)
        controller.return_to_level_select()
        assert nav.active is Screen.LEVEL_SELECT

    def test_rebind_replaces_subscription(self, controller: SessionController):
        nav = ScreenNavigator()
        nav.bind(controller)
        nav.bind(controller)
        seen = []
        nav.on_change(seen.append)
        controller.start_level(1)
        assert seen == [Screen.GAME]
