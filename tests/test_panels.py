"""
Tests for panel behaviour that does not need a DearPyGui context.
"""

import pytest

pytest.importorskip("dearpygui")

from nervechip.gui.panels import InfoPanel  # noqa: E402
from nervechip.stages import COMPONENT_INFO  # noqa: E402


class TestInfoPanel:
    """Tests for the hover description panel."""

    def test_close_button_clears_panel(self, monkeypatch):
        panel = InfoPanel()
        calls = []
        monkeypatch.setattr(panel, "clear", lambda: calls.append("clear"))

        panel._on_close_click(None, None)

        assert calls == ["clear"]

    def test_clear_before_create_is_noop(self):
        panel = InfoPanel()
        panel.clear()
        panel.show(COMPONENT_INFO["medium_channel"])
        panel.show(None)
