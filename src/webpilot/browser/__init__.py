"""Browser automation modules (Playwright, async API).

``session`` owns the browser and the active page. The primitives it
exposes live in ``actions`` (type, click, select, waits), ``locator``
(soft lookups and value reads) and ``custom_select`` (non-native
dropdowns), all timed through ``timing``.

Identity and anti-detection are handled by ``stealth``; request filtering
by ``interception``; download policy and tab cleanup go through the
DevTools protocol in ``downloads`` and ``targets``.
"""
