"""
Dashboard page object.

The dashboard is the landing screen after login.  It carries the top bar
(breadcrumb header, user dropdown with Logout), the side panel with module
links and the search box that filters those links.
"""

from __future__ import annotations

import logging
import re

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hrm_bdd.pages.base_page import BasePage
from hrm_bdd.pages.locators import LocatorChain, chain, css, placeholder, role

logger = logging.getLogger(__name__)

DASHBOARD_HEADER = chain(
    "dashboard header",
    css(".oxd-topbar-header-breadcrumb"),
    css(".oxd-topbar-header"),
)
USER_DROPDOWN = chain("user dropdown", css(".oxd-userdropdown-tab"))
LOGOUT_OPTION = chain("logout option", role("menuitem", "Logout"), css('a[href*="logout"]'))
SEARCH_INPUT = chain("menu search", placeholder("Search"))
SIDE_MENU = chain("side menu", css(".oxd-sidepanel"))
DASHBOARD_WIDGETS = chain("dashboard widgets", css(".oxd-dashboard-widget"))
PROFILE_PICTURE = chain("profile picture", css(".oxd-userdropdown-img"))
MENU_ITEMS = chain("menu items", css(".oxd-main-menu-item"))

DASHBOARD_URL_PATTERN = re.compile(r".*dashboard")


def module_link(module_name: str) -> LocatorChain:
    """Side-panel link for a module, e.g. ``Admin`` or ``My Info``."""
    return chain(
        f"{module_name} menu link",
        role("link", module_name, exact=True),
        css(".oxd-main-menu-item", has_text=module_name),
    )


class DashboardPage(BasePage):
    """Page object for the OrangeHRM dashboard and its navigation chrome."""

    # -------------------------------------------------------------------------
    # Load state
    # -------------------------------------------------------------------------

    def is_dashboard_loaded(self, timeout: int = 10000) -> bool:
        """Return True once the header shows up within ``timeout``."""
        return self.appears_within(DASHBOARD_HEADER, timeout)

    def wait_for_dashboard_load(self, timeout: int = 20000) -> None:
        """
        Wait for a dashboard URL, then briefly for the header.

        Raises:
            playwright.sync_api.TimeoutError: If the URL never matches.
        """
        logger.info("Waiting for dashboard to load")
        self.wait_for_url(DASHBOARD_URL_PATTERN, timeout)
        try:
            self.wait_for_element(DASHBOARD_HEADER, 5000)
        except PlaywrightTimeoutError:
            logger.warning("Dashboard header not found within timeout")

    def is_on_dashboard_page(self) -> bool:
        return "dashboard" in self.current_url()

    def header_text(self) -> str:
        return self.get_text(DASHBOARD_HEADER)

    def is_header_visible(self) -> bool:
        return self.is_visible(DASHBOARD_HEADER)

    def is_user_dropdown_visible(self) -> bool:
        return self.is_visible(USER_DROPDOWN)

    def is_side_menu_visible(self) -> bool:
        return self.is_visible(SIDE_MENU)

    def is_profile_picture_displayed(self) -> bool:
        return self.is_visible(PROFILE_PICTURE)

    def widget_count(self) -> int:
        return self.count(DASHBOARD_WIDGETS)

    def visible_menu_items(self) -> list[str]:
        return self.all_texts(MENU_ITEMS)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def open_user_dropdown(self) -> None:
        self.click(USER_DROPDOWN)

    def click_logout(self) -> None:
        self.click(LOGOUT_OPTION)
        self.wait_for_page_load()

    def logout(self) -> None:
        """Open the user dropdown and choose Logout."""
        logger.info("Performing logout")
        self.open_user_dropdown()
        self.click_logout()

    def navigate_to_module(self, module_name: str) -> None:
        """
        Open a module from the side panel.

        Args:
            module_name: Visible link text, e.g. ``PIM``.
        """
        logger.info("Navigating to %s module", module_name)
        self.click(module_link(module_name))
        self.wait_for_page_load()

    def is_module_available(self, module_name: str) -> bool:
        return self.is_visible(module_link(module_name))

    def search_menu(self, term: str) -> None:
        """Filter the side panel with the search box."""
        logger.info("Searching menu for: %s", term)
        self.fill(SEARCH_INPUT, term, clear=True)
        self.press_key("Enter")
