"""
System Users page object (Admin > User Management > Users).

Covers the filter form (username, role, employee name, status), the
Search/Reset/Add buttons and the results table with its per-row action
buttons.

Key Concepts Demonstrated:
- Custom dropdown handling (click the widget, then the ``option`` role)
- Column reads scoped to the table body
- Result checks that report mismatches instead of raising
"""

from __future__ import annotations

import logging
import re

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hrm_bdd.pages.base_page import BasePage
from hrm_bdd.pages.locators import LocatorChain, chain, css, role

logger = logging.getLogger(__name__)

USERNAME_FILTER = chain(
    "username filter",
    css('input[name="username"]'),
    css('.oxd-input[placeholder*="Username"]'),
    css(".oxd-grid-item input"),
)
USER_ROLE_DROPDOWN = chain("user role dropdown", css(".oxd-select-text-input", nth=0))
STATUS_DROPDOWN = chain("status dropdown", css(".oxd-select-text-input", nth=1))
EMPLOYEE_NAME_INPUT = chain(
    "employee name filter",
    css('input[placeholder*="Type for hints"]'),
    css('input[placeholder*="Employee Name"]'),
)

SEARCH_BUTTON = chain("search button", role("button", "Search"))
RESET_BUTTON = chain("reset button", role("button", "Reset"))
ADD_BUTTON = chain("add button", role("button", "Add"))

RESULTS_TABLE = chain("results table", css(".oxd-table"), css('[role="table"]'))
TABLE_ROWS = chain(
    "result rows",
    css(".oxd-table-body .oxd-table-card"),
    css('.oxd-table-row:not(:has-text("Username"))'),
)
NO_RECORDS_MESSAGE = chain(
    "no records message",
    css(".oxd-toast-content--info"),
    css('.oxd-table-body:has-text("No Records Found")'),
)

EDIT_BUTTONS = chain(
    "edit buttons",
    css(".oxd-table-cell-actions button:has(i.bi-pencil-fill)"),
    css('.oxd-icon-button:has(i[class*="edit"])'),
)
DELETE_BUTTONS = chain(
    "delete buttons",
    css(".oxd-table-cell-actions button:has(i.bi-trash)"),
    css('.oxd-icon-button:has(i[class*="trash"]), .oxd-icon-button:has(i[class*="delete"])'),
)
ACTIONS_CELL = chain(
    "actions column",
    css(".oxd-table-cell-actions"),
    css(".oxd-table-cell:last-child"),
)

# 1-based column positions in the results table
USERNAME_COLUMN = 2
ROLE_COLUMN = 3
EMPLOYEE_NAME_COLUMN = 4
STATUS_COLUMN = 5

ADMIN_URL_PATTERN = re.compile(r".*admin.*")


def column_cells(position: int) -> LocatorChain:
    return chain(
        f"column {position} cells",
        css(f".oxd-table-body .oxd-table-cell:nth-child({position})"),
        css(f".oxd-table-cell:nth-child({position})"),
    )


def dropdown_option(text: str) -> LocatorChain:
    return chain(f"option '{text}'", role("option", text, exact=True))


class UserManagementPage(BasePage):
    """Page object for the System Users screen."""

    # -------------------------------------------------------------------------
    # Load state
    # -------------------------------------------------------------------------

    def wait_for_system_users_page_load(self) -> None:
        """
        Wait for an admin URL and the filter form.

        Raises:
            playwright.sync_api.TimeoutError: If the page never loads.
        """
        logger.info("Waiting for System Users page to load")
        self.wait_for_url(ADMIN_URL_PATTERN, 10000)
        self.wait_for_element(SEARCH_BUTTON, 5000)
        self.wait_for_element(USERNAME_FILTER, 5000)

    def is_on_system_users_page(self) -> bool:
        url = self.current_url()
        return "admin" in url and "viewSystemUsers" in url

    def wait_for_results(self) -> None:
        """Let the search request settle, then wait for the table."""
        self.wait_for_page_load()
        try:
            self.wait_for_element(RESULTS_TABLE, 5000)
        except PlaywrightTimeoutError:
            logger.warning("Results table not visible within timeout")

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def enter_username_filter(self, username: str) -> None:
        self.fill(USERNAME_FILTER, username, clear=True)

    def select_user_role(self, role_name: str) -> None:
        logger.info("Selecting user role: %s", role_name)
        self.click(USER_ROLE_DROPDOWN)
        self.click(dropdown_option(role_name))

    def select_status(self, status: str) -> None:
        logger.info("Selecting status: %s", status)
        self.click(STATUS_DROPDOWN)
        self.click(dropdown_option(status))

    def enter_employee_name(self, employee_name: str) -> None:
        self.fill(EMPLOYEE_NAME_INPUT, employee_name, clear=True)

    def select_employee_from_dropdown(self, employee_name: str) -> None:
        """Pick the first suggestion containing ``employee_name``."""
        suggestion = chain(
            f"suggestion '{employee_name}'",
            css(".oxd-autocomplete-option", has_text=employee_name),
        )
        self.click(suggestion, timeout=5000)

    # -------------------------------------------------------------------------
    # Buttons
    # -------------------------------------------------------------------------

    def click_search(self) -> None:
        self.click(SEARCH_BUTTON)
        self.wait_for_results()

    def click_reset(self) -> None:
        self.click(RESET_BUTTON)
        self.wait_for_page_load()

    def click_add(self) -> None:
        self.click(ADD_BUTTON)
        self.wait_for_page_load()

    def search_by_username(self, username: str) -> None:
        self.enter_username_filter(username)
        self.click_search()

    def search_by_user_role(self, role_name: str) -> None:
        self.select_user_role(role_name)
        self.click_search()

    def search_by_status(self, status: str) -> None:
        self.select_status(status)
        self.click_search()

    def search_by_employee_name(self, employee_name: str) -> None:
        self.enter_employee_name(employee_name)
        self.select_employee_from_dropdown(employee_name)
        self.click_search()

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def results_count(self) -> int:
        count = self.count(TABLE_ROWS)
        logger.info("Found %d results", count)
        return count

    def are_results_displayed(self) -> bool:
        return self.results_count() > 0

    def is_no_records_message_displayed(self, timeout: int = 5000) -> bool:
        return self.appears_within(NO_RECORDS_MESSAGE, timeout) and self.is_visible(NO_RECORDS_MESSAGE)

    def usernames(self) -> list[str]:
        return self.all_texts(column_cells(USERNAME_COLUMN))

    def user_roles(self) -> list[str]:
        return self.all_texts(column_cells(ROLE_COLUMN))

    def employee_names(self) -> list[str]:
        return self.all_texts(column_cells(EMPLOYEE_NAME_COLUMN))

    def statuses(self) -> list[str]:
        return self.all_texts(column_cells(STATUS_COLUMN))

    def usernames_not_containing(self, term: str) -> list[str]:
        """Usernames in the results that do not contain ``term`` (case-insensitive)."""
        return [name for name in self.usernames() if term.lower() not in name.lower()]

    def roles_not_matching(self, expected: str) -> list[str]:
        return [value for value in self.user_roles() if value.lower() != expected.lower()]

    def statuses_not_matching(self, expected: str) -> list[str]:
        return [value for value in self.statuses() if value.lower() != expected.lower()]

    def employee_names_not_containing(self, term: str) -> list[str]:
        return [name for name in self.employee_names() if term.lower() not in name.lower()]

    # -------------------------------------------------------------------------
    # Form and row controls
    # -------------------------------------------------------------------------

    def is_username_filter_visible(self) -> bool:
        return self.is_visible(USERNAME_FILTER)

    def is_user_role_dropdown_visible(self) -> bool:
        return self.is_visible(USER_ROLE_DROPDOWN)

    def is_employee_name_input_visible(self) -> bool:
        return self.is_visible(EMPLOYEE_NAME_INPUT)

    def is_status_dropdown_visible(self) -> bool:
        return self.is_visible(STATUS_DROPDOWN)

    def is_search_button_visible(self) -> bool:
        return self.is_visible(SEARCH_BUTTON)

    def is_reset_button_visible(self) -> bool:
        return self.is_visible(RESET_BUTTON)

    def is_add_button_visible(self) -> bool:
        return self.is_visible(ADD_BUTTON)

    def are_filters_cleared(self) -> bool:
        return self.input_value(USERNAME_FILTER) == "" and self.input_value(EMPLOYEE_NAME_INPUT) == ""

    def edit_button_count(self) -> int:
        return self.count(EDIT_BUTTONS)

    def delete_button_count(self) -> int:
        return self.count(DELETE_BUTTONS)

    def every_row_has_edit_button(self) -> bool:
        rows = self.results_count()
        buttons = self.edit_button_count()
        logger.info("Rows: %d, edit buttons: %d", rows, buttons)
        return rows > 0 and buttons >= rows

    def every_row_has_delete_button(self) -> bool:
        rows = self.results_count()
        buttons = self.delete_button_count()
        logger.info("Rows: %d, delete buttons: %d", rows, buttons)
        return rows > 0 and buttons >= rows

    def are_action_buttons_visible(self) -> bool:
        return self.is_visible(ACTIONS_CELL)
