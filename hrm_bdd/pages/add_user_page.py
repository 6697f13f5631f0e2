"""Add/Edit User form object (Admin > User Management > Add)."""

from __future__ import annotations

import logging
import re

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hrm_bdd.pages.base_page import BasePage
from hrm_bdd.pages.locators import LocatorChain, chain, css, label, role

logger = logging.getLogger(__name__)

USER_ROLE_DROPDOWN = chain("user role dropdown", css(".oxd-select-text-input", nth=0))
STATUS_DROPDOWN = chain("status dropdown", css(".oxd-select-text-input", nth=1))
EMPLOYEE_NAME_INPUT = chain("employee name input", css('input[placeholder*="Type for hints"]'))
EMPLOYEE_SUGGESTIONS = chain("employee suggestions", css(".oxd-autocomplete-dropdown"))
USERNAME_INPUT = chain(
    "username input",
    css('.oxd-form-row .oxd-input-group:has-text("Username") input'),
    label(re.compile(r"username", re.IGNORECASE)),
    css('input[placeholder*="Username"]'),
    css(".oxd-input", nth=3),
)
PASSWORD_INPUT = chain("password input", css('input[type="password"]', nth=0))
CONFIRM_PASSWORD_INPUT = chain("confirm password input", css('input[type="password"]', nth=1))

SAVE_BUTTON = chain("save button", role("button", "Save"))
CANCEL_BUTTON = chain("cancel button", role("button", "Cancel"))

SUCCESS_MESSAGE = chain(
    "success toast",
    css(".oxd-toast-content--success"),
    css(".oxd-text--toast-message"),
)
ERROR_MESSAGE = chain(
    "form error",
    css(".oxd-toast-content--error"),
    css(".oxd-input-field-error-message"),
)
PAGE_TITLE = chain(
    "form title",
    css(".oxd-text--h6, h6", has_text=re.compile(r"Add User|Edit User", re.IGNORECASE)),
)


def _suggestion(text: str | re.Pattern, description: str) -> LocatorChain:
    return chain(description, css(".oxd-autocomplete-option", has_text=text))


class AddUserPage(BasePage):
    """
    Page object for the Add User form.

    Provides methods for:
    - Filling each form field
    - Creating a user in one call
    - Reading the save result
    """

    def wait_for_add_user_page_load(self) -> None:
        """
        Wait until the role dropdown and Save button are visible.

        Raises:
            playwright.sync_api.TimeoutError: If the form never renders.
        """
        logger.info("Waiting for Add User page to load")
        self.wait_for_element(USER_ROLE_DROPDOWN, 10000)
        self.wait_for_element(SAVE_BUTTON, 5000)

    def is_on_add_user_page(self) -> bool:
        title = self.get_text(PAGE_TITLE, timeout=5000)
        return "Add User" in title or "Edit User" in title

    # -------------------------------------------------------------------------
    # Form fields
    # -------------------------------------------------------------------------

    def select_user_role(self, role_name: str) -> None:
        logger.info("Selecting user role: %s", role_name)
        self.click(USER_ROLE_DROPDOWN)
        self.click(chain(f"option '{role_name}'", role("option", role_name, exact=True)))

    def select_status(self, status: str) -> None:
        logger.info("Selecting status: %s", status)
        self.click(STATUS_DROPDOWN)
        self.click(chain(f"option '{status}'", role("option", status, exact=True)))

    def enter_employee_name(self, employee_name: str) -> None:
        self.fill(EMPLOYEE_NAME_INPUT, employee_name, clear=True)

    def select_employee_from_suggestions(self, employee_name: str) -> bool:
        """
        Click the suggestion for ``employee_name``.

        An exact match is preferred over a partial one.  The demo's
        autocomplete is unreliable, so an empty suggestion list is logged
        rather than raised; the missing employee then surfaces as a form
        error on save.

        Returns:
            True when a suggestion was clicked.
        """
        try:
            self.wait_for_element(EMPLOYEE_SUGGESTIONS, 10000)
        except PlaywrightTimeoutError:
            logger.warning("Autocomplete suggestions did not appear for '%s'", employee_name)

        exact = _suggestion(
            re.compile(rf"^\s*{re.escape(employee_name)}\s*$"),
            f"exact suggestion '{employee_name}'",
        )
        partial = _suggestion(employee_name, f"suggestion containing '{employee_name}'")
        for candidate in (exact, partial):
            if self.count(candidate) > 0:
                self.click(candidate, timeout=5000)
                logger.info("Employee '%s' selected from suggestions", employee_name)
                return True

        logger.warning("No autocomplete suggestions found for '%s'", employee_name)
        return False

    def enter_username(self, username: str) -> None:
        self.fill(USERNAME_INPUT, username, clear=True)

    def enter_password(self, password: str) -> None:
        self.fill(PASSWORD_INPUT, password)

    def enter_confirm_password(self, password: str) -> None:
        self.fill(CONFIRM_PASSWORD_INPUT, password)

    def create_user(
        self,
        user_role: str,
        employee_search: str,
        employee_select: str,
        status: str,
        username: str,
        password: str,
    ) -> None:
        """
        Fill the whole form.  Saving is left to the caller.

        Args:
            user_role: ``Admin`` or ``ESS``.
            employee_search: Text typed into the employee field.
            employee_select: Suggestion to pick.
            status: ``Enabled`` or ``Disabled``.
            username: New login name.
            password: Password, entered twice.
        """
        logger.info("Creating user: %s", username)
        self.select_user_role(user_role)
        self.enter_employee_name(employee_search)
        self.select_employee_from_suggestions(employee_select)
        self.select_status(status)
        self.enter_username(username)
        self.enter_password(password)
        self.enter_confirm_password(password)

    def click_save(self) -> None:
        self.click(SAVE_BUTTON)
        self.wait_for_page_load()

    def click_cancel(self) -> None:
        self.click(CANCEL_BUTTON)
        self.wait_for_page_load()

    # -------------------------------------------------------------------------
    # Results and field state
    # -------------------------------------------------------------------------

    def is_success_message_displayed(self, timeout: int = 5000) -> bool:
        if not self.appears_within(SUCCESS_MESSAGE, timeout):
            logger.warning("No success message found")
            return False
        return self.is_visible(SUCCESS_MESSAGE)

    def success_message(self) -> str:
        return self.get_text(SUCCESS_MESSAGE)

    def is_error_message_displayed(self) -> bool:
        return self.is_visible(ERROR_MESSAGE)

    def error_messages(self) -> list[str]:
        return self.all_texts(ERROR_MESSAGE)

    def is_user_role_dropdown_visible(self) -> bool:
        return self.is_visible(USER_ROLE_DROPDOWN)

    def is_employee_name_input_visible(self) -> bool:
        return self.is_visible(EMPLOYEE_NAME_INPUT)

    def is_status_dropdown_visible(self) -> bool:
        return self.is_visible(STATUS_DROPDOWN)

    def is_username_input_visible(self) -> bool:
        return self.is_visible(USERNAME_INPUT)

    def is_password_input_visible(self) -> bool:
        return self.is_visible(PASSWORD_INPUT)

    def is_confirm_password_input_visible(self) -> bool:
        return self.is_visible(CONFIRM_PASSWORD_INPUT)

    def is_save_button_visible(self) -> bool:
        return self.is_visible(SAVE_BUTTON)

    def is_cancel_button_visible(self) -> bool:
        return self.is_visible(CANCEL_BUTTON)

    def username_value(self) -> str:
        return self.input_value(USERNAME_INPUT)

    def employee_name_value(self) -> str:
        return self.input_value(EMPLOYEE_NAME_INPUT)
