"""Login page object for OrangeHRM authentication flows."""

from __future__ import annotations

import logging
import re

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hrm_bdd.pages.base_page import BasePage
from hrm_bdd.pages.locators import chain, css, placeholder, role

logger = logging.getLogger(__name__)

USERNAME_INPUT = chain("username input", placeholder("Username"), css('input[name="username"]'))
PASSWORD_INPUT = chain("password input", placeholder("Password"), css('input[name="password"]'))
LOGIN_BUTTON = chain("login button", role("button", "Login"), css('button[type="submit"]'))
ERROR_MESSAGE = chain(
    "login error message",
    css(".oxd-alert-content-text"),
    css(".oxd-alert"),
    css('[role="alert"]'),
    css('[class*="error"]'),
)
FORGOT_PASSWORD_LINK = chain(
    "forgot password link",
    css("p.oxd-text--p, a", has_text=re.compile(r"forgot.*password", re.IGNORECASE)),
)
LOGIN_PANEL = chain(
    "login panel",
    css(".oxd-sheet"),
    css(".orangehrm-login-container"),
    css('[class*="login-panel"]'),
)
LOGO_IMAGE = chain(
    "company logo",
    css('img[alt*="company-branding"]'),
    css('img[alt*="logo"]'),
    css(".orangehrm-login-logo img"),
)
VALIDATION_ERRORS = chain("field validation errors", css(".oxd-input-field-error-message"))

LOGIN_URL_PATTERN = re.compile(r".*(login|auth)")


class LoginPage(BasePage):
    """
    Page object for the OrangeHRM login screen.

    Provides methods for:
    - Entering credentials and submitting the form
    - Reading the error banner and field validation errors
    - Checking which login widgets are rendered
    """

    def goto(self) -> "LoginPage":
        """
        Open the login page and wait for the username field.

        Returns:
            Self for method chaining.
        """
        logger.info("Navigating to login page")
        self.navigate_to(self.environment.base_url)
        self.wait_for_page_load()
        self.wait_for_element(USERNAME_INPUT)
        return self

    # -------------------------------------------------------------------------
    # Form actions
    # -------------------------------------------------------------------------

    def enter_username(self, username: str) -> None:
        logger.info("Entering username: %s", username)
        self.fill(USERNAME_INPUT, username)

    def enter_password(self, password: str) -> None:
        logger.info("Entering password")
        self.fill(PASSWORD_INPUT, password)

    def click_login_button(self) -> None:
        """Submit the form and give the resulting navigation time to settle."""
        self.click(LOGIN_BUTTON)
        self.wait_for_page_load()

    def login(self, username: str, password: str) -> None:
        """
        Fill credentials and submit the login form.

        Args:
            username: Username to enter (may be empty).
            password: Password to enter (may be empty).
        """
        logger.info("Attempting login with username: %s", username)
        self.enter_username(username)
        self.enter_password(password)
        self.click_login_button()

    def quick_login(self) -> None:
        """Log in with the configured environment credentials."""
        self.login(self.environment.username, self.environment.password)

    def clear_form(self) -> None:
        self.fill(USERNAME_INPUT, "", clear=True)
        self.fill(PASSWORD_INPUT, "", clear=True)
        logger.info("Login form cleared")

    def click_forgot_password(self) -> None:
        self.click(FORGOT_PASSWORD_LINK)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def get_error_message(self) -> str:
        return self.get_text(ERROR_MESSAGE)

    def wait_for_error_message(self, timeout: int | None = None) -> bool:
        """Return True once the error banner shows up within ``timeout``."""
        return self.appears_within(ERROR_MESSAGE, timeout)

    def is_error_displayed(self) -> bool:
        return self.is_visible(ERROR_MESSAGE)

    def validation_error_count(self) -> int:
        return self.count(VALIDATION_ERRORS)

    def validation_errors(self) -> list[str]:
        return self.all_texts(VALIDATION_ERRORS)

    def is_login_page_displayed(self) -> bool:
        return self.is_visible(LOGIN_PANEL)

    def is_on_login_page(self) -> bool:
        url = self.current_url()
        return "login" in url or "auth" in url

    def wait_for_login_page_load(self, timeout: int = 10000) -> None:
        """
        Wait for a login/auth URL, then briefly for the login panel.

        Raises:
            playwright.sync_api.TimeoutError: If the URL never matches.
        """
        self.wait_for_url(LOGIN_URL_PATTERN, timeout)
        try:
            self.wait_for_element(LOGIN_PANEL, 5000)
        except PlaywrightTimeoutError:
            logger.warning("Login panel not found within timeout")

    def is_username_input_visible(self) -> bool:
        return self.is_visible(USERNAME_INPUT)

    def is_password_input_visible(self) -> bool:
        return self.is_visible(PASSWORD_INPUT)

    def is_login_button_visible(self) -> bool:
        return self.is_visible(LOGIN_BUTTON)

    def is_login_button_enabled(self) -> bool:
        return self.is_enabled(LOGIN_BUTTON)

    def is_forgot_password_link_visible(self) -> bool:
        return self.is_visible(FORGOT_PASSWORD_LINK)

    def is_logo_visible(self) -> bool:
        return self.is_visible(LOGO_IMAGE)

    def password_field_type(self) -> str | None:
        return self.get_attribute(PASSWORD_INPUT, "type")

    def username_placeholder(self) -> str | None:
        return self.get_attribute(USERNAME_INPUT, "placeholder")
