"""Step definitions for the login feature."""

import logging

from behave import given, then, when

from hrm_bdd.data import ERROR_MESSAGES, resolve_user
from hrm_bdd.hooks import page_object
from hrm_bdd.pages import DashboardPage, LoginPage

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Given
# -----------------------------------------------------------------------------

@given("I am on the OrangeHRM login page")
def step_open_login_page(context):
    page_object(context, LoginPage).goto()


# -----------------------------------------------------------------------------
# When
# -----------------------------------------------------------------------------

@when('I enter username "{username:Text}"')
def step_enter_username(context, username):
    page_object(context, LoginPage).enter_username(username)


@when('I enter password "{password:Text}"')
def step_enter_password(context, password):
    page_object(context, LoginPage).enter_password(password)


@when("I click the login button")
def step_click_login(context):
    page_object(context, LoginPage).click_login_button()


@when("I login with default credentials")
def step_quick_login(context):
    login_page = page_object(context, LoginPage)
    login_page.goto()
    login_page.quick_login()


@when('I login as the "{user_key}" user')
def step_login_as(context, user_key):
    user = resolve_user(user_key)
    page_object(context, LoginPage).login(user.username, user.password)


@when("I click on user dropdown")
def step_open_user_dropdown(context):
    page_object(context, DashboardPage).open_user_dropdown()


@when("I click logout")
def step_click_logout(context):
    page_object(context, DashboardPage).click_logout()


# -----------------------------------------------------------------------------
# Then
# -----------------------------------------------------------------------------

@then("I should be redirected to the dashboard")
def step_redirected_to_dashboard(context):
    dashboard = page_object(context, DashboardPage)
    dashboard.wait_for_dashboard_load(20000)
    assert dashboard.is_on_dashboard_page(), f"Expected dashboard URL, got {dashboard.current_url()}"


@then("I should see the dashboard header")
def step_dashboard_header(context):
    assert page_object(context, DashboardPage).is_dashboard_loaded(5000), "Dashboard header is not visible"


@then("I should be logged in successfully")
def step_logged_in(context):
    dashboard = page_object(context, DashboardPage)
    dashboard.wait_for_dashboard_load(10000)
    assert dashboard.is_dashboard_loaded(5000), "Dashboard header is not visible after login"


@then("I should see the user dropdown in the header")
def step_user_dropdown_in_header(context):
    assert page_object(context, DashboardPage).is_user_dropdown_visible(), "User dropdown is not visible in the header"


@then("I should see an error message")
def step_error_visible(context):
    login_page = page_object(context, LoginPage)
    assert login_page.wait_for_error_message(), "No login error message appeared"
    message = login_page.get_error_message()
    assert message in ERROR_MESSAGES.values(), f"Unexpected login error {message!r}"


@then('I should see an error message "{expected}"')
def step_error_text(context, expected):
    message = page_object(context, LoginPage).get_error_message()
    assert expected.lower() in message.lower(), f"Expected error containing {expected!r}, got {message!r}"


@then("I should remain on the login page")
def step_remain_on_login(context):
    login_page = page_object(context, LoginPage)
    assert login_page.is_on_login_page(), f"Left the login page: {login_page.current_url()}"
    assert login_page.is_login_page_displayed(), "Login panel is not displayed"


@then("I should see validation errors")
def step_validation_errors(context):
    login_page = page_object(context, LoginPage)
    errors = login_page.validation_errors()
    assert errors, "Expected at least one field validation error"
    logger.info("Found %d validation errors: %s", len(errors), errors)
    unexpected = [error for error in errors if error != ERROR_MESSAGES["required"]]
    assert not unexpected, f"Unexpected validation messages: {unexpected}"


@then('I should see "{text}"')
def step_page_contains(context, text):
    body = context.page.text_content("body") or ""
    assert text in body, f"Page does not contain {text!r}"


@then("I should see the username input field")
def step_username_visible(context):
    assert page_object(context, LoginPage).is_username_input_visible(), "Username input is not visible"


@then("I should see the password input field")
def step_password_visible(context):
    assert page_object(context, LoginPage).is_password_input_visible(), "Password input is not visible"


@then("I should see the login button")
def step_login_button_visible(context):
    login_page = page_object(context, LoginPage)
    assert login_page.is_login_button_visible(), "Login button is not visible"
    assert login_page.is_login_button_enabled(), "Login button is disabled"


@then("I should see the forgot password link")
def step_forgot_link_visible(context):
    assert page_object(context, LoginPage).is_forgot_password_link_visible(), "Forgot password link is not visible"


@then("I should see the company logo")
def step_logo_visible(context):
    assert page_object(context, LoginPage).is_logo_visible(), "Company logo is not visible"


@then("the password field should be masked")
def step_password_masked(context):
    field_type = page_object(context, LoginPage).password_field_type()
    assert field_type == "password", f"Password field type is {field_type!r}"


@then("I should be redirected to the login page")
def step_redirected_to_login(context):
    page_object(context, LoginPage).wait_for_login_page_load(10000)


@then("I should see the login form")
def step_login_form(context):
    assert page_object(context, LoginPage).is_login_page_displayed(), "Login form is not displayed"
