"""
Step definitions for Admin > User Management.

Covers filtering the System Users list and creating users through the Add
User form.  A generated username is kept on ``context.created_username``
so later steps can search for the user that was just created.
"""

import logging

from behave import given, then, when

from hrm_bdd.data import USER_ROLES, USER_STATUSES, strong_password, unique_username
from hrm_bdd.hooks import page_object
from hrm_bdd.pages import AddUserPage, DashboardPage, UserManagementPage

logger = logging.getLogger(__name__)


def _username(context, value: str) -> str:
    """``<generated>`` stands for a fresh username, created once per scenario."""
    if value != "<generated>":
        return value
    if not getattr(context, "created_username", None):
        context.created_username = unique_username()
    return context.created_username


# -----------------------------------------------------------------------------
# Given
# -----------------------------------------------------------------------------

@given("I navigate to the Admin module")
def step_open_admin(context):
    page_object(context, DashboardPage).navigate_to_module("Admin")


@given("I am on the System Users page")
def step_on_system_users(context):
    users_page = page_object(context, UserManagementPage)
    users_page.wait_for_system_users_page_load()
    assert users_page.is_on_system_users_page(), f"Not on System Users: {users_page.current_url()}"


# -----------------------------------------------------------------------------
# When: filters
# -----------------------------------------------------------------------------

@when('I enter username "{username}" in the username filter')
def step_username_filter(context, username):
    page_object(context, UserManagementPage).enter_username_filter(_username(context, username))


@when('I select "{role_name}" from the user role dropdown')
def step_role_filter(context, role_name):
    assert role_name in USER_ROLES, f"Unknown user role {role_name!r}; expected one of {USER_ROLES}"
    page_object(context, UserManagementPage).select_user_role(role_name)


@when('I select "{status}" from the status dropdown')
def step_status_filter(context, status):
    assert status in USER_STATUSES, f"Unknown status {status!r}; expected one of {USER_STATUSES}"
    page_object(context, UserManagementPage).select_status(status)


@when('I enter employee name "{employee_name}" in the employee name filter')
def step_employee_filter(context, employee_name):
    users_page = page_object(context, UserManagementPage)
    users_page.enter_employee_name(employee_name)
    users_page.select_employee_from_dropdown(employee_name)


@when("I click the search button")
def step_search(context):
    page_object(context, UserManagementPage).click_search()


@when("I click the reset button")
def step_reset(context):
    page_object(context, UserManagementPage).click_reset()


# -----------------------------------------------------------------------------
# Then: results
# -----------------------------------------------------------------------------

@then('I should see users matching the username "{username}"')
def step_usernames_match(context, username):
    users_page = page_object(context, UserManagementPage)
    username = _username(context, username)
    assert users_page.results_count() > 0, f"No users found for {username!r}"
    mismatched = users_page.usernames_not_containing(username)
    assert not mismatched, f"Usernames not matching {username!r}: {mismatched}"


@then('I should see only users with "{role_name}" role')
def step_roles_match(context, role_name):
    users_page = page_object(context, UserManagementPage)
    assert users_page.results_count() > 0, f"No users found with role {role_name!r}"
    mismatched = users_page.roles_not_matching(role_name)
    assert not mismatched, f"Roles not matching {role_name!r}: {mismatched}"


@then('I should see only users with "{status}" status')
def step_statuses_match(context, status):
    users_page = page_object(context, UserManagementPage)
    assert users_page.results_count() > 0, f"No users found with status {status!r}"
    mismatched = users_page.statuses_not_matching(status)
    assert not mismatched, f"Statuses not matching {status!r}: {mismatched}"


@then('I should see users with employee name containing "{employee_name}"')
def step_employee_names_match(context, employee_name):
    users_page = page_object(context, UserManagementPage)
    mismatched = users_page.employee_names_not_containing(employee_name)
    assert not mismatched, f"Employee names not containing {employee_name!r}: {mismatched}"


@then("the results count should be greater than {count:d}")
def step_results_count(context, count):
    actual = page_object(context, UserManagementPage).results_count()
    assert actual > count, f"Expected more than {count} results, found {actual}"


@then("I should see no records found message")
def step_no_records(context):
    assert page_object(context, UserManagementPage).is_no_records_message_displayed(), "No 'No Records Found' message"


@then("the results table should be empty")
def step_results_empty(context):
    count = page_object(context, UserManagementPage).results_count()
    assert count == 0, f"Expected an empty table, found {count} rows"


@then("all filter fields should be cleared")
def step_filters_cleared(context):
    assert page_object(context, UserManagementPage).are_filters_cleared(), "Filters still hold values after reset"


@then("I should see the user filter form")
def step_filter_form(context):
    users_page = page_object(context, UserManagementPage)
    checks = {
        "username filter": users_page.is_username_filter_visible(),
        "user role dropdown": users_page.is_user_role_dropdown_visible(),
        "employee name filter": users_page.is_employee_name_input_visible(),
        "status dropdown": users_page.is_status_dropdown_visible(),
        "search button": users_page.is_search_button_visible(),
        "reset button": users_page.is_reset_button_visible(),
        "add button": users_page.is_add_button_visible(),
    }
    missing = [name for name, visible in checks.items() if not visible]
    assert not missing, f"Filter form elements not visible: {', '.join(missing)}"


@then("each user record should have edit and delete buttons")
def step_row_actions(context):
    users_page = page_object(context, UserManagementPage)
    assert users_page.are_action_buttons_visible(), "Actions column is not visible"
    assert users_page.every_row_has_edit_button(), "Some rows have no edit button"
    assert users_page.every_row_has_delete_button(), "Some rows have no delete button"


# -----------------------------------------------------------------------------
# Add User form
# -----------------------------------------------------------------------------

@when("I click the Add button")
def step_click_add(context):
    page_object(context, UserManagementPage).click_add()


@then("I should be on the Add User page")
def step_on_add_user(context):
    add_page = page_object(context, AddUserPage)
    add_page.wait_for_add_user_page_load()
    assert add_page.is_on_add_user_page(), "Add User form title not found"


@then("I should see all Add User form fields")
def step_add_user_fields(context):
    add_page = page_object(context, AddUserPage)
    checks = {
        "user role": add_page.is_user_role_dropdown_visible(),
        "employee name": add_page.is_employee_name_input_visible(),
        "status": add_page.is_status_dropdown_visible(),
        "username": add_page.is_username_input_visible(),
        "password": add_page.is_password_input_visible(),
        "confirm password": add_page.is_confirm_password_input_visible(),
        "save": add_page.is_save_button_visible(),
        "cancel": add_page.is_cancel_button_visible(),
    }
    missing = [name for name, visible in checks.items() if not visible]
    assert not missing, f"Add User fields not visible: {', '.join(missing)}"


@when("I create a user with")
def step_create_user(context):
    """Fill the Add User form from a one-row table; ``<generated>`` username is allowed."""
    row = context.table[0]
    password = row.get("password") or strong_password()
    page_object(context, AddUserPage).create_user(
        user_role=row["role"],
        employee_search=row["employee"],
        employee_select=row.get("employee_select") or row["employee"],
        status=row["status"],
        username=_username(context, row["username"]),
        password=password,
    )


@when('I select "{employee_name}" from employee suggestions')
def step_pick_employee(context, employee_name):
    page_object(context, AddUserPage).select_employee_from_suggestions(employee_name)


@when("I click the Save button")
def step_save(context):
    page_object(context, AddUserPage).click_save()


@when("I click the Cancel button")
def step_cancel(context):
    page_object(context, AddUserPage).click_cancel()


@then("I should see a success message")
def step_success(context):
    add_page = page_object(context, AddUserPage)
    assert add_page.is_success_message_displayed(), f"No success toast; form errors: {add_page.error_messages()}"


@then("I should see a form error")
def step_form_error(context):
    assert page_object(context, AddUserPage).is_error_message_displayed(), "No form error was shown"


@then("I should be redirected to System Users page")
def step_back_on_system_users(context):
    users_page = page_object(context, UserManagementPage)
    users_page.wait_for_system_users_page_load()
    assert users_page.is_on_system_users_page(), f"Not on System Users: {users_page.current_url()}"


@then('the user should have "{role_name}" role')
def step_user_has_role(context, role_name):
    roles = page_object(context, UserManagementPage).user_roles()
    assert any(value.lower() == role_name.lower() for value in roles), f"Role {role_name!r} not in {roles}"


@then('the user should have "{status}" status')
def step_user_has_status(context, status):
    statuses = page_object(context, UserManagementPage).statuses()
    assert any(value.lower() == status.lower() for value in statuses), f"Status {status!r} not in {statuses}"
