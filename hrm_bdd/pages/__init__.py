"""Page Object Model classes for the OrangeHRM screens."""

from hrm_bdd.pages.add_user_page import AddUserPage
from hrm_bdd.pages.base_page import BasePage
from hrm_bdd.pages.dashboard_page import DashboardPage
from hrm_bdd.pages.locators import LocatorChain, LocatorSpec
from hrm_bdd.pages.login_page import LoginPage
from hrm_bdd.pages.user_management_page import UserManagementPage

__all__ = [
    "AddUserPage",
    "BasePage",
    "DashboardPage",
    "LocatorChain",
    "LocatorSpec",
    "LoginPage",
    "UserManagementPage",
]
