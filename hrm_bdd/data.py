"""
Static and generated test data for the OrangeHRM scenarios.

Static records cover the demo's seeded accounts and the messages the UI
is expected to show.  Anything that must be unique per run (new user
names, passwords) comes from Faker so repeated runs against the shared
demo do not collide.
"""

from __future__ import annotations

from dataclasses import dataclass

from faker import Faker

fake = Faker()


@dataclass(frozen=True)
class User:
    username: str
    password: str
    role: str = ""
    first_name: str = ""


@dataclass(frozen=True)
class Employee:
    first_name: str
    last_name: str
    middle_name: str = ""
    employee_id: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.middle_name, self.last_name) if part)


VALID_USERS = {
    "admin": User("Admin", "admin123", "Admin", "Admin"),
    "ess": User("ESS", "ess123", "ESS", "Employee"),
    "supervisor": User("Supervisor", "supervisor123", "Supervisor", "Supervisor"),
}

INVALID_USERS = {
    "invalid_username": User("InvalidUser", "admin123"),
    "invalid_password": User("Admin", "wrongpassword"),
    "empty_username": User("", "admin123"),
    "empty_password": User("Admin", ""),
}

SAMPLE_EMPLOYEES = [
    Employee("John", "Doe", "Michael", "EMP001"),
    Employee("Jane", "Smith", "", "EMP002"),
    Employee("Robert", "Johnson", "James", "EMP003"),
]

MODULES = (
    "Admin",
    "PIM",
    "Leave",
    "Time",
    "Recruitment",
    "My Info",
    "Performance",
    "Dashboard",
    "Directory",
    "Maintenance",
    "Claim",
    "Buzz",
)

USER_ROLES = ("Admin", "ESS")
USER_STATUSES = ("Enabled", "Disabled")

ERROR_MESSAGES = {
    "invalid_credentials": "Invalid credentials",
    "required": "Required",
    "account_disabled": "Account disabled",
    "account_locked": "Account locked",
    "session_expired": "Session expired",
}


def unique_username(prefix: str = "qa") -> str:
    """
    Generate a username that is unlikely to exist on the shared demo.

    OrangeHRM requires at least five characters, which the numeric
    suffix always guarantees.
    """
    return f"{prefix}{fake.user_name()}{fake.random_number(digits=5, fix_len=True)}"


def strong_password() -> str:
    """Password that satisfies OrangeHRM's strength rules."""
    return fake.password(length=12, special_chars=True, digits=True, upper_case=True, lower_case=True)


def resolve_user(key: str) -> User:
    """
    Look up a named account from either table.

    Raises:
        KeyError: If ``key`` names no known account.
    """
    normalized = key.strip().lower().replace(" ", "_")
    if normalized in VALID_USERS:
        return VALID_USERS[normalized]
    if normalized in INVALID_USERS:
        return INVALID_USERS[normalized]
    raise KeyError(f"Unknown test user: {key!r}")
