"""
Playwright fixtures for page-object tests.

These tests run the page objects in a real browser (pytest-playwright's
``page`` fixture) against small local copies of the OrangeHRM login and
dashboard markup.  Requests to ``https://hrm.test`` are answered by
``page.route``, so no network access or live OrangeHRM instance is needed.

Key Concepts Demonstrated:
- Request interception to serve fixture HTML
- Short timeouts so negative tests fail fast
- Screenshot capture on failure
"""

import os

import pytest
from playwright.sync_api import Page, Route

from hrm_bdd.config import BrowserConfig, EnvironmentConfig
from hrm_bdd.scenario import sanitize_label


SITE = "https://hrm.test"
LOGIN_URL = f"{SITE}/web/index.php/auth/login"

LOGIN_HTML = """
<!doctype html>
<html>
<body>
  <div class="orangehrm-login-container">
    <div class="oxd-sheet">
      <img alt="company-branding" style="width:120px;height:40px">
      <form id="login-form">
        <div class="field"><input name="username" placeholder="Username"></div>
        <div class="field"><input name="password" type="password" placeholder="Password"></div>
        <button type="submit">Login</button>
      </form>
      <p class="oxd-text oxd-text--p orangehrm-login-forgot-header"
         onclick="window.location.href = '/web/index.php/auth/requestPasswordResetCode'">Forgot your password?</p>
      <div id="alert-slot"></div>
    </div>
  </div>
  <script>
    document.getElementById("login-form").addEventListener("submit", (event) => {
      event.preventDefault();
      document.querySelectorAll(".oxd-input-field-error-message").forEach((node) => node.remove());
      document.getElementById("alert-slot").innerHTML = "";
      const fields = ["username", "password"].map((name) => document.querySelector(`input[name="${name}"]`));
      const empty = fields.filter((field) => !field.value);
      if (empty.length) {
        empty.forEach((field) => {
          const message = document.createElement("span");
          message.className = "oxd-input-field-error-message";
          message.textContent = "Required";
          field.parentElement.appendChild(message);
        });
        return;
      }
      if (fields[0].value === "Admin" && fields[1].value === "admin123") {
        window.location.href = "/web/index.php/dashboard/index";
        return;
      }
      setTimeout(() => {
        document.getElementById("alert-slot").innerHTML =
          '<div class="oxd-alert" role="alert"><p class="oxd-alert-content-text">Invalid credentials</p></div>';
      }, 200);
    });
  </script>
</body>
</html>
"""

RESET_PASSWORD_HTML = """
<!doctype html>
<html>
<body>
  <h6 class="oxd-text oxd-text--h6">Reset Password</h6>
</body>
</html>
"""

DASHBOARD_HTML = """
<!doctype html>
<html>
<body>
  <header class="oxd-topbar-header">
    <span class="oxd-topbar-header-breadcrumb"><h6>Dashboard</h6></span>
    <span class="oxd-userdropdown-tab">
      <img class="oxd-userdropdown-img" style="width:32px;height:32px">
      Paul Collings
    </span>
    <ul id="user-menu" hidden>
      <li><a role="menuitem" href="/web/index.php/auth/logout">Logout</a></li>
    </ul>
  </header>
  <aside class="oxd-sidepanel">
    <input placeholder="Search">
    <ul>
      <li><a class="oxd-main-menu-item" href="/web/index.php/admin/viewSystemUsers">Admin</a></li>
      <li><a class="oxd-main-menu-item" href="/web/index.php/pim/viewEmployeeList">PIM</a></li>
      <li><a class="oxd-main-menu-item" href="/web/index.php/leave/viewLeaveList">Leave</a></li>
      <li><a class="oxd-main-menu-item" href="/web/index.php/pim/viewPersonalDetails">My Info</a></li>
    </ul>
  </aside>
  <main>
    <div class="oxd-dashboard-widget">Time at Work</div>
    <div class="oxd-dashboard-widget">My Actions</div>
    <div class="oxd-dashboard-widget">Quick Launch</div>
  </main>
  <script>
    document.querySelector(".oxd-userdropdown-tab").addEventListener("click", () => {
      document.getElementById("user-menu").hidden = false;
    });
    document.querySelector('input[placeholder="Search"]').addEventListener("input", (event) => {
      const term = event.target.value.toLowerCase();
      document.querySelectorAll(".oxd-main-menu-item").forEach((item) => {
        if (!item.textContent.toLowerCase().includes(term)) item.parentElement.remove();
      });
    });
  </script>
</body>
</html>
"""


# -----------------------------------------------------------------------------
# Browser Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def browser_context_args():
    """
    Configure browser context options.

    Returns:
        dict: Browser context configuration.
    """
    return {
        "viewport": {"width": 1280, "height": 720},
        "ignore_https_errors": True,
    }


@pytest.fixture
def environment():
    """Environment settings pointing at the intercepted fake site."""
    return EnvironmentConfig(base_url=LOGIN_URL, username="Admin", password="admin123")


@pytest.fixture
def fast_browser_config():
    """
    Browser settings with short timeouts.

    Negative tests wait for elements that never appear; half a second is
    plenty for local HTML.
    """
    return BrowserConfig(
        default_timeout_ms=2000,
        navigation_timeout_ms=5000,
        action_timeout_ms=500,
    )


@pytest.fixture
def hrm_site(page: Page) -> Page:
    """
    Serve the fake OrangeHRM pages on ``https://hrm.test``.

    Unknown paths answer 404 so accidental navigation fails loudly.

    Returns:
        Page: The same page, with routing installed.
    """
    pages = {
        "/web/index.php/auth/login": LOGIN_HTML,
        "/web/index.php/auth/logout": LOGIN_HTML,
        "/web/index.php/dashboard/index": DASHBOARD_HTML,
        "/web/index.php/auth/requestPasswordResetCode": RESET_PASSWORD_HTML,
    }

    def handle(route: Route):
        path = route.request.url[len(SITE):].split("?", 1)[0]
        body = pages.get(path)
        if body is None:
            route.fulfill(status=404, content_type="text/plain", body="not found")
        else:
            route.fulfill(status=200, content_type="text/html", body=body)

    page.route(f"{SITE}/**", handle)
    return page


# -----------------------------------------------------------------------------
# Screenshot on Failure
# -----------------------------------------------------------------------------

@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Capture a screenshot when a UI test fails."""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        page = item.funcargs.get("page")
        if page:
            screenshot_dir = "test-results/screenshots"
            os.makedirs(screenshot_dir, exist_ok=True)
            screenshot_path = f"{screenshot_dir}/{sanitize_label(item.name)}.png"
            try:
                page.screenshot(path=screenshot_path)
                print(f"\nScreenshot saved: {screenshot_path}")
            except Exception as e:
                print(f"\nFailed to capture screenshot: {e}")
