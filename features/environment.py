"""
behave environment hooks for the OrangeHRM suite.

The hook logic lives in :mod:`hrm_bdd.hooks` so it can be unit tested;
behave only needs the names to exist in this module.
"""

from hrm_bdd.hooks import (  # noqa: F401
    after_all,
    after_scenario,
    after_step,
    before_all,
    before_feature,
    before_scenario,
)
