"""
Locator descriptors for page objects.

OrangeHRM markup differs between releases, so several logical elements
need more than one way to be found.  Instead of scattering ``or`` chains
through page methods, each page declares its elements as data:

- ``LocatorSpec`` -- one strategy + value (+ Playwright options)
- ``LocatorChain`` -- an ordered list of specs for one logical element

A chain is resolved against the live page only when an action or query
runs.  Candidates are tried in declaration order and the first one that
currently matches wins; if none matches yet, the union of all candidates
is returned so waits can succeed on whichever appears first.

Nothing here touches the DOM at construction time, so descriptors are
safe to share as module-level constants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from playwright.sync_api import Locator, Page

STRATEGIES = ("css", "role", "placeholder", "label", "text", "test_id")


@dataclass(frozen=True)
class LocatorSpec:
    """
    One way of finding an element.

    Attributes:
        strategy: One of ``css``, ``role``, ``placeholder``, ``label``,
            ``text`` or ``test_id``.
        value: Selector, role name, placeholder text, label text, visible
            text or test id, depending on the strategy.
        options: Extra keyword arguments for the ``get_by_*`` call
            (for example ``name`` and ``exact`` for roles).
        has_text: Optional ``Locator.filter(has_text=...)`` narrowing.
        nth: Optional index into the matches.
    """

    strategy: str
    value: str
    options: dict[str, Any] = field(default_factory=dict)
    has_text: Any = None
    nth: int | None = None

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown locator strategy: {self.strategy!r}")

    def build(self, page: Page) -> Locator:
        """Create the (lazy) Playwright locator for this spec."""
        if self.strategy == "css":
            locator = page.locator(self.value)
        elif self.strategy == "role":
            locator = page.get_by_role(self.value, **self.options)
        elif self.strategy == "placeholder":
            locator = page.get_by_placeholder(self.value, **self.options)
        elif self.strategy == "label":
            locator = page.get_by_label(self.value, **self.options)
        elif self.strategy == "text":
            locator = page.get_by_text(self.value, **self.options)
        else:
            locator = page.get_by_test_id(self.value)

        if self.has_text is not None:
            locator = locator.filter(has_text=self.has_text)
        if self.nth is not None:
            locator = locator.nth(self.nth)
        return locator

    def describe(self) -> str:
        return f"{self.strategy}={self.value!r}"


@dataclass(frozen=True)
class LocatorChain:
    """
    Ordered candidate locators for one logical element.

    Attributes:
        name: Human-readable element name used in logs.
        candidates: Specs tried in order; first match wins.
    """

    name: str
    candidates: tuple[LocatorSpec, ...]

    def __post_init__(self):
        if not self.candidates:
            raise ValueError(f"Locator chain '{self.name}' has no candidates")

    def all(self, page: Page) -> list[Locator]:
        """Build every candidate, in order."""
        return [spec.build(page) for spec in self.candidates]

    def union(self, page: Page) -> Locator:
        """Union of all candidates (``Locator.or_``), unnarrowed."""
        locators = self.all(page)
        combined = locators[0]
        for locator in locators[1:]:
            combined = combined.or_(locator)
        return combined

    def matching(self, page: Page) -> Locator:
        """
        All elements of the first candidate that currently matches.

        Candidates are alternatives for the same element, so counting or
        reading every match must not mix two of them together.  Falls
        back to the union when nothing matches yet.
        """
        locators = self.all(page)
        if len(locators) == 1:
            return locators[0]
        for locator in locators:
            if locator.count() > 0:
                return locator
        return self.union(page)

    def resolve(self, page: Page) -> Locator:
        """
        Pick the locator to act on right now.

        Returns:
            The first candidate with at least one match, narrowed to its
            first element; otherwise the first element of the union.
        """
        return self.matching(page).first

    def __str__(self) -> str:
        return f"{self.name} [{' | '.join(spec.describe() for spec in self.candidates)}]"


def css(selector: str, *, has_text: Any = None, nth: int | None = None) -> LocatorSpec:
    return LocatorSpec("css", selector, has_text=has_text, nth=nth)


def role(name_of_role: str, name: Any = None, *, exact: bool | None = None) -> LocatorSpec:
    options: dict[str, Any] = {}
    if name is not None:
        options["name"] = name
    if exact is not None:
        options["exact"] = exact
    return LocatorSpec("role", name_of_role, options)


def placeholder(text: str) -> LocatorSpec:
    return LocatorSpec("placeholder", text)


def label(text: Any) -> LocatorSpec:
    return LocatorSpec("label", text)


def chain(name: str, *candidates: LocatorSpec) -> LocatorChain:
    """Shorthand for ``LocatorChain(name, candidates)``."""
    return LocatorChain(name, tuple(candidates))
