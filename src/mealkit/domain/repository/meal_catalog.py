"""Abstract catalog of meals.

Defined in the domain layer so the cart never depends on where the menu
comes from.  Concrete catalogs live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mealkit.domain.model.meal import Meal


class MealCatalog(ABC):

    @abstractmethod
    def get_by_id(self, meal_id: str) -> Meal | None:
        """Return a meal by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Meal | None:
        """Return a meal by name (case-insensitive), or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Meal]:
        """Return every meal on the menu."""

    def list_by_tag(self, tag: str) -> list[Meal]:
        """Return the meals carrying *tag*, in menu order."""
        return [meal for meal in self.list_all() if meal.has_tag(tag)]
