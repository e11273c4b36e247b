"""In-memory implementation of MealCatalog, seeded with the sample menus."""

from __future__ import annotations

from mealkit.domain.model.meal import Meal
from mealkit.domain.model.value_objects import DEFAULT_CURRENCY, Money
from mealkit.domain.repository.meal_catalog import MealCatalog

KETO = "keto"
HIGH_PROTEIN = "high-protein"

# (name, image, calories, protein, carbs, fat, price, tags)
_KETO_MEALS = [
    ("Keto Chicken Caesar Bowl", "KetoCaesarBowl", 520, 42, 9, 35, "12.99", ("keto", "gluten-free")),
    ("Zucchini Noodles & Pesto", "ZucchiniNoodles", 480, 18, 11, 38, "11.49", ("keto", "vegetarian")),
    ("Beef & Broccoli Stir-fry", "Beefbroccolistirfry", 560, 40, 10, 38, "13.49", ("keto",)),
    ("Salmon & Avocado Salad", "Salmonavocadosalad", 510, 34, 8, 38, "14.49", ("keto", "pescatarian")),
    ("Creamy Mushroom Chicken", "Creamymushroomchicken", 590, 44, 8, 43, "12.99", ("keto",)),
    ("Halloumi Greek Bowl", "HalloumiGreekBowl", 540, 23, 12, 41, "11.99", ("keto", "vegetarian")),
]

_HIGH_PROTEIN_MEALS = [
    ("Teriyaki Chicken Power Bowl", "TerayakiChickenPowerBowl", 620, 50, 55, 18, "12.49", ("high-protein",)),
    ("Lean Beef Burrito", "Leanbeefburrito", 680, 48, 62, 22, "12.99", ("high-protein",)),
    ("Tuna Poke Bowl", "Tunapokebowl", 540, 46, 52, 12, "13.49", ("high-protein", "pescatarian")),
    ("Chicken Pesto Pasta", "Chickenpestopasta", 700, 47, 64, 22, "12.99", ("high-protein",)),
    ("BBQ Turkey Meatballs", "BBQturkeymeatball", 580, 45, 48, 16, "11.99", ("high-protein",)),
    ("Greek Yoghurt Parfait", "Greekyogurtparfait", 420, 32, 44, 10, "8.99", ("high-protein", "vegetarian")),
]


def slugify(name: str) -> str:
    """'Beef & Broccoli Stir-fry' -> 'beef-broccoli-stir-fry'."""
    words = "".join(c if c.isalnum() else " " for c in name.lower()).split()
    return "-".join(words)


def sample_meals(currency: str = DEFAULT_CURRENCY) -> list[Meal]:
    return [
        Meal(
            id=slugify(name),
            name=name,
            image_name=image,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            price=Money.of(price, currency),
            tags=tags,
        )
        for name, image, calories, protein, carbs, fat, price, tags in _KETO_MEALS + _HIGH_PROTEIN_MEALS
    ]


class InMemoryMealCatalog(MealCatalog):

    def __init__(self, meals: list[Meal] | None = None) -> None:
        self._store: dict[str, Meal] = {}
        for meal in sample_meals() if meals is None else meals:
            self._store[meal.id] = meal

    # --- MealCatalog interface ------------------------------------------------

    def get_by_id(self, meal_id: str) -> Meal | None:
        return self._store.get(meal_id)

    def get_by_name(self, name: str) -> Meal | None:
        for meal in self._store.values():
            if meal.name.lower() == name.lower():
                return meal
        return None

    def list_all(self) -> list[Meal]:
        return list(self._store.values())
