# okchef/core/recipes.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Recipe:
    title: str
    description: str
    steps: List[str] = field(default_factory=list)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def step(self, position: int) -> str:
        """1-based access."""
        return self.steps[position - 1]


BUILTIN_RECIPES = [
    Recipe(
        title="Nems aux fraises",
        description="Dessert facile et bon marché. Végétarien",
        steps=[
            "Laver les fraises sous l'eau et les équeuter.",
            "Les couper en morceaux dans un saladier et les saupoudrer de sucre.",
            "Etaler vos feuilles de brick sur un plan de travail et couper les en deux.",
            "Beurrer les feuilles de brick à l'aide d'un pinceau et déposer au centre quelques morceaux de fraises au sucre.",
            "Poser dessus une cuillère à café de crème pâtissière et rouler les feuilles de brick comme un nem.",
            "Chaque convive trempera ses nems dans le coulis de fruits rouges froid.",
        ],
    ),
    Recipe(
        title="Tagliatelles au chocolat",
        description="Dessert - Très facile - Bon marché - Végétarien - Sans porc",
        steps=[
            "Mélanger la farine et le cacao en même temps.",
            "Ajouter le sucre et la cannelle.",
            "Faire un puit au centre et y casser les oeufs.",
            "Bien mélanger jusqu'à l'obtention d'une pâte lisse. Si besoin, travailler la pâte directement avec les mains.",
            "Etaler la pâte au rouleau à pâtisserie. Si besoin, la passer au laminoir. La pâte doit avoir une épaisseur de 2,5 cm environ.",
            "Découper des bandes de 1 cm de large pour former les tagliatelles.",
            "Plonger les tagliatelles au chocolat dans une casserole d'eau bouillante.",
            "Laisser cuire 3 minutes.",
            "Dresser dans les assiettes, parsemer de pistaches concassées et de sucre glace avant de servir.",
        ],
    ),
    Recipe(
        title="Amour de saumon en papillote",
        description="Plat principal - Très facile - Moyen",
        steps=[
            "Préchauffer le four à 180°C (thermostat 6).",
            "Laver, essorer et ciseler l'aneth. Peler et émincer la gousse d'ail finement. Réserver.",
            "Couper les tomates cerise en deux.",
            "Emincer les champignons après les avoir nettoyés.",
            "Déposer au centre de chaque feuille de papier cuisson un pavé de saumon, ajouter les tomates et les champignons tout autour.",
            "Parsemer les pavés de saumon d'aneth et d'ail et les arroser d'un filet de jus de citron. Poivrer, saler et terminer par un filet d'huile d'olive.",
            "Fermer les papillotes et les mettre au four pendant 25 à 30 minutes.",
        ],
    ),
]


class RecipeLibrary:
    """
    Built-in recipes plus any JSON files found in ``recipes_dir``.

    Each file looks like:

      {
        "title": "Crêpes",
        "description": "Dessert",
        "steps": ["Mélanger la farine et les oeufs.", "..."]
      }

    A file whose title matches a built-in recipe replaces it.
    """

    def __init__(self, recipes_dir: Optional[Path] = None, logger=None):
        self.logger = logger or logging.getLogger("okchef.recipes")
        self.recipes_dir = Path(recipes_dir) if recipes_dir else None
        self._recipes: Dict[str, Recipe] = {}
        self._load_all()

    # ---------- loading ----------

    def _load_all(self):
        self._recipes.clear()
        for recipe in BUILTIN_RECIPES:
            self._recipes[self._key_for_title(recipe.title)] = recipe

        if self.recipes_dir is None or not self.recipes_dir.is_dir():
            return

        for path in sorted(self.recipes_dir.glob("*.json")):
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                title = raw.get("title") or path.stem
                steps = [str(s).strip() for s in raw.get("steps", []) if str(s).strip()]
                if not steps:
                    self.logger.warning(f"Recipe {path} has no steps; skipped")
                    continue
                recipe = Recipe(title=title, description=raw.get("description", ""), steps=steps)
                self._recipes[self._key_for_title(title)] = recipe
                self.logger.info(f"Loaded recipe '{title}' ({len(steps)} steps) from {path}")
            except (OSError, ValueError, AttributeError) as e:
                self.logger.error(f"Failed to load recipe from {path}: {e}")

    # ---------- public API ----------

    def list_recipes(self) -> List[Recipe]:
        return list(self._recipes.values())

    def get(self, title: str) -> Optional[Recipe]:
        return self._recipes.get(self._key_for_title(title))

    def __getitem__(self, index: int) -> Recipe:
        return self.list_recipes()[index]

    def __len__(self) -> int:
        return len(self._recipes)

    # ---------- helpers ----------

    @staticmethod
    def _key_for_title(title: str) -> str:
        return title.strip().lower().replace(" ", "_")
