"""Value types shared by the classification pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

LEVEL_NAMES: tuple[str, ...] = ("Secteur", "Rayon", "Famille", "Sous-Famille")

EXPORT_COLUMNS: tuple[str, ...] = (
    "Description",
    "Secteur Code",
    "Secteur Nom",
    "Rayon Code",
    "Rayon Nom",
    "Famille Code",
    "Famille Nom",
    "Sous-Famille Code",
    "Sous-Famille Nom",
)


@dataclass(frozen=True)
class ClassificationNode:
    level: int
    code: str
    name: str
    parent_code: Optional[str] = None


@dataclass(frozen=True)
class Category:
    code: str
    name: str


UNCLASSIFIED_CODE = "N/A"
UNCLASSIFIED_NAME = "NON CLASSIFIÉ"
UNCLASSIFIED_CATEGORY = Category(UNCLASSIFIED_CODE, UNCLASSIFIED_NAME)


@dataclass(frozen=True)
class Product:
    description: str


@dataclass(frozen=True)
class ClassificationPath:
    """A complete Secteur > Rayon > Famille > Sous-Famille assignment."""

    secteur: Category
    rayon: Category
    famille: Category
    sous_famille: Category

    def levels(self) -> tuple[Category, Category, Category, Category]:
        return (self.secteur, self.rayon, self.famille, self.sous_famille)

    @property
    def is_unclassified(self) -> bool:
        return self == UNCLASSIFIED_PATH


UNCLASSIFIED_PATH = ClassificationPath(
    secteur=UNCLASSIFIED_CATEGORY,
    rayon=UNCLASSIFIED_CATEGORY,
    famille=UNCLASSIFIED_CATEGORY,
    sous_famille=UNCLASSIFIED_CATEGORY,
)


@dataclass(frozen=True)
class ClassifiedProduct:
    description: str
    classification: ClassificationPath

    def to_export_row(self) -> Dict[str, str]:
        """Return the flat record written to the exported spreadsheet."""

        row: Dict[str, str] = {"Description": self.description}
        for label, category in zip(LEVEL_NAMES, self.classification.levels()):
            row[f"{label} Code"] = category.code
            row[f"{label} Nom"] = category.name
        return row
