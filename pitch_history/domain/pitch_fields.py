"""
Tables statiques des champs d'un pitch (catégories de diff, champs restaurables).

Ce module décrit les champs connus d'un pitch et les tables immuables qui en dérivent:
- catégorie de diff de chaque champ (`metadata`, `content`, `formatting`, `structure`);
- liste blanche des champs restaurables;
- champs système exclus des snapshots;
- libellés lisibles utilisés dans les descriptions de changements.

Les tables sont construites une seule fois à l'import et exposées en lecture seule.
"""

# ============================================================
# Module : pitch_history/domain/pitch_fields.py
# Objet  : Schéma des champs pitch et tables immuables associées.
# ============================================================

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class PitchField(str, Enum):
    """Champs connus d'un pitch (valeur = nom de champ côté stockage)."""

    BUSINESS_NAME = "businessName"
    CONTACT_NAME = "contactName"
    INDUSTRY = "industry"
    SUB_INDUSTRY = "subIndustry"
    STATED_PROBLEM = "statedProblem"
    HTML_CONTENT = "htmlContent"
    PITCH_LEVEL = "pitchLevel"
    LEVEL = "level"
    HIDE_BRANDING = "hideBranding"
    CUSTOM_PRIMARY_COLOR = "customPrimaryColor"
    CUSTOM_ACCENT_COLOR = "customAccentColor"
    SHARED = "shared"
    SHARE_ID = "shareId"
    SELLER_CONTEXT = "sellerContext"
    USER_ID = "userId"

    @classmethod
    def lookup(cls, name: str) -> PitchField | None:
        """Retourne le champ connu correspondant au nom, ou None."""
        try:
            return cls(name)
        except ValueError:
            return None


class DiffCategory(str, Enum):
    """Catégories fixes d'un diff catégorisé."""

    METADATA = "metadata"
    CONTENT = "content"
    FORMATTING = "formatting"
    STRUCTURE = "structure"


FIELD_CATEGORIES: MappingProxyType[PitchField, DiffCategory] = MappingProxyType(
    {
        PitchField.BUSINESS_NAME: DiffCategory.METADATA,
        PitchField.CONTACT_NAME: DiffCategory.METADATA,
        PitchField.INDUSTRY: DiffCategory.METADATA,
        PitchField.SUB_INDUSTRY: DiffCategory.METADATA,
        PitchField.STATED_PROBLEM: DiffCategory.METADATA,
        PitchField.HTML_CONTENT: DiffCategory.CONTENT,
        PitchField.PITCH_LEVEL: DiffCategory.FORMATTING,
        PitchField.LEVEL: DiffCategory.STRUCTURE,
        PitchField.HIDE_BRANDING: DiffCategory.FORMATTING,
        PitchField.CUSTOM_PRIMARY_COLOR: DiffCategory.FORMATTING,
        PitchField.CUSTOM_ACCENT_COLOR: DiffCategory.FORMATTING,
        PitchField.SHARED: DiffCategory.STRUCTURE,
        PitchField.SHARE_ID: DiffCategory.STRUCTURE,
        PitchField.SELLER_CONTEXT: DiffCategory.STRUCTURE,
        PitchField.USER_ID: DiffCategory.STRUCTURE,
    }
)

# Champs de partage (un diff qui ne touche qu'eux est un changement "shared")
SHARING_FIELDS: frozenset[str] = frozenset({PitchField.SHARED.value, PitchField.SHARE_ID.value})

# Champs de contenu pouvant être réécrits lors d'une restauration (ordre stable)
RESTORABLE_FIELDS: tuple[str, ...] = (
    PitchField.BUSINESS_NAME.value,
    PitchField.CONTACT_NAME.value,
    PitchField.INDUSTRY.value,
    PitchField.SUB_INDUSTRY.value,
    PitchField.HTML_CONTENT.value,
    PitchField.STATED_PROBLEM.value,
    PitchField.SHARED.value,
    PitchField.LEVEL.value,
    PitchField.PITCH_LEVEL.value,
    PitchField.HIDE_BRANDING.value,
    PitchField.CUSTOM_PRIMARY_COLOR.value,
    PitchField.CUSTOM_ACCENT_COLOR.value,
    PitchField.SELLER_CONTEXT.value,
)

# Champs système/volatils jamais conservés dans un snapshot
SYSTEM_FIELDS: frozenset[str] = frozenset({"analytics", "createdAt", "updatedAt"})

FRIENDLY_NAMES: MappingProxyType[PitchField, str] = MappingProxyType(
    {
        PitchField.BUSINESS_NAME: "business name",
        PitchField.CONTACT_NAME: "contact name",
        PitchField.INDUSTRY: "industry",
        PitchField.SUB_INDUSTRY: "sub-industry",
        PitchField.STATED_PROBLEM: "stated problem",
        PitchField.HTML_CONTENT: "pitch content",
        PitchField.PITCH_LEVEL: "pitch level",
        PitchField.HIDE_BRANDING: "branding visibility",
        PitchField.CUSTOM_PRIMARY_COLOR: "primary color",
        PitchField.CUSTOM_ACCENT_COLOR: "accent color",
        PitchField.SHARED: "sharing status",
        PitchField.SHARE_ID: "share link",
        PitchField.SELLER_CONTEXT: "seller context",
        PitchField.USER_ID: "owner",
    }
)


def category_for(field_name: str) -> DiffCategory:
    """Retourne la catégorie de diff d'un champ de premier niveau.

    Tout champ inconnu tombe dans `structure`.
    """
    known = PitchField.lookup(field_name)
    if known is None:
        return DiffCategory.STRUCTURE
    return FIELD_CATEGORIES[known]


def friendly_name(field_name: str) -> str:
    """Libellé lisible d'un champ (le nom brut si inconnu)."""
    known = PitchField.lookup(field_name)
    if known is None:
        return field_name
    return FRIENDLY_NAMES[known]
