"""
Snapshot typé d'un pitch.

Un `PitchSnapshot` porte un attribut optionnel par champ connu (`PitchField`) et un bucket
`extras` pour les champs structurels non référencés (compatibilité ascendante). Les champs système
(`analytics`, `createdAt`, `updatedAt`) ne sont jamais conservés.
"""

# ============================================================
# Module : pitch_history/domain/snapshot.py
# Objet  : Snapshot typé (POPO) + assainissement des champs système.
# ============================================================

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from pydantic_core import to_jsonable_python

from .pitch_fields import SYSTEM_FIELDS, PitchField

# attribut python -> nom de champ stocké
_ATTR_TO_FIELD: dict[str, str] = {
    "business_name": PitchField.BUSINESS_NAME.value,
    "contact_name": PitchField.CONTACT_NAME.value,
    "industry": PitchField.INDUSTRY.value,
    "sub_industry": PitchField.SUB_INDUSTRY.value,
    "stated_problem": PitchField.STATED_PROBLEM.value,
    "html_content": PitchField.HTML_CONTENT.value,
    "pitch_level": PitchField.PITCH_LEVEL.value,
    "level": PitchField.LEVEL.value,
    "hide_branding": PitchField.HIDE_BRANDING.value,
    "custom_primary_color": PitchField.CUSTOM_PRIMARY_COLOR.value,
    "custom_accent_color": PitchField.CUSTOM_ACCENT_COLOR.value,
    "shared": PitchField.SHARED.value,
    "share_id": PitchField.SHARE_ID.value,
    "seller_context": PitchField.SELLER_CONTEXT.value,
    "user_id": PitchField.USER_ID.value,
}
_FIELD_TO_ATTR: dict[str, str] = {v: k for k, v in _ATTR_TO_FIELD.items()}


@dataclass
class PitchSnapshot:
    """
    État sérialisable d'un pitch, sans champs système.

    Les attributs à `None` sont considérés comme absents du snapshot, sauf s'ils figurent dans
    `present` (valeur `null` explicitement stockée).
    """

    business_name: str | None = None
    contact_name: str | None = None
    industry: str | None = None
    sub_industry: str | None = None
    stated_problem: str | None = None
    html_content: str | None = None
    pitch_level: Any = None
    level: Any = None
    hide_branding: bool | None = None
    custom_primary_color: str | None = None
    custom_accent_color: str | None = None
    shared: bool | None = None
    share_id: str | None = None
    seller_context: Any = None
    user_id: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)
    present: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> PitchSnapshot:
        """Construit un snapshot depuis un dict brut (copie profonde, champs système retirés)."""
        snap = cls()
        if not data:
            return snap
        present: set[str] = set()
        for key, value in data.items():
            if key in SYSTEM_FIELDS:
                continue
            attr = _FIELD_TO_ATTR.get(key)
            if attr is None:
                snap.extras[key] = copy.deepcopy(value)
            else:
                setattr(snap, attr, copy.deepcopy(value))
                present.add(attr)
        snap.present = frozenset(present)
        return snap

    def to_mapping(self) -> dict[str, Any]:
        """Sérialise vers un dict plat (noms de champs stockés), extras inclus."""
        out: dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("extras", "present"):
                continue
            value = getattr(self, f.name)
            if value is None and f.name not in self.present:
                continue
            out[_ATTR_TO_FIELD[f.name]] = copy.deepcopy(value)
        for key, value in self.extras.items():
            if key in SYSTEM_FIELDS:
                continue
            out[key] = copy.deepcopy(value)
        return out


def to_json_safe(value: Any) -> Any:
    """Convertit une valeur en types JSON natifs.

    Dates et heures en ISO 8601, `Decimal` et `UUID` en chaînes, octets en base64, ensembles et
    tuples en listes.
    Un type inconnu est rendu par `str()`.
    """
    return to_jsonable_python(value, bytes_mode="base64", fallback=str)


def sanitize_snapshot(data: Mapping[str, Any] | PitchSnapshot | None) -> dict[str, Any]:
    """Retourne une copie du pitch sans champs système, prête à être stockée (valeurs JSON)."""
    if not isinstance(data, PitchSnapshot):
        data = PitchSnapshot.from_mapping(data)
    return to_json_safe(data.to_mapping())
