"""
Moteur de diff catégorisé entre deux snapshots de pitch.

Le diff est calculé comme une suite d'opérations structurelles (`add`, `remove`, `replace`)
adressées par chemin (style JSON Pointer sans le `/` initial), puis réparti dans les catégories
`metadata`, `content`, `formatting` et `structure` selon le champ de premier niveau.

Le calcul est pur et déterministe: aucune I/O, aucune mutation des entrées, aucune exception
propagée pour des entrées inattendues (un snapshot absent ou non-mapping produit un diff vide).
"""

# ============================================================
# Module : pitch_history/domain/diff_engine.py
# Objet  : Diff structurel catégorisé + description lisible.
# ============================================================

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .pitch_fields import SHARING_FIELDS, PitchField, category_for, friendly_name
from .snapshot import PitchSnapshot, to_json_safe
from .version import CategorizedDiff, ChangeType, DiffEntry

SUMMARY_MAX_CHARS = 100
OBJECT_MARKER = "[object]"

_ADD = "add"
_REMOVE = "remove"
_REPLACE = "replace"


def summarize_value(value: Any) -> Any:
    """Résume une valeur pour stockage dans le diff.

    - None reste None;
    - une chaîne de plus de 100 caractères est tronquée (suffixe "...");
    - un objet/tableau/ensemble est remplacé par le marqueur "[object]";
    - les nombres et booléens sont conservés, les autres scalaires convertis en JSON.
    """
    if value is None:
        return None
    if isinstance(value, Mapping | list | tuple | set | frozenset):
        return OBJECT_MARKER
    if not isinstance(value, str | int | float):
        value = to_json_safe(value)
    if isinstance(value, str) and len(value) > SUMMARY_MAX_CHARS:
        return value[:SUMMARY_MAX_CHARS] + "..."
    return value


def _as_mapping(snapshot: Any) -> Mapping[str, Any] | None:
    if isinstance(snapshot, PitchSnapshot):
        return snapshot.to_mapping()
    if isinstance(snapshot, Mapping):
        return snapshot
    return None


def _escape(key: Any) -> str:
    return str(key).replace("~", "~0").replace("/", "~1")


def _is_list(value: Any) -> bool:
    return isinstance(value, list | tuple)


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping) or _is_list(value)


def _same_container_kind(a: Any, b: Any) -> bool:
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return True
    return _is_list(a) and _is_list(b)


def _scalar_equal(a: Any, b: Any) -> bool:
    # True == 1 en Python: un booléen ne vaut jamais un nombre
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    try:
        return bool(a == b)
    except Exception:
        return False


def _children(node: Mapping[str, Any] | Sequence[Any]) -> list[tuple[Any, Any]]:
    if isinstance(node, Mapping):
        return list(node.items())
    return list(enumerate(node))


class _Frame:
    """Comparaison en cours de deux conteneurs de même nature."""

    __slots__ = ("path", "new", "new_items", "old_keys", "pending", "deleted")

    def __init__(
        self,
        old: Mapping[str, Any] | Sequence[Any],
        new: Mapping[str, Any] | Sequence[Any],
        path: str,
    ) -> None:
        old_items = _children(old)
        self.path = path
        self.new = new
        self.new_items = dict(_children(new))
        self.old_keys = {k for k, _ in old_items}
        self.pending = reversed(old_items)
        self.deleted = False

    def child_path(self, key: Any) -> str:
        return f"{self.path}/{_escape(key)}" if self.path else _escape(key)

    def additions(self) -> list[tuple[str, str, Any, Any]]:
        if not self.deleted and len(self.new_items) == len(self.old_keys):
            return []
        return [
            (_ADD, self.child_path(key), None, new_val)
            for key, new_val in _children(self.new)
            if key not in self.old_keys
        ]


def _generate(
    old: Mapping[str, Any] | Sequence[Any],
    new: Mapping[str, Any] | Sequence[Any],
) -> list[tuple[str, str, Any, Any]]:
    """Compare deux conteneurs de même nature et retourne les opérations.

    Les suppressions/remplacements sont émis en parcourant l'ancien état à rebours (en
    descendant dans les sous-conteneurs au passage), puis les ajouts dans l'ordre du nouvel
    état. Le parcours utilise une pile explicite: la profondeur d'imbrication n'est pas bornée.
    """
    out: list[tuple[str, str, Any, Any]] = []
    stack = [_Frame(old, new, "")]
    while stack:
        frame = stack[-1]
        item = next(frame.pending, None)
        if item is None:
            out.extend(frame.additions())
            stack.pop()
            continue
        key, old_val = item
        child_path = frame.child_path(key)
        if key not in frame.new_items:
            out.append((_REMOVE, child_path, old_val, None))
            frame.deleted = True
            continue
        new_val = frame.new_items[key]
        if _same_container_kind(old_val, new_val):
            stack.append(_Frame(old_val, new_val, child_path))
        elif _is_container(old_val) or _is_container(new_val):
            out.append((_REPLACE, child_path, old_val, new_val))
        elif not _scalar_equal(old_val, new_val):
            out.append((_REPLACE, child_path, old_val, new_val))
    return out


def compute_diff(old: Any, new: Any) -> CategorizedDiff:
    """Calcule le diff catégorisé entre deux snapshots.

    Args:
        old: état précédent (mapping ou `PitchSnapshot`), peut être absent.
        new: nouvel état (mapping ou `PitchSnapshot`), peut être absent.

    Returns:
        CategorizedDiff: diff vide si l'un des deux états est absent.
    """
    diff = CategorizedDiff()
    old_map = _as_mapping(old)
    new_map = _as_mapping(new)
    if old_map is None or new_map is None:
        return diff

    for op, field_path, old_val, new_val in _generate(old_map, new_map):
        entry = DiffEntry(
            op=op,
            field=field_path,
            old_value=summarize_value(old_val) if op in (_REPLACE, _REMOVE) else None,
            new_value=summarize_value(new_val) if op in (_REPLACE, _ADD) else None,
        )
        diff.bucket(category_for(entry.top_field)).append(entry)
    return diff


def _unique_friendly(entries: list[DiffEntry]) -> list[str]:
    seen: list[str] = []
    for e in entries:
        name = friendly_name(e.top_field)
        if name not in seen:
            seen.append(name)
    return seen


def _as_change_type(value: ChangeType | str) -> ChangeType | None:
    if isinstance(value, ChangeType):
        return value
    try:
        return ChangeType(value)
    except ValueError:
        return None


def describe_changes(diff: CategorizedDiff, change_type: ChangeType | str) -> str:
    """Construit un résumé lisible d'un diff.

    Phrases fixes pour `created` et `restored`; sinon (type inconnu compris) une clause par
    catégorie non vide, jointes par "; ", ou "Minor changes" si le diff est vide.
    """
    kind = _as_change_type(change_type)
    if kind is ChangeType.CREATED:
        return "Pitch created"
    if kind is ChangeType.RESTORED:
        return "Restored from previous version"

    parts: list[str] = []
    if diff.metadata:
        parts.append(f"Updated {', '.join(_unique_friendly(diff.metadata))}")
    if diff.content:
        parts.append(f"Modified {friendly_name(PitchField.HTML_CONTENT.value)}")
    if diff.formatting:
        parts.append(f"Changed {', '.join(_unique_friendly(diff.formatting))}")
    if diff.structure:
        parts.append(f"Updated {len(diff.structure)} other field(s)")
    return "; ".join(parts) if parts else "Minor changes"


def detect_change_type(diff: CategorizedDiff) -> ChangeType:
    """Classe un diff (indicatif, surchargeable par l'appelant).

    - `shared`: seuls des champs de partage sont touchés, dont `shared`;
    - `formatted`: seul le formatage change (ni metadata ni content);
    - `edited` sinon.
    """
    touched = diff.touched_fields()
    if PitchField.SHARED.value in touched and touched <= SHARING_FIELDS:
        return ChangeType.SHARED
    if diff.formatting and not diff.metadata and not diff.content:
        return ChangeType.FORMATTED
    return ChangeType.EDITED


__all__ = [
    "compute_diff",
    "describe_changes",
    "detect_change_type",
    "summarize_value",
]
