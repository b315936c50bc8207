"""
Passe de rétention manuelle pour un pitch.

Exécute synchronement le nettoyage des versions excédentaires (même logique que la tâche Celery
`pitch_history.tasks.cleanup_versions`) et affiche le nombre de versions supprimées. Utile pour
rattraper un pitch après un changement de plan ou une file de rétention saturée.
"""

from __future__ import annotations

import argparse

from pitch_history.core.container import Container
from pitch_history.core.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Prune old pitch versions per plan limit")
    parser.add_argument("pitch_id", help="Pitch identifier")
    parser.add_argument("owner_id", help="Owner identifier (determines the plan limit)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the current count and the applicable limit",
    )
    return parser


def main(argv: list[str] | None = None, container: Container | None = None) -> int:
    """
    Point d'entrée principal de la passe de rétention.

    Retourne le nombre de versions supprimées (0 en mode `--dry-run`).
    """
    args = build_parser().parse_args(argv)
    c = container or Container()

    if args.dry_run:
        total = c.version_store.count_versions(args.pitch_id)
        limit = c.retention.version_limit(args.owner_id)
        print(f"pitch={args.pitch_id} versions={total} limit={limit}")
        return 0

    deleted = c.retention.cleanup(args.pitch_id, args.owner_id)
    print(f"pruned pitch={args.pitch_id} deleted={deleted}")
    return deleted


if __name__ == "__main__":  # pragma: no cover - script entry
    setup_logging()
    main()
