"""Mutually exclusive option groups over flat boolean item flags."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple

from .errors import DOMAIN_RANGE, EXCLUSIVE_GROUP, ValidationResult, Violation

__all__ = ["ExclusiveGroup", "ExclusiveGroupValidator"]


@dataclass(frozen=True)
class ExclusiveGroup:
    id: str
    items: Tuple[str, ...]
    label: str = ""


class ExclusiveGroupValidator:
    """Check that at most one flag of each declared group is selected.

    The validator never chooses which flag to keep: any group with two or
    more true flags is reported with its identifier and the selected items.
    """

    def __init__(self, groups: Sequence[ExclusiveGroup], known_items: Iterable[str]):
        self.groups = tuple(groups)
        self.known_items = frozenset(known_items)
        for group in self.groups:
            unknown = set(group.items) - self.known_items
            if unknown:
                raise ValueError(f"Grupo {group.id} declara ítems desconocidos: {sorted(unknown)}")

    def validate(self, flags: Mapping[str, object]) -> ValidationResult:
        violations: List[Violation] = []
        unknown = sorted(key for key in flags if key not in self.known_items)
        for key in unknown:
            violations.append(
                Violation(reason=DOMAIN_RANGE, field=key, message=f"Ítem desconocido: {key}")
            )
        for key, value in flags.items():
            if key in self.known_items and not isinstance(value, bool):
                violations.append(
                    Violation(
                        reason=DOMAIN_RANGE,
                        field=key,
                        message=f"{key} debe ser verdadero o falso (recibido {value!r})",
                    )
                )
        for group in self.groups:
            selected = tuple(item for item in group.items if flags.get(item) is True)
            if len(selected) > 1:
                violations.append(
                    Violation(
                        reason=EXCLUSIVE_GROUP,
                        group=group.id,
                        items=selected,
                        message=(
                            f"Solo se puede seleccionar una opción del {group.label or group.id}"
                            f" (seleccionados: {', '.join(selected)})"
                        ),
                    )
                )
        return ValidationResult.collect(violations)
