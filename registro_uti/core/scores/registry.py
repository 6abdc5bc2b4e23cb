"""Score registry: dispatch a wire payload to the matching score computation."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping

ScoreFunc = Callable[[Mapping[str, Any]], Dict[str, Any]]

_REGISTRY: Dict[str, ScoreFunc] = {}


class UnknownScoreError(LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Puntaje no registrado: {name}")


def register(name: str) -> Callable[[ScoreFunc], ScoreFunc]:
    def decorator(func: ScoreFunc) -> ScoreFunc:
        _REGISTRY[name] = func
        return func

    return decorator


def available_scores() -> List[str]:
    return sorted(_REGISTRY)


def run_score(name: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Compute a registered score. Scoring errors propagate to the caller."""

    func = _REGISTRY.get(name)
    if func is None:
        raise UnknownScoreError(name)
    return func(payload)
