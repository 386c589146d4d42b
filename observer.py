# observer.py
from __future__ import annotations
from typing import Protocol, Any


class Observer(Protocol):
    def update(self, event: str, payload: Any) -> None: ...


class Subject:
    """
    Источник событий для репозиториев. Наблюдатели (persistence, UI)
    получают событие синхронно, в порядке подписки.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def attach(self, obs: Observer) -> None:
        if obs not in self._observers:
            self._observers.append(obs)

    def detach(self, obs: Observer) -> None:
        if obs in self._observers:
            self._observers.remove(obs)

    def observers(self) -> tuple[Observer, ...]:
        return tuple(self._observers)

    def notify(self, event: str, payload: Any) -> None:
        # копия списка: наблюдатель может отписаться прямо в update()
        for obs in list(self._observers):
            obs.update(event, payload)
