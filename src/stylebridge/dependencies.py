"""
Trackable requirements for preprocessing engines, so a missing engine can be
reported with an install hint instead of an ImportError deep in a build.
"""
from __future__ import annotations

import abc
import importlib
import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Iterable


class Dependency(abc.ABC):
    """
    Something an engine needs installed before it can compile anything.
    """

    @property
    @abc.abstractmethod
    def satisfied(self) -> bool:
        """
        Whether the engine can use this requirement right now.
        """

    @property
    @abc.abstractmethod
    def install_hint(self) -> str:
        """
        The command to show when an engine is reported as unavailable.
        """

    def __repr__(self):
        return f'{self.__class__.__name__}({self}, satisfied={self.satisfied})'


class PipDependency(Dependency):
    """
    An engine's Python binding, found by importing @check_name. @name is the
    distribution shown in reports and @source what to hand to pip, so an
    engine can ask for `libsass` while importing `sass`.
    """
    def __init__(self,
                 name: str,
                 source: str | None = None,
                 check_name: str | None = None):
        self.name = name
        self.source = source or name
        self.check_name = check_name or name

    def __str__(self):
        return self.name

    @property
    def satisfied(self):
        try:
            importlib.import_module(self.check_name)
        except ImportError:
            return False
        return True

    @property
    def install_hint(self):
        return f'pip install {self.source}'


def missing(dependencies: Iterable[Dependency]) -> list[Dependency]:
    """
    Return the unsatisfied members of @dependencies, sorted by name.
    """
    return sorted((d for d in dependencies if not d.satisfied), key=str)
