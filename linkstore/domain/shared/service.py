"""Base class for domain services.

Services declare their collaborators as annotated fields (``_store: LinkStore``)
and are constructed with keyword arguments by the dishka providers.
"""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform()
class _ServiceMeta(type):
    """Turns every Service subclass into a dataclass; Service itself stays plain."""

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        is_subclass = any(isinstance(base, mcs) for base in bases)
        return dataclass(cls) if is_subclass else cls


class Service(metaclass=_ServiceMeta):
    """A stateless domain operation over injected ports."""
