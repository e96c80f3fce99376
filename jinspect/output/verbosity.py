"""
Verbosity Selection
====================

Bitmask choosing which sections of a decoded class file are rendered.
An empty mask means "everything", so ``VerboseMode.build([])`` and
``VerboseMode.build(["all"])`` are equivalent.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable


class Section(enum.IntFlag):
    HEADER = 1
    CLAZZ = 2
    POOL = 4
    INTERFACE = 8
    METHOD = 16
    FIELD = 32
    ATTRIBUTE = 64


SECTION_NAMES: dict[str, Section] = {
    "header": Section.HEADER,
    "clazz": Section.CLAZZ,
    "pool": Section.POOL,
    "interface": Section.INTERFACE,
    "method": Section.METHOD,
    "field": Section.FIELD,
    "attribute": Section.ATTRIBUTE,
}

CHOICES: tuple[str, ...] = ("all", *SECTION_NAMES)


@dataclass(frozen=True, slots=True)
class VerboseMode:
    """Selected sections; a zero mask selects all of them."""
    mask: int = 0

    @classmethod
    def build(cls, names: Iterable[str]) -> VerboseMode:
        """Combine section *names* into a mode.

        Raises:
            ValueError: A name is not one of :data:`CHOICES`.
        """
        mask = 0
        everything = False
        for raw in names:
            name = raw.strip().lower()
            if not name:
                continue
            if name == "all":
                everything = True
                continue
            if name not in SECTION_NAMES:
                raise ValueError(
                    f"unknown section {raw!r}; choose from {', '.join(CHOICES)}"
                )
            mask |= SECTION_NAMES[name]
        return cls(0 if everything else mask)

    def can_show(self, section: Section) -> bool:
        return self.mask == 0 or self.mask & section == section

    @property
    def selected(self) -> tuple[str, ...]:
        return tuple(name for name, sec in SECTION_NAMES.items() if self.can_show(sec))
