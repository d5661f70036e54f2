"""
Vocabulary model — facets, option groups and their translatable values.

Facets and option groups share one shape: a group with a stable code, a set
of translations and a list of items (facet values / options).  The kind is
an explicit discriminant set at construction time.

All vocabulary of one import run lives in an ImportContext which is passed
by reference through the catalog builder and mutated in place as new values
and translations are discovered.

Public API:
    Translation, VocabularyItem, VocabularyGroup, ImportContext
    Disambiguator (protocol implemented by the operator prompt)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Protocol

from config.catalog import REQUIRED_FACET_CODES
from config.option_groups import OPTION_GROUPS_BY_CODE
from processing.errors import MissingRequiredVocabularyError

logger = logging.getLogger(__name__)

VocabularyKind = Literal["facet", "option_group"]

FACET: VocabularyKind = "facet"
OPTION_GROUP: VocabularyKind = "option_group"


# ═══════════════════════════════════════════════════════════════════════════
# Disambiguator port
# ═══════════════════════════════════════════════════════════════════════════

class Disambiguator(Protocol):
    """Asks an operator to pick one of several candidates."""

    def ask(
        self,
        prompt: str,
        candidates: list[Any],
        render_item: Callable[[Any], str],
        allow_none: bool = True,
    ) -> Any | None:
        """Block until a candidate (or None for "none of these") is chosen."""
        ...


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Translation:
    language_code: str
    name: str


@dataclass
class _Translatable:
    code: str
    translations: list[Translation] = field(default_factory=list)

    def name_in(self, language_code: str) -> str | None:
        for translation in self.translations:
            if translation.language_code == language_code:
                return translation.name
        return None

    def has_translation(self, language_code: str) -> bool:
        return self.name_in(language_code) is not None

    def set_translation(self, language_code: str, name: str) -> None:
        """Add or replace the translation for *language_code*."""
        for translation in self.translations:
            if translation.language_code == language_code:
                translation.name = name
                return
        self.translations.append(Translation(language_code, name))

    def render(self) -> str:
        """'<code>, [de: "Rot"], [fr: "Rouge"]' for operator prompts."""
        names = ", ".join(
            f'[{t.language_code}: "{t.name}"]' for t in self.translations
        )
        return f"{self.code}, {names}" if names else self.code


@dataclass
class VocabularyItem(_Translatable):
    """A facet value or an option.  Belongs to exactly one group."""

    group_code: str = ""
    id: Any = None


@dataclass
class VocabularyGroup(_Translatable):
    """A facet or an option group with its controlled vocabulary."""

    kind: VocabularyKind = FACET
    items: list[VocabularyItem] = field(default_factory=list)
    id: Any = None

    def find_item(self, code: str) -> VocabularyItem | None:
        for item in self.items:
            if item.code == code:
                return item
        return None

    def add_item(
        self,
        code: str,
        language_code: str,
        name: str,
        reserved_codes: set[str] | None = None,
    ) -> VocabularyItem:
        """Create an item with a code unique within this group and *reserved_codes*."""
        item = VocabularyItem(
            code=self.unique_code(code, reserved_codes),
            translations=[Translation(language_code, name)],
            group_code=self.code,
        )
        self.items.append(item)
        return item

    def unique_code(self, base: str, reserved_codes: set[str] | None = None) -> str:
        """*base*, or *base*-2, *base*-3 … whichever is still free."""
        base = base or "value"
        taken = {item.code for item in self.items} | (reserved_codes or set())
        if base not in taken:
            return base
        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    def copy_with_items(self, item_codes: list[str]) -> "VocabularyGroup":
        """Shallow subtree holding only the listed items (same item objects)."""
        return VocabularyGroup(
            code=self.code,
            translations=self.translations,
            kind=self.kind,
            items=[item for item in self.items if item.code in item_codes],
            id=self.id,
        )


# ═══════════════════════════════════════════════════════════════════════════
# Import context
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ImportContext:
    """
    Mutable vocabulary state of one import run.

    Args:
        facets: Facet snapshot from the remote store.  Must contain every
            code in *required_facet_codes*.
        disambiguator: Operator prompt used when matching is ambiguous.
        option_groups: Optional option-group snapshot.  Groups missing from
            it are created from config.option_groups on first use.
        required_facet_codes: Facets the import cannot run without.
    """

    facets: list[VocabularyGroup]
    disambiguator: Disambiguator
    option_groups: list[VocabularyGroup] = field(default_factory=list)
    required_facet_codes: list[str] = field(
        default_factory=lambda: list(REQUIRED_FACET_CODES)
    )

    def __post_init__(self):
        for code in self.required_facet_codes:
            self.facet(code)

    def facet(self, code: str) -> VocabularyGroup:
        """
        Raises:
            MissingRequiredVocabularyError: the facet is not in the seed.
        """
        for facet in self.facets:
            if facet.code == code:
                return facet
        raise MissingRequiredVocabularyError(FACET, code)

    def facet_value_codes(self) -> set[str]:
        """Codes of all facet values; products reference them without the facet."""
        return {item.code for facet in self.facets for item in facet.items}

    def option_group(self, code: str) -> VocabularyGroup:
        """
        Existing option group *code*, created from the attribute table if
        the seed lacks it.

        Raises:
            MissingRequiredVocabularyError: *code* is neither in the seed
                nor in the attribute table.
        """
        for group in self.option_groups:
            if group.code == code:
                return group

        template = OPTION_GROUPS_BY_CODE.get(code)
        if template is None:
            raise MissingRequiredVocabularyError(OPTION_GROUP, code)

        group = VocabularyGroup(
            code=code,
            translations=[
                Translation(language, name)
                for language, name in template["translations"].items()
            ],
            kind=OPTION_GROUP,
        )
        self.option_groups.append(group)
        logger.info(f"Created option group '{code}'")
        return group
