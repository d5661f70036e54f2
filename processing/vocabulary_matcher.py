"""
Vocabulary matcher — maps a free-text label onto an existing facet value or
option, creating a new one only when nothing matches.

Matching cascade for a label in one language:
  1. Normalize the label (trim + casefold).
  2. Keep the contextual suggestions (items already used by another
     translation of the same product/variant) that are either untranslated
     in this language or carry exactly this name.
  3. Prefer suggestions whose name matches; without suggestions, scan the
     whole group for a matching name.
  4. A single candidate is accepted silently.
  5. If every item of the group is already translated in this language the
     label is genuinely new → no match.
  6. Otherwise the operator decides (or answers "none of these").

Public API:
    resolve(group, free_text, language_code, suggestions, disambiguator)
        → VocabularyItem | None
    find_or_create(group, free_text, language_code, suggestions, disambiguator)
        → VocabularyItem
"""

import logging

from processing.vocabulary import Disambiguator, VocabularyGroup, VocabularyItem
from utils.slugs import make_slug

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def resolve(
    group: VocabularyGroup,
    free_text: str,
    language_code: str,
    suggestions: list[VocabularyItem] | None,
    disambiguator: Disambiguator,
) -> VocabularyItem | None:
    """
    Find the item of *group* that *free_text* refers to.

    Args:
        group: Facet or option group whose items are searched.
        free_text: Label as written in the row.
        language_code: Language of the row.
        suggestions: Items already chosen for a sibling translation, or
            None/empty when there is no such context.
        disambiguator: Operator prompt for the ambiguous cases.

    Returns:
        The matched item (with a translation in *language_code* attached if
        it lacked one), or None when a new item should be created.
    """
    needle = _normalize(free_text)

    if suggestions:
        plausible = [
            item for item in suggestions
            if not item.has_translation(language_code)
            or _normalize(item.name_in(language_code)) == needle
        ]
        exact = [item for item in plausible if _matches(item, needle, language_code)]
        candidates = exact or plausible
    else:
        candidates = [
            item for item in group.items
            if _matches(item, needle, language_code)
        ]

    if len(candidates) == 1:
        match = candidates[0]
        _attach_translation(match, language_code, free_text)
        logger.debug(
            f"Matched '{free_text}' ({language_code}) → "
            f"{group.code}/{match.code}"
        )
        return match

    untranslated = [
        item for item in group.items if not item.has_translation(language_code)
    ]
    if not untranslated:
        logger.debug(
            f"No match for '{free_text}' ({language_code}) in '{group.code}', "
            f"all {len(group.items)} items already translated"
        )
        return None

    choices = candidates or list(group.items)
    prompt = (
        f'Which value of "{group.code}" is meant by "{free_text}" '
        f"({language_code})?"
    )
    logger.info(
        f"Asking operator about '{free_text}' in '{group.code}' "
        f"({len(choices)} choices)"
    )
    choice = disambiguator.ask(prompt, choices, _render, True)

    if choice is not None:
        _attach_translation(choice, language_code, free_text)
    return choice


def find_or_create(
    group: VocabularyGroup,
    free_text: str,
    language_code: str,
    suggestions: list[VocabularyItem] | None,
    disambiguator: Disambiguator,
    reserved_codes: set[str] | None = None,
) -> VocabularyItem:
    """
    resolve(), falling back to a new item of *group* named *free_text*.

    The new item's code is a slug of *free_text*, suffixed if it collides
    with an item of *group* or with *reserved_codes*.
    """
    match = resolve(group, free_text, language_code, suggestions, disambiguator)
    if match is not None:
        return match

    item = group.add_item(
        make_slug(free_text), language_code, free_text.strip(), reserved_codes
    )
    logger.info(
        f"Created {group.kind} value '{group.code}/{item.code}' "
        f"for '{free_text}' ({language_code})"
    )
    return item


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _normalize(text: str | None) -> str:
    return str(text or "").strip().casefold()


def _matches(item: VocabularyItem, needle: str, language_code: str) -> bool:
    """
    Name equality in *language_code*; an item without that translation is
    compared through its other translations instead.
    """
    own_name = item.name_in(language_code)
    if own_name is not None:
        return _normalize(own_name) == needle
    return any(_normalize(t.name) == needle for t in item.translations)


def _attach_translation(item: VocabularyItem, language_code: str, name: str) -> None:
    if not item.has_translation(language_code):
        item.set_translation(language_code, name.strip())


def _render(item: VocabularyItem) -> str:
    return item.render()
