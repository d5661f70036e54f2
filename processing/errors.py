"""
Fatal import errors.

Every error here aborts the whole import before anything reaches the remote
store.  Messages are written for the operator who has to fix the source file.
"""


class CatalogImportError(ValueError):
    """Base class for all errors that abort an import run."""


class RecordValidationError(CatalogImportError):
    """A single row could not be turned into a NormalizedRecord."""

    def __init__(self, row_index: int, message: str):
        self.row_index = row_index
        super().__init__(f"Row {row_index}: {message}")


class MissingColumnError(RecordValidationError):
    """A mandatory logical field has none of its column aliases in the row."""

    def __init__(
        self,
        row_index: int,
        field_name: str,
        aliases: list[str],
        suggestion: str | None = None,
    ):
        self.field_name = field_name
        self.aliases = list(aliases)
        self.suggestion = suggestion
        message = (
            f"missing column for '{field_name}'. "
            f"Add one of the columns [{', '.join(aliases)}]"
        )
        if suggestion:
            message += f" (found a similar column '{suggestion}')"
        super().__init__(row_index, message)


class MalformedValueError(RecordValidationError):
    """A present column holds a value that cannot be coerced."""

    def __init__(self, row_index: int, field_name: str, raw_value: object, reason: str = ""):
        self.field_name = field_name
        self.raw_value = raw_value
        message = f"invalid value {raw_value!r} for '{field_name}'"
        if reason:
            message += f": {reason}"
        super().__init__(row_index, message)


class InconsistentTranslationError(CatalogImportError):
    """Rows of the same logical entity disagree on their option groups."""


class MissingRequiredVocabularyError(CatalogImportError):
    """A facet or option group the import depends on is not in the seed."""

    def __init__(self, kind: str, code: str):
        self.kind = kind
        self.code = code
        super().__init__(
            f"Required {kind} '{code}' does not exist. "
            f"Create it in the catalog before importing."
        )


class AmbiguousDuplicateError(CatalogImportError):
    """Two variants of one product share an option set but not a SKU."""

    def __init__(self, product_sku: str, first: object, second: object):
        self.product_sku = product_sku
        self.first = first
        self.second = second
        super().__init__(
            f"Product {product_sku}: variants with identical options but "
            f"different SKUs.\n  {first}\n  {second}"
        )


class MissingOptionError(CatalogImportError):
    """A variant to be created lacks an option in one of its product's groups."""
