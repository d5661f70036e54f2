"""
Known attribute columns that become option groups.

Each entry names an option group (stable code + de/fr display names) and the
column names under which its values appear in the different export formats.
Table order is the order in which option groups are extracted from a row.

Used by processing/row_normalizer.py (extraction) and
processing/vocabulary.py (creating groups missing from the seed).
"""

IMPORT_OPTION_GROUPS: list[dict] = [
    {
        "code": "model",
        "translations": {"de": "Ausführung", "fr": "Modèle"},
        "column_keys": ["Ausführung", "Ausfuehrung", "Modèle", "Modele"],
    },
    {
        "code": "arrow-direction",
        "translations": {"de": "Pfeilrichtung", "fr": "Sens de la flèche"},
        "column_keys": ["Pfeilrichtung", "Sens de la flèche", "Sens de la fleche"],
    },
    {
        "code": "size",
        "translations": {"de": "Grösse", "fr": "Taille"},
        "column_keys": ["Grösse", "Produkt Grösse", "Taille"],
    },
    {
        "code": "year",
        "translations": {"de": "Jahr", "fr": "An"},
        "column_keys": ["Jahr", "An"],
    },
    {
        "code": "color",
        "translations": {"de": "Farbe", "fr": "Couleur"},
        "column_keys": ["Farbe", "Couleur"],
    },
    {
        "code": "format",
        "translations": {"de": "Format", "fr": "Format"},
        "column_keys": ["Format"],
    },
    {
        "code": "luminance",
        "translations": {"de": "Leuchtdichte", "fr": "Luminance"},
        "column_keys": ["Leuchtdichte_mcd", "Leuchtdichte", "Luminance"],
    },
    {
        "code": "material",
        "translations": {"de": "Material", "fr": "Matériau"},
        "column_keys": ["Material", "Produkt Material", "Matériau", "Materiau"],
    },
    {
        "code": "norm",
        "translations": {"de": "Norm", "fr": "Norme"},
        "column_keys": ["Norm", "Norme"],
    },
    {
        "code": "pspa-class",
        "translations": {"de": "PSPA Klasse", "fr": "PSPA Classe"},
        "column_keys": ["PSPA_Class", "Pspa-klasse"],
    },
    {
        "code": "country",
        "translations": {"de": "Ursprungsland", "fr": "Pays d'origine"},
        "column_keys": [
            "Ursprungsland",
            "Produkt Ursprungsland",
            "Pays d'origine",
            "Pays",
        ],
    },
    {
        "code": "print-property",
        "translations": {
            "de": "Druckeigenschaft(-en)",
            "fr": "Propriétés d'impression",
        },
        "column_keys": [
            "Eigenschaft_Druck",
            "Produkt Druckeigenschaft(-en)",
            "Propriétés d'impression",
        ],
    },
    {
        # The unit column is rewritten with the quantity per unit before
        # extraction, see row_normalizer._merge_unit_quantity
        "code": "unit",
        "translations": {"de": "Einheit", "fr": "Unité"},
        "column_keys": ["Einheit", "Produkt Einheit", "Unité"],
    },
    {
        "code": "symbol-number",
        "translations": {"de": "Symbolnummer", "fr": "Numéro de symbole"},
        "column_keys": ["Symbolnummer", "Numéro de symbole"],
    },
    {
        "code": "content",
        "translations": {"de": "Inhalt", "fr": "Contenu"},
        "column_keys": ["Inhalt", "Contenu"],
    },
    {
        "code": "variant",
        "translations": {"de": "Variante", "fr": "Variante"},
        "column_keys": ["Variante"],
    },
]

OPTION_GROUPS_BY_CODE: dict[str, dict] = {
    group["code"]: group for group in IMPORT_OPTION_GROUPS
}
