"""
Entity type normalization and categorisation.

Knowledge Graph types arrive as schema.org names ("Person",
"CreativeWork", "TVSeries"). Scoring and topic rules compare the
kebab-case form ("person", "creative-work", "tv-series").
"""

import re

CATEGORY_PERSON = "person"
CATEGORY_ORGANIZATION = "organization"
CATEGORY_PLACE = "place"
CATEGORY_PRODUCT = "product"
CATEGORY_OTHER = "other"

ORGANIZATION_TYPES = frozenset({
    "organization", "corporation", "educational-organization",
    "government-organization", "local-business", "sports-team", "ngo",
    "sports-organization", "airline",
})
PLACE_TYPES = frozenset({
    "place", "location", "city", "country", "administrative-area", "region",
    "landmark", "tourist-attraction", "state", "continent",
})
PRODUCT_TYPES = frozenset({
    "product", "service", "software-application", "product-model", "vehicle",
})

# Types that give a person-centred page narrative context
CONTEXTUAL_TYPES = frozenset({
    "cuisine", "city", "organization", "restaurant", "place", "location",
    "region", "creative-work", "book", "tv-show", "tv-series",
})

# Coarse type inference from a short knowledge-base description
_DESCRIPTION_TYPE_RULES = (
    (re.compile(
        r"\b(actor|actress|singer|politician|writer|author|footballer|player|"
        r"musician|scientist|businessman|businesswoman|entrepreneur|chef|"
        r"painter|journalist|rapper|comedian|philosopher|athlete)\b"), "Person"),
    (re.compile(
        r"\b(company|corporation|organi[sz]ation|agency|university|foundation|"
        r"association|institution|manufacturer|non-profit|political party|band)\b"),
     "Organization"),
    (re.compile(r"\b(restaurant)\b"), "Restaurant"),
    (re.compile(r"\b(cuisine)\b"), "Cuisine"),
    (re.compile(r"\b(city|town|capital|municipality|village)\b"), "City"),
    (re.compile(r"\b(country|sovereign state)\b"), "Country"),
    (re.compile(r"\b(region|province|county|district)\b"), "Region"),
    (re.compile(r"\b(television series|tv series|sitcom)\b"), "TVSeries"),
    (re.compile(r"\b(book|novel)\b"), "Book"),
    (re.compile(r"\b(film|album|song|video game|painting)\b"), "CreativeWork"),
    (re.compile(
        r"\b(software|product|smartphone|web browser|operating system|device)\b"),
     "Product"),
    (re.compile(r"\b(service)\b"), "Service"),
)


def normalize_type(entity_type: str | None) -> str:
    """CamelCase schema.org type to kebab-case, '' for None."""
    if not entity_type:
        return ""
    value = entity_type.strip()
    value = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", value)
    value = re.sub(r"(?<=[A-Z])(?=[A-Z][a-z])", "-", value)
    return value.replace("_", "-").replace(" ", "-").lower()


def type_category(entity_type: str | None) -> str | None:
    """Scoring category of a type, None when the type is unknown."""
    normalized = normalize_type(entity_type)
    if not normalized:
        return None
    if normalized == CATEGORY_PERSON:
        return CATEGORY_PERSON
    if normalized in ORGANIZATION_TYPES:
        return CATEGORY_ORGANIZATION
    if normalized in PLACE_TYPES:
        return CATEGORY_PLACE
    if normalized in PRODUCT_TYPES:
        return CATEGORY_PRODUCT
    return CATEGORY_OTHER


def is_person_or_organization(entity_type: str | None) -> bool:
    return type_category(entity_type) in (CATEGORY_PERSON, CATEGORY_ORGANIZATION)


def is_contextual_type(entity_type: str | None) -> bool:
    return normalize_type(entity_type) in CONTEXTUAL_TYPES


def infer_type_from_description(description: str | None) -> str | None:
    """First matching coarse type for a description, None if nothing matches."""
    if not description:
        return None
    lowered = description.lower()
    for pattern, entity_type in _DESCRIPTION_TYPE_RULES:
        if pattern.search(lowered):
            return entity_type
    return None
