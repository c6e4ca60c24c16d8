"""
Synonym groups used to expand topic phrases.

A group is a set of interchangeable surface forms. Lookup is symmetric:
any member returns the whole group.
"""

from dataclasses import dataclass, field

DEFAULT_SYNONYM_GROUPS: tuple[tuple[str, ...], ...] = (
    ("seo", "search engine optimization"),
    ("ppc", "pay per click", "pay-per-click"),
    ("sem", "search engine marketing"),
    ("ai", "artificial intelligence"),
    ("ml", "machine learning"),
    ("ux", "user experience"),
    ("ui", "user interface"),
    ("crm", "customer relationship management"),
    ("smm", "social media marketing"),
    ("cro", "conversion rate optimization"),
    ("ecommerce", "e-commerce", "electronic commerce"),
)


@dataclass(frozen=True)
class SynonymTable:
    """
    Immutable synonym lookup.

    Groups sharing a member are merged, so the table stays symmetric
    when extra groups overlap the defaults.

    Example:
        >>> table = SynonymTable.default()
        >>> table.aliases("SEO")
        ('SEO', 'search engine optimization')
    """

    groups: tuple[tuple[str, ...], ...] = DEFAULT_SYNONYM_GROUPS
    _index: dict[str, tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        merged: list[list[str]] = []
        for group in self.groups:
            members = [m.strip().lower() for m in group if m.strip()]
            overlapping = [g for g in merged if set(g) & set(members)]
            target = overlapping[0] if overlapping else []
            if not overlapping:
                merged.append(target)
            for other in overlapping[1:]:
                target.extend(m for m in other if m not in target)
                merged.remove(other)
            target.extend(m for m in members if m not in target)

        index: dict[str, tuple[str, ...]] = {}
        for group in merged:
            frozen = tuple(group)
            for member in frozen:
                index[member] = frozen
        object.__setattr__(self, "_index", index)

    @classmethod
    def default(cls, extra_groups: list[list[str]] | None = None) -> "SynonymTable":
        """Built-in groups plus optional configured ones."""
        extra = tuple(tuple(group) for group in extra_groups or [])
        return cls(groups=DEFAULT_SYNONYM_GROUPS + extra)

    def group(self, term: str) -> tuple[str, ...]:
        """Lowercased group containing ``term``, empty if it has none."""
        return self._index.get(term.strip().lower(), ())

    def aliases(self, term: str, limit: int | None = None) -> tuple[str, ...]:
        """
        The term as given, followed by the rest of its group.

        Args:
            term: Surface form to expand
            limit: Maximum aliases returned, including the term itself
        """
        key = term.strip().lower()
        result = [term.strip()]
        result.extend(member for member in self.group(term) if member != key)
        if limit is not None:
            result = result[:limit]
        return tuple(result)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and term.strip().lower() in self._index
