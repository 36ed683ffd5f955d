"""Canonical field-name alias table.

Different flows name the same answer differently (`user_phone`,
`mobile_phone`, `proposer_mobile_phone`, ...). A write under any member of
a group is mirrored onto every other member, so reads never need alias
resolution.
"""

from collections.abc import Iterable, Mapping

from intakeflow.errors import AliasTableError

DEFAULT_ALIAS_GROUPS: dict[str, tuple[str, ...]] = {
    "first_name": ("user_first_name", "proposer_first_name"),
    "last_name": ("user_last_name", "proposer_last_name"),
    "phone": ("user_phone", "proposer_mobile_phone", "mobile_phone", "user_mobile_phone"),
    "email": ("user_email", "proposer_email"),
}


class AliasTable:
    """Validated bidirectional multimap of alias groups."""

    def __init__(self, groups: Mapping[str, tuple[str, ...]]) -> None:
        self._groups = dict(groups)
        self._canonical_by_name = {
            name: canonical
            for canonical, members in self._groups.items()
            for name in members
        }

    @classmethod
    def from_groups(cls, groups: Mapping[str, Iterable[str]]) -> "AliasTable":
        """Build a table from `{canonical: [aliases...]}`.

        Raises:
            AliasTableError: If a group lists its canonical name as an alias,
                a name is empty or repeated, or two groups share a name
        """
        seen: dict[str, str] = {}
        built: dict[str, tuple[str, ...]] = {}

        for canonical, aliases in groups.items():
            aliases = tuple(aliases)
            if canonical in aliases:
                raise AliasTableError(
                    f"Alias group '{canonical}' lists itself as an alias",
                    reference=canonical,
                )

            members = (canonical, *aliases)
            for name in members:
                if not name or not name.strip():
                    raise AliasTableError(
                        f"Alias group '{canonical}' contains an empty name",
                        reference=canonical,
                    )
                if name in seen:
                    raise AliasTableError(
                        f"'{name}' appears in alias groups '{seen[name]}' and '{canonical}'",
                        reference=name,
                    )
                seen[name] = canonical

            built[canonical] = members

        return cls(built)

    @classmethod
    def default(cls) -> "AliasTable":
        """Table with the built-in contact-field groups."""
        return cls.from_groups(DEFAULT_ALIAS_GROUPS)

    @property
    def groups(self) -> dict[str, tuple[str, ...]]:
        """Groups by canonical name; each tuple starts with the canonical name."""
        return dict(self._groups)

    def canonical_of(self, key: str) -> str | None:
        return self._canonical_by_name.get(key)

    def aliases_of(self, key: str) -> list[str]:
        """Every other member of the key's group; empty for unknown keys."""
        canonical = self._canonical_by_name.get(key)
        if canonical is None:
            return []
        return [name for name in self._groups[canonical] if name != key]

    def group_of(self, key: str) -> tuple[str, ...]:
        """All members of the key's group, or just the key when it has none."""
        canonical = self._canonical_by_name.get(key)
        return self._groups[canonical] if canonical is not None else (key,)
