"""Old-id to new-id translation for imported records."""

from doc_archive.exceptions import MappingMissingError


class IdMapping:
    """Bidirectional mapping between source-store ids and target-store ids.

    Several source ids may resolve to the same target id (two imported
    categories matching one existing category by name), so the reverse
    lookup returns the first source id mapped to a target.
    """

    def __init__(self, kind: str) -> None:
        """Initialize mapping.

        Args:
            kind: Entity kind used in error messages ("category", "document")
        """
        self.kind = kind
        self._forward: dict[int, int] = {}
        self._reverse: dict[int, int] = {}

    def set(self, old_id: int, new_id: int) -> None:
        """Record that source id `old_id` now lives at `new_id`.

        Raises:
            ValueError: If old_id is already mapped to a different id
        """
        current = self._forward.get(old_id)
        if current is not None and current != new_id:
            raise ValueError(
                f"{self.kind} {old_id} already mapped to {current}, not {new_id}"
            )
        self._forward[old_id] = new_id
        self._reverse.setdefault(new_id, old_id)

    def get(self, old_id: int | None) -> int | None:
        """Target id for a source id, or None."""
        if old_id is None:
            return None
        return self._forward.get(old_id)

    def require(self, old_id: int | None) -> int:
        """Target id for a source id.

        Raises:
            MappingMissingError: If the source id was never mapped
        """
        new_id = self.get(old_id)
        if new_id is None:
            raise MappingMissingError(self.kind, old_id)
        return new_id

    def source_of(self, new_id: int) -> int | None:
        """First source id mapped to a target id, or None."""
        return self._reverse.get(new_id)

    def as_dict(self) -> dict[int, int]:
        """Copy of the forward mapping."""
        return dict(self._forward)

    def __contains__(self, old_id: object) -> bool:
        return old_id in self._forward

    def __len__(self) -> int:
        return len(self._forward)
