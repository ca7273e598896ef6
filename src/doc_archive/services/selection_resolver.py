"""Resolve an export request into the exact set of records to include."""

from doc_archive.db.base import ArchiveStore
from doc_archive.exceptions import NotFoundError
from doc_archive.models.export_import import (
    ExportOptions,
    ExportSelection,
    ExportStats,
    ExportType,
)
from doc_archive.models.records import Attachment, Category, Document


def order_parents_first(categories: list[Category]) -> list[Category]:
    """Order categories so every parent precedes its children.

    Categories whose parent is outside the list are treated as roots.
    Siblings are ordered by sort_order, then id.
    """
    ids = {category.id for category in categories}
    children: dict[int | None, list[Category]] = {}
    for category in categories:
        parent = category.parent_id if category.parent_id in ids else None
        children.setdefault(parent, []).append(category)

    ordered: list[Category] = []
    queue = [None]
    while queue:
        parent = queue.pop(0)
        for child in sorted(children.get(parent, []), key=lambda c: (c.sort_order, c.id)):
            ordered.append(child)
            queue.append(child.id)

    # Categories on a parent cycle are never reached from a root
    seen = {category.id for category in ordered}
    ordered.extend(category for category in categories if category.id not in seen)
    return ordered


class SelectionResolver:
    """Determine which categories, documents and attachments an export includes."""

    def __init__(self, store: ArchiveStore) -> None:
        """Initialize resolver.

        Args:
            store: Record store to read from
        """
        self.store = store

    async def resolve(self, options: ExportOptions) -> ExportSelection:
        """Resolve an export request.

        Args:
            options: Export selection request

        Returns:
            Selected records with selection info

        Raises:
            NotFoundError: If the selected category or document does not exist
        """
        if options.type == ExportType.CATEGORY:
            return await self._resolve_category(options)
        if options.type == ExportType.DOCUMENT:
            return await self._resolve_document(options)
        return await self._resolve_complete(options)

    async def stats(self, options: ExportOptions) -> ExportStats:
        """Count what an export would include without writing anything."""
        selection = await self.resolve(options)
        return ExportStats(
            categories=len(selection.categories),
            documents=len(selection.documents),
            attachments=len(selection.attachments),
            estimated_size=selection.estimated_size,
            selection_info=selection.selection_info,
        )

    async def _resolve_complete(self, options: ExportOptions) -> ExportSelection:
        categories = order_parents_first(await self.store.list_categories())
        documents: list[Document] = []
        for category in categories:
            documents.extend(await self.store.list_documents_by_category(category.id))

        return ExportSelection(
            options=options,
            categories=categories,
            documents=documents,
            attachments=await self._collect_attachments(documents),
            selection_info="Complete Archive",
        )

    async def _resolve_category(self, options: ExportOptions) -> ExportSelection:
        root = await self.store.get_category_by_id(options.category_id)
        if root is None:
            raise NotFoundError(f"Category not found: {options.category_id}")

        all_categories = await self.store.list_categories()
        subtree = self._subtree(root, all_categories)
        documents = await self.store.list_documents_by_category_tree(root.id)

        return ExportSelection(
            options=options,
            categories=order_parents_first(subtree),
            documents=documents,
            attachments=await self._collect_attachments(documents),
            selection_info=f"Category: {root.name}",
        )

    async def _resolve_document(self, options: ExportOptions) -> ExportSelection:
        document = await self.store.get_document_by_id(options.document_id)
        if document is None:
            raise NotFoundError(f"Document not found: {options.document_id}")

        categories: list[Category] = []
        if document.category_id is not None:
            category = await self.store.get_category_by_id(document.category_id)
            if category is not None:
                categories = [category]

        return ExportSelection(
            options=options,
            categories=categories,
            documents=[document],
            attachments=await self.store.list_attachments(document.id),
            selection_info=f"Document: {document.title}",
        )

    async def _collect_attachments(self, documents: list[Document]) -> list[Attachment]:
        attachments: list[Attachment] = []
        for document in documents:
            attachments.extend(await self.store.list_attachments(document.id))
        return attachments

    @staticmethod
    def _subtree(root: Category, categories: list[Category]) -> list[Category]:
        """Root category plus all of its descendants."""
        by_parent: dict[int | None, list[Category]] = {}
        for category in categories:
            by_parent.setdefault(category.parent_id, []).append(category)

        result = [root]
        seen = {root.id}
        stack = [root.id]
        while stack:
            parent_id = stack.pop()
            for child in by_parent.get(parent_id, []):
                if child.id not in seen:
                    seen.add(child.id)
                    result.append(child)
                    stack.append(child.id)
        return result
