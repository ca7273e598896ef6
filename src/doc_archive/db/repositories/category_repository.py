"""Category repository for database operations."""

from datetime import datetime, timezone
from typing import Any

from doc_archive.db.database import Database
from doc_archive.models.records import Category


class CategoryRepository:
    """Repository for category operations."""

    def __init__(self, db: Database) -> None:
        """Initialize repository.

        Args:
            db: Database instance
        """
        self.db = db

    async def create(
        self,
        name: str,
        icon: str = "folder",
        color: str = "#6B7280",
        parent_id: int | None = None,
        description: str | None = None,
    ) -> Category:
        """Create a new category.

        The level is derived from the parent; the category is appended after
        its existing siblings.

        Args:
            name: Category name
            icon: Icon identifier
            color: Display color
            parent_id: Parent category id
            description: Optional description

        Returns:
            Created category
        """
        level = 0
        if parent_id is not None:
            parent = await self.find_by_id(parent_id)
            if parent is None:
                raise ValueError(f"Parent category not found: {parent_id}")
            level = parent.level + 1

        if parent_id is None:
            cursor = await self.db.execute(
                "SELECT COALESCE(MAX(sort_order), 0) FROM categories WHERE parent_id IS NULL"
            )
        else:
            cursor = await self.db.execute(
                "SELECT COALESCE(MAX(sort_order), 0) FROM categories WHERE parent_id = ?",
                (parent_id,),
            )
        row = await cursor.fetchone()
        sort_order = row[0] + 1

        created_at = datetime.now(timezone.utc)
        cursor = await self.db.execute(
            """
            INSERT INTO categories (
                name, icon, color, parent_id, description, level, sort_order, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                name,
                icon,
                color,
                parent_id,
                description,
                level,
                sort_order,
                created_at.isoformat(),
            ),
        )
        await self.db.commit()

        return Category(
            id=cursor.lastrowid,
            name=name,
            icon=icon,
            color=color,
            parent_id=parent_id,
            description=description,
            level=level,
            sort_order=sort_order,
            created_at=created_at,
        )

    async def find_by_id(self, category_id: int) -> Category | None:
        """Find category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category or None if not found
        """
        cursor = await self.db.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_category(row)

    async def find_all(self) -> list[Category]:
        """List all categories, roots first."""
        cursor = await self.db.execute(
            "SELECT * FROM categories ORDER BY level, sort_order, id"
        )
        rows = await cursor.fetchall()
        return [self._row_to_category(row) for row in rows]

    async def find_subtree_ids(self, root_id: int) -> list[int]:
        """Get ids of a category and all of its descendants.

        Args:
            root_id: Root category ID

        Returns:
            Category ids, root first
        """
        cursor = await self.db.execute(
            """
            WITH RECURSIVE subtree(id, depth) AS (
                SELECT id, 0 FROM categories WHERE id = ?
                UNION ALL
                SELECT c.id, subtree.depth + 1
                FROM categories c JOIN subtree ON c.parent_id = subtree.id
            )
            SELECT id FROM subtree ORDER BY depth, id
            """,
            (root_id,),
        )
        rows = await cursor.fetchall()
        return [row["id"] for row in rows]

    async def update(self, category_id: int, name: str, icon: str, color: str) -> None:
        """Update category name, icon and color.

        Args:
            category_id: Category ID
            name: New name
            icon: New icon
            color: New color
        """
        await self.db.execute(
            "UPDATE categories SET name = ?, icon = ?, color = ? WHERE id = ?",
            (name, icon, color, category_id),
        )
        await self.db.commit()

    def _row_to_category(self, row: Any) -> Category:
        """Convert database row to Category."""
        return Category(
            id=row["id"],
            name=row["name"],
            icon=row["icon"],
            color=row["color"],
            parent_id=row["parent_id"],
            description=row["description"],
            level=row["level"],
            sort_order=row["sort_order"],
            created_at=row["created_at"],
        )
