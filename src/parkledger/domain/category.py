"""Category domain service: the chart-of-accounts tree store."""

import logging
from typing import Optional

from parkledger.database.base import Database
from parkledger.domain.entities import (
    AccountNature,
    Category,
    CategoryFilter,
    CategoryTreeNode,
)
from parkledger.domain.errors import (
    ConflictError,
    DependencyError,
    InvalidHierarchyError,
    NotFoundError,
    ValidationError,
    category_delete_blocked,
    category_inactive,
    category_id_not_found,
    category_not_found,
)
from parkledger.domain.seed import INITIAL_CATEGORIES

logger = logging.getLogger(__name__)

MAX_LEVEL = 5
PATH_SEPARATOR = "."
CODE_SEPARATOR = "-"


class CategoryService:
    """Service for managing the hierarchical chart of accounts."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        parent_code: Optional[str] = None,
        account_nature: Optional[AccountNature] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
        fiscal_code: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name
            parent_code: Parent category code, or None for a top-level branch
            account_nature: Required for top-level branches; children inherit
                the branch nature and may only restate it
            code: Category code; generated as ``<parent>-<n>`` when omitted
            description: Optional description
            fiscal_code: Optional regulatory code
            sort_order: Position among siblings (defaults to last)

        Returns:
            The created category

        Raises:
            InvalidHierarchyError: If the level would exceed 5, the nature
                contradicts the branch root, or the code does not fit the parent
            NotFoundError: If the parent does not exist or is inactive
            ConflictError: If the code already exists
        """
        if not name or not name.strip():
            raise ValidationError("Category name is required")

        with self.db.transaction():
            if parent_code is None:
                return self._create_root(
                    name, account_nature, code, description, fiscal_code, sort_order
                )

            parent = self.resolve(parent_code)
            level = parent.level + 1
            if level > MAX_LEVEL:
                raise InvalidHierarchyError(
                    f"Cannot create category under '{parent.code}': "
                    f"maximum depth is {MAX_LEVEL} levels"
                )

            root_nature = self.path(parent.code)[0].account_nature
            if account_nature is not None and account_nature != root_nature:
                raise InvalidHierarchyError(
                    f"Category nature '{account_nature.value}' contradicts branch "
                    f"nature '{root_nature.value}'"
                )

            siblings = self.db.list_children(parent.id)
            if code is None:
                code = self._next_child_code(parent, siblings)
            else:
                segment = code[len(parent.code) + 1:]
                if (
                    not code.startswith(parent.code + CODE_SEPARATOR)
                    or not segment
                    or CODE_SEPARATOR in segment
                ):
                    raise InvalidHierarchyError(
                        f"Code '{code}' must extend parent code '{parent.code}' "
                        "by one segment"
                    )
            self._ensure_code_available(code)

            category_id = self.db.create_category(
                code=code,
                name=name.strip(),
                level=level,
                parent_id=parent.id,
                account_nature=root_nature,
                full_path=f"{parent.full_path}{PATH_SEPARATOR}{code}",
                description=description,
                fiscal_code=fiscal_code,
                sort_order=sort_order if sort_order is not None else len(siblings),
            )
            logger.info("Created category %s under %s", code, parent.code)
            return self.db.get_category(category_id)

    def _create_root(
        self,
        name: str,
        account_nature: Optional[AccountNature],
        code: Optional[str],
        description: Optional[str],
        fiscal_code: Optional[str],
        sort_order: Optional[int],
    ) -> Category:
        if not code or CODE_SEPARATOR in code or PATH_SEPARATOR in code:
            raise InvalidHierarchyError(
                "Top-level categories need a single-segment code"
            )
        if account_nature is None:
            raise ValidationError("Top-level categories need an account nature")
        self._ensure_code_available(code)
        if sort_order is None:
            sort_order = len(self.db.list_categories(level=1, include_inactive=True))
        category_id = self.db.create_category(
            code=code,
            name=name.strip(),
            level=1,
            parent_id=None,
            account_nature=account_nature,
            full_path=code,
            description=description,
            fiscal_code=fiscal_code,
            sort_order=sort_order,
        )
        logger.info("Created top-level category %s", code)
        return self.db.get_category(category_id)

    def _ensure_code_available(self, code: str) -> None:
        if self.db.get_category_by_code(code) is not None:
            raise ConflictError(f"Category code '{code}' already exists")

    @staticmethod
    def _next_child_code(parent: Category, siblings: list[Category]) -> str:
        numbers = []
        for sibling in siblings:
            segment = sibling.code[len(parent.code) + 1:]
            if segment.isdigit():
                numbers.append(int(segment))
        return f"{parent.code}{CODE_SEPARATOR}{max(numbers, default=0) + 1}"

    def get_category(self, code: str) -> Category:
        """Get a category by code, active or not.

        Raises:
            NotFoundError: If the code is unknown
        """
        category = self.db.get_category_by_code(code)
        if category is None:
            raise NotFoundError(category_not_found(code))
        return category

    def get_category_by_id(self, category_id: int) -> Category:
        """Get a category by ID, active or not."""
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_id_not_found(category_id))
        return category

    def resolve(self, code: str) -> Category:
        """Get a category that can receive postings.

        Raises:
            NotFoundError: If the code is unknown or the category is inactive
        """
        category = self.get_category(code)
        if not category.is_active:
            raise NotFoundError(category_inactive(code))
        return category

    def children(self, code: str) -> list[Category]:
        """Direct children of a category ordered by sort order."""
        parent = self.get_category(code)
        return self.db.list_children(parent.id)

    def path(self, code: str) -> list[Category]:
        """Categories from the branch root down to ``code``.

        Raises:
            InvalidHierarchyError: If the stored full path disagrees with the
                parent chain
        """
        node = self.get_category(code)
        chain = [node]
        while chain[-1].parent_id is not None:
            if len(chain) > MAX_LEVEL:
                raise InvalidHierarchyError(f"Category '{code}' has a cyclic parent chain")
            parent = self.db.get_category(chain[-1].parent_id)
            if parent is None:
                raise InvalidHierarchyError(
                    f"Category '{chain[-1].code}' references a missing parent"
                )
            chain.append(parent)
        chain.reverse()

        expected = PATH_SEPARATOR.join(c.code for c in chain)
        if node.full_path != expected:
            raise InvalidHierarchyError(
                f"Full path '{node.full_path}' of '{code}' does not match ancestors "
                f"'{expected}'"
            )
        return chain

    def descendants(self, code: str) -> list[Category]:
        """The category and every category below it."""
        category = self.get_category(code)
        return self.db.list_descendants(category.full_path)

    def list_categories(self, category_filter: Optional[CategoryFilter] = None) -> list[Category]:
        """List categories.

        Args:
            category_filter: Optional level, parent, text and activity filters

        Returns:
            Categories ordered by level, sort order and name
        """
        category_filter = category_filter or CategoryFilter()
        parent_id = None
        if category_filter.parent_code is not None:
            parent_id = self.get_category(category_filter.parent_code).id
        return self.db.list_categories(
            level=category_filter.level,
            parent_id=parent_id,
            search=category_filter.search,
            include_inactive=category_filter.include_inactive,
        )

    def get_category_tree(self, include_inactive: bool = False) -> list[CategoryTreeNode]:
        """Get full category tree.

        Returns:
            List of top-level nodes with nested children
        """
        categories = self.db.list_categories(include_inactive=include_inactive)
        by_parent: dict[Optional[int], list[Category]] = {}
        for cat in categories:
            by_parent.setdefault(cat.parent_id, []).append(cat)

        def build(parent_id: Optional[int]) -> list[CategoryTreeNode]:
            return [
                CategoryTreeNode(category=cat, children=build(cat.id))
                for cat in by_parent.get(parent_id, [])
            ]

        return build(None)

    def update_category(
        self,
        code: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        fiscal_code: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> Category:
        """Relabel a category. Code, parent and nature never change."""
        category = self.get_category(code)
        if name is not None and not name.strip():
            raise ValidationError("Category name cannot be empty")
        self.db.update_category(
            category.id,
            name=name.strip() if name is not None else None,
            description=description,
            fiscal_code=fiscal_code,
            sort_order=sort_order,
        )
        return self.get_category(code)

    def deactivate_category(self, code: str) -> Category:
        """Soft-delete a category; history and balances are kept.

        Raises:
            DependencyError: If the category still has active children
        """
        category = self.get_category(code)
        active_children = self.db.count_category_children(category.id, active_only=True)
        if active_children > 0:
            raise DependencyError(
                f"Cannot deactivate category '{code}': it has {active_children} "
                "active subcategor" + ("ies" if active_children != 1 else "y")
            )
        self.db.update_category(category.id, is_active=False)
        logger.info("Deactivated category %s", code)
        return self.get_category(code)

    def delete_category(self, code: str) -> None:
        """Remove a category that has never been used.

        Raises:
            DependencyError: If the category has children or journal lines
        """
        category = self.get_category(code)
        child_count = self.db.count_category_children(category.id)
        line_count = self.db.count_category_lines(category.id)
        if child_count > 0 or line_count > 0:
            raise DependencyError(category_delete_blocked(code, child_count, line_count))
        self.db.delete_category(category.id)
        logger.info("Deleted category %s", code)

    def seed(self) -> int:
        """Create the initial chart of accounts, skipping codes that exist.

        Returns:
            Number of categories created (0 when already seeded)
        """
        created = 0
        with self.db.transaction():
            for code, name, parent_code, fiscal_code, nature in INITIAL_CATEGORIES:
                if self.db.get_category_by_code(code) is not None:
                    continue
                self.create_category(
                    name=name,
                    parent_code=parent_code,
                    account_nature=nature,
                    code=code,
                    fiscal_code=fiscal_code,
                )
                created += 1
        if created:
            logger.info("Seeded %d categories", created)
        else:
            logger.info("Chart of accounts already seeded")
        return created
