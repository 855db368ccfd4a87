"""Link model: a single record that can point at a URL, email, phone, file, or page."""

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, reconstructor

from cmslink.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cmslink.registry import TypeDefinition

DEFAULT_LINK_TYPE = "URL"


class Link(Base, TimestampMixin):
    """Polymorphic link entity.

    ``link_type`` selects which of the value/reference columns is active.
    Subclasses share the ``links`` table and are told apart by ``class_name``.
    """

    __tablename__ = "links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    link_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_LINK_TYPE, index=True
    )
    url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    anchor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # References into stores owned by the host application, so no foreign keys
    file_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    site_tree_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    open_in_new_window: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    style: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    @declared_attr.directive
    def __mapper_args__(cls) -> dict[str, Any]:
        if cls.__name__ == "Link":
            return {"polymorphic_on": cls.class_name, "polymorphic_identity": "Link"}
        return {"polymorphic_identity": cls.__name__}

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("link_type", DEFAULT_LINK_TYPE)
        kwargs.setdefault("open_in_new_window", False)
        super().__init__(**kwargs)
        self._init_transient()

    @reconstructor
    def _init_transient(self) -> None:
        # Insertion-ordered set of extra CSS classes; never persisted
        self._css_classes: dict[str, None] = {}

    @property
    def is_persisted(self) -> bool:
        """True once the record has been assigned an identity."""
        return self.id is not None

    @property
    def css_classes(self) -> list[str]:
        """Extra CSS classes added with add_class(), in insertion order."""
        return list(self._css_classes)

    def add_class(self, classes: str | None) -> "Link":
        """
        Add space-separated CSS classes for templates.

        Args:
            classes: One or more class names separated by whitespace

        Returns:
            This link, so calls can be chained
        """
        for token in (classes or "").split():
            self._css_classes.setdefault(token, None)
        return self

    def field_value(self, definition: "TypeDefinition") -> Any:
        """Return the value of the attribute a type definition marks as active."""
        if not definition.field:
            return None
        return getattr(self, definition.field, None)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id!r}, link_type={self.link_type!r}, title={self.title!r})>"
