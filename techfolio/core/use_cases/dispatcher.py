# techfolio/core/use_cases/dispatcher.py
from typing import Any, Callable, Dict, Type

import structlog

from techfolio.core.domain.exceptions import (
    ContentNotFoundError,
    InvalidOperationError,
    PermissionDeniedError,
)
from techfolio.core.domain.models import PublicationState, Role
from techfolio.core.use_cases import commands as c
from techfolio.core.use_cases.category_tree import CategoryTree
from techfolio.core.use_cases.content_lifecycle import ContentLifecycle
from techfolio.core.use_cases.tag_resolver import TagResolver

logger = structlog.get_logger()

Handler = Callable[[Any, Role], Any]

class Dispatcher:
    """
    Mediator: maps a message type to the one handler that serves it.

    Callers only know the message they send; which use case answers it is
    decided here. The role check runs before any handler does.
    """

    def __init__(self):
        self._handlers: Dict[Type[c.Message], Handler] = {}

    def register(self, message_type: Type[c.Message], handler: Handler) -> None:
        if message_type in self._handlers:
            raise ValueError(f"Handler already registered for {message_type.__name__}")
        self._handlers[message_type] = handler

    def handles(self, message_type: Type[c.Message]) -> bool:
        return message_type in self._handlers

    def dispatch(self, message: c.Message, role: Role = Role.USER) -> Any:
        """
        Runs the handler registered for `type(message)`.

        Raises:
            PermissionDeniedError: `role` may not send this message.
            InvalidOperationError: no handler is registered for it.
        """
        role = Role(role)
        operation = message.operation_name()

        handler = self._handlers.get(type(message))
        if handler is None:
            raise InvalidOperationError(f"No handler registered for '{operation}'.")

        if role not in message.allowed_roles:
            logger.warning("dispatch_denied", operation=operation, role=role.value)
            raise PermissionDeniedError(role.value, operation)

        with structlog.contextvars.bound_contextvars(operation=operation, role=role.value):
            logger.debug("dispatch")
            return handler(message, role)

def build_dispatcher(tree: CategoryTree, content: ContentLifecycle, tags: TagResolver) -> Dispatcher:
    """Wires every message type to its use-case operation."""
    d = Dispatcher()

    # Categories
    d.register(c.CreateCategory, lambda m, _: tree.create(m.name, slug=m.slug, parent_id=m.parent_id))
    d.register(c.RenameCategory, lambda m, _: tree.rename(m.category_id, name=m.name, slug=m.slug))
    d.register(c.MoveCategory, lambda m, _: tree.move(m.category_id, m.new_parent_id))
    d.register(c.ReorderCategories, lambda m, _: tree.reorder(m.parent_id, m.ordered_ids))
    d.register(c.GetCategory, lambda m, _: tree.get(m.category_id))
    d.register(c.GetAncestors, lambda m, _: tree.ancestors_of(m.category_id))
    d.register(c.GetDescendants, lambda m, _: tree.descendants_of(m.category_id))

    def list_categories(m: c.ListCategories, _):
        if not m.children_only:
            return tree.list()
        return tree.children_of(m.parent_id) if m.parent_id is not None else tree.roots()

    def delete_category(m: c.DeleteCategory, _):
        removed = tree.delete(m.category_id, policy=m.policy)
        # The tree change is already committed. Items left pointing at a
        # removed category cannot be published until they are re-filed.
        try:
            content.detach_category(removed)
        except Exception:
            logger.exception("category_detach_failed", category_id=m.category_id, removed=list(removed))
            raise
        return removed

    d.register(c.ListCategories, list_categories)
    d.register(c.DeleteCategory, delete_category)

    # Content
    d.register(c.CreateContent, lambda m, _: content.create(
        m.kind,
        title=m.title,
        slug=m.slug,
        category_id=m.category_id,
        tags=m.tags,
        **m.attributes,
    ))
    d.register(c.UpdateContent, lambda m, _: content.update(m.item_id, **m.changes))
    d.register(c.PublishContent, lambda m, _: content.publish(m.item_id))
    d.register(c.UnpublishContent, lambda m, _: content.unpublish(m.item_id))
    d.register(c.ArchiveContent, lambda m, _: content.archive(m.item_id))
    d.register(c.DeleteContent, lambda m, _: content.delete(m.item_id))

    def get_content(m: c.GetContent, role: Role):
        item = content.get(m.item_id)
        # Non-admins only ever see published items.
        if role != Role.ADMIN and item.state != PublicationState.PUBLISHED:
            raise ContentNotFoundError(m.item_id)
        return item

    def list_content(m: c.ListContent, role: Role):
        state = m.state
        if role != Role.ADMIN:
            if state not in (None, PublicationState.PUBLISHED):
                return []
            state = PublicationState.PUBLISHED
        return content.list(kind=m.kind, state=state, category_id=m.category_id, tag=m.tag)

    d.register(c.GetContent, get_content)
    d.register(c.ListContent, list_content)

    # Tags
    d.register(c.ResolveTag, lambda m, _: tags.resolve(m.label))
    d.register(c.ListTags, lambda m, _: tags.list())

    return d
