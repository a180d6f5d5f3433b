# src/article_editor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, Optional

from .core import NodeDefinition

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Central registry for document node definitions.

    Dynamically discovers and loads NodeDefinition modules from the
    'article_editor.dom.nodes' package to populate tag and type lookups.
    """

    _by_tag: Dict[str, NodeDefinition] = {}
    _by_type: Dict[str, NodeDefinition] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Discovers and registers all node definitions found in the 'article_editor.dom.nodes' package.

        Every module exposing a `DEFINITION` attribute (instance of `NodeDefinition`)
        is registered under each of its HTML tags and node type names.
        """
        if cls._loaded:
            return

        try:
            import article_editor.dom.nodes as nodes_pkg

            for _, name, _ in pkgutil.iter_modules(nodes_pkg.__path__):
                full_name = f"article_editor.dom.nodes.{name}"
                try:
                    module = importlib.import_module(full_name)
                    if hasattr(module, "DEFINITION") and isinstance(module.DEFINITION, NodeDefinition):
                        cls.register(module.DEFINITION)
                        logger.debug(f"Node definition loaded: {module.DEFINITION.type_name}")
                except Exception as e:
                    logger.error(f"Error loading node module {name}: {e}")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find nodes package: {e}")

    @classmethod
    def register(cls, definition: NodeDefinition) -> None:
        for tag in definition.tags:
            cls._by_tag[tag] = definition
        for node_type in definition.node_types:
            cls._by_type[node_type] = definition

    @classmethod
    def get_by_tag(cls, tag_name: str) -> Optional[NodeDefinition]:
        """Retrieves the definition that parses a specific HTML tag."""
        return cls._by_tag.get(tag_name)

    @classmethod
    def get_by_type(cls, node_type: str) -> Optional[NodeDefinition]:
        """Retrieves the definition that renders a specific node type."""
        return cls._by_type.get(node_type)

    @classmethod
    def known_types(cls):
        return sorted(cls._by_type.keys())
