# src/mutflex_shell/core/managers/draft_manager.py
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from mutflex_shell.core.managers.config_manager import config_manager
from mutflex_shell.core.utils.path_utils import PathUtils
from mutflex_shell.model import ArticleDraft, generate_slug

logger = logging.getLogger(__name__)


class DraftManager:
    """
    Persists article drafts as JSON files, one per slug.
    """

    def __init__(self, drafts_dir: Optional[Path] = None):
        if drafts_dir is None:
            configured = config_manager.get_nested("drafts.dir")
            drafts_dir = PathUtils.get_drafts_dir(Path(configured) if configured else None)
        self.drafts_dir = Path(drafts_dir)
        self.drafts_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, slug: str) -> Path:
        safe = generate_slug(slug) or "untitled"
        return self.drafts_dir / f"{safe}.json"

    def save(self, draft: ArticleDraft) -> Path:
        """
        Writes the draft to disk.

        Raises:
            ValueError: if the title or content is empty.
        """
        missing = draft.missing_fields()
        if missing:
            raise ValueError(f"Missing required field(s): {', '.join(missing)}")
        if not draft.slug:
            draft.slug = generate_slug(draft.title)

        path = self._path_for(draft.slug)
        path.write_text(draft.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Draft '%s' saved to %s", draft.slug, path)
        return path

    def load(self, slug: str) -> Optional[ArticleDraft]:
        path = self._path_for(slug)
        if not path.exists():
            return None
        try:
            return ArticleDraft.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            logger.error("Draft file %s is invalid: %s", path, e)
            return None

    def list_slugs(self) -> List[str]:
        return sorted(p.stem for p in self.drafts_dir.glob("*.json"))

    def delete(self, slug: str) -> bool:
        path = self._path_for(slug)
        if not path.exists():
            return False
        path.unlink()
        return True
