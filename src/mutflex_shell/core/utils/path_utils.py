# src/mutflex_shell/core/utils/path_utils.py
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PathUtils:
    """
    Where the shell keeps its files: the package's settings, uploads served
    by the local gateway, drafts and the prompt history.
    """

    @staticmethod
    def get_project_root() -> Path:
        """
        Walks up from this file to the checkout root (the directory holding
        both 'src' and 'pyproject.toml').
        """
        for candidate in Path(__file__).resolve().parents:
            if (candidate / "src").is_dir() and (candidate / "pyproject.toml").is_file():
                return candidate
        raise FileNotFoundError("No directory with 'src' and 'pyproject.toml' above the shell package.")

    @staticmethod
    def get_shell_package_root() -> Path:
        return Path(__file__).resolve().parent.parent.parent

    @staticmethod
    def get_uploads_root() -> Path:
        """
        Images stored by the local upload gateway, e.g. /path/to/checkout/uploads.
        Falls back to ./uploads for installed (non-checkout) runs.
        """
        try:
            return PathUtils.get_project_root() / "uploads"
        except FileNotFoundError:
            logger.debug("No checkout root found, storing uploads under the working directory.")
            return Path.cwd() / "uploads"

    @staticmethod
    def get_shell_history_file() -> Path:
        return Path.home() / ".mutflex_shell_history"

    @staticmethod
    def get_drafts_dir(base_dir: Optional[Path] = None) -> Path:
        """Returns (and creates) the drafts directory, ~/.mutflex/drafts by default."""
        path = (base_dir or Path.home() / ".mutflex") / "drafts"
        path.mkdir(parents=True, exist_ok=True)
        return path
