"""
Path Resolution Service
Locates configuration files and resolves relative data paths against the project root
"""
from pathlib import Path
from typing import Optional, List


class PathResolver:
    """Centralized path resolution for configuration and data files"""

    def __init__(self, project_root: Optional[Path] = None, config_dir: str = "config"):
        """
        Initialize PathResolver

        Args:
            project_root: Root directory of the project (auto-detected if None)
            config_dir: Name of configuration directory (default: "config")
        """
        self.project_root = Path(project_root) if project_root else self._detect_project_root()
        self.config_dir_name = config_dir

    def _detect_project_root(self) -> Path:
        """Walk up from the working directory looking for project markers"""
        current = Path.cwd()
        markers = ["pyproject.toml", ".git"]

        for parent in [current] + list(current.parents):
            if any((parent / marker).exists() for marker in markers):
                return parent

        return current

    def resolve_config(self, filename: str, required: bool = True) -> Optional[Path]:
        """
        Resolve configuration file path with fallback locations

        Args:
            filename: Configuration file name (e.g., "annotator_config.json")
            required: If True, raise FileNotFoundError if file not found

        Returns:
            Path to configuration file, or None if not found and not required
        """
        search_paths = self._get_config_search_paths(filename)

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        if required:
            search_locations = "\n".join(f"  - {path}" for path in search_paths)
            raise FileNotFoundError(
                f"Configuration file '{filename}' not found in any of these locations:\n{search_locations}"
            )

        return None

    def _get_config_search_paths(self, filename: str) -> List[Path]:
        if Path(filename).is_absolute():
            return [Path(filename)]
        return [
            self.project_root / self.config_dir_name / filename,
            Path.cwd() / self.config_dir_name / filename,
            Path.cwd() / filename
        ]

    def resolve_data_path(self, path: str) -> Path:
        """Relative data paths are anchored at the project root"""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.project_root / candidate
