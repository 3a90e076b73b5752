"""
StubServer Common Utilities

Stub-definition loading and resource file reading shared by the response
table and the response emitter.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from ..errors import ConfigError, ResourceLoadError

logger = logging.getLogger("stubserver.config")


class StubDefinitionLoader:
    """
    Loader for YAML stub-definition files.

    The file is a single mapping from ``"METHOD|path"`` keys to response
    definitions:

        GET|api/users:
          httpcode: 200
          delay: 0
          header: stubs/users.headers
          body: stubs/users.json

        default|default:
          httpcode: 404
          body: stubs/notfound.txt

    Example:
        loader = StubDefinitionLoader("stubs.yaml")
        definitions = loader.load()
    """

    def __init__(self, file_path: str):
        """
        Initialize stub-definition loader.

        Args:
            file_path: Path to the YAML stub-definition file
        """
        self.file_path = Path(file_path)

    def load(self) -> Dict[str, Any]:
        """
        Load the raw definition mapping.

        Returns:
            Mapping of route key to raw definition (may be empty)

        Raises:
            ConfigError: If the file is unreadable, is not valid YAML, or its
                top level is not a mapping
        """
        try:
            text = self.file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"cannot read stub definitions: {e}", str(self.file_path)) from e

        return self.parse(text, source=str(self.file_path))

    @staticmethod
    def parse(text: str, source: Optional[str] = None) -> Dict[str, Any]:
        """
        Parse stub-definition text.

        Args:
            text: YAML document text
            source: Name used in error messages

        Returns:
            Mapping of route key to raw definition

        Raises:
            ConfigError: If the text is not YAML or not a top-level mapping
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML: {e}", source) from e

        if data is None:
            logger.warning(f"Stub definitions in {source or '<text>'} are empty")
            return {}

        if not isinstance(data, dict):
            raise ConfigError(
                f"expected a mapping of 'METHOD|path' keys, found {type(data).__name__}",
                source
            )

        return data


def read_resource(path: str) -> bytes:
    """
    Read a header or body file named by a route.

    Args:
        path: File path, relative paths resolve against the working directory

    Returns:
        Raw file contents

    Raises:
        ResourceLoadError: If no path is configured or the file cannot be read
    """
    if not path:
        raise ResourceLoadError(path, "no file configured")

    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ResourceLoadError(path, e.strerror or str(e)) from e
