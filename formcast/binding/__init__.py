"""Map Python types to and from GeneratedContent."""

from .hydrate import hydrate
from .to_content import to_content

__all__ = ["hydrate", "to_content"]
