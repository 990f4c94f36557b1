"""
Document Data Models
====================
Structures passed from the classifier to the renderers.
"""
from dataclasses import dataclass
from typing import Optional

from trados_translator.config.constants import LineRole, ROLE_CSS_CLASSES, FALLBACK_CSS_CLASS


@dataclass(frozen=True)
class ClassifiedLine:
    """One output line tagged with its structural role."""
    role: LineRole
    text: str
    marker: Optional[str] = None

    @property
    def body(self) -> str:
        """Line text with the marker and its separator removed."""
        if not self.marker:
            return self.text
        return self.text[len(self.marker):].lstrip(' \t')

    @property
    def css_class(self) -> str:
        return ROLE_CSS_CLASSES.get(self.role, FALLBACK_CSS_CLASS)

    def to_dict(self) -> dict:
        return {
            'role': getattr(self.role, 'value', self.role),
            'text': self.text,
            'marker': self.marker,
        }
