"""
Plugin data model.

A Plugin record is built once at discovery time and never mutated;
resolution steps produce updated copies with dataclasses.replace().
Items stay plain dicts so unknown keys emitted by plugins survive.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from .constants import DEFAULT_ACTION

Item = dict


class Schema(str, Enum):
    """Invocation protocol a plugin speaks."""
    DEXT = "dext"      # native, in-process module
    ALFRED = "alfred"  # legacy workflow, child process


@dataclass(frozen=True)
class Details:
    """Expanded-view descriptor exported by native plugins."""
    type: str = "html"  # html or md
    render: Union[str, Callable, None] = None

    @classmethod
    def from_export(cls, value) -> Optional["Details"]:
        """Build from a module's `details` export (dict or object)."""
        if value is None:
            return None
        if isinstance(value, Details):
            return value
        if isinstance(value, dict):
            return cls(type=value.get("type") or "html", render=value.get("render"))
        return cls(
            type=getattr(value, "type", None) or "html",
            render=getattr(value, "render", None),
        )


@dataclass(frozen=True)
class Plugin:
    """A registered extension."""
    path: str
    name: str
    is_core: bool = False
    schema: Schema = Schema.DEXT
    keyword: str = ""
    action: str = DEFAULT_ACTION
    helper: Any = None
    details: Optional[Details] = None

    def to_ref(self) -> dict:
        """Provenance stamped onto every item this plugin returns."""
        return {"path": self.path, "name": self.name}
