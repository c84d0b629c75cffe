"""
Post-processing hooks applied to extractor results.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Optional

import structlog

from ..protocols import PostProcessor
from .models import ContentDocument

logger = structlog.get_logger(__name__)

HOOK_NAMES = frozenset(
    {
        "steps",
        "video",
        "chapters",
        "transcript",
        "signals",
        "resource_type",
        "interactivity",
        "time_required",
    }
)


class HookRegistry:
    """
    Ordered post-processors per extractor name.

    Each hook receives the current value and the source document and returns
    the value to pass on. A hook that raises is logged and skipped.
    """

    def __init__(self) -> None:
        self._hooks: Dict[str, List[PostProcessor]] = defaultdict(list)

    def register(self, name: str, hook: PostProcessor) -> PostProcessor:
        if name not in HOOK_NAMES:
            raise ValueError(f"Unknown hook point '{name}'. Expected one of: {sorted(HOOK_NAMES)}")
        if not callable(hook):
            raise TypeError("Hook must be callable")
        self._hooks[name].append(hook)
        return hook

    def unregister(self, name: str, hook: PostProcessor) -> None:
        hooks = self._hooks.get(name, [])
        if hook in hooks:
            hooks.remove(hook)

    def hooks_for(self, name: str) -> List[PostProcessor]:
        return list(self._hooks.get(name, []))

    def apply(self, name: str, value: Any, document: Optional[ContentDocument] = None) -> Any:
        document = document if document is not None else ContentDocument("")
        for hook in self._hooks.get(name, []):
            try:
                value = hook(value, document)
            except Exception as e:
                logger.warning(
                    "Post-processing hook failed",
                    hook_point=name,
                    hook=getattr(hook, "__name__", repr(hook)),
                    error=str(e),
                    exc_info=True,
                )
        return value

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())
