"""Status notifications for navigation lifecycle events.

Message content is supplied through MessageTemplates at construction (or the
[messages] section of config.ini); the Notifier formats a template and hands
the text to a sink. Delivery is fire-and-forget: failures are logged, never
raised into the navigation loop.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageTemplates:
    """str.format templates keyed by event name."""

    moving: str = "Navigating to ({x}, {y}), distance {dist}"
    arrived: str = "Reached point {index} at ({x}, {y})"
    stuck: str = "Stuck at ({x}, {y}), jumping"
    emergency_stop: str = "Emergency stop: {reason}"
    finished: str = "Navigation finished, {count} point(s) reached"

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, str]) -> "MessageTemplates":
        """Defaults updated with any known keys from `overrides`."""
        known = {f.name for f in fields(cls)}
        picked = {k: str(v) for k, v in overrides.items() if k in known}
        unknown = sorted(set(overrides) - known)
        if unknown:
            logger.warning("messages: ignoring unknown template(s): %s", ", ".join(unknown))
        return replace(cls(), **picked)


class Notifier:
    """Formats lifecycle messages and forwards them to a sink.

    The sink is either a callable taking the text or an object with a
    set_status(text) method (an overlay, a status bar). Without a sink the
    messages only go to the log.
    """

    def __init__(self, sink: Optional[Any] = None, templates: Optional[MessageTemplates] = None) -> None:
        self.sink = sink
        self.templates = templates or MessageTemplates()

    def notify(self, event: str, **values: Any) -> Optional[str]:
        """Format and deliver the `event` message; returns the text or None."""
        template = getattr(self.templates, event, None)
        if not isinstance(template, str):
            logger.warning("notify: no template for event %s", event)
            return None
        try:
            text = template.format(**values)
        except (KeyError, IndexError, ValueError) as e:
            logger.warning("notify: bad template for %s: %s", event, e)
            return None

        logger.info("notify[%s]: %s", event, text)
        deliver = self._resolve_sink()
        if deliver is not None:
            try:
                deliver(text)
            except Exception:
                logger.warning("notify: delivery failed for %s", event, exc_info=True)
        return text

    def _resolve_sink(self) -> Optional[Callable[[str], Any]]:
        if self.sink is None:
            return None
        if hasattr(self.sink, "set_status"):
            return self.sink.set_status
        if callable(self.sink):
            return self.sink
        return None
