"""
fallback.py — Fallback record synthesis.

Used only when an extraction path produced zero records.

Tier 1 (text and word-processor input): a KnownPatternRecognizer scans the
full text for literal trigger substrings and emits a templated Record per
trigger found. The templates are organisation-specific sample vocabulary,
not a general rule; they live in config.yaml and can be swapped or switched
off without touching the pipeline.

Tier 2 (every format): universal_fallback emits one sentinel Record naming
the source file, so a processed document never yields an empty RecordSet.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from statusdeck.records import FIELD_NAMES, NOT_AVAILABLE, Record, UNKNOWN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternVariant:
    """Field overrides applied when `when` also occurs in the text."""
    when: str
    overrides: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PatternTemplate:
    """A literal trigger and the Record it synthesises."""
    trigger: str
    fields: dict[str, str] = field(default_factory=dict)
    variants: tuple[PatternVariant, ...] = ()

    def build(self, text: str) -> Record:
        values = dict(self.fields)
        for variant in self.variants:
            if variant.when in text:
                values.update(variant.overrides)
        return Record(**{k: v for k, v in values.items() if k in FIELD_NAMES})


class KnownPatternRecognizer:
    """Maps literal trigger substrings to synthesized Records."""

    def __init__(self, templates: tuple[PatternTemplate, ...] = ()):
        self.templates = tuple(templates)

    @property
    def enabled(self) -> bool:
        return bool(self.templates)

    def recognize(self, text: str) -> list[Record]:
        """Return one Record per template whose trigger occurs in text.

        Args:
            text: Full decoded document text.

        Returns:
            Synthesized records in template order; empty if nothing matched.
        """
        if not text:
            return []
        records = [t.build(text) for t in self.templates if t.trigger in text]
        if records:
            logger.warning(
                "No structured rows found -- synthesized %d record(s) from known patterns",
                len(records),
            )
        return records

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "KnownPatternRecognizer":
        """Build a recognizer from the `fallback` section of the config.

        Args:
            cfg: Full configuration dict.

        Returns:
            Recognizer; empty (never matches) when disabled.
        """
        fb_cfg = cfg.get("fallback", {})
        if not fb_cfg.get("known_patterns_enabled", True):
            logger.debug("Known-pattern fallback disabled by config")
            return cls()

        templates = []
        for entry in fb_cfg.get("known_patterns") or []:
            trigger = entry.get("trigger")
            if not trigger:
                logger.warning("Skipping known pattern without trigger: %r", entry)
                continue
            variants = tuple(
                PatternVariant(when=v["when"], overrides=dict(v.get("record") or {}))
                for v in entry.get("variants") or []
                if v.get("when")
            )
            templates.append(PatternTemplate(
                trigger=trigger,
                fields=dict(entry.get("record") or {}),
                variants=variants,
            ))
        return cls(tuple(templates))


def universal_fallback(source_name: str) -> Record:
    """Single sentinel Record naming the uninterpretable file."""
    logger.warning("No data could be extracted from %s -- emitting fallback record", source_name)
    return Record(
        client=UNKNOWN,
        module=UNKNOWN,
        description=f"No data could be extracted from {source_name}",
        deployment_status=NOT_AVAILABLE,
        delivery_date=NOT_AVAILABLE,
    )
