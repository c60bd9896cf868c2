"""
Schema Registry - Tenant-scoped store of generated schemas with similarity search.

Features:
- Append-only registration (no update/delete, no dedup at write time)
- Similarity ranking of registered schemas against a new requirement
- Exact lookup by entity type
- Textual context of existing schemas for AI prompts
- Optional JSON file persistence, one file per organization
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from hera_mapper.errors import RegistryWriteError

logger = logging.getLogger(__name__)

USE_EXISTING = "use_existing"
GENERATE_NEW = "generate_new"

STOP_WORDS = {
    "a", "an", "the", "and", "or", "for", "to", "of", "in", "on", "at", "by", "with",
    "i", "we", "our", "my", "need", "needs", "want", "wants", "should", "must", "be",
    "is", "are", "that", "this", "it", "as", "from", "each", "all", "their", "its",
    "manage", "track", "store", "system", "create", "new",
}


def _fold(token: str) -> str:
    """Crude plural folding so 'customers' and 'customer' compare equal."""
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


def tokenize(text: str) -> Set[str]:
    return {_fold(t) for t in re.findall(r"[a-z0-9]+", (text or "").lower()) if t not in STOP_WORDS}


@dataclass
class SchemaRegistryEntry:
    """A schema registered for an organization."""

    organization_id: str
    entity_type: str
    entity_name: str
    schema_definition: Dict[str, Any]
    ai_generated: bool = False
    created_by: str = "system"
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def signature(self) -> Set[str]:
        """Tokens describing this schema: entity type, name and field names"""
        tokens = tokenize(self.entity_type.replace("_", " "))
        tokens |= tokenize(self.entity_name)
        for item in self.schema_definition.get("fields", []):
            tokens |= tokenize(str(item.get("name", "")).replace("_", " "))
        return tokens

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "organization_id": self.organization_id,
            "entity_type": self.entity_type,
            "entity_name": self.entity_name,
            "schema_definition": self.schema_definition,
            "ai_generated": self.ai_generated,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaRegistryEntry":
        return cls(**data)


@dataclass
class SimilarSchema:
    """A ranked similarity search hit."""

    entity_type: str
    entity_name: str
    similarity_score: float
    recommendation: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "entity_name": self.entity_name,
            "similarity_score": self.similarity_score,
            "recommendation": self.recommendation,
            "reason": self.reason,
        }


class SchemaRegistry:
    """
    Per-organization registry of generated schemas

    Usage:
    ```python
    registry = SchemaRegistry(storage_dir=Path("./registry"))
    registry.register_schema("org-1", "customer", "Customer", schema.to_dict(), ai_generated=True)
    matches = registry.find_similar_schemas("org-1", "customer records with email", "customer")
    ```
    """

    TYPE_WEIGHT = 0.6
    OVERLAP_WEIGHT = 0.4
    # Scores at or above this are recommended for reuse
    REUSE_THRESHOLD = 0.75

    def __init__(self, storage_dir: Optional[Path] = None):
        """
        Initialize registry

        Args:
            storage_dir: Directory for per-organization JSON files;
                         None keeps the registry in memory only
        """
        self.storage_dir = Path(storage_dir) if storage_dir else None
        self._entries: Dict[str, List[SchemaRegistryEntry]] = {}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def register_schema(
        self,
        organization_id: str,
        entity_type: str,
        entity_name: str,
        schema_definition: Dict[str, Any],
        ai_generated: bool = False,
        created_by: str = "system",
    ) -> SchemaRegistryEntry:
        """
        Append a schema for an organization

        Raises:
            ValueError: If organization_id is empty
            RegistryWriteError: If persistence is enabled and the file cannot be written
        """
        self._require_org(organization_id)

        entry = SchemaRegistryEntry(
            organization_id=organization_id,
            entity_type=entity_type,
            entity_name=entity_name,
            schema_definition=schema_definition,
            ai_generated=ai_generated,
            created_by=created_by,
        )
        entries = self._load(organization_id)
        entries.append(entry)
        try:
            self._save(organization_id)
        except RegistryWriteError:
            entries.pop()
            raise

        logger.info(f"Registered schema '{entity_type}' for organization {organization_id}")
        return entry

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_schemas(self, organization_id: str) -> List[SchemaRegistryEntry]:
        self._require_org(organization_id)
        return list(self._load(organization_id))

    def get_schema_by_type(self, organization_id: str, entity_type: str) -> Optional[SchemaRegistryEntry]:
        """Most recently registered schema with exactly this entity type"""
        self._require_org(organization_id)
        for entry in reversed(self._load(organization_id)):
            if entry.entity_type == entity_type:
                return entry
        return None

    def find_similar_schemas(
        self,
        organization_id: str,
        requirement: str,
        entity_type: Optional[str] = None,
        limit: int = 5,
    ) -> List[SimilarSchema]:
        """
        Rank the organization's schemas by similarity to a requirement

        Only the latest entry per entity type is considered.

        Returns:
            Hits sorted by similarity_score (highest first)
        """
        self._require_org(organization_id)
        requirement_tokens = tokenize(requirement)

        latest: Dict[str, SchemaRegistryEntry] = {}
        for entry in self._load(organization_id):
            latest[entry.entity_type] = entry

        hits = [self._score(entry, requirement_tokens, entity_type) for entry in latest.values()]
        hits.sort(key=lambda hit: hit.similarity_score, reverse=True)

        if hits:
            logger.debug(
                f"Top similar schema for {organization_id}: {hits[0].entity_type} "
                f"({hits[0].similarity_score:.2f})"
            )
        return hits[:limit]

    def generate_ai_context(self, organization_id: str) -> str:
        """Summary of registered schemas to prepend to AI prompts"""
        self._require_org(organization_id)

        latest: Dict[str, SchemaRegistryEntry] = {}
        for entry in self._load(organization_id):
            latest[entry.entity_type] = entry
        if not latest:
            return ""

        lines = [f"The organization already has {len(latest)} registered entity schemas:"]
        for entry in latest.values():
            names = [str(f.get("name")) for f in entry.schema_definition.get("fields", [])]
            origin = "AI generated" if entry.ai_generated else "manual"
            lines.append(f"- {entry.entity_type} ({entry.entity_name}, {origin}): {', '.join(names)}")
        lines.append("Reuse existing field names and conventions where they apply.")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Similarity
    # ------------------------------------------------------------------

    def _score(
        self,
        entry: SchemaRegistryEntry,
        requirement_tokens: Set[str],
        entity_type: Optional[str],
    ) -> SimilarSchema:
        signature = entry.signature()
        shared = requirement_tokens & signature
        overlap = len(shared) / len(requirement_tokens) if requirement_tokens else 0.0

        if entity_type:
            type_match = 1.0 if _fold(entity_type.lower()) == _fold(entry.entity_type.lower()) else 0.0
        else:
            type_tokens = tokenize(entry.entity_type.replace("_", " "))
            type_match = 1.0 if type_tokens and type_tokens <= requirement_tokens else 0.0

        score = round(self.TYPE_WEIGHT * type_match + self.OVERLAP_WEIGHT * overlap, 4)

        if score >= self.REUSE_THRESHOLD:
            recommendation = USE_EXISTING
            reason = (
                f"Existing '{entry.entity_type}' schema covers {len(shared)} of "
                f"{len(requirement_tokens)} requirement terms"
            )
        else:
            recommendation = GENERATE_NEW
            if type_match:
                reason = f"Entity type '{entry.entity_type}' matches but fields differ ({overlap:.0%} term overlap)"
            else:
                reason = f"Different entity type ({overlap:.0%} term overlap)"

        return SimilarSchema(
            entity_type=entry.entity_type,
            entity_name=entry.entity_name,
            similarity_score=score,
            recommendation=recommendation,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    @staticmethod
    def _require_org(organization_id: str) -> None:
        if not organization_id or not str(organization_id).strip():
            raise ValueError("organization_id is required for registry operations")

    def _load(self, organization_id: str) -> List[SchemaRegistryEntry]:
        if organization_id in self._entries:
            return self._entries[organization_id]

        entries: List[SchemaRegistryEntry] = []
        path = self._file_path(organization_id)
        if path is not None and path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    entries = [SchemaRegistryEntry.from_dict(item) for item in json.load(f)]
                logger.debug(f"Loaded {len(entries)} schemas from {path}")
            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"Error loading registry file {path}: {e}")

        self._entries[organization_id] = entries
        return entries

    def _save(self, organization_id: str) -> None:
        path = self._file_path(organization_id)
        if path is None:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump([e.to_dict() for e in self._entries[organization_id]], f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            raise RegistryWriteError(f"Could not persist registry for {organization_id}: {e}")

    def _file_path(self, organization_id: str) -> Optional[Path]:
        if self.storage_dir is None:
            return None
        safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", organization_id)
        return self.storage_dir / f"{safe_name}.json"
