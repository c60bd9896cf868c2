"""Compliance checks of a mapping session against the universal-schema principles."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from hera_mapper.mapper.mapping import MappingSession, MappingType, SessionStatus
from hera_mapper.mapper.rules import TENANT_FIELD
from hera_mapper.schema.models import HeraTable

logger = logging.getLogger(__name__)

STANDARD_ENTITY_COLUMNS = {"id", TENANT_FIELD, "entity_type", "is_active", "created_at", "updated_at"}


@dataclass
class ComplianceCheck:
    name: str
    passed: bool
    message: str
    required: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "required": self.required,
        }


@dataclass
class ComplianceReport:
    """Outcome of validating a session."""

    score: float
    checks: List[ComplianceCheck] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks if check.required)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "passed": self.passed,
            "checks": [c.to_dict() for c in self.checks],
            "issues": list(self.issues),
        }


class ComplianceValidator:
    """Validates a session's mappings."""

    def validate(self, session: MappingSession) -> ComplianceReport:
        """Run every check and score the session."""
        issues: List[str] = []
        checks = [
            self._check_coverage(session, issues),
            self._check_tenant_isolation(session, issues),
            self._check_no_foreign_keys(session, issues),
            self._check_confidence_range(session, issues),
            self._check_universal_naming(session, issues),
            self._check_dynamic_data_usage(session, issues),
        ]

        score = round(len([c for c in checks if c.passed]) / len(checks), 4)
        report = ComplianceReport(score=score, checks=checks, issues=issues)
        logger.info(f"Compliance for session {session.id}: score={score:.2f}, passed={report.passed}")
        return report

    @staticmethod
    def _check_coverage(session: MappingSession, issues: List[str]) -> ComplianceCheck:
        counts: Dict[str, int] = {}
        for mapping in session.mappings:
            counts[mapping.legacy_field] = counts.get(mapping.legacy_field, 0) + 1

        expected = [f"{e.name}.{f.name}" for e in session.legacy_data for f in e.fields]
        missing = [name for name in expected if name not in counts]
        duplicated = [name for name, count in counts.items() if count > 1]

        for name in missing:
            issues.append(f"No mapping for {name}")
        for name in duplicated:
            issues.append(f"More than one mapping for {name}")

        passed = not missing and not duplicated
        return ComplianceCheck(
            "coverage",
            passed,
            f"{len(expected) - len(missing)}/{len(expected)} fields mapped exactly once",
        )

    @staticmethod
    def _check_tenant_isolation(session: MappingSession, issues: List[str]) -> ComplianceCheck:
        bad = [
            m for m in session.mappings
            if m.field_name == TENANT_FIELD and not (
                m.hera_table == HeraTable.ENTITIES and m.hera_field == TENANT_FIELD and m.confidence == 1.0
            )
        ]
        for mapping in bad:
            issues.append(f"{mapping.legacy_field} must map to core_entities.{TENANT_FIELD} at confidence 1.0")
        return ComplianceCheck("tenant_isolation", not bad, f"{len(bad)} tenant scope violations")

    @staticmethod
    def _check_no_foreign_keys(session: MappingSession, issues: List[str]) -> ComplianceCheck:
        bad = []
        for mapping in session.mappings:
            if not mapping.field_name.endswith("_id") and mapping.field_name != "id":
                continue
            if mapping.hera_table == HeraTable.ENTITIES and mapping.hera_field in ("id", TENANT_FIELD):
                continue
            if mapping.hera_table == HeraTable.METADATA:
                continue
            bad.append(mapping)
            issues.append(f"{mapping.legacy_field} is a legacy key and must be stored in core_metadata")
        return ComplianceCheck("no_foreign_keys", not bad, f"{len(bad)} foreign key style mappings")

    @staticmethod
    def _check_confidence_range(session: MappingSession, issues: List[str]) -> ComplianceCheck:
        bad = [m for m in session.mappings if not 0.0 <= m.confidence <= 1.0]
        for mapping in bad:
            issues.append(f"{mapping.legacy_field} confidence {mapping.confidence} outside [0, 1]")
        return ComplianceCheck("confidence_range", not bad, f"{len(bad)} confidences out of range")

    @staticmethod
    def _check_universal_naming(session: MappingSession, issues: List[str]) -> ComplianceCheck:
        bad = []
        for mapping in session.mappings_for_table(HeraTable.ENTITIES):
            if mapping.hera_field in STANDARD_ENTITY_COLUMNS:
                continue
            allowed = {f"{mapping.entity_type}_name", f"{mapping.entity_type}_code"}
            if mapping.hera_field not in allowed:
                bad.append(mapping)
                issues.append(
                    f"{mapping.legacy_field} targets core_entities.{mapping.hera_field}; "
                    f"expected <entity_type>_name or <entity_type>_code"
                )
        return ComplianceCheck("universal_naming", not bad, f"{len(bad)} non-standard entity columns")

    @staticmethod
    def _check_dynamic_data_usage(session: MappingSession, issues: List[str]) -> ComplianceCheck:
        dynamic = [m for m in session.mappings if m.mapping_type == MappingType.DYNAMIC]
        total = len(session.mappings)
        return ComplianceCheck(
            "dynamic_data_usage",
            bool(dynamic) or total == 0,
            f"{len(dynamic)}/{total} fields stored as dynamic data",
            required=False,
        )


def validate_session(session: MappingSession, validator: ComplianceValidator = None) -> ComplianceReport:
    """
    Validate a draft session and advance it to VALIDATED when it passes.

    Sessions past draft are checked but left in their current status.
    """
    validator = validator or ComplianceValidator()
    report = validator.validate(session)
    if report.passed and session.status == SessionStatus.DRAFT:
        session.advance(SessionStatus.VALIDATED)
    elif not report.passed:
        logger.warning(f"Session {session.id} failed compliance with {len(report.issues)} issues")
    return report
