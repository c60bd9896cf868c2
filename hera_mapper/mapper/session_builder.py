"""Builds mapping sessions from parsed legacy data or uploaded files."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from hera_mapper.introspection.structure_analyzer import StructureAnalyzer
from hera_mapper.mapper.domain import BusinessDomain, DomainClassifier
from hera_mapper.mapper.heuristic import HeuristicMapper
from hera_mapper.mapper.mapping import MappingSession
from hera_mapper.parser.parser_factory import ParserFactory
from hera_mapper.schema.models import LegacyDataset

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Session plus the analysis it was built from."""

    session: MappingSession
    dataset: LegacyDataset
    domain: BusinessDomain


def describe_dataset(dataset: LegacyDataset) -> str:
    """Entity and field names as text for domain classification."""
    words = []
    for entity in dataset.entities:
        words.append(entity.name.replace("_", " "))
        words.extend(f.name.replace("_", " ") for f in entity.fields)
    return " ".join(words)


class SessionBuilder:
    """Analyze, classify and map legacy data into a draft MappingSession"""

    def __init__(
        self,
        analyzer: Optional[StructureAnalyzer] = None,
        classifier: Optional[DomainClassifier] = None,
    ):
        self.analyzer = analyzer or StructureAnalyzer()
        self.classifier = classifier or DomainClassifier()

    def from_data(
        self,
        data: Any,
        source_name: str = "legacy_items",
        source_format: str = "json",
        session_name: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Build a session from already parsed data.

        Args:
            data: List of records or dict of record lists
            source_name: Entity name used when data is a bare list
            source_format: Format label recorded on the dataset
            session_name: Session name (defaults to the source name)

        Returns:
            AnalysisResult with a DRAFT session
        """
        dataset = self.analyzer.analyze_dataset(data, source_name, source_format)
        domain = self.classifier.classify(describe_dataset(dataset))
        mapper = HeuristicMapper(domain=domain)

        session = MappingSession(
            name=session_name or f"{source_name} migration",
            legacy_data=dataset.entities,
            mappings=mapper.suggest_mappings(dataset.entities),
        )
        logger.info(
            f"Session '{session.name}' created: {len(dataset.entities)} entities, "
            f"{len(session.mappings)} mappings, domain={domain.name}"
        )
        return AnalysisResult(session=session, dataset=dataset, domain=domain)

    def from_file(self, file_path: str, max_bytes: Optional[int] = None) -> AnalysisResult:
        """
        Parse an uploaded file and build a session from it.

        Raises:
            ParseError: If the file is too large or invalid for its type
            ValueError: If the file extension is not supported
        """
        data, parser = ParserFactory.parse_upload(file_path, max_bytes=max_bytes)
        path = Path(file_path)
        return self.from_data(
            data,
            source_name=path.stem,
            source_format=parser.format_name,
            session_name=path.name,
        )
