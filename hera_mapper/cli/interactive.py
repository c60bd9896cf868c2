"""Interactive CLI for the HERA Legacy Mapper."""
import json
import logging
from pathlib import Path
from typing import Optional

import click
from colorama import Fore, Style

from hera_mapper.builder.preview_builder import PreviewBuilder
from hera_mapper.config import AppConfig, app_config
from hera_mapper.errors import InvalidTransitionError, ParseError
from hera_mapper.exporter.json_exporter import JsonExporter
from hera_mapper.generator.orchestrator import SchemaGenerationOrchestrator
from hera_mapper.mapper.mapping import MappingSession
from hera_mapper.mapper.session_builder import AnalysisResult, SessionBuilder
from hera_mapper.registry.schema_registry import SchemaRegistry
from hera_mapper.samples import load_sample_session
from hera_mapper.schema.models import HeraTable
from hera_mapper.validator.compliance import validate_session

logger = logging.getLogger(__name__)

TABLE_COLORS = {
    HeraTable.ENTITIES: Fore.BLUE,
    HeraTable.DYNAMIC_DATA: Fore.GREEN,
    HeraTable.METADATA: Fore.MAGENTA,
    HeraTable.TRANSACTIONS: Fore.YELLOW,
}

# Mappings below this confidence are offered for editing during review
REVIEW_THRESHOLD = 0.8


class InteractiveCLI:
    """Interactive CLI interface."""

    def __init__(self, config: Optional[AppConfig] = None):
        """Initialize CLI."""
        self.config = config or app_config
        self.session_builder = SessionBuilder()
        self.exporter = JsonExporter()
        self.registry = SchemaRegistry(self.config.registry_dir)

    def print_header(self, title: str):
        """Print a section header."""
        click.echo(f"\n{Fore.CYAN}{'━' * 45}")
        click.echo(f"{Fore.CYAN}{title}")
        click.echo(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def analyze_file(self, file_path: str, export_path: Optional[str] = None, review: bool = False) -> bool:
        """
        Parse, analyze and map an uploaded file.

        Returns:
            False when the file could not be parsed
        """
        self.print_header("Step 1: Analyze Legacy Data")
        click.echo(f"{Fore.CYAN}Loading {Path(file_path).name}...")

        try:
            result = self.session_builder.from_file(file_path, max_bytes=self.config.max_upload_bytes)
        except (ParseError, ValueError) as e:
            click.echo(f"{Fore.RED}❌ Could not read {Path(file_path).name}: {e}")
            return False

        self._process_session(result, export_path, review)
        return True

    def load_sample(self, export_path: Optional[str] = None, review: bool = False) -> None:
        """Analyze and map the built-in restaurant dataset."""
        self.print_header("Step 1: Load Sample Restaurant Data")
        self._process_session(load_sample_session(self.session_builder), export_path, review)

    def _process_session(self, result: AnalysisResult, export_path: Optional[str], review: bool):
        session = result.session
        click.echo(f"{Fore.GREEN}✅ Analyzed successfully!")
        click.echo(f"   Format: {result.dataset.source_format}")
        click.echo(f"   Entities: {len(result.dataset.entities)}")
        click.echo(f"   Fields: {result.dataset.total_fields}")
        click.echo(f"   Records: {result.dataset.total_records}")
        click.echo(f"   Domain: {result.domain.name} ({result.domain.confidence:.0%})")

        self._show_mappings(session)

        if review:
            self._edit_mappings(session)

        self._validate(session)
        self._show_preview(session)

        if export_path:
            written = self.exporter.export(session, Path(export_path))
            click.echo(f"\n{Fore.GREEN}✅ Mapping exported to {written}")

    def _show_mappings(self, session: MappingSession):
        """Print proposed mappings grouped by entity."""
        self.print_header("Step 2: Proposed Mappings")

        current_entity = None
        for mapping in session.mappings:
            if mapping.entity_name != current_entity:
                current_entity = mapping.entity_name
                click.echo(f"{Style.BRIGHT}{current_entity}{Style.RESET_ALL}")
            color = TABLE_COLORS.get(mapping.hera_table, Fore.WHITE)
            click.echo(
                f"   {mapping.field_name:<20} → {color}{mapping.hera_table.value}.{mapping.hera_field}"
                f"{Style.RESET_ALL} ({mapping.confidence:.0%})"
            )

        summary = session.summary()
        click.echo(f"\n{Fore.CYAN}Generated {summary['mappings']} mappings, "
                   f"{summary['high_confidence']} high confidence, "
                   f"average {summary['average_confidence']:.0%}")

    def _edit_mappings(self, session: MappingSession):
        """Edit low-confidence mappings interactively."""
        self.print_header("Step 3: Review Mappings")

        pending = [i for i, m in enumerate(session.mappings) if m.confidence < REVIEW_THRESHOLD]
        if not pending:
            click.echo(f"{Fore.GREEN}All mappings are above {REVIEW_THRESHOLD:.0%} confidence!")
            return

        click.echo(f"Pending mappings: {len(pending)}\n")
        tables = [t.value for t in HeraTable]
        for index in pending:
            mapping = session.mappings[index]
            click.echo(f"Legacy field: {Fore.YELLOW}{mapping.legacy_field}{Style.RESET_ALL}")
            click.echo(f"   Suggested: {mapping.hera_table.value}.{mapping.hera_field} ({mapping.confidence:.0%})")

            table = click.prompt("Target table", default=mapping.hera_table.value, type=click.Choice(tables))
            hera_field = click.prompt("Target field", default=mapping.hera_field)
            if table != mapping.hera_table.value or hera_field != mapping.hera_field:
                try:
                    session.update_mapping(index, hera_table=table, hera_field=hera_field, confidence=1.0,
                                           notes="Edited during review")
                except InvalidTransitionError as e:
                    click.echo(f"{Fore.RED}{e}")
                    return

            if not click.confirm("Review next?", default=True):
                break

    def _validate(self, session: MappingSession):
        """Run compliance checks."""
        self.print_header("Step 4: Compliance")

        report = validate_session(session)
        for check in report.checks:
            icon = f"{Fore.GREEN}✓" if check.passed else (f"{Fore.RED}✗" if check.required else f"{Fore.YELLOW}!")
            click.echo(f"{icon} {check.name}{Style.RESET_ALL}: {check.message}")

        click.echo(f"\n   Score: {report.score:.0%}")
        click.echo(f"   Status: {session.status.value}")
        if report.issues:
            click.echo(f"\n{Fore.YELLOW}Sample issues:")
            for issue in report.issues[:5]:
                click.echo(f"   • {issue}")

    def _show_preview(self, session: MappingSession):
        """Show the universal rows of the first record per entity."""
        self.print_header("Step 5: Migration Preview")

        previews = PreviewBuilder().build_session(session, limit=1)
        for entity_name, records in previews.items():
            if not records:
                continue
            click.echo(f"{Style.BRIGHT}{entity_name}{Style.RESET_ALL}")
            click.echo(json.dumps(records[0].to_dict(), indent=2, ensure_ascii=False, default=str))

    def generate(
        self,
        requirement: str,
        entity_type: Optional[str] = None,
        organization_id: Optional[str] = None,
        ai_enabled: Optional[bool] = None,
    ) -> None:
        """Generate a schema from a business requirement."""
        self.print_header("Generate Schema")

        if ai_enabled is not False and not self.config.ai.is_available():
            click.echo(f"{Fore.YELLOW}No AI backend configured, rule-based generation will be used")

        orchestrator = SchemaGenerationOrchestrator(registry=self.registry, config=self.config.ai)
        schema = orchestrator.generate_schema(
            requirement,
            entity_type=entity_type,
            organization_id=organization_id,
            ai_enabled=ai_enabled,
        )

        source = schema.metadata.get("generation_source", "rule_based")
        click.echo(f"{Fore.GREEN}✅ {schema.name} ({schema.entity_type})")
        click.echo(f"   Domain: {schema.domain.name}")
        click.echo(f"   Source: {source}")
        click.echo(f"   Confidence: {schema.confidence:.0%}")
        click.echo(f"   Fields: {len(schema.fields)}")
        for generated in schema.fields:
            target = ""
            if generated.mapping:
                target = f" → {generated.mapping['heraTable']}.{generated.mapping['heraField']}"
            required = "*" if generated.required else " "
            click.echo(f"   {required} {generated.name:<20} {generated.type:<10}{target}")

        if schema.suggestions:
            click.echo(f"\n{Fore.YELLOW}Suggestions:")
            for suggestion in schema.suggestions:
                click.echo(f"   • {suggestion}")

    def list_registry(self, organization_id: str) -> None:
        """List registered schemas for an organization."""
        self.print_header(f"Registered Schemas: {organization_id}")

        entries = self.registry.list_schemas(organization_id)
        if not entries:
            click.echo(f"{Fore.YELLOW}No schemas registered")
            return

        for entry in entries:
            origin = "AI" if entry.ai_generated else "manual"
            field_count = len(entry.schema_definition.get("fields", []))
            click.echo(f"{entry.entity_type:<20} {entry.entity_name:<25} {field_count:>3} fields  "
                       f"{origin:<6} {entry.created_at}")
