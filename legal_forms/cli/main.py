"""Main CLI application"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from legal_forms.db import get_store
from legal_forms.errors import DocumentEngineError
from legal_forms.models.template import FieldType
from legal_forms.services.documents import DocumentService, EditSession
from legal_forms.services.registry import TemplateRegistry
from legal_forms.utils.config import get_settings

app = typer.Typer(
    name="legal-forms",
    help="Real estate document forms and PDF generation",
    add_completion=False,
)

console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    """Configure logging from settings"""
    settings = get_settings()
    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _service() -> DocumentService:
    settings = get_settings()
    return DocumentService(TemplateRegistry.default(settings), get_store(settings))


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(code=1)


def _load_data(data: Optional[str], data_file: Optional[Path]) -> Optional[dict]:
    """Field data from a JSON string or a JSON file"""
    raw = data
    if data_file is not None:
        raw = data_file.read_text(encoding="utf-8")
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON data: {e}")
    if not isinstance(parsed, dict):
        _fail("JSON data must be an object of field values")
    return parsed


def _parse_assignments(assignments: List[str]) -> dict:
    """'name=value' pairs; values are parsed as JSON when possible"""
    values = {}
    for item in assignments:
        if "=" not in item:
            _fail(f"Expected name=value, got '{item}'")
        name, raw = item.split("=", 1)
        try:
            values[name.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            values[name.strip()] = raw
    return values


def _apply(session: EditSession, values: dict) -> None:
    for name, value in values.items():
        result = session.set_field(name, value)
        if not result.valid:
            console.print(f"  [yellow]! {result.message}[/yellow]")


def _prompt_fields(session: EditSession) -> None:
    """Ask for each field, section by section"""
    template = session.template
    groups = [(s.title, template.fields_for_section(s.id)) for s in template.sections]
    if not groups:
        groups = [(template.name, list(template.fields))]

    for title, fields in groups:
        console.print(f"\n[bold blue]{title}[/bold blue]")
        for field in fields:
            if field.field_type == FieldType.SIGNATURE:
                continue
            current = session.engine.value(field.name)
            label = f"{field.label}{' *' if field.required else ''}"
            if field.field_type == FieldType.SELECT:
                label += f" ({' / '.join(field.options)})"
            elif field.field_type == FieldType.CHECKBOX:
                label += " (y/n)"
            answer = Prompt.ask(label, default="" if current is None else str(current), console=console)
            if answer == "" and current is None:
                continue
            result = session.set_field(field.name, answer)
            if not result.valid:
                console.print(f"  [yellow]! {result.message}[/yellow]")
    console.print(f"\nCompletion: [cyan]{session.completion()}%[/cyan]")


def _save(service: DocumentService, session: EditSession, complete: bool) -> None:
    if complete:
        result = service.save_complete(session)
        if not result.ok:
            table = Table(title="Fields to fix")
            table.add_column("Field", style="cyan")
            table.add_column("Problem", style="red")
            for name, message in result.errors.items():
                table.add_row(name, message)
            console.print(table)
            console.print("[yellow]Document not saved. Fix the fields above or save as draft.[/yellow]")
            raise typer.Exit(code=1)
    else:
        result = service.save_draft(session)
    document = result.document
    console.print(f"[green][OK][/green] Saved {document.id} ({document.status.value}, "
                  f"{session.completion()}% complete)")


@app.command("init")
def init():
    """Initialize the document store"""
    settings = get_settings()
    try:
        store = get_store(settings)
        store.init_db()
    except DocumentEngineError as e:
        _fail(str(e))
    console.print(Panel.fit(
        f"[bold green][OK] Document store ready[/bold green] ({settings.store_mode}: {settings.database_path})\n\n"
        "Next steps:\n"
        "1. List templates: [cyan]python -m legal_forms templates[/cyan]\n"
        "2. Start a document: [cyan]python -m legal_forms new purchase-agreement -i[/cyan]",
        border_style="green",
    ))


@app.command("templates")
def templates(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
):
    """List available document templates"""
    registry = TemplateRegistry.default(get_settings())
    try:
        template_list = registry.get_templates_by_category(category) if category else registry.list_templates()
    except ValueError:
        _fail(f"Unknown category '{category}'")

    if not template_list:
        console.print("[yellow]No templates available[/yellow]")
        return

    table = Table(title="Available Document Templates")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Category")
    table.add_column("Fields", justify="right")
    table.add_column("Required", justify="right")

    for template in template_list:
        table.add_row(
            template.id,
            template.name,
            template.category.display_name,
            str(len(template.fields)),
            str(len(template.required_fields)),
        )

    console.print(table)
    console.print("\nUse [cyan]python -m legal_forms template <id> --fields[/cyan] to see the fields")


@app.command("template")
def template_detail(
    template_id: str = typer.Argument(..., help="Template id"),
    fields: bool = typer.Option(False, "--fields", "-f", help="Show fields by section"),
):
    """Show template details"""
    registry = TemplateRegistry.default(get_settings())
    template = registry.get_template(template_id)
    if template is None:
        _fail(f"Template '{template_id}' not found. Available: "
              f"{', '.join(t.id for t in registry.list_templates())}")

    console.print(Panel(
        f"[bold]{template.name}[/bold]\n\n{template.description}",
        title=f"Template: {template_id}",
        border_style="blue",
    ))

    if fields:
        table = Table(title="Fields")
        table.add_column("Section", style="blue")
        table.add_column("Field", style="cyan")
        table.add_column("Label", style="green")
        table.add_column("Type")
        table.add_column("Required")
        sections = {fid: s.title for s in template.sections for fid in s.fields}
        for field in template.fields:
            table.add_row(
                sections.get(field.id, ""),
                field.name,
                field.label,
                field.field_type.value,
                "Yes" if field.required else "No",
            )
        console.print(table)


@app.command("new")
def new_document(
    template_id: str = typer.Argument(..., help="Template id"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON field values"),
    data_file: Optional[Path] = typer.Option(None, "--data-file", help="JSON file with field values"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Prompt for each field"),
    complete: bool = typer.Option(False, "--complete", help="Save as completed instead of draft"),
):
    """Create a document and save it"""
    service = _service()
    try:
        session = service.create_session(template_id)
        values = _load_data(data, data_file)
        if values:
            _apply(session, values)
        if interactive:
            _prompt_fields(session)
        _save(service, session, complete)
    except DocumentEngineError as e:
        _fail(str(e))


@app.command("edit")
def edit_document(
    document_id: str = typer.Argument(..., help="Document id"),
    assignments: List[str] = typer.Option([], "--set", "-s", help="Field assignment name=value"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Prompt for each field"),
    complete: bool = typer.Option(False, "--complete", help="Save as completed instead of draft"),
):
    """Edit a saved document"""
    service = _service()
    try:
        session = service.open_document(document_id)
        _apply(session, _parse_assignments(assignments))
        if interactive:
            _prompt_fields(session)
        _save(service, session, complete)
    except DocumentEngineError as e:
        _fail(str(e))


@app.command("documents")
def documents(
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Search template or file name"),
    status: Optional[str] = typer.Option(None, "--status", help="draft, completed or signed"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Template category"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Browse saved documents"""
    service = _service()
    try:
        found = service.list_documents(search=search, status=status, category=category)
    except ValueError as e:
        _fail(str(e))

    if json_output:
        print(json.dumps([d.model_dump(mode="json") for d in found], ensure_ascii=False, indent=2))
        return

    if not found:
        console.print("[yellow]No documents found[/yellow]")
        return

    table = Table(title="Documents")
    table.add_column("ID", style="cyan")
    table.add_column("Template", style="green")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Created")
    for document in found:
        table.add_row(
            document.id,
            document.template_name,
            document.file_name,
            document.status.value,
            document.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command("generate")
def generate(
    document_id: str = typer.Argument(..., help="Document id"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="Output directory"),
    force: bool = typer.Option(False, "--force", help="Generate even if required fields are missing"),
):
    """Generate the PDF of a saved document"""
    service = _service()
    output_dir = output_dir or get_settings().output_dir
    try:
        session = service.open_document(document_id)
        composed = service.generate(session, output_dir=output_dir, allow_incomplete=force)
    except DocumentEngineError as e:
        _fail(str(e))
    console.print(f"[green][OK][/green] {session.document.pdf_url or composed.file_name} "
                  f"({composed.page_count} page(s))")


@app.command("render")
def render(
    template_id: str = typer.Argument(..., help="Template id"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON field values"),
    data_file: Optional[Path] = typer.Option(None, "--data-file", help="JSON file with field values"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output PDF path"),
):
    """Render a PDF straight from field data, without saving a document"""
    service = _service()
    try:
        composed = service.generate_document(template_id, _load_data(data, data_file) or {})
    except DocumentEngineError as e:
        _fail(str(e))
    path = output or Path(get_settings().output_dir) / composed.file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(composed.buffer)
    console.print(f"[green][OK][/green] {path} ({composed.page_count} page(s))")


@app.command("delete")
def delete(document_id: str = typer.Argument(..., help="Document id")):
    """Delete a saved document"""
    service = _service()
    try:
        service.delete_document(document_id)
    except DocumentEngineError as e:
        _fail(str(e))
    console.print(f"[green][OK][/green] Deleted {document_id}")
