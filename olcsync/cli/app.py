"""
Aplicación CLI de olcsync.

Solo compone comandos y formatea con rich; la lógica vive en core y providers.
"""

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from olcsync import __version__
from olcsync.catalog.loader import CatalogLoader
from olcsync.core.errors import (
    ConfigError,
    ConvergenceError,
    DiscoveryError,
    OlcsyncError,
    ValidationError,
)
from olcsync.core.resource.planner import Action, Create, Delete, Modify
from olcsync.core.resource.schema import mask
from olcsync.core.runtime.run import Outcome, RunReport, reconcile
from olcsync.core.runtime.settings import Settings, load_settings
from olcsync.logger import configure_logging
from olcsync.providers.openldap import DATABASE, DatabaseProvider, DatabaseReader, openldap_password
from olcsync.providers.openldap.database import redact_ldif
from olcsync.providers.openldap.discovery import format_records
from olcsync.system.commands import SubprocessExecutor
from olcsync.system.packages import (
    check_preconditions,
    detect_os_family,
    install_commands,
    load_package_table,
)

app = typer.Typer(
    name="olcsync",
    help="olcsync - Reconciliación declarativa de bases de datos OpenLDAP (cn=config)",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

_OUTCOME_STYLE = {
    Outcome.CREATED: "[green]✔ creada[/green]",
    Outcome.UPDATED: "[yellow]✔ actualizada[/yellow]",
    Outcome.DELETED: "[red]✔ eliminada[/red]",
    Outcome.UNCHANGED: "[dim]sin cambios[/dim]",
    Outcome.PLANNED: "[cyan]pendiente[/cyan]",
    Outcome.FAILED: "[red]✘ error[/red]",
}


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logging detallado (DEBUG)"),
):
    """Carga .env y configura el logging antes de cualquier comando."""
    env_file = Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    settings = _settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _settings() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _provider(settings: Settings) -> DatabaseProvider:
    return DatabaseProvider(SubprocessExecutor(timeout=settings.command_timeout), settings=settings)


def _describe(action: Optional[Action]) -> str:
    """Resumen legible de una acción, con los secretos enmascarados."""
    if action is None:
        return ""
    if isinstance(action, Create):
        attrs = mask(DATABASE, dict(action.attributes))
        return "add " + ", ".join(f"{k}={v}" for k, v in attrs.items())
    if isinstance(action, Modify):
        secrets = DATABASE.secret_names()
        parts = []
        for c in action.changes:
            if c.field in secrets:
                parts.append(f"{c.field}: ******** → ********")
            else:
                parts.append(f"{c.field}: {c.actual} → {c.desired}")
        return "replace " + "; ".join(parts)
    if isinstance(action, Delete):
        return f"delete {action.dn or ''}".strip()
    return action.verb


def _print_report(report: RunReport, provider: DatabaseProvider) -> None:
    title = "Plan (dry-run)" if report.dry_run else "Resultado de la reconciliación"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Sufijo", style="cyan")
    table.add_column("Estado", style="green")
    table.add_column("Detalles", style="yellow")
    for result in report.results:
        details = _describe(result.action)
        if result.error is not None:
            details = str(result.error)
        details = escape(details)
        table.add_row(result.name or "—", _OUTCOME_STYLE[result.outcome], details)
    console.print(table)

    for result in report.failed:
        if isinstance(result.error, ConvergenceError) and result.error.payload:
            console.print(Panel(
                provider.redact(result.error.payload).rstrip(),
                title=f"LDIF enviado ({result.name})",
                border_style="red",
            ))

    counts = ", ".join(f"{k}: {v}" for k, v in report.counts().items()) or "catálogo vacío"
    console.print(f"\n[dim]{counts}[/dim]")


def _run(catalog: Optional[Path], dry_run: bool, fail_fast: bool) -> None:
    settings = _settings()
    path = catalog or settings.catalog
    provider = _provider(settings)
    try:
        entries = CatalogLoader(path).entries()
        report = reconcile(provider, entries, dry_run=dry_run, fail_fast=fail_fast)
    except DiscoveryError as e:
        console.print(f"[red]❌ Discovery falló: {escape(str(e))}[/red]")
        if e.command:
            console.print(f"[dim]Comando: {' '.join(e.command)}[/dim]")
        raise typer.Exit(1)
    except ConvergenceError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        console.print(Panel(provider.redact(e.payload).rstrip() or "(vacío)", title="LDIF enviado", border_style="red"))
        raise typer.Exit(1)
    except (ConfigError, ValidationError) as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _print_report(report, provider)
    if not report.ok:
        console.print("\n[yellow]⚠️ Algunas bases no convergieron[/yellow]")
        raise typer.Exit(1)
    if not dry_run:
        console.print("\n[bold green]✅ Estado deseado aplicado[/bold green]")


@app.command()
def version():
    """Muestra la versión de olcsync"""
    console.print(Panel.fit(
        "[bold cyan]olcsync[/bold cyan]\n"
        "[dim]Reconciliación declarativa de OpenLDAP (cn=config)[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}\n"
        f"[bold]Recurso:[/bold] {DATABASE.kind}",
        border_style="cyan",
    ))


@app.command()
def info():
    """Muestra la configuración efectiva y las propiedades gestionadas"""
    settings = _settings()
    console.print(Panel.fit("[bold cyan]olcsync - Información[/bold cyan]", border_style="cyan"))

    config = Table(show_header=False, box=None)
    config.add_column("Campo", style="cyan", width=18)
    config.add_column("Valor", style="green")
    config.add_row("Catálogo", str(settings.catalog))
    config.add_row("URI", settings.ldap_uri)
    config.add_row("Lectura", settings.read_mode)
    config.add_row("Timeout", f"{settings.command_timeout:g}s")
    config.add_row("Host (sal)", settings.host_id)
    console.print(config)

    table = Table(title=f"Propiedades de {DATABASE.kind}", show_header=True, header_style="bold cyan")
    table.add_column("Propiedad", style="cyan")
    table.add_column("Atributo", style="green")
    table.add_column("Permitidos", style="yellow")
    table.add_column("Default")
    table.add_column("Mutable")
    table.add_row(f"{DATABASE.identity_key} (identidad)", DATABASE.identity_attribute, "—", "—", "—")
    for name, spec in DATABASE.properties:
        table.add_row(
            name,
            spec.attribute,
            ", ".join(sorted(spec.allowed_values)) if spec.allowed_values else "—",
            spec.default or "—",
            "sí" if spec.mutable else "no",
        )
    console.print(table)


@app.command()
def discover(
    as_ldif: bool = typer.Option(False, "--ldif", help="Imprimir los registros observados como LDIF"),
):
    """
    Lista las bases de datos existentes en cn=config

    Ejemplo: olcsync discover --ldif
    """
    settings = _settings()
    reader = DatabaseReader(
        SubprocessExecutor(timeout=settings.command_timeout),
        read_mode=settings.read_mode,
        ldap_uri=settings.ldap_uri,
    )
    try:
        records = reader.discover()
    except DiscoveryError as e:
        console.print(f"[red]❌ Discovery falló: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not records:
        console.print("[yellow]⚠️ No hay bases de datos gestionables[/yellow]")
        return

    if as_ldif:
        console.print(redact_ldif(DATABASE, format_records(reader, records)).rstrip(),
                      markup=False, highlight=False, soft_wrap=True)
        return

    table = Table(title="Bases de datos descubiertas", show_header=True, header_style="bold cyan")
    table.add_column("Sufijo", style="cyan")
    table.add_column("DN", style="dim")
    for name in DATABASE.property_names:
        table.add_column(name)
    for record in records:
        attrs = mask(DATABASE, record.attributes)
        table.add_row(record.name, record.dn or "—", *[attrs.get(n) or "—" for n in DATABASE.property_names])
    console.print(table)
    console.print(f"\n[dim]Total: {len(records)} base(s)[/dim]")


@app.command()
def plan(
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help="YAML del catálogo (por defecto OLCSYNC_CATALOG)"),
):
    """
    Muestra qué cambios se aplicarían, sin escribir nada

    Ejemplo: olcsync plan -c databases.yaml
    """
    _run(catalog, dry_run=True, fail_fast=False)


@app.command()
def apply(
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help="YAML del catálogo (por defecto OLCSYNC_CATALOG)"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Detener en el primer error"),
    check: bool = typer.Option(True, "--check/--no-check", help="Verificar binarios y servicio antes"),
):
    """
    Converge las bases de datos al estado del catálogo

    Ejemplo: olcsync apply -c databases.yaml
    """
    if check:
        settings = _settings()
        reader_binary = "ldapsearch" if settings.read_mode == "ldapsearch" else "slapcat"
        problems = check_preconditions(
            SubprocessExecutor(timeout=settings.command_timeout),
            binaries=(reader_binary, "ldapmodify"),
        )
        if problems:
            for problem in problems:
                console.print(f"[red]✘ {escape(problem)}[/red]")
            console.print("[dim]Usa --no-check para omitir esta verificación[/dim]")
            raise typer.Exit(1)
    _run(catalog, dry_run=False, fail_fast=fail_fast)


@app.command()
def password(
    secret: List[str] = typer.Argument(None, help="Secreto en claro (exactamente uno)"),
    context: Optional[str] = typer.Option(None, "--context", help="Contexto de la sal (por defecto: host)"),
):
    """
    Genera el valor {SSHA} de olcRootPW para un secreto

    Ejemplo: olcsync password s3cr3t --context ldap1.example.com
    """
    settings = _settings()
    try:
        console.print(openldap_password(*(secret or []), context=context or settings.host_id), highlight=False)
    except ValidationError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def packages(
    os_family: Optional[str] = typer.Option(None, "--os-family", help="debian | redhat | suse | archlinux"),
    install: bool = typer.Option(False, "--install", help="Instalar, habilitar y arrancar slapd"),
):
    """
    Muestra (o ejecuta) la instalación de OpenLDAP para la familia de SO

    Ejemplo: olcsync packages --os-family debian
    """
    settings = _settings()
    try:
        table_by_family = load_package_table(settings.packages_file)
    except ConfigError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)

    family = os_family or detect_os_family()
    if not family or family not in table_by_family:
        console.print(f"[red]❌ Familia de SO no soportada: {family or 'desconocida'}[/red]")
        console.print(f"[dim]Disponibles: {', '.join(sorted(table_by_family))}[/dim]")
        raise typer.Exit(1)

    spec = table_by_family[family]
    commands = install_commands(spec)
    table = Table(title=f"OpenLDAP en {family}", show_header=True, header_style="bold cyan")
    table.add_column("Paquetes", style="cyan")
    table.add_column("Servicio", style="green")
    table.add_row(", ".join(spec.packages), spec.service)
    console.print(table)
    for argv in commands:
        console.print(f"[dim]$ {' '.join(argv)}[/dim]")

    if not install:
        return

    executor = SubprocessExecutor(timeout=max(settings.command_timeout, 600))
    for argv in commands:
        try:
            executor.run(argv)
        except OlcsyncError as e:
            console.print(f"[red]✘ {escape(str(e))}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✔[/green] {' '.join(argv)}")


def main():
    app()
