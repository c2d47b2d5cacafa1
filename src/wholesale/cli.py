from __future__ import annotations

import json
import logging
import uuid
from dataclasses import fields
from pathlib import Path

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from wholesale.catalog import ShopifyClient
from wholesale.config import Settings
from wholesale.core.db import OrderRepository
from wholesale.core.logging import configure_logging, get_logger
from wholesale.documents import CONFIRMATION, INVOICE, OrderDocument, extract_size, format_money
from wholesale.errors import (
    CatalogError,
    InvalidStatusTransition,
    OrderNotFoundError,
    OrderPersistenceError,
    PartialOrderWriteError,
)
from wholesale.orders import BuyerProfile, OrderStatus
from wholesale.services import (
    CatalogService,
    OrderAdminService,
    OrderSubmissionService,
    export_data,
    run_doctor_checks,
)
from wholesale.session import PortalSession

app = typer.Typer(no_args_is_help=True, help="Wholesale portal: каталог, корзина, заказы и документы")
profile_app = typer.Typer(no_args_is_help=True, help="Профиль покупателя")
app.add_typer(profile_app, name="profile")

console = Console()


def _load_settings(base_dir: Path | None = None) -> Settings:
    settings = Settings.load(base_dir=base_dir)
    settings.ensure_directories()
    return settings


def _logger(settings: Settings, name: str, **context: str) -> logging.LoggerAdapter:
    correlation_id = uuid.uuid4().hex
    configure_logging(settings.logs_dir, correlation_id=correlation_id)
    return get_logger(name, correlation_id, **context)


def _open_repository(settings: Settings) -> OrderRepository:
    repository = OrderRepository(settings.db_path)
    repository.migrate()
    return repository


def _parse_items(values: list[str]) -> list[tuple[str, int]]:
    parsed: list[tuple[str, int]] = []
    for value in values:
        variant_id, sep, qty = value.rpartition("=")
        try:
            quantity = int(qty)
        except ValueError:
            quantity = None
        if not sep or not variant_id.strip() or quantity is None:
            raise typer.BadParameter(f"Ожидается VARIANT_ID=QTY, получено: {value}")
        parsed.append((variant_id.strip(), quantity))
    return parsed


def _print_document(document: OrderDocument) -> None:
    order = document.order
    print(f"[bold blue]{document.title.upper()}[/bold blue]")
    print(f"{document.seller.name}, {document.seller.address}, {document.seller.postal_city}")
    print(f"Customer: [bold]{order.company_name or '—'}[/bold] {order.contact_name}")
    print(f"No.: [bold]{document.number}[/bold]   Date: {document.date_display}   Total pairs: {document.total_pcs}")
    if document.due_date_display:
        print(f"Payment terms: {document.payment_terms_days} days   [orange3]Due: {document.due_date_display}[/orange3]")

    table = Table(show_lines=False)
    table.add_column("#")
    table.add_column("Product")
    table.add_column("SKU")
    table.add_column("Unit price", justify="right")
    table.add_column("Sizes")
    table.add_column("Pairs", justify="right")
    table.add_column("Total", justify="right")
    for index, product in enumerate(document.products, start=1):
        sizes = " ".join(f"{size}×{qty}" for size, qty in product.size_columns if qty)
        extra = " ".join(f"{size}×{qty}" for size, qty in product.extra_sizes.items())
        table.add_row(
            str(index),
            product.product_title,
            product.sku or "",
            format_money(product.unit_price),
            " ".join(part for part in [sizes, extra] if part),
            str(product.total_pcs),
            format_money(product.total_value),
        )
    console.print(table)

    print(f"Subtotal (excl. BTW): {format_money(document.subtotal)}")
    print(f"BTW {round(document.vat_rate * 100)}%: {format_money(document.tax)}")
    print(f"[bold blue]Total (incl. BTW): {format_money(document.total_incl_tax)}[/bold blue]")
    if order.notes:
        print(f"Notes: {order.notes}")
    if document.kind == INVOICE:
        seller = document.seller
        print(f"Bank: {seller.bank}  IBAN: {seller.iban}  BIC: {seller.bic}  Reference: {document.payment_reference}")
    for line in document.terms:
        print(f"[dim]{line}[/dim]")


@app.command("init")
def init_command(
    base_dir: Path | None = typer.Option(None, help="Корень проекта (по умолчанию текущая папка)"),
) -> None:
    settings = _load_settings(base_dir=base_dir)
    with OrderRepository(settings.db_path) as repository:
        executed = repository.migrate()
    print(f"[green]Инициализация завершена[/green]. DB: {settings.db_path}")
    print(f"Миграции: {executed if executed else 'нет новых'}")


@app.command("doctor")
def doctor_command() -> None:
    settings = _load_settings()
    checks = run_doctor_checks(settings)

    print("Результаты doctor:")
    for check in checks:
        status = check["status"].upper()
        print(f"- [{status}] {check['check']}: {check['detail']}")


@app.command("catalog")
def catalog_command(
    search: str = typer.Option("", help="Поиск по названию или SKU"),
    category: str = typer.Option("all", help="Категория (product type)"),
) -> None:
    settings = _load_settings()
    logger = _logger(settings, "wholesale.catalog")
    try:
        catalog = CatalogService(ShopifyClient(settings.shopify), logger).load()
    except CatalogError as exc:
        print(f"[red]Каталог не загружен[/red]: {exc}")
        raise typer.Exit(1) from exc

    if not catalog.stock_known:
        print("[yellow]Остатки недоступны, показываем без них[/yellow]")

    table = Table(title=f"Категории: {', '.join(catalog.categories())}")
    table.add_column("Variant ID")
    table.add_column("Product")
    table.add_column("Size")
    table.add_column("SKU")
    table.add_column("Stock", justify="right")
    table.add_column("Retail", justify="right")
    table.add_column("Wholesale", justify="right")
    for product in catalog.search(search, category):
        for variant in product.variants:
            stock = catalog.stock.get(variant.id)
            table.add_row(
                variant.id.rsplit("/", 1)[-1],
                product.title,
                extract_size(variant.size_label) or "",
                variant.sku or "",
                "—" if not variant.available else ("?" if stock is None else str(stock)),
                format_money(variant.compare_at_price.amount) if variant.compare_at_price else "",
                format_money(variant.price.amount),
            )
    console.print(table)


@profile_app.command("show")
def profile_show_command(user: str = typer.Option(..., help="Идентификатор покупателя")) -> None:
    settings = _load_settings()
    with _open_repository(settings) as repository:
        profile = repository.get_profile(user)
    if profile is None:
        print(f"[yellow]Профиль не найден[/yellow]: {user}")
        raise typer.Exit(1)
    for item in fields(profile):
        print(f"- {item.name}: {getattr(profile, item.name) or ''}")


@profile_app.command("set")
def profile_set_command(
    user: str = typer.Option(..., help="Идентификатор покупателя"),
    company: str = typer.Option(..., help="Название компании"),
    contact: str = typer.Option("", help="Контактное лицо"),
    email: str = typer.Option(..., help="E-mail"),
    phone: str | None = typer.Option(None),
    address: str | None = typer.Option(None),
    city: str | None = typer.Option(None),
    postal_code: str | None = typer.Option(None),
    country: str = typer.Option("NL"),
    kvk: str | None = typer.Option(None, help="KvK-nummer"),
    btw: str | None = typer.Option(None, help="BTW-nummer"),
) -> None:
    settings = _load_settings()
    with _open_repository(settings) as repository:
        repository.upsert_profile(
            BuyerProfile(
                user_id=user,
                company_name=company,
                contact_name=contact,
                email=email,
                phone=phone,
                address=address,
                city=city,
                postal_code=postal_code,
                country=country,
                kvk_number=kvk,
                btw_number=btw,
            )
        )
    print(f"[green]Профиль сохранен[/green]: {user}")


@app.command("order")
def order_command(
    user: str = typer.Option(..., help="Идентификатор покупателя"),
    item: list[str] = typer.Option(..., "--item", help="VARIANT_ID=QTY, можно несколько раз"),
    notes: str | None = typer.Option(None, help="Комментарий к заказу"),
) -> None:
    requested = _parse_items(item)
    settings = _load_settings()
    logger = _logger(settings, "wholesale.order", user_id=user)

    try:
        catalog = CatalogService(ShopifyClient(settings.shopify), logger).load()
    except CatalogError as exc:
        print(f"[red]Каталог не загружен[/red]: {exc}")
        raise typer.Exit(1) from exc

    with _open_repository(settings) as repository:
        session = PortalSession(user, catalog, OrderSubmissionService(repository, logger), logger)
        for variant_id, qty in requested:
            try:
                added = session.add(variant_id, qty)
            except LookupError as exc:
                print(f"[red]{exc}[/red]")
                raise typer.Exit(1) from exc
            if added < qty:
                print(f"[yellow]{variant_id}: доступно только {added} из {qty}[/yellow]")

        warning = session.minimum_order_warning()
        if warning:
            print(f"[yellow]{warning}[/yellow]")

        try:
            result = session.submit(notes=notes)
        except PartialOrderWriteError as exc:
            print(f"[bold red]Заказ записан частично[/bold red]: {exc}")
            raise typer.Exit(2) from exc
        except OrderPersistenceError as exc:
            print(f"[red]Fout bij bestelling[/red]: {exc}")
            raise typer.Exit(1) from exc

    if not result.ok:
        print(f"[red]{result.message}[/red]")
        raise typer.Exit(1)
    print(f"[green]Bestelling geplaatst![/green] {result.message}")


@app.command("orders")
def orders_command(user: str | None = typer.Option(None, help="Только заказы покупателя")) -> None:
    settings = _load_settings()
    with _open_repository(settings) as repository:
        orders = OrderAdminService(repository, logging.getLogger("wholesale.admin")).list_orders(user)

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Company")
    table.add_column("Status")
    table.add_column("Total excl. BTW", justify="right")
    for order in orders:
        table.add_row(
            str(order.order_number),
            order.created_at.strftime("%Y-%m-%d"),
            order.company_name or order.email,
            order.status.label,
            format_money(order.total_price),
        )
    console.print(table)


@app.command("status")
def status_command(
    reference: str = typer.Argument(..., help="Id или номер заказа"),
    status: OrderStatus = typer.Argument(..., help="Новый статус"),
) -> None:
    settings = _load_settings()
    logger = _logger(settings, "wholesale.admin")
    with _open_repository(settings) as repository:
        try:
            order = OrderAdminService(repository, logger, settings.seller).change_status(reference, status)
        except (OrderNotFoundError, InvalidStatusTransition) as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(1) from exc
    print(f"[green]Status bijgewerkt[/green]: #{order.order_number} {order.status.label}")


@app.command("notes")
def notes_command(
    reference: str = typer.Argument(..., help="Id или номер заказа"),
    text: str = typer.Argument("", help="Заметка администратора (пусто = очистить)"),
) -> None:
    settings = _load_settings()
    logger = _logger(settings, "wholesale.admin")
    with _open_repository(settings) as repository:
        try:
            order = OrderAdminService(repository, logger, settings.seller).update_admin_notes(reference, text)
        except OrderNotFoundError as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(1) from exc
    print(f"[green]Заметка сохранена[/green]: #{order.order_number}")


@app.command("document")
def document_command(
    reference: str = typer.Argument(..., help="Id или номер заказа"),
    kind: str = typer.Option(CONFIRMATION, help=f"{CONFIRMATION}|{INVOICE}"),
    as_json: bool = typer.Option(False, "--json", help="Вывести документ как JSON"),
) -> None:
    if kind not in {CONFIRMATION, INVOICE}:
        raise typer.BadParameter(f"Параметр --kind должен быть {CONFIRMATION} или {INVOICE}")

    settings = _load_settings()
    with _open_repository(settings) as repository:
        service = OrderAdminService(repository, logging.getLogger("wholesale.documents"), settings.seller)
        try:
            document = service.render_document(reference, kind)
        except OrderNotFoundError as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(1) from exc

    if as_json:
        typer.echo(json.dumps(document.as_dict(), ensure_ascii=False, indent=2))
    else:
        _print_document(document)


@app.command("export")
def export_command(
    format: str = typer.Option("xlsx,csv", help="Список форматов через запятую: xlsx,csv"),
    out: Path | None = typer.Option(None, help="Папка экспорта"),
) -> None:
    formats = [item.strip().lower() for item in format.split(",") if item.strip()]
    supported = {"xlsx", "csv"}
    unknown = [item for item in formats if item not in supported]
    if unknown:
        raise typer.BadParameter(f"Неподдерживаемые форматы: {unknown}")

    settings = _load_settings()
    out_dir = (out or settings.exports_dir).resolve()

    with _open_repository(settings) as repository:
        files = export_data(repository=repository, formats=formats, out_dir=out_dir)

    print("[green]Экспорт завершен[/green]")
    for file_path in files:
        print(f"- {file_path}")


if __name__ == "__main__":
    app()
