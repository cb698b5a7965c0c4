"""otpcatalog CLI - Login with an OTP and browse the product catalog."""
import asyncio
import logging
import re

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from otpcatalog import CatalogClient, APIConfig, setup_logging
from otpcatalog.core.catalog import SORT_FIELDS, SORT_KEY_ALIASES

app = typer.Typer(
    name="otpcatalog",
    help="Browse a product catalog behind an email + OTP login",
    add_completion=False
)
console = Console()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

COLUMNS = (
    ("Product ID", "product_id"),
    ("Product Name", "product_name"),
    ("Company Name", "company_name"),
    ("Website", "website"),
    ("Category", "product_category"),
    ("Company Address", "company_address"),
)


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def make_client(config: APIConfig) -> CatalogClient:
    return CatalogClient(config=config)


def render_products(products) -> Table:
    """Build the product table."""
    table = Table()
    for title, _ in COLUMNS:
        table.add_column(title, style="cyan" if title == "Product Name" else None)

    for product in products:
        table.add_row(*(escape(str(getattr(product, attr))) for _, attr in COLUMNS))

    return table


def fail(message: str):
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


@app.command()
def browse(
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
    otp: str = typer.Option(None, "--otp", "-o", help="One-time password (prompted if omitted)"),
    sort: str = typer.Option(None, "--sort", "-s", help="Sort by field (see 'fields')"),
    search: str = typer.Option(None, "--search", "-q", help="Filter by product name"),
    base_url: str = typer.Option(
        APIConfig.base_url, "--base-url", envvar="OTPCATALOG_BASE_URL", help="Backend base URL"
    ),
    insecure: bool = typer.Option(False, "--insecure", help="Disable SSL verification"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Login, validate the OTP and print the product list."""
    if sort is not None and search is not None:
        fail("Use either --sort or --search, not both")

    if verbose:
        logging.basicConfig(level=logging.DEBUG)
        setup_logging(logging.DEBUG)

    if not email:
        email = typer.prompt("Email")
    if not EMAIL_RE.match(email.strip()):
        fail(f"Not a valid email address: {email}")

    config = APIConfig.insecure(base_url=base_url) if insecure else APIConfig(base_url=base_url)

    async def do_browse():
        async with make_client(config) as client:
            outcome = await client.login(email)
            if not outcome:
                fail(outcome.message)

            console.print(f"[green]OTP sent to {escape(email)}[/green]")
            code = otp or typer.prompt("OTP")

            outcome = await client.verify_otp(code)
            if not outcome:
                fail(outcome.message)

            if sort is not None:
                outcome = client.sort_by(sort)
            elif search is not None:
                outcome = client.search(search)
            if not outcome:
                fail(outcome.message)

            console.print(render_products(client.products))
            console.print(f"{len(client.products)} of {len(client.catalog.source_products)} products")

    run_async(do_browse())


@app.command()
def fields():
    """List the keys accepted by --sort."""
    aliases = {attr: alias for alias, attr in SORT_KEY_ALIASES.items()}
    for attr in SORT_FIELDS:
        console.print(f"{attr} ({aliases.get(attr, '-')})")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
