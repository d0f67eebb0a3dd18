"""Command line interface for the Wedrop inventory core."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from .config import Settings
from .core.client import ApiNotConfiguredError
from .core.service import InventoryService
from .core.utils import round_half_up


LOGGER = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def load_settings(config_path: str) -> Settings:
    """Read the YAML file when it exists; otherwise rely on the environment."""

    path = Path(config_path).expanduser()
    if path.exists():
        return Settings.load(path)
    LOGGER.debug("Configuration file %s not found; using defaults and environment", path)
    return Settings().apply_environment()


def command_test_connection(args: argparse.Namespace) -> int:
    service = InventoryService(load_settings(args.config))
    try:
        check = asyncio.run(service.test_connection())
    except ApiNotConfiguredError as exc:
        print(str(exc))
        return 1
    print(check.message)
    return 0 if check.success else 1


def command_stats(args: argparse.Namespace) -> int:
    service = InventoryService(load_settings(args.config))

    async def run():
        return await service.get_dashboard_stats(), await service.get_category_distribution()

    stats, categories = asyncio.run(run())
    print(f"Produtos: {stats.total_products}")
    print(f"Estoque total: {stats.total_stock:g}")
    print(f"Estoque baixo: {stats.low_stock_products}")
    print(f"Sem estoque: {stats.out_of_stock_products}")
    print(f"Valor em estoque: R$ {stats.total_value:,.2f}")
    for entry in categories[: args.categories]:
        print(f"  {entry['name']}: {entry['value']} produtos, {entry['stock']:g} un")
    return 0


def command_abc(args: argparse.Namespace) -> int:
    service = InventoryService(load_settings(args.config))
    curve = asyncio.run(service.get_abc_curve())
    summary = curve.summary
    print(f"A: {summary.total_a} produtos ({summary.percent_a}% das vendas)")
    print(f"B: {summary.total_b} produtos ({summary.percent_b}% das vendas)")
    print(f"C: {summary.total_c} produtos ({summary.percent_c}% das vendas)")
    for item in curve.products[: args.top]:
        print(
            f"  [{item.classification}] {item.product.sku} {item.product.name}"
            f" score={item.sales_score:g} acumulado={round_half_up(item.accumulated_percentage)}%"
        )
    return 0


def command_movements(args: argparse.Namespace) -> int:
    service = InventoryService(load_settings(args.config))
    movements = asyncio.run(service.get_product_movements(args.product_id))
    if not movements:
        print("Nenhuma movimentação encontrada.")
        return 0
    for movement in movements:
        print(
            f"{movement.created_at or '-'} {movement.type:<10} {movement.quantity:g}"
            f" ({movement.previous_stock:g} -> {movement.new_stock:g}) {movement.reason}"
        )
    return 0


def command_snapshot(args: argparse.Namespace) -> int:
    service = InventoryService(load_settings(args.config))
    day = date.fromisoformat(args.date) if args.date else None
    snapshot = asyncio.run(service.take_snapshot(day))
    if snapshot is None:
        print("Snapshot não salvo: catálogo incompleto.")
        return 1
    print(f"Snapshot {snapshot.date}: {snapshot.total_products} produtos, estoque {snapshot.total_stock:g}")
    return 0


def command_api(args: argparse.Namespace) -> int:
    from .api.server import create_app

    settings = load_settings(args.config)
    app = create_app(settings)
    import uvicorn

    uvicorn.run(app, host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wedrop inventory dashboard core")
    parser.add_argument("--config", default="config.yaml", help="Path to the configuration YAML file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    test_parser = subparsers.add_parser("test-connection", help="Check the API credentials")
    test_parser.set_defaults(func=command_test_connection)

    stats_parser = subparsers.add_parser("stats", help="Print dashboard totals")
    stats_parser.add_argument("--categories", type=int, default=5, help="Number of categories to list")
    stats_parser.set_defaults(func=command_stats)

    abc_parser = subparsers.add_parser("abc", help="Print the ABC curve")
    abc_parser.add_argument("--top", type=int, default=10, help="Number of ranked products to list")
    abc_parser.set_defaults(func=command_abc)

    movements_parser = subparsers.add_parser("movements", help="List the stock movements of a product")
    movements_parser.add_argument("product_id")
    movements_parser.set_defaults(func=command_movements)

    snapshot_parser = subparsers.add_parser("snapshot", help="Store the daily stock snapshot")
    snapshot_parser.add_argument("--date", default=None, help="ISO date to store (defaults to today)")
    snapshot_parser.set_defaults(func=command_snapshot)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server")
    api_parser.add_argument("--host", default="0.0.0.0")
    api_parser.add_argument("--port", type=int, default=8000)
    api_parser.add_argument("--reload", action="store_true", help="Enable auto reload (development only)")
    api_parser.set_defaults(func=command_api)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
