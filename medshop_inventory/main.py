import argparse
import json
import sys

from medshop_inventory.config import config
from medshop_inventory.core.analytics import PERIOD_CHOICES
from medshop_inventory.core.sale_builder import build_sale, build_sale_item
from medshop_inventory.exceptions import MedShopError, NotFoundError, ValidationError
from medshop_inventory.logging_setup import logger, get_logger, log_exception
from medshop_inventory.models import PaymentMethod
from medshop_inventory.services import InventoryService, ReportingService

LISTINGS = ('products', 'clients', 'sales')


def setup_database(drop_existing=False):
    """Create the schema on a SQL database.

    Args:
        drop_existing: If True, drop existing tables before creating new ones

    Returns:
        True if setup was successful, False otherwise
    """
    from medshop_inventory.db import db, get_db_type

    log = get_logger('db_setup')

    try:
        db_type = get_db_type()
        log.info(f"Database type: {db_type}")

        if db_type == "supabase":
            log.info("Using Supabase. Tables must be created via SQL migrations in the Supabase SQL editor.")
            return True

        if drop_existing:
            log.info("Dropping all existing tables...")
            db.drop_all_tables()

        log.info("Creating database tables...")
        db.create_all_tables()
        log.info("Database tables created successfully.")
        return True
    except MedShopError as e:
        log.error(f"Database setup failed: {str(e)}")
        return False


def init_application() -> InventoryService:
    """Connect to the configured store and load every collection."""
    from medshop_inventory.db import get_store

    log = logger.app_logger
    log.info(f"Using database type: {config.get('DATABASE', 'type', 'supabase')}")

    inventory = InventoryService(get_store())
    inventory.load_all()
    return inventory


def parse_item(value: str):
    """Parse a PRODUCT_ID:QUANTITY item argument."""
    product_id, _, quantity = value.partition(':')
    try:
        return product_id, int(quantity or 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid item '{value}', expected PRODUCT_ID:QUANTITY")


def record_sale(inventory: InventoryService, args):
    """Build a sale from command-line arguments and record it."""
    client = inventory.get_client(args.client_id)
    if client is None:
        raise NotFoundError(f"Client {args.client_id} not found")

    items = []
    for product_id, quantity in args.item:
        product = inventory.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        items.append(build_sale_item(product, quantity))

    sale = build_sale(client, items, discount=args.discount, payment_method=args.payment_method)
    return inventory.add_sale(sale)


def export_records(inventory: InventoryService, name: str) -> str:
    """Serialize one of the loaded collections to JSON."""
    records = getattr(inventory, name)
    return json.dumps([record.to_dict() for record in records], indent=2)


def build_parser():
    parser = argparse.ArgumentParser(description='Medical Shop Inventory')

    parser.add_argument('--setup-db', action='store_true',
                        help='Set up the database schema (SQL databases only)')
    parser.add_argument('--drop-db', action='store_true',
                        help='Drop existing tables before setup')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    subparsers.add_parser('dashboard', help='Show the dashboard summary')

    analytics_parser = subparsers.add_parser('analytics', help='Show period analytics')
    analytics_parser.add_argument('--period', type=int, choices=PERIOD_CHOICES,
                                  default=config.analytics_config['default_period_days'],
                                  help='Trailing window in days')

    subparsers.add_parser('alerts', help='Show low stock, expiry and recent sale notifications')

    for name in LISTINGS:
        list_parser = subparsers.add_parser(name, help=f'List {name}')
        list_parser.add_argument('--json', action='store_true', help='Print records as JSON')

    search_parser = subparsers.add_parser('search', help='Search products, clients and sales')
    search_parser.add_argument('query', help='Text to match (case-insensitive)')

    stats_parser = subparsers.add_parser('client-stats', help='Show purchase statistics for a client')
    stats_parser.add_argument('client_id', help='Client ID')

    sell_parser = subparsers.add_parser('sell', help='Record a sale')
    sell_parser.add_argument('--client-id', required=True, help='Buying client ID')
    sell_parser.add_argument('--item', type=parse_item, action='append', required=True,
                             help='PRODUCT_ID:QUANTITY, repeat for several items')
    sell_parser.add_argument('--discount', type=float, default=0.0, help='Discount amount')
    sell_parser.add_argument('--payment-method', choices=[m.value for m in PaymentMethod],
                             default=PaymentMethod.CASH.value, help='Payment method')

    return parser


def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.setup_db:
        return 0 if setup_database(args.drop_db) else 1

    if not args.command:
        parser.print_help()
        return 0

    log = logger.app_logger

    try:
        inventory = init_application()
        reporting = ReportingService(inventory)

        if args.command == 'dashboard':
            print(reporting.format_dashboard(reporting.dashboard()))
        elif args.command == 'analytics':
            print(reporting.format_analytics(reporting.analytics(args.period)))
        elif args.command == 'alerts':
            print(reporting.format_notifications(reporting.notifications()))
        elif args.command in LISTINGS and args.json:
            print(export_records(inventory, args.command))
        elif args.command == 'products':
            print(reporting.format_products())
        elif args.command == 'clients':
            print(reporting.format_clients())
        elif args.command == 'sales':
            print(reporting.format_sales())
        elif args.command == 'search':
            print(reporting.format_search(reporting.search(args.query)))
        elif args.command == 'client-stats':
            print(reporting.format_client_stats(reporting.client_stats(args.client_id)))
        elif args.command == 'sell':
            sale = record_sale(inventory, args)
            print(f"Recorded sale {sale.id} for {sale.client_name}: ${sale.final_amount:.2f}")
    except ValidationError as e:
        log.error(json.dumps(e.to_dict(), default=str))
        return 1
    except MedShopError as e:
        log_exception('app', e, f"Command '{args.command}' failed")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
