import argparse
from dotenv import load_dotenv

load_dotenv()

from rich import print
from core.config import DEFAULT_CATALOG, DEFAULT_PROPERTY, setup_logging
from core.engine import ItineraryEngine, format_usd
from core.models import DAY_CHIPS
from core.proximity import ProximityCalculator
from services import mailer, routing, workbook


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=f"Beach add-ons for {DEFAULT_PROPERTY.name}")
    p.add_argument("--sets", type=int, default=None, help="chair sets (clamped to 1–10)")
    p.add_argument("--box", action="store_true", help="include the Beach Better Box")
    p.add_argument("--bonfire", choices=DAY_CHIPS, default=None)
    p.add_argument("--photo", choices=DAY_CHIPS, default=None)
    p.add_argument("--route", action="store_true", help="fetch the driving route to the beach")
    p.add_argument("--email", default=None)
    return p


def apply_args(engine: ItineraryEngine, args: argparse.Namespace) -> None:
    if args.sets is not None:
        engine.set_chair_set_count(args.sets)
    if args.box:
        engine.toggle_supply_box()
    if args.bonfire:
        engine.set_bonfire_day(args.bonfire)
    if args.photo:
        engine.set_photo_day(args.photo)


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging()

    engine = ItineraryEngine(DEFAULT_CATALOG, DEFAULT_PROPERTY)
    apply_args(engine, args)
    itin = engine.compute_itinerary()
    prop = engine.property

    print(f"[bold cyan]{prop.name}[/]  {prop.address}  ·  {prop.dates_label}")
    for item in itin.line_items:
        print(f"[yellow]{item.label:<20}[/] {format_usd(item.amount):>8}  [dim]{item.note}[/]")
    print(f"[bold]{'Total':<20} {format_usd(itin.total):>8}[/]")

    calc = ProximityCalculator(prop)
    prox = calc.proximity()
    print(f"\nClosest beach access: {prop.beach_access_label} · ~{prox.formatted_label}")

    if args.route:
        geometry = routing.fetch_route(calc.route_request())
        n = len(geometry.get("coordinates", []))
        print(f"Route: {n} points" if n else "[dim]Route unavailable[/]")

    if args.email and input("\nSend this itinerary by e-mail? (y/n) ").lower().startswith("y"):
        xlsx = workbook.generate_workbook(itin, prop, args.email)
        mailer.send_itinerary_email(args.email, itin, prop, attachment_path=xlsx)
        print("[green]E-mail sent![/]")


if __name__ == "__main__":
    main()
