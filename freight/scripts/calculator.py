"""
Freight Quote Calculator
========================

Interactive CLI tool to price a shipment against the agreement table.

Usage:
    python -m freight.scripts.calculator
    python -m freight.scripts.calculator --agreements path/to/agreements.csv
"""

import argparse
import logging
from datetime import date

from freight.agreements import load_agreements
from freight.calculate_quote import calculate_quote, supplement_items
from freight.data import SELECTABLE_CONTAINERS, RATE_TYPE_LABELS
from freight.items import items_to_frame
from freight.modes import MODE_NAMES
from freight.utilization import add_container_fit
from freight.version import VERSION
from shared.errors import FreightError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Price a shipment against rate agreements")
    parser.add_argument("--agreements", help="Agreements CSV (default: bundled sample lanes)")
    parser.add_argument("--date", help="Quote date YYYY-MM-DD (default: today)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show log output")
    return parser.parse_args()


def get_user_input() -> dict:
    """Prompt user for lane, mode, and items."""
    print("\n=== Freight Quote Calculator ===")
    print(f"Version: {VERSION}\n")

    origin = input("Origin id (e.g., CN-SHA): ").strip()
    destination = input("Destination id (e.g., OM-MCT): ").strip()

    print("\nMode:")
    for i, name in enumerate(MODE_NAMES, start=1):
        print(f"  {i}. {name}")
    mode = MODE_NAMES[int(input(f"Select (1-{len(MODE_NAMES)}): ").strip()) - 1]

    container = None
    if mode == "sea_fcl":
        print("\nContainer:")
        for i, name in enumerate(SELECTABLE_CONTAINERS, start=1):
            print(f"  {i}. {RATE_TYPE_LABELS[name]}")
        container = SELECTABLE_CONTAINERS[int(input("Select: ").strip()) - 1]

    items = []
    print("\nItems (blank length to finish):")
    while True:
        length = input(f"  Item {len(items) + 1} length: ").strip()
        if not length:
            break
        items.append({
            "length": float(length),
            "width": float(input("  width: ")),
            "height": float(input("  height: ")),
            "dimension_unit": input("  dimension unit (cm/m/in) [cm]: ").strip() or "cm",
            "weight": float(input("  weight per unit: ")),
            "weight_unit": input("  weight unit (kg/lb) [kg]: ").strip() or "kg",
            "quantity": int(input("  quantity [1]: ").strip() or 1),
        })

    return {
        "origin": origin,
        "destination": destination,
        "mode": mode,
        "container": container,
        "items": items,
    }


def print_items(items: list[dict]) -> None:
    """Print per-item volume, weight, and container fit."""
    if not items:
        return
    df = add_container_fit(supplement_items(items_to_frame(items)))

    print("\n--- Items ---")
    for i, row in enumerate(df.iter_rows(named=True), start=1):
        if not row["is_valid"]:
            print(f"  {i}. incomplete, skipped")
            continue
        print(
            f"  {i}. {row['total_cbm']:.3f} m3 ({row['total_ft3']:.2f} ft3), "
            f"{row['total_weight_kg']:.2f} kg, volumetric {row['total_volumetric_weight']:.2f} kg"
        )
        fits = ", ".join(
            f"{c.replace('SEA_CONTAINER_', '')}: {row[f'fit_{c.lower()}']}"
            for c in SELECTABLE_CONTAINERS
        )
        print(f"     units per container: {fits}")


def print_results(quote) -> None:
    """Print calculation results."""
    calc = quote.calculation
    currency = quote.currency

    print("\n" + "=" * 50)
    print("QUOTE")
    print("=" * 50)
    print(f"Agreement: {quote.agreement_reference} ({RATE_TYPE_LABELS[quote.rate_type]})")

    if quote.mode == "air":
        print(f"Actual weight:      {calc['actual_weight']:>10.1f} kg")
        print(f"Volumetric weight:  {calc['volumetric_weight']:>10.1f} kg")
        print(f"Chargeable weight:  {calc['chargeable_weight']:>10.1f} kg")
    elif quote.mode == "sea_lcl":
        print(f"Total volume:       {calc['total_cbm']:>10.2f} CBM")
    else:
        print(f"Container:          {calc['container_label']} ({calc['dimensions']})")
        if "utilization" in calc:
            u = calc["utilization"]
            print(f"Filled volume:      {u['volume_percent']:>9.0f}%")
            print(f"Filled weight:      {u['weight_percent']:>9.0f}%")

    print(f"Rate:               {currency} {calc['sell_price']:.2f}")
    if quote.min_charge_applied:
        print(f"Minimum charge applied: {currency} {calc['min_charge']:.2f}")
    print(f"                    {'=' * 12}")
    print(f"TOTAL:              {currency} {quote.total_price:.3f}")
    print()


def main():
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    book = load_agreements(args.agreements)
    on_date = date.fromisoformat(args.date) if args.date else None

    def find_agreement(origin_id, destination_id, rate_type):
        return book.find(origin_id, destination_id, rate_type, on_date=on_date)

    try:
        request = get_user_input()
        print_items(request["items"])

        quote = calculate_quote(
            request["items"],
            request["mode"],
            request["origin"],
            request["destination"],
            find_agreement,
            container=request["container"],
        )
        print_results(quote)

    except KeyboardInterrupt:
        print("\n\nCancelled.")
    except FreightError as e:
        print(f"\nError: {e}")


if __name__ == "__main__":
    main()
