import argparse
from .client import CardClient
from .config import settings
from .db import init_db
from .importer import import_csv


def main(argv=None):
    parser = argparse.ArgumentParser(prog="cardshelf")
    parser.add_argument("cmd", choices=["initdb", "import", "delete", "recent"])
    parser.add_argument("ids", nargs="*", type=int, help="card ids for delete")
    parser.add_argument("--csv", dest="csv_path")
    parser.add_argument("--api-url", dest="api_url", default=settings.api_url)
    args = parser.parse_args(argv)

    if args.cmd == "initdb":
        init_db()
        print("DB initialized")
        return 0

    client = CardClient(args.api_url)

    if args.cmd == "import":
        if not args.csv_path:
            raise SystemExit("--csv required")
        report = import_csv(args.csv_path, client)
        print(f"Imported {report.imported} cards")
        for err in report.errors:
            problems = ", ".join(f"{k}: {v}" for k, v in err.errors.items())
            print(f"  row {err.row} ({err.record.get('Player Name') or '?'}): {problems}")
        return 1 if report.errors else 0

    if args.cmd == "delete":
        if not args.ids:
            raise SystemExit("at least one id required")
        result = client.bulk_delete(args.ids)
        print(f"Deleted {len(result.succeeded)} cards")
        for card_id, error in result.failed.items():
            print(f"  {card_id}: {error}")
        return 1 if result.failed else 0

    for player in client.recent_players():
        print(player)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
