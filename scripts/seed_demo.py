import argparse
import sys
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lifealign import create_app, db
from lifealign.demo import seed_demo_data


def main():
    parser = argparse.ArgumentParser(
        description="Create the demo account with sample habits, completions and recommendations."
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Anchor date for the generated completion history (YYYY-MM-DD, default: today).",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Run db.create_all() first (development databases without migrations).",
    )
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.create_tables:
            db.create_all()
        user = seed_demo_data(today=args.today)
        print(f"Demo user ready: id={user.id} email={user.email}")


if __name__ == "__main__":
    main()
