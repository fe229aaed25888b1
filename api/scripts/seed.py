import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from roommate_match.config import DATABASE_URL
from roommate_match.main import build_store
from roommate_match.services.directory import ProfileDirectory
from roommate_match.services.engine import InterestEngine
from roommate_match.services.seeding import seed_demo_profiles


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo roommate profiles into the SQL store")
    parser.add_argument("--database-url", type=str, default=DATABASE_URL)
    parser.add_argument("--no-interest", action="store_true", help="skip the demo pending interest")
    args = parser.parse_args()

    store = build_store("sql", args.database_url)
    directory = ProfileDirectory(store)
    engine = InterestEngine(store, directory)
    summary = seed_demo_profiles(directory, engine, with_interest=not args.no_interest)

    print("Seed completed")
    for k, v in summary.items():
        print(f"- {k}: {v}")


if __name__ == "__main__":
    main()
