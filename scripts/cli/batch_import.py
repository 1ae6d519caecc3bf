"""CLI for importing a list of arXiv papers into the library."""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

from paperpile_navigate.database.connection import DatabaseConnection  # noqa: E402
from paperpile_navigate.database.schema import init_database  # noqa: E402
from paperpile_navigate.models.schemas import NewWorldline  # noqa: E402
from paperpile_navigate.tasks.batch_import import BatchImportTask  # noqa: E402
from paperpile_navigate.utils.config import settings  # noqa: E402
from paperpile_navigate.utils.errors import ValidationError  # noqa: E402

# ── Terminal colours ─────────────────────────────────────────────────
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"


def header(title: str) -> None:
    print(f"\n{BOLD}{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}{RESET}")


def read_ids(args: argparse.Namespace) -> List[str]:
    """IDs from the command line plus one per line from --file."""
    ids = list(args.arxiv_ids)
    if args.file:
        for line in Path(args.file).read_text(encoding="utf-8").splitlines():
            line = line.split("#", 1)[0].strip()
            if line:
                ids.append(line)
    return ids


async def cmd_import(args: argparse.Namespace) -> int:
    ids = read_ids(args)

    db = DatabaseConnection()
    init_database(db.engine)

    new_worldlines = []
    if args.new_worldline:
        new_worldlines.append(NewWorldline(name=args.new_worldline, color=args.color))

    task = BatchImportTask(db=db)
    header(f"Importing {len(ids)} arXiv IDs")
    try:
        result = await task.execute(
            ids,
            worldline_ids=args.worldline,
            new_worldlines=new_worldlines,
            tag_ids=args.tag,
        )
    except ValidationError as e:
        print(f"  {RED}✗{RESET}  {e}")
        return 1
    finally:
        await task.arxiv_client.close()
        await task.s2_client.close()

    print(f"  {GREEN}✓{RESET}  Papers added:      {result.papers_added}")
    print(f"  {GREEN}✓{RESET}  Citations created: {result.citations_created}")
    if result.worldline_ids:
        print(f"  {GREEN}✓{RESET}  Worldlines:        {', '.join(map(str, result.worldline_ids))}")
    if args.tag:
        print(f"  {GREEN}✓{RESET}  Tags applied:      {result.tags_applied}")

    for error in result.errors:
        print(f"  {YELLOW}–{RESET}  {DIM}{error}{RESET}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Batch import arXiv papers")
    parser.add_argument("arxiv_ids", nargs="*", help="arXiv IDs (version suffix optional)")
    parser.add_argument("-f", "--file", help="File with one arXiv ID per line")
    parser.add_argument(
        "-w", "--worldline", type=int, action="append", default=[],
        help="Existing worldline id to append to (repeatable)",
    )
    parser.add_argument("-n", "--new-worldline", help="Create a worldline with this name")
    parser.add_argument(
        "--color", default=settings.default_worldline_color, help="Color of the new worldline"
    )
    parser.add_argument(
        "-t", "--tag", type=int, action="append", default=[], help="Tag id to apply (repeatable)"
    )
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    if not args.arxiv_ids and not args.file:
        build_parser().print_usage()
        sys.exit(1)
    sys.exit(asyncio.run(cmd_import(args)))
