from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from finance_importer.data_sources.exante import load_export_text
from finance_importer.domain.asset import asset_id_code
from finance_importer.domain.errors import InvalidHeader, MappingError, RecordParseError
from finance_importer.error_policy import ErrorPolicy
from finance_importer.services.import_service import import_transactions
from finance_importer.settings import get_settings

logger = logging.getLogger("finance_importer.scripts.import_exante")


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import an Exante tab-delimited export and print transactions.")
    parser.add_argument("path", type=Path, help="Exante export file (.csv/.tsv)")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in ErrorPolicy],
        default=None,
        help="Row error policy (default: FINANCE_IMPORTER_ERROR_POLICY or 'drop')",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    policy = ErrorPolicy(args.policy) if args.policy else settings.error_policy

    path: Path = args.path
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 1

    try:
        text = load_export_text(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", path, e)
        print(f"Cannot read {path}: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    try:
        report = import_transactions(text, policy=policy)
    except (InvalidHeader, RecordParseError, MappingError) as e:
        logger.error("Import failed: %s", e)
        print(f"Import failed: {e}", file=sys.stderr)
        return 1

    for tx in report.transactions:
        ledgers = ",".join(sorted(ledger.name for ledger in tx.ledgers))
        print(f"{tx.started_at.isoformat()}  [{ledgers}]  {len(tx.operations)} operation(s)")
        for op in tx.operations:
            print(f"    {op.kind}  {op.value}  {asset_id_code(op.asset.id)}  {op.asset.name}")

    for err in report.errors[: settings.errors_preview_limit]:
        print(f"error: {err}", file=sys.stderr)

    print(
        f"records={report.records_count} operations={report.operations_count} "
        f"transactions={report.transactions_count} dropped={report.dropped_count}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
