#!/usr/bin/env python3
"""
Command-line entry point for the eligibility pipeline.

Without arguments it decides what to run from the files present in the
working directory: the full pipeline when the report, CRM and roster files
exist, the re-lookup (PROCV-only) step when only a previous artifact exists,
and otherwise it starts the HTTP server.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from eligibility import EligibilityProcessor, PipelineResult, SourceFiles
from eligibility.config import ARTIFACT_FILE, RELOOKUP_OUTPUT_FILE
from eligibility.processor import AUTO_MODE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

RELOOKUP_COMMANDS = {"procv", "procv-only"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Eligibility report enrichment pipeline")
    parser.add_argument(
        "command",
        nargs="?",
        help="'procv' or 'procv-only' to only re-run the lookups over a previous artifact",
    )
    parser.add_argument(
        "--workdir",
        type=str,
        default=os.environ.get("WORK_DIR", "."),
        help="Directory holding the input files under their fixed names",
    )
    parser.add_argument("--report", type=str, help="Primary eligibility report")
    parser.add_argument("--crm", type=str, help="CRM (Bitrix) extract")
    parser.add_argument("--roster", type=str, help="Roster / team file")
    parser.add_argument("--revenue", type=str, help="Optional revenue file")
    parser.add_argument("--artifact", type=str, help="Previously produced workbook to re-look-up")
    parser.add_argument("--output", type=str, help="Output workbook path")
    parser.add_argument("--serve", action="store_true", help="Start the HTTP server")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "3000")))
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def serve(host: str, port: int) -> int:
    import uvicorn

    logger.info(f"Servidor rodando em http://{host}:{port}")
    uvicorn.run("app:app", host=host, port=port)
    return 0


def report(result: PipelineResult, title: str) -> int:
    print(f"{title} Logs:")
    print("\n".join(result.logs))
    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command and args.command.lower() not in RELOOKUP_COMMANDS:
        parser.error(f"Comando desconhecido: {args.command}")

    if args.serve:
        return serve(args.host, args.port)

    workdir = Path(args.workdir)
    processor = EligibilityProcessor()

    try:
        if args.command or args.artifact:
            artifact = Path(args.artifact) if args.artifact else workdir / ARTIFACT_FILE
            output = Path(args.output) if args.output else workdir / RELOOKUP_OUTPUT_FILE
            return report(processor.run_relookup(artifact, output), "PROCV-only finalizado.")

        if args.report or args.crm or args.roster or args.revenue:
            defaults = SourceFiles.from_workdir(workdir)
            sources = SourceFiles(
                report=Path(args.report) if args.report else defaults.report,
                crm=Path(args.crm) if args.crm else defaults.crm,
                roster=Path(args.roster) if args.roster else defaults.roster,
                revenue=Path(args.revenue) if args.revenue else defaults.revenue,
            )
            output = Path(args.output) if args.output else workdir / ARTIFACT_FILE
            return report(processor.run_full(sources, output), "Pipeline completo finalizado.")

        has_full_inputs = not SourceFiles.from_workdir(workdir).missing()
        if has_full_inputs or (workdir / ARTIFACT_FILE).exists():
            output = Path(args.output) if args.output else None
            result = processor.run(workdir, AUTO_MODE, output_path=output)
            return report(result, f"Executado {result.mode} (detecção automática).")

        logger.info("Nenhum arquivo de entrada encontrado; iniciando o servidor HTTP.")
        return serve(args.host, args.port)

    except Exception as e:
        logger.error(f"Application failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
